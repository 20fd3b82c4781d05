from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional

from photometa.routers.deps import attribute_store_dep, object_store_dep
from photometa.services.errors import PhotometaError
from photometa.services.export import export_csv
from photometa.services.logs import configure_logging
from photometa.services.metadata import describe_prefix
from photometa.services.settings import get_settings


def _extract(args: argparse.Namespace) -> int:
	settings = get_settings()
	records = describe_prefix(object_store_dep(), args.bucket or settings.upload_bucket, args.prefix)
	json.dump(records, sys.stdout, indent=2, sort_keys=True)
	sys.stdout.write("\n")
	return 0


def _export(args: argparse.Namespace) -> int:
	settings = get_settings()
	report = export_csv(
		attribute_store_dep(),
		object_store_dep(),
		settings.table,
		args.bucket or settings.export_bucket,
		args.key or settings.export_key,
	)
	print(f"Saved: {report.bucket}/{report.key} ({report.rows} rows, {report.columns} columns)")
	return 0


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(prog="photometa", description="Image metadata extraction and CSV export")
	sub = parser.add_subparsers(dest="command", required=True)

	p = sub.add_parser("extract", help="Print the metadata of every image under a prefix as JSON")
	p.add_argument("--bucket", help="Bucket to read (defaults to the upload bucket)")
	p.add_argument("--prefix", default="", help="Key prefix to list")
	p.set_defaults(func=_extract)

	p = sub.add_parser("export", help="Export all stored records to a CSV object")
	p.add_argument("--bucket", help="Destination bucket")
	p.add_argument("--key", help="Destination key")
	p.set_defaults(func=_export)
	return parser


def main(argv: Optional[List[str]] = None) -> int:
	args = build_parser().parse_args(argv)
	configure_logging(get_settings().log_level)
	try:
		return args.func(args)
	except PhotometaError as e:
		print(f"error: {e}", file=sys.stderr)
		return 1


if __name__ == "__main__":
	raise SystemExit(main())
