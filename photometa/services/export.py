from __future__ import annotations

import logging
from dataclasses import dataclass

from photometa.services.attribute_store import AttributeStore
from photometa.services.logs import log_event
from photometa.services.object_store import ObjectStore
from photometa.services.scan import scan_all
from photometa.services.table import assemble_table, encode_csv

log = logging.getLogger("photometa.export")

CSV_CONTENT_TYPE = "text/csv"
ATTACHMENT = "attachment"


@dataclass
class ExportReport:
	bucket: str
	key: str
	rows: int
	columns: int
	size: int
	etag: str


def export_csv(
	attribute_store: AttributeStore,
	object_store: ObjectStore,
	table: str,
	bucket: str,
	key: str = "image-data.csv",
) -> ExportReport:
	# Nothing is written unless every page was scanned and encoded
	scanned = scan_all(attribute_store, table)
	export_table = assemble_table(scanned.records, scanned.schema)
	body = encode_csv(export_table).encode("utf-8")
	etag = object_store.put(bucket, key, body, CSV_CONTENT_TYPE, len(body), ATTACHMENT)
	report = ExportReport(bucket, key, len(export_table.rows), export_table.width, len(body), etag.strip('"'))
	log_event(log, "export_written", bucket=bucket, key=key, rows=report.rows, columns=report.columns, size=report.size)
	return report
