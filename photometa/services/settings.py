from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


def _env(name: str, default: str) -> str:
	return (os.getenv(name) or default).strip()


@dataclass(frozen=True)
class Settings:
	table: str = "image-data"
	export_bucket: str = "image-exports"
	export_key: str = "image-data.csv"
	upload_bucket: str = "images"
	data_dir: Path = Path("data")
	scan_page_size: int = 100
	scan_max_bytes: int = 1024 * 1024
	max_workers: int = 4
	log_level: str = "INFO"

	@property
	def objects_dir(self) -> Path:
		return self.data_dir / "objects"

	@property
	def tables_dir(self) -> Path:
		return self.data_dir / "tables"

	@classmethod
	def from_env(cls) -> "Settings":
		return cls(
			table=_env("PHOTOMETA_TABLE", cls.table),
			export_bucket=_env("PHOTOMETA_EXPORT_BUCKET", cls.export_bucket),
			export_key=_env("PHOTOMETA_EXPORT_KEY", cls.export_key),
			upload_bucket=_env("PHOTOMETA_UPLOAD_BUCKET", cls.upload_bucket),
			data_dir=Path(_env("PHOTOMETA_DATA_DIR", str(cls.data_dir))),
			scan_page_size=int(_env("PHOTOMETA_SCAN_PAGE_SIZE", str(cls.scan_page_size))),
			scan_max_bytes=int(_env("PHOTOMETA_SCAN_MAX_BYTES", str(cls.scan_max_bytes))),
			max_workers=int(_env("PHOTOMETA_MAX_WORKERS", str(cls.max_workers))),
			log_level=_env("PHOTOMETA_LOG_LEVEL", cls.log_level).upper(),
		)


_settings: Optional[Settings] = None


def get_settings() -> Settings:
	global _settings
	if _settings is None:
		_settings = Settings.from_env()
	return _settings


def reset_settings() -> None:
	global _settings
	_settings = None
