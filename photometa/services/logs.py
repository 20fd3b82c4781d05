from __future__ import annotations

import logging
import sys
from typing import Any

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO") -> None:
	root = logging.getLogger("photometa")
	root.setLevel(level)
	if not any(getattr(h, "_photometa", False) for h in root.handlers):
		handler = logging.StreamHandler(sys.stderr)
		handler.setFormatter(logging.Formatter(LOG_FORMAT))
		handler._photometa = True  # type: ignore[attr-defined]
		root.addHandler(handler)


def log_event(logger: logging.Logger, event: str, level: int = logging.INFO, **fields: Any) -> None:
	# Structured log in a single line
	logger.log(level, "%s", {"event": event, **fields})
