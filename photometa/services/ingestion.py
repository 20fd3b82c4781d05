from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from photometa.services.attribute_store import AttributeStore
from photometa.services.errors import InvalidEvent, MetadataError, NotAnImage, StoreError
from photometa.services.logs import log_event
from photometa.services.metadata import extract_attributes
from photometa.services.object_store import ObjectStore
from photometa.services.records import AttributeRecord

log = logging.getLogger("photometa.ingestion")


@dataclass(frozen=True)
class ObjectEvent:
	bucket: str
	key: str


@dataclass
class BatchReport:
	processed: List[str] = field(default_factory=list)
	skipped: Dict[str, str] = field(default_factory=dict)
	failed: Dict[str, str] = field(default_factory=dict)


def process_object(
	event: ObjectEvent,
	object_store: ObjectStore,
	attribute_store: AttributeStore,
	table: str,
) -> AttributeRecord:
	# 1) Fetch
	obj = object_store.get(event.bucket, event.key)
	# 2) Extract
	record = extract_attributes(obj.body, obj.content_type, obj.etag, event.key)
	# 3) Upsert keyed on the object key
	attribute_store.put_item(table, record)
	return record


def process_batch(
	events: Sequence[ObjectEvent],
	object_store: ObjectStore,
	attribute_store: AttributeStore,
	table: str,
	max_workers: int = 4,
) -> BatchReport:
	if not events:
		raise InvalidEvent("event carries no object records")

	report = BatchReport()
	with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
		futmap = {
			executor.submit(process_object, ev, object_store, attribute_store, table): ev
			for ev in events
		}
		for fut in as_completed(futmap):
			ev = futmap[fut]
			try:
				fut.result()
			except NotAnImage as e:
				report.skipped[ev.key] = str(e)
				log_event(log, "object_skipped", bucket=ev.bucket, key=ev.key, reason=str(e))
			except MetadataError as e:
				report.failed[ev.key] = str(e)
				log_event(log, "object_failed", logging.WARNING, bucket=ev.bucket, key=ev.key, error=str(e))
			except StoreError as e:
				report.failed[ev.key] = str(e)
				log_event(log, "store_failed", logging.ERROR, bucket=ev.bucket, key=ev.key, error=str(e))
			except Exception as e:
				report.failed[ev.key] = f"{type(e).__name__}: {e}"
				log_event(log, "object_error", logging.ERROR, bucket=ev.bucket, key=ev.key, error=repr(e))
			else:
				report.processed.append(ev.key)
				log_event(log, "object_processed", bucket=ev.bucket, key=ev.key)

	# completion order is nondeterministic
	report.processed.sort()
	return report
