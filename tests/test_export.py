import csv
import io

import pytest

from photometa.services.attribute_store import MemoryAttributeStore
from photometa.services.errors import AttributeStoreError, EmptyScanResult
from photometa.services.export import export_csv
from photometa.services.records import ScanPage

TABLE = "image-data"


def _read_csv(object_store, bucket="exports", key="image-data.csv"):
	obj = object_store.get(bucket, key)
	return obj, list(csv.reader(io.StringIO(obj.body.decode("utf-8"), newline="")))


def test_export_writes_aligned_csv(object_store):
	store = MemoryAttributeStore(page_size=2)
	store.put_item(TABLE, {"key": "a.jpg", "etag": "1", "Make": "Canon"})
	store.put_item(TABLE, {"key": "b.jpg", "etag": "2", "Make": None})
	store.put_item(TABLE, {"etag": "3", "key": "c.jpg", "dc:format": "image/jpeg"})

	report = export_csv(store, object_store, TABLE, "exports")

	obj, rows = _read_csv(object_store)
	assert obj.content_type == "text/csv"
	assert obj.content_disposition == "attachment"
	assert rows == [
		["key", "etag", "Make", "dc:format"],
		["a.jpg", "1", "Canon", ""],
		["b.jpg", "2", "", ""],
		["c.jpg", "3", "", "image/jpeg"],
	]
	assert (report.rows, report.columns) == (3, 4)
	assert report.size == len(obj.body)


def test_two_page_scenario(object_store):
	store = MemoryAttributeStore(page_size=2)
	store.put_item(TABLE, {"key": "1", "A": "a1", "B": "b1"})
	store.put_item(TABLE, {"key": "2", "A": "a2", "B": "b2"})
	store.put_item(TABLE, {"key": "3", "B": "b3", "C": "c3"})

	export_csv(store, object_store, TABLE, "exports")

	_, rows = _read_csv(object_store)
	assert rows[0] == ["key", "A", "B", "C"]
	assert rows[3] == ["3", "", "b3", "c3"]


def test_empty_table_writes_nothing(object_store):
	with pytest.raises(EmptyScanResult):
		export_csv(MemoryAttributeStore(), object_store, TABLE, "exports")

	assert object_store.list("exports") == []


def test_failed_page_writes_nothing(object_store):
	class FailingStore:
		def scan(self, table, cursor=None):
			if cursor is None:
				return ScanPage([{"key": "a"}], cursor="next")
			raise AttributeStoreError("connection reset")

	with pytest.raises(AttributeStoreError):
		export_csv(FailingStore(), object_store, TABLE, "exports")

	assert object_store.list("exports") == []
