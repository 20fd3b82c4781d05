from __future__ import annotations

import bisect
import hashlib
import json
import threading
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from photometa.services.errors import AttributeStoreError
from photometa.services.records import KEY, AttributeRecord, ScanPage


class AttributeStore(Protocol):
	def scan(self, table: str, cursor: Optional[str] = None) -> ScanPage:
		...

	def put_item(self, table: str, item: AttributeRecord) -> None:
		...


def item_id(item: AttributeRecord) -> str:
	key = item.get(KEY)
	if not key:
		raise AttributeStoreError("item has no key attribute")
	return hashlib.sha1(key.encode("utf-8")).hexdigest()


def _check_item(item: AttributeRecord) -> None:
	for name, value in item.items():
		if not isinstance(name, str) or not (value is None or isinstance(value, str)):
			raise AttributeStoreError("items must map strings to strings or null", {"attribute": name})


def _resume_at(ids: List[str], cursor: str, sorted_ids: bool) -> int:
	offset, _, last = cursor.partition(":")
	if offset.isdigit():
		n = int(offset)
		if 0 < n <= len(ids) and ids[n - 1] == last:
			return n
		if sorted_ids:
			# items written since the previous page shift offsets, not order
			n = bisect.bisect_left(ids, last)
			if n < len(ids) and ids[n] == last:
				return n + 1
	raise AttributeStoreError("unknown scan cursor", {"cursor": cursor})


def _page(
	ids: List[str],
	load,
	cursor: Optional[str],
	page_size: int,
	max_bytes: Optional[int],
	sorted_ids: bool = False,
) -> ScanPage:
	start = _resume_at(ids, cursor, sorted_ids) if cursor is not None else 0
	items: List[AttributeRecord] = []
	size = 0
	last: Optional[str] = None
	for i in ids[start:start + page_size]:
		item = load(i)
		item_size = len(json.dumps(item))
		if items and max_bytes is not None and size + item_size > max_bytes:
			break
		items.append(item)
		size += item_size
		last = i
	end = start + len(items)
	if last is None or end >= len(ids):
		return ScanPage(items, None)
	return ScanPage(items, f"{end}:{last}")


class MemoryAttributeStore:
	def __init__(self, page_size: int = 100, max_page_bytes: Optional[int] = None) -> None:
		self.page_size = page_size
		self.max_page_bytes = max_page_bytes
		self._tables: Dict[str, Dict[str, AttributeRecord]] = {}
		self._order: Dict[str, List[str]] = {}
		self._lock = threading.Lock()

	def put_item(self, table: str, item: AttributeRecord) -> None:
		_check_item(item)
		with self._lock:
			rows = self._tables.setdefault(table, {})
			i = item_id(item)
			# upsert replaces the item and keeps its scan position
			if i not in rows:
				self._order.setdefault(table, []).append(i)
			rows[i] = dict(item)

	def scan(self, table: str, cursor: Optional[str] = None) -> ScanPage:
		with self._lock:
			rows = self._tables.get(table, {})
			return _page(self._order.get(table, []), lambda i: dict(rows[i]), cursor, self.page_size, self.max_page_bytes)


class JsonAttributeStore:
	def __init__(self, root: Path, page_size: int = 100, max_page_bytes: Optional[int] = None) -> None:
		self.root = Path(root)
		self.page_size = page_size
		self.max_page_bytes = max_page_bytes
		self._ids: Dict[str, List[str]] = {}

	def _table_dir(self, table: str) -> Path:
		return self.root / table

	def put_item(self, table: str, item: AttributeRecord) -> None:
		_check_item(item)
		table_dir = self._table_dir(table)
		path = table_dir / f"{item_id(item)}.json"
		try:
			table_dir.mkdir(parents=True, exist_ok=True)
			with path.open("w", encoding="utf-8") as f:
				json.dump(item, f, indent=2)
		except OSError as e:
			raise AttributeStoreError(f"cannot write item: {e}", {"table": table}) from e
		self._ids.pop(table, None)

	def _load(self, table: str, i: str) -> AttributeRecord:
		path = self._table_dir(table) / f"{i}.json"
		try:
			with path.open("r", encoding="utf-8") as f:
				return json.load(f)
		except (OSError, ValueError) as e:
			raise AttributeStoreError(f"cannot read item: {e}", {"table": table, "item": i}) from e

	def _list_ids(self, table: str) -> List[str]:
		table_dir = self._table_dir(table)
		return sorted(p.stem for p in table_dir.glob("*.json")) if table_dir.is_dir() else []

	def scan(self, table: str, cursor: Optional[str] = None) -> ScanPage:
		# the directory is listed once per scan; later pages reuse the listing
		ids = self._ids.get(table)
		if cursor is None or ids is None:
			ids = self._ids[table] = self._list_ids(table)
		return _page(ids, lambda i: self._load(table, i), cursor, self.page_size, self.max_page_bytes, sorted_ids=True)
