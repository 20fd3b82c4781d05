from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from photometa.services.attribute_store import AttributeStore
from photometa.services.errors import EmptyScanResult
from photometa.services.logs import log_event
from photometa.services.records import AttributeRecord

log = logging.getLogger("photometa.scan")


class SchemaUnion:
	def __init__(self, names: Iterable[str] = ()) -> None:
		self._names: List[str] = []
		self._index: Dict[str, int] = {}
		for n in names:
			self.add(n)

	def add(self, name: str) -> int:
		i = self._index.get(name)
		if i is None:
			i = len(self._names)
			self._index[name] = i
			self._names.append(name)
		return i

	def observe(self, record: AttributeRecord) -> None:
		for name in record:
			self.add(name)

	def index(self, name: str) -> int:
		return self._index[name]

	@property
	def names(self) -> Tuple[str, ...]:
		return tuple(self._names)

	def __contains__(self, name: object) -> bool:
		return name in self._index

	def __iter__(self) -> Iterator[str]:
		return iter(tuple(self._names))

	def __len__(self) -> int:
		return len(self._names)

	def __repr__(self) -> str:
		return f"SchemaUnion({self._names!r})"


@dataclass
class ScanResult:
	records: List[AttributeRecord] = field(default_factory=list)
	schema: SchemaUnion = field(default_factory=SchemaUnion)
	pages: int = 0


def scan_all(attribute_store: AttributeStore, table: str) -> ScanResult:
	result = ScanResult()
	cursor: Optional[str] = None
	while True:
		page = attribute_store.scan(table, cursor)
		result.pages += 1
		if not page.items:
			if result.pages == 1:
				log_event(log, "scan_empty", logging.ERROR, table=table)
				raise EmptyScanResult(table)
			log_event(log, "scan_empty_page", logging.WARNING, table=table, page=result.pages)
			break
		for item in page.items:
			result.schema.observe(item)
			result.records.append(item)
		if page.cursor is None:
			break
		cursor = page.cursor

	log_event(log, "scan_done", table=table, pages=result.pages, records=len(result.records), columns=len(result.schema))
	return result
