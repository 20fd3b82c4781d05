from __future__ import annotations

import csv
import io
from dataclasses import dataclass, field
from typing import Iterator, List, Sequence

from photometa.services.records import AttributeRecord
from photometa.services.scan import SchemaUnion


@dataclass
class ExportTable:
	header: List[str]
	rows: List[List[str]] = field(default_factory=list)

	@property
	def width(self) -> int:
		return len(self.header)

	def __iter__(self) -> Iterator[List[str]]:
		yield self.header
		yield from self.rows

	def __len__(self) -> int:
		return len(self.rows) + 1


def assemble_row(record: AttributeRecord, schema: SchemaUnion) -> List[str]:
	# cells are looked up by column name, never by the record's own key order
	return [record.get(name) or "" for name in schema]


def assemble_table(records: Sequence[AttributeRecord], schema: SchemaUnion) -> ExportTable:
	return ExportTable(list(schema), [assemble_row(r, schema) for r in records])


def encode_csv(table: ExportTable, delimiter: str = ",") -> str:
	buf = io.StringIO()
	writer = csv.writer(buf, delimiter=delimiter, quotechar='"', quoting=csv.QUOTE_MINIMAL, lineterminator="\r\n")
	writer.writerows(table)
	return buf.getvalue()
