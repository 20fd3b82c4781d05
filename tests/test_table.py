import csv
import io

from photometa.services.scan import SchemaUnion
from photometa.services.table import ExportTable, assemble_row, assemble_table, encode_csv


def test_cells_follow_column_names_not_record_order():
	schema = SchemaUnion(["A", "B", "C"])
	records = [
		{"A": "a1", "B": "b1"},
		{"C": "c2", "B": "b2"},
	]

	table = assemble_table(records, schema)

	assert table.header == ["A", "B", "C"]
	assert table.rows == [["a1", "b1", ""], ["", "b2", "c2"]]


def test_every_cell_belongs_to_its_column():
	schema = SchemaUnion(["key", "Make", "dc:title[x-default]", "etag", "GPSLatitude"])
	record = {"etag": "e", "GPSLatitude": "[37/1,25/1,1234/100]", "key": "k", "Make": "Canon"}

	row = assemble_row(record, schema)

	for i, name in enumerate(schema):
		assert row[i] == (record.get(name) or "")


def test_null_and_missing_render_empty():
	schema = SchemaUnion(["a", "b", "c"])

	assert assemble_row({"a": None, "c": "x"}, schema) == ["", "", "x"]


def test_rows_match_header_width():
	schema = SchemaUnion(["a", "b", "c", "d"])
	table = assemble_table([{"a": "1"}, {}, {"d": "4", "b": "2"}], schema)

	assert table.width == 4
	assert all(len(row) == table.width for row in table)
	assert len(table) == 4


def test_csv_quotes_special_characters():
	table = ExportTable(["name", "note"], [["a,b", 'say "hi"'], ["multi\nline", "plain"]])

	text = encode_csv(table)

	assert text.splitlines()[0] == "name,note"
	assert '"a,b","say ""hi"""' in text
	assert '"multi\nline",plain' in text


def test_csv_round_trip():
	schema = SchemaUnion(["key", "dc:subject[0]", "UserComment"])
	records = [
		{"key": "a.jpg", "dc:subject[0]": "survey, site 4", "UserComment": None},
		{"UserComment": 'quote " inside\r\nand break', "key": "b.jpg"},
	]
	table = assemble_table(records, schema)

	parsed = list(csv.reader(io.StringIO(encode_csv(table), newline="")))

	assert parsed == list(table)


def test_encoding_is_deterministic():
	table = ExportTable(["a", "b"], [["1", ""], ["", "2"]])

	assert encode_csv(table) == encode_csv(table) == "a,b\r\n1,\r\n,2\r\n"
