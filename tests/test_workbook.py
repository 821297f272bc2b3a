import datetime
import io
import zipfile

import pytest
import xlrd

from conftest import build_workbook, build_xlsx

from quote_importer.errors import WorkbookParseError
from quote_importer.extraction import process_workbook
from quote_importer.extraction.spreadsheet import Workbook
from quote_importer.extraction.spreadsheet.workbook import XLS_MAGIC, parse_ref


def _zip(parts):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, text in parts.items():
            archive.writestr(name, text)
    return buffer.getvalue()


class FakeXlsSheet:
    def __init__(self, name, cells, merged_cells=()):
        self.name = name
        self._cells = cells
        self.merged_cells = list(merged_cells)
        self.nrows = max(row for row, _ in cells) + 1
        self.ncols = max(column for _, column in cells) + 1

    def cell_type(self, row, column):
        return self._cells.get((row, column), (xlrd.XL_CELL_EMPTY, ""))[0]

    def cell_value(self, row, column):
        return self._cells.get((row, column), (xlrd.XL_CELL_EMPTY, ""))[1]


class FakeXlsBook:
    datemode = 0

    def __init__(self, sheets):
        self._sheets = sheets

    def sheets(self):
        return self._sheets


def test_corrupt_xml_part_is_a_parse_error():
    data = _zip({"[Content_Types].xml": "<Types><broken"})
    with pytest.raises(WorkbookParseError, match="Failed to read workbook"):
        Workbook.from_bytes(data)

    result = process_workbook(data)
    assert result["success"] is False
    assert result["error"].startswith("Failed to read workbook")


def test_not_a_zip_is_a_parse_error():
    with pytest.raises(WorkbookParseError):
        Workbook.from_bytes(b"plain text")


def test_unreadable_xls_is_a_parse_error():
    with pytest.raises(WorkbookParseError, match=r"\.xls"):
        Workbook.from_bytes(XLS_MAGIC + b"\x00" * 600)


def test_xls_snapshot_matches_xlsx_conventions():
    sheet = FakeXlsSheet(
        "見積",
        {
            (0, 0): (xlrd.XL_CELL_TEXT, "株式会社テスト"),
            (1, 1): (xlrd.XL_CELL_NUMBER, 12.0),
            (1, 2): (xlrd.XL_CELL_NUMBER, 2.5),
            (2, 0): (xlrd.XL_CELL_DATE, 45748.0),
            (2, 1): (xlrd.XL_CELL_BLANK, ""),
            (2, 2): (xlrd.XL_CELL_ERROR, 7),
            (3, 3): (xlrd.XL_CELL_BOOLEAN, 1),
        },
        merged_cells=[(0, 1, 0, 3)],
    )
    workbook = Workbook.from_xlrd(FakeXlsBook([sheet]))

    assert workbook.sheet_names == ["見積"]
    assert workbook.cell("見積", "A1") == "株式会社テスト"
    assert workbook.cell("見積", "B2") == 12
    assert isinstance(workbook.cell("見積", "B2"), int)
    assert workbook.cell("見積", "C2") == 2.5
    assert workbook.cell("見積", "A3") == datetime.datetime(2025, 4, 1)
    assert workbook.cell("見積", "B3") is None
    assert workbook.cell("見積", "C3") is None
    assert workbook.cell("見積", "D4") is True
    assert workbook.merged_ranges("見積") == ["A1:C1"]
    assert (workbook.max_row("見積"), workbook.max_column("見積")) == (4, 4)


def test_preview_marks_merged_cells():
    workbook = build_workbook({"表紙": {"A1": "御見積書", "B3": 5}}, merged={"表紙": ["A1:C1"]})
    preview = workbook.preview("表紙")
    assert preview.rows[0][2].merged == "A1:C1"
    assert preview.rows[2][1].text == "5"
    with pytest.raises(KeyError):
        workbook.preview("なし")


@pytest.mark.parametrize("ref, expected", [("A1", (1, 1)), ("ab12", (12, 28)), (" C3 ", (3, 3))])
def test_parse_ref(ref, expected):
    assert parse_ref(ref) == expected


def test_parse_ref_rejects_ranges():
    with pytest.raises(ValueError):
        parse_ref("A1:B2")


def test_roundtrip_from_bytes_keeps_sheet_order():
    workbook = Workbook.from_bytes(build_xlsx({"b": {"A1": 1}, "a": {"A1": 2}}))
    assert workbook.sheet_names == ["b", "a"]
