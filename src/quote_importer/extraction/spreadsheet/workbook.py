"""Read-only workbook snapshot built with openpyxl (.xlsx) or xlrd (legacy .xls)."""

from __future__ import annotations

import io
import zipfile
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import openpyxl
import xlrd
from openpyxl.utils import column_index_from_string, get_column_letter
from openpyxl.utils.cell import coordinate_from_string, range_boundaries
from openpyxl.utils.exceptions import CellCoordinatesException, InvalidFileException

from quote_importer.errors import WorkbookParseError
from quote_importer.logging_config import get_logger
from quote_importer.utils import cell_to_str, normalize_text

logger = get_logger(__name__)

Coordinate = Tuple[int, int]

# Legacy .xls files are OLE2 compound documents
XLS_MAGIC = b"\xd0\xcf\x11\xe0"


def column_index(letters: str) -> int:
    """Convert column letters ("AB") to a 1-based index."""
    return column_index_from_string(letters.strip().upper())


def column_letter(index: int) -> str:
    """Convert a 1-based column index to letters."""
    return get_column_letter(index)


def parse_ref(ref: str) -> Coordinate:
    """
    Split an A1 reference into ``(row, column)``.

    Raises:
        ValueError: If ``ref`` is not a single-cell A1 reference.
    """
    try:
        letters, row = coordinate_from_string(ref.strip().upper())
    except CellCoordinatesException as e:
        raise ValueError(f"Invalid cell reference: {ref!r}") from e
    return row, column_index_from_string(letters)


def make_ref(row: int, column: int) -> str:
    return f"{get_column_letter(column)}{row}"


@dataclass
class SheetSnapshot:
    """Cached values of one worksheet keyed by ``(row, column)``."""

    title: str
    values: Dict[Coordinate, Any] = field(default_factory=dict)
    merged_ranges: List[str] = field(default_factory=list)
    max_row: int = 0
    max_column: int = 0


@dataclass
class PreviewCell:
    ref: str
    row: int
    column: int
    text: str
    merged: Optional[str] = None


@dataclass
class SheetPreview:
    """Cell grid of one sheet, sized for the mapping UI."""

    sheet: str
    rows: List[List[PreviewCell]]
    merged_ranges: List[str]
    max_row: int
    max_column: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sheet": self.sheet,
            "maxRow": self.max_row,
            "maxColumn": self.max_column,
            "mergedRanges": self.merged_ranges,
            "rows": [
                [
                    {"ref": c.ref, "row": c.row, "column": c.column, "text": c.text, "merged": c.merged}
                    for c in row
                ]
                for row in self.rows
            ],
        }


class Workbook:
    """
    Immutable view over a workbook's cached cell values.

    Values are copied out of the reader once at load time so lookups never create
    cells and never evaluate formulas.
    """

    def __init__(self, sheets: List[SheetSnapshot]):
        self._sheets: Dict[str, SheetSnapshot] = {sheet.title: sheet for sheet in sheets}
        self._order: List[str] = [sheet.title for sheet in sheets]

    @classmethod
    def from_openpyxl(cls, book: "openpyxl.Workbook") -> "Workbook":
        sheets = []
        for worksheet in book.worksheets:
            snapshot = SheetSnapshot(
                title=worksheet.title,
                merged_ranges=[str(rng) for rng in worksheet.merged_cells.ranges],
            )
            for row in worksheet.iter_rows():
                for cell in row:
                    if cell.value is None or cell.value == "":
                        continue
                    snapshot.values[(cell.row, cell.column)] = cell.value
                    snapshot.max_row = max(snapshot.max_row, cell.row)
                    snapshot.max_column = max(snapshot.max_column, cell.column)
            sheets.append(snapshot)
        return cls(sheets)

    @classmethod
    def from_xlrd(cls, book: "xlrd.book.Book") -> "Workbook":
        """Snapshot a legacy ``.xls`` book opened with xlrd (0-based rows and columns)."""
        sheets = []
        for worksheet in book.sheets():
            snapshot = SheetSnapshot(
                title=worksheet.name,
                merged_ranges=[
                    f"{make_ref(rlo + 1, clo + 1)}:{make_ref(rhi, chi)}"
                    for rlo, rhi, clo, chi in worksheet.merged_cells
                ],
            )
            for row in range(worksheet.nrows):
                for column in range(worksheet.ncols):
                    value = _xls_value(book, worksheet.cell_type(row, column), worksheet.cell_value(row, column))
                    if value is None or value == "":
                        continue
                    snapshot.values[(row + 1, column + 1)] = value
                    snapshot.max_row = max(snapshot.max_row, row + 1)
                    snapshot.max_column = max(snapshot.max_column, column + 1)
            sheets.append(snapshot)
        return cls(sheets)

    @classmethod
    def from_bytes(cls, data: bytes) -> "Workbook":
        """
        Load a workbook from raw ``.xlsx`` or legacy ``.xls`` bytes.

        Args:
            data: File content.

        Returns:
            Workbook: Snapshot of cached values.

        Raises:
            WorkbookParseError: If the bytes are not a readable workbook.
        """
        if not data:
            raise WorkbookParseError("Empty workbook upload")
        if data.startswith(XLS_MAGIC):
            workbook = _load_xls(data)
        else:
            workbook = _load_xlsx(data)
        logger.info("Loaded workbook with sheets %s", workbook.sheet_names)
        return workbook

    @property
    def sheet_names(self) -> List[str]:
        return list(self._order)

    def has_sheet(self, name: str) -> bool:
        return name in self._sheets

    def sheet(self, name: str) -> Optional[SheetSnapshot]:
        return self._sheets.get(name)

    def value(self, sheet: str, row: int, column: int) -> Any:
        snapshot = self._sheets.get(sheet)
        if snapshot is None or row < 1 or column < 1:
            return None
        return snapshot.values.get((row, column))

    def cell(self, sheet: str, ref: str) -> Any:
        row, column = parse_ref(ref)
        return self.value(sheet, row, column)

    def text(self, sheet: str, row: int, column: int) -> str:
        """Normalized text of a cell (whitespace removed)."""
        return normalize_text(self.value(sheet, row, column))

    def text_at(self, sheet: str, ref: str) -> str:
        return normalize_text(self.cell(sheet, ref))

    def max_row(self, sheet: str) -> int:
        snapshot = self._sheets.get(sheet)
        return snapshot.max_row if snapshot else 0

    def max_column(self, sheet: str) -> int:
        snapshot = self._sheets.get(sheet)
        return snapshot.max_column if snapshot else 0

    def merged_ranges(self, sheet: str) -> List[str]:
        snapshot = self._sheets.get(sheet)
        return list(snapshot.merged_ranges) if snapshot else []

    def find_sheet(self, fragment: str) -> Optional[str]:
        """First sheet whose name contains ``fragment``."""
        for name in self._order:
            if fragment in name:
                return name
        return None

    def preview(self, sheet: str, max_rows: int = 120, max_cols: int = 52) -> SheetPreview:
        """
        Build the cell grid shown to the operator while mapping.

        Args:
            sheet: Sheet name.
            max_rows: Row limit of the grid.
            max_cols: Column limit of the grid.

        Returns:
            SheetPreview: Grid of display texts with merged-range markers.

        Raises:
            KeyError: If the sheet does not exist.
        """
        snapshot = self._sheets.get(sheet)
        if snapshot is None:
            raise KeyError(sheet)

        merged_at: Dict[Coordinate, str] = {}
        for rng in snapshot.merged_ranges:
            min_col, min_row, max_col, max_row = range_boundaries(rng)
            for row in range(min_row, max_row + 1):
                for column in range(min_col, max_col + 1):
                    merged_at[(row, column)] = rng

        row_limit = min(snapshot.max_row, max_rows)
        col_limit = min(snapshot.max_column, max_cols)
        rows = [
            [
                PreviewCell(
                    ref=make_ref(row, column),
                    row=row,
                    column=column,
                    text=cell_to_str(snapshot.values.get((row, column))),
                    merged=merged_at.get((row, column)),
                )
                for column in range(1, col_limit + 1)
            ]
            for row in range(1, row_limit + 1)
        ]
        return SheetPreview(
            sheet=sheet,
            rows=rows,
            merged_ranges=list(snapshot.merged_ranges),
            max_row=snapshot.max_row,
            max_column=snapshot.max_column,
        )


def _xls_value(book: "xlrd.book.Book", cell_type: int, value: Any) -> Any:
    if cell_type in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK, xlrd.XL_CELL_ERROR):
        return None
    if cell_type == xlrd.XL_CELL_DATE:
        return xlrd.xldate_as_datetime(value, book.datemode)
    if cell_type == xlrd.XL_CELL_BOOLEAN:
        return bool(value)
    # BIFF stores every number as a float
    if cell_type == xlrd.XL_CELL_NUMBER and float(value).is_integer():
        return int(value)
    return value


def _load_xlsx(data: bytes) -> Workbook:
    try:
        book = openpyxl.load_workbook(io.BytesIO(data), data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, ValueError, OSError, SyntaxError) as e:
        # SyntaxError covers malformed XML parts (ElementTree and lxml parse errors)
        raise WorkbookParseError(f"Failed to read workbook: {e}") from e
    try:
        return Workbook.from_openpyxl(book)
    finally:
        book.close()


def _load_xls(data: bytes) -> Workbook:
    try:
        book = xlrd.open_workbook(file_contents=data, formatting_info=True)
    except Exception as e:
        raise WorkbookParseError(f"Failed to read .xls workbook: {e}") from e
    try:
        return Workbook.from_xlrd(book)
    finally:
        book.release_resources()


def load_workbook(data: bytes) -> Workbook:
    """Shortcut for :meth:`Workbook.from_bytes`."""
    return Workbook.from_bytes(data)
