"""Detail (line-item) extraction from a workbook."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Set

from quote_importer.domain.constants import (
    GRAND_TOTAL_WORDS,
    OPTIONAL_DETAIL_FIELDS,
    REQUIRED_DETAIL_FIELDS,
)
from quote_importer.domain.models import LineItem, SectionDef
from quote_importer.logging_config import get_logger
from quote_importer.presets.models import DetailLayout
from quote_importer.utils import cell_to_str, coerce_number, collapse_whitespace, first_match, normalize_text, to_number
from quote_importer.extraction.spreadsheet.workbook import Workbook, column_index, column_letter

logger = get_logger(__name__)

MAX_HEADER_COLUMN = 104  # CZ
SECTION_RESUME_LOOKAHEAD = 5


@dataclass
class DetailExtraction:
    """Line items of one details sheet plus the layout that produced them."""

    sheet: Optional[str]
    columns: Dict[str, int] = field(default_factory=dict)
    items: List[LineItem] = field(default_factory=list)
    last_row: Optional[int] = None
    stop_row: Optional[int] = None

    def column_letters(self) -> Dict[str, str]:
        return {name: column_letter(index) for name, index in self.columns.items()}


def find_details_sheet(workbook: Workbook, layout: DetailLayout) -> Optional[str]:
    """
    Pick the details sheet.

    The first sheet-name candidate present in the workbook wins (exact,
    case-sensitive). A single-sheet workbook falls back to its only sheet.
    """
    match = first_match(layout.sheet_names, workbook.has_sheet)
    if match:
        return match[0]
    if len(workbook.sheet_names) == 1:
        return workbook.sheet_names[0]
    return None


def _match_column(header: Mapping[int, str], keywords: Sequence[str], claimed: Set[int]) -> Optional[int]:
    for keyword in keywords:
        target = normalize_text(keyword)
        if not target:
            continue
        for column, text in header.items():
            if column not in claimed and text == target:
                return column
        for column, text in header.items():
            if column not in claimed and target in text:
                return column
    return None


def resolve_columns(workbook: Workbook, sheet: str, layout: DetailLayout) -> Dict[str, int]:
    """
    Map detail fields to column indexes using the header row.

    Per field, keywords are tried in order and an exact normalized match beats
    a substring match. Cost and wholesale columns are resolved first so that
    e.g. 原価単価 is never taken for 単価. When the product-name column cannot
    be found the preset's default column letters fill the gaps.

    Args:
        workbook: Loaded workbook.
        sheet: Details sheet.
        layout: Detail layout of the preset.

    Returns:
        Dict[str, int]: Field name to 1-based column index.
    """
    last_column = min(workbook.max_column(sheet), MAX_HEADER_COLUMN)
    header: Dict[int, str] = {}
    for column in range(1, last_column + 1):
        text = workbook.text(sheet, layout.header_row, column)
        if text:
            header[column] = text

    columns: Dict[str, int] = {}
    claimed: Set[int] = set()
    for field_name in OPTIONAL_DETAIL_FIELDS + REQUIRED_DETAIL_FIELDS:
        keywords = layout.columns.keywords(field_name)
        if not keywords:
            continue
        column = _match_column(header, keywords, claimed)
        if column is not None:
            columns[field_name] = column
            claimed.add(column)

    if "product_name" not in columns and layout.default_columns:
        logger.warning(
            "No product-name header on row %d of '%s', using default columns", layout.header_row, sheet
        )
        for field_name, letter in layout.default_columns.items():
            if field_name not in columns:
                columns[field_name] = column_index(letter)
    return columns


class _RowReader:
    def __init__(self, workbook: Workbook, sheet: str, columns: Mapping[str, int]):
        self.workbook = workbook
        self.sheet = sheet
        self.columns = columns

    def raw(self, row: int, field_name: str):
        column = self.columns.get(field_name)
        return None if column is None else self.workbook.value(self.sheet, row, column)

    def text(self, row: int, field_name: str) -> str:
        return normalize_text(self.raw(row, field_name))

    def number(self, row: int, field_name: str) -> Optional[float]:
        if field_name not in self.columns:
            return None
        return coerce_number(self.raw(row, field_name))

    def line_item(self, row: int, section_name: Optional[str]) -> LineItem:
        quantity = self.number(row, "quantity") or 0
        unit_price = self.number(row, "unit_price") or 0
        amount = self.number(row, "amount") or 0
        if amount == 0 and quantity * unit_price > 0:
            amount = quantity * unit_price
        return LineItem(
            item_name=collapse_whitespace(self.raw(row, "product_name")),
            spec=cell_to_str(self.raw(row, "spec")).strip(),
            unit=collapse_whitespace(self.raw(row, "unit")),
            quantity=quantity,
            unit_price=unit_price,
            amount=amount,
            cost_price=self.number(row, "cost_price"),
            cost_amount=self.number(row, "cost_amount"),
            gross_margin=self.number(row, "gross_margin"),
            wholesale_price=self.number(row, "wholesale_price"),
            section_name=section_name,
            source_row=row,
        )

    def is_continuation(self, row: int) -> bool:
        """Spec text spilling onto a row without a name, quantity or price."""
        if not self.text(row, "spec"):
            return False
        return not to_number(self.raw(row, "quantity")) and to_number(self.raw(row, "unit_price")) is None


def _find_resume_row(reader: _RowReader, row: int, stop_words: Sequence[str]) -> Optional[int]:
    for candidate in range(row + 1, row + SECTION_RESUME_LOOKAHEAD + 1):
        name = reader.text(candidate, "product_name")
        if name and not any(word in name for word in stop_words):
            return candidate
    return None


def extract_line_items(
    workbook: Workbook,
    layout: DetailLayout,
    sections: Sequence[SectionDef] = (),
    column_overrides: Optional[Mapping[str, int]] = None,
    sheet: Optional[str] = None,
) -> DetailExtraction:
    """
    Walk the detail rows of ``layout`` and emit line items.

    Rows without a product name are skipped (spec-only rows extend the previous
    item). A product name containing a stop word ends the walk, unless sections
    remain, in which case scanning resumes at the next named row within five
    rows under the next section. A row naming a section switches the current
    section and is not emitted.

    Args:
        workbook: Loaded workbook.
        layout: Detail layout of the preset.
        sections: Known sections in order.
        column_overrides: Field to column index, taking precedence over header
            matching (used by mapping).
        sheet: Details sheet; detected from the layout when omitted.

    Returns:
        DetailExtraction: Items in source row order.
    """
    sheet = sheet or find_details_sheet(workbook, layout)
    if sheet is None:
        logger.warning("No details sheet among %s", list(layout.sheet_names))
        return DetailExtraction(sheet=None)

    columns = resolve_columns(workbook, sheet, layout)
    if column_overrides:
        columns.update(column_overrides)
    result = DetailExtraction(sheet=sheet, columns=columns)
    if "product_name" not in columns:
        logger.warning("Product-name column unresolved on '%s', no line items read", sheet)
        return result

    reader = _RowReader(workbook, sheet, columns)
    header_name = workbook.text(sheet, layout.header_row, columns["product_name"])
    section_index = {normalize_text(section.name): i for i, section in enumerate(sections)}
    current = 0 if sections else None
    last_row = min(layout.max_row, workbook.max_row(sheet))

    row = layout.start_row
    while row <= last_row:
        name = reader.text(row, "product_name")
        if not name:
            if result.items and reader.is_continuation(row):
                previous = result.items[-1]
                extra = cell_to_str(reader.raw(row, "spec")).strip()
                previous.spec = f"{previous.spec}\n{extra}" if previous.spec else extra
            row += 1
            continue

        if name in section_index:
            current = section_index[name]
            row += 1
            continue

        if any(word in name for word in layout.stop_words):
            resume = None
            is_grand_total = any(word in name for word in GRAND_TOTAL_WORDS)
            if current is not None and current < len(sections) - 1 and not is_grand_total:
                resume = _find_resume_row(reader, row, layout.stop_words)
            if resume is None:
                result.stop_row = row
                break
            current += 1
            logger.debug("Stop word on row %d, resuming section '%s' at row %d", row, sections[current].name, resume)
            row = resume
            continue

        if name == header_name:
            # Header repeated on a continuation page.
            row += 1
            continue

        section_name = sections[current].name if current is not None else None
        result.items.append(reader.line_item(row, section_name))
        result.last_row = row
        row += 1

    logger.info(
        "Read %d line items from '%s' (columns %s)", len(result.items), sheet, result.column_letters()
    )
    return result
