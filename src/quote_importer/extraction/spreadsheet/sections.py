"""Section (目次) sheet reader and the checks against its amounts."""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, List, Optional

from quote_importer.domain.constants import SECTION_SKIP_WORDS
from quote_importer.domain.models import LineItem, SectionDef
from quote_importer.extraction.spreadsheet.workbook import Workbook, column_index
from quote_importer.logging_config import get_logger
from quote_importer.presets.models import SectionLayout
from quote_importer.utils import to_number

logger = get_logger(__name__)

SECTION_SCAN_ROWS = 80
# Blank rows before this row are tolerated (title blocks above the table).
BLANK_TOLERANCE_ROW = 10
# Yen differences tolerated by the section and total checks.
SECTION_TOLERANCE = 1
TOTAL_TOLERANCE = 100


@dataclass
class IndexTotals:
    """小計/消費税/合計 as listed on the index sheet, selling and wholesale side."""

    subtotal: Optional[float] = None
    tax_amount: Optional[float] = None
    total_amount: Optional[float] = None
    wholesale_subtotal: Optional[float] = None
    wholesale_tax: Optional[float] = None
    wholesale_total: Optional[float] = None

    @property
    def expected_total(self) -> Optional[float]:
        return self.wholesale_total if self.wholesale_total is not None else self.total_amount


def find_sections_sheet(workbook: Workbook, layout: SectionLayout) -> Optional[str]:
    if workbook.has_sheet(layout.sheet_name):
        return layout.sheet_name
    return workbook.find_sheet(layout.sheet_name)


def _amount(workbook: Workbook, sheet: str, row: int, letters: Optional[str]) -> Optional[float]:
    if not letters:
        return None
    return to_number(workbook.value(sheet, row, column_index(letters)))


def read_sections(workbook: Workbook, layout: Optional[SectionLayout]) -> List[SectionDef]:
    """
    Read ordered sections from the sections sheet.

    When the layout names amount columns, a row is a section only if its
    amount or wholesale amount is positive; title and heading rows carry none.

    Args:
        workbook: Loaded workbook.
        layout: Sections block of the preset, or ``None``.

    Returns:
        List[SectionDef]: Sections in sheet order, empty when not configured.
    """
    if layout is None:
        return []
    sheet = find_sections_sheet(workbook, layout)
    if sheet is None:
        logger.info("No sections sheet '%s' in workbook", layout.sheet_name)
        return []

    column = column_index(layout.name_column)
    last_row = min(layout.start_row + SECTION_SCAN_ROWS, max(workbook.max_row(sheet), layout.start_row))
    needs_amount = bool(layout.amount_column or layout.wholesale_column)

    sections: List[SectionDef] = []
    for row in range(layout.start_row, last_row + 1):
        name = workbook.text(sheet, row, column)
        if not name:
            if row > BLANK_TOLERANCE_ROW:
                break
            continue
        if any(word in name for word in SECTION_SKIP_WORDS):
            continue

        amount = _amount(workbook, sheet, row, layout.amount_column)
        wholesale = _amount(workbook, sheet, row, layout.wholesale_column)
        if needs_amount and (amount or 0) <= 0 and (wholesale or 0) <= 0:
            logger.debug("Row %d '%s' has no amount, not a section", row, name)
            continue
        sections.append(
            SectionDef(order=len(sections) + 1, name=name, amount=amount or 0, wholesale_amount=wholesale)
        )

    logger.info("Read %d sections from '%s'", len(sections), sheet)
    return sections


def read_index_totals(workbook: Workbook, layout: Optional[SectionLayout]) -> Optional[IndexTotals]:
    """
    Read the index sheet's own totals from ``layout.totals_rows``.

    Returns:
        Optional[IndexTotals]: ``None`` when there is no index sheet or no amount column.
    """
    if layout is None or not (layout.amount_column or layout.wholesale_column):
        return None
    sheet = find_sections_sheet(workbook, layout)
    if sheet is None:
        return None

    column = column_index(layout.name_column)
    totals = IndexTotals()
    first, last = layout.totals_rows
    for row in range(first, last + 1):
        label = workbook.text(sheet, row, column)
        amount = _amount(workbook, sheet, row, layout.amount_column)
        wholesale = _amount(workbook, sheet, row, layout.wholesale_column)
        if "小計" in label and "消費税" not in label:
            totals.subtotal, totals.wholesale_subtotal = amount, wholesale
        elif "消費税" in label:
            totals.tax_amount, totals.wholesale_tax = amount, wholesale
        elif "合計" in label:
            totals.total_amount, totals.wholesale_total = amount, wholesale
    return totals


def check_sections(items: List[LineItem], sections: List[SectionDef]) -> List[str]:
    """
    Compare each section's line-item sum with the amount on the index sheet.

    Wholesale values are preferred on both sides when present, matching how
    the index sheet lists them.

    Returns:
        List[str]: One warning per mismatched or empty section.
    """
    grouped: Dict[str, List[LineItem]] = OrderedDict()
    for item in items:
        if item.section_name:
            grouped.setdefault(item.section_name, []).append(item)

    warnings = []
    for section in sections:
        members = grouped.get(section.name)
        if not members:
            warnings.append(f"Section '{section.name}' from the index sheet has no line items")
            continue
        detail_total = sum(
            item.wholesale_price if item.wholesale_price is not None else item.amount for item in members
        )
        expected = section.wholesale_amount if section.wholesale_amount is not None else section.amount
        if abs(detail_total - expected) > SECTION_TOLERANCE:
            warnings.append(
                f"Section '{section.name}' sums to {detail_total:,.0f} "
                f"but the index sheet lists {expected:,.0f}"
            )
    return warnings


def check_index_total(total_amount: Optional[float], totals: Optional[IndexTotals]) -> Optional[str]:
    """Warning when the extracted total is off from the index sheet total by more than 100 yen."""
    if totals is None or total_amount is None:
        return None
    expected = totals.expected_total
    if not expected or abs(total_amount - expected) <= TOTAL_TOLERANCE:
        return None
    return f"Total {total_amount:,.0f} differs from the index sheet total {expected:,.0f}"
