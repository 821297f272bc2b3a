"""Summary amounts (小計 / 消費税 / 合計) found below the detail rows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from quote_importer.domain.constants import SUMMARY_LABELS
from quote_importer.utils import to_number
from quote_importer.extraction.spreadsheet.workbook import Workbook

SUMMARY_ROWS_AFTER_DETAILS = 15
FALLBACK_SUMMARY_ROWS = range(50, 101)


@dataclass
class SummaryAmounts:
    subtotal: Optional[float] = None
    special_discount: Optional[float] = None
    tax_amount: Optional[float] = None
    total_amount: Optional[float] = None

    def as_dict(self) -> Dict[str, Optional[float]]:
        return {
            "subtotal": self.subtotal,
            "special_discount": self.special_discount,
            "tax_amount": self.tax_amount,
            "total_amount": self.total_amount,
        }


def _label_field(label: str) -> Optional[str]:
    for field_name, words in SUMMARY_LABELS.items():
        if any(word in label for word in words):
            return field_name
    return None


def _first_amount_right_of(workbook: Workbook, sheet: str, row: int, column: int) -> Optional[float]:
    for right in range(column + 1, workbook.max_column(sheet) + 1):
        amount = to_number(workbook.value(sheet, row, right))
        if amount is not None:
            return amount
    return None


def find_summary_amounts(
    workbook: Workbook, sheet: str, label_column: int, after_row: Optional[int]
) -> SummaryAmounts:
    """
    Scan for summary rows labelled in the product-name column.

    Rows right after the last detail row are tried first, then rows 50-100.
    The first numeric cell to the right of a label is its amount; the first
    occurrence of each label wins.

    Args:
        workbook: Loaded workbook.
        sheet: Details sheet.
        label_column: Product-name column index.
        after_row: Last row consumed by the detail walk.

    Returns:
        SummaryAmounts: Amounts found, ``None`` for the rest.
    """
    rows: Iterable[int] = FALLBACK_SUMMARY_ROWS
    if after_row is not None:
        rows = list(range(after_row + 1, after_row + SUMMARY_ROWS_AFTER_DETAILS + 1)) + list(
            FALLBACK_SUMMARY_ROWS
        )

    found: Dict[str, Optional[float]] = {}
    for row in rows:
        label = workbook.text(sheet, row, label_column)
        if not label:
            continue
        field_name = _label_field(label)
        if field_name is None or field_name in found:
            continue
        amount = _first_amount_right_of(workbook, sheet, row, label_column)
        if amount is None:
            continue
        found[field_name] = abs(amount) if field_name == "special_discount" else amount
    return SummaryAmounts(**found)
