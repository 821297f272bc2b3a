"""Typed, immutable format preset records."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Optional, Tuple

from quote_importer.domain.constants import DETAIL_FIELDS, HEADER_FIELDS, LABELLED_FIELDS


class LayoutType(str, Enum):
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"


@dataclass(frozen=True)
class CoverCells:
    """Ordered candidate cell references per header field."""

    customer_name: Tuple[str, ...] = ()
    subject: Tuple[str, ...] = ()
    delivery_place: Tuple[str, ...] = ()
    delivery_deadline: Tuple[str, ...] = ()
    delivery_terms: Tuple[str, ...] = ()
    validity_text: Tuple[str, ...] = ()
    payment_terms: Tuple[str, ...] = ()
    estimate_date: Tuple[str, ...] = ()
    estimate_number: Tuple[str, ...] = ()
    subtotal: Tuple[str, ...] = ()
    tax_amount: Tuple[str, ...] = ()
    total_amount: Tuple[str, ...] = ()

    def candidates(self, field_name: str) -> Tuple[str, ...]:
        if field_name not in HEADER_FIELDS:
            raise KeyError(field_name)
        return getattr(self, field_name)


@dataclass(frozen=True)
class LabelKeywords:
    """Ordered label keywords used when no candidate cell yields a value."""

    subject: Tuple[str, ...] = ()
    delivery_place: Tuple[str, ...] = ()
    delivery_deadline: Tuple[str, ...] = ()
    delivery_terms: Tuple[str, ...] = ()
    validity_text: Tuple[str, ...] = ()
    payment_terms: Tuple[str, ...] = ()
    estimate_date: Tuple[str, ...] = ()

    def keywords(self, field_name: str) -> Tuple[str, ...]:
        if field_name not in LABELLED_FIELDS:
            return ()
        return getattr(self, field_name)

    def all_keywords(self) -> Tuple[str, ...]:
        return tuple(k for name in LABELLED_FIELDS for k in getattr(self, name))


@dataclass(frozen=True)
class DetailColumns:
    """Header keyword candidates per detail column."""

    product_name: Tuple[str, ...] = ()
    spec: Tuple[str, ...] = ()
    unit: Tuple[str, ...] = ()
    quantity: Tuple[str, ...] = ()
    unit_price: Tuple[str, ...] = ()
    amount: Tuple[str, ...] = ()
    cost_price: Tuple[str, ...] = ()
    cost_amount: Tuple[str, ...] = ()
    gross_margin: Tuple[str, ...] = ()
    wholesale_price: Tuple[str, ...] = ()

    def keywords(self, field_name: str) -> Tuple[str, ...]:
        if field_name not in DETAIL_FIELDS:
            raise KeyError(field_name)
        return getattr(self, field_name)


@dataclass(frozen=True)
class DetailLayout:
    sheet_names: Tuple[str, ...]
    header_row: int
    start_row: int
    max_row: int
    stop_words: Tuple[str, ...]
    columns: DetailColumns
    # Column letters used when header keyword matching fails.
    default_columns: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class SectionLayout:
    sheet_name: str
    name_column: str
    start_row: int
    # With amount columns set, only rows carrying an amount are sections.
    amount_column: Optional[str] = None
    wholesale_column: Optional[str] = None
    # Rows holding the index sheet's own 小計/消費税/合計.
    totals_rows: Tuple[int, int] = (15, 25)


@dataclass(frozen=True)
class FormatPreset:
    """A named extraction recipe for one family of workbook layouts."""

    id: str
    name: str
    description: str
    layout_type: LayoutType
    cover: CoverCells
    labels: LabelKeywords
    details: DetailLayout
    sections: Optional[SectionLayout] = None

    def summary(self) -> Dict[str, str]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "layoutType": self.layout_type.value,
        }


def with_header_row(preset: FormatPreset, header_row: int) -> FormatPreset:
    """
    Derive a copy of ``preset`` keyed to another detail header row.

    The data start row follows directly below the header. The catalogue entry
    itself is left untouched.

    Args:
        preset: Catalogue preset.
        header_row: 1-based header row found by detection.

    Returns:
        FormatPreset: Derived preset.
    """
    details = replace(preset.details, header_row=header_row, start_row=header_row + 1)
    return replace(preset, details=details)
