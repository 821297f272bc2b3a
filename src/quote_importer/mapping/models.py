"""Mapping fields, locations and the mapping set produced by a session."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Literal, Tuple, Union

from quote_importer.extraction.pdfextract.models import PixelArea


class SessionState(str, Enum):
    IDLE = "idle"
    FIELD_SELECTED = "field_selected"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class FieldStatus(str, Enum):
    """What the operator sees next to each field."""

    UNMAPPED = "unmapped"
    SELECTED = "selected"
    CAPTURED = "captured"


@dataclass(frozen=True)
class MappingField:
    key: str
    label: str
    multi_select: bool = False
    # Detail field this column field feeds, for column mappings.
    detail_field: str | None = None


@dataclass(frozen=True)
class CellLocation:
    sheet: str
    ref: str


@dataclass(frozen=True)
class AreaLocation:
    area: PixelArea
    page: int
    render_scale: float


@dataclass(frozen=True)
class LineLocation:
    """A clicked line of linearized PDF text, with its current (possibly edited) text."""

    index: int
    text: str


Location = Union[CellLocation, AreaLocation, LineLocation]


@dataclass(frozen=True)
class MappingEntry:
    field_type: str
    label: str
    location: Location
    ordinal: int


@dataclass
class MappingSet:
    """Completed mapping: only fields with at least one location appear."""

    kind: Literal["spreadsheet", "pdf", "text"]
    entries: List[MappingEntry] = field(default_factory=list)

    def for_field(self, key: str) -> List[MappingEntry]:
        return sorted((e for e in self.entries if e.field_type == key), key=lambda e: e.ordinal)

    def fields(self) -> Tuple[str, ...]:
        seen: Dict[str, None] = {}
        for entry in self.entries:
            seen.setdefault(entry.field_type, None)
        return tuple(seen)

    def __bool__(self) -> bool:
        return bool(self.entries)


SPREADSHEET_FIELDS: Tuple[MappingField, ...] = (
    MappingField("customer_name", "顧客名"),
    MappingField("subject", "件名"),
    MappingField("delivery_place", "受渡場所", multi_select=True),
    MappingField("delivery_deadline", "受渡期限", multi_select=True),
    MappingField("delivery_terms", "受渡条件", multi_select=True),
    MappingField("validity_text", "有効期限", multi_select=True),
    MappingField("payment_terms", "御支払条件", multi_select=True),
    MappingField("estimate_date", "見積日", multi_select=True),
    MappingField("estimate_number", "見積番号", multi_select=True),
    MappingField("subtotal", "小計", multi_select=True),
    MappingField("tax_amount", "消費税", multi_select=True),
    MappingField("total_amount", "合計金額", multi_select=True),
    MappingField("product_name_col", "品名列", detail_field="product_name"),
    MappingField("spec_col", "規格列", detail_field="spec"),
    MappingField("unit_col", "単位列", detail_field="unit"),
    MappingField("quantity_col", "数量列", detail_field="quantity"),
    MappingField("unit_price_col", "単価列", detail_field="unit_price"),
    MappingField("amount_col", "金額列", detail_field="amount"),
    MappingField("cost_price_col", "原価列", detail_field="cost_price"),
    MappingField("wholesale_price_col", "仕切列", detail_field="wholesale_price"),
)

PDF_FIELDS: Tuple[MappingField, ...] = (
    MappingField("customer_name", "顧客名"),
    MappingField("subject", "件名"),
    MappingField("estimate_date", "見積日"),
    MappingField("estimate_number", "見積番号"),
    MappingField("product_name_col", "品名列", detail_field="product_name"),
    MappingField("spec_col", "規格列", detail_field="spec"),
    MappingField("quantity_col", "数量列", detail_field="quantity"),
    MappingField("unit_price_col", "単価列", detail_field="unit_price"),
    MappingField("amount_col", "金額列", detail_field="amount"),
    MappingField("wholesale_price_col", "仕切列", detail_field="wholesale_price"),
)


TEXT_FIELDS: Tuple[MappingField, ...] = (
    MappingField("customer_name", "顧客名"),
    MappingField("subject", "件名"),
    MappingField("estimate_date", "見積日", multi_select=True),
    MappingField("estimate_number", "見積番号", multi_select=True),
    MappingField("delivery_deadline", "受渡期限", multi_select=True),
    MappingField("delivery_terms", "受渡条件", multi_select=True),
    MappingField("validity_text", "有効期限", multi_select=True),
    MappingField("payment_terms", "御支払条件", multi_select=True),
)

# A text mapping cannot be handed over without these.
REQUIRED_TEXT_FIELDS: Tuple[str, ...] = ("customer_name", "subject", "estimate_date", "estimate_number")


def field_catalogue(kind: str) -> Tuple[MappingField, ...]:
    if kind == "spreadsheet":
        return SPREADSHEET_FIELDS
    if kind == "pdf":
        return PDF_FIELDS
    if kind == "text":
        return TEXT_FIELDS
    raise ValueError(f"Unknown mapping kind: {kind}")
