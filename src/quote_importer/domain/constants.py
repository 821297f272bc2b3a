"""Domain-level constants for quotation import."""

from __future__ import annotations

from typing import Dict, List, Tuple

# Header fields read from the cover sheet, in extraction order.
TEXT_HEADER_FIELDS: Tuple[str, ...] = (
    "customer_name",
    "subject",
    "delivery_place",
    "delivery_deadline",
    "delivery_terms",
    "validity_text",
    "payment_terms",
    "estimate_date",
    "estimate_number",
)
AMOUNT_HEADER_FIELDS: Tuple[str, ...] = ("subtotal", "tax_amount", "total_amount")
HEADER_FIELDS: Tuple[str, ...] = TEXT_HEADER_FIELDS + AMOUNT_HEADER_FIELDS

# Header fields that support label search on the cover sheet.
LABELLED_FIELDS: Tuple[str, ...] = (
    "subject",
    "delivery_place",
    "delivery_deadline",
    "delivery_terms",
    "validity_text",
    "payment_terms",
    "estimate_date",
)

REQUIRED_DETAIL_FIELDS: Tuple[str, ...] = (
    "product_name",
    "spec",
    "unit",
    "quantity",
    "unit_price",
    "amount",
)
# Resolved before the required fields so their header columns are claimed first.
OPTIONAL_DETAIL_FIELDS: Tuple[str, ...] = (
    "cost_amount",
    "cost_price",
    "gross_margin",
    "wholesale_price",
)
DETAIL_FIELDS: Tuple[str, ...] = REQUIRED_DETAIL_FIELDS + OPTIONAL_DETAIL_FIELDS

NUMERIC_DETAIL_FIELDS: Tuple[str, ...] = (
    "quantity",
    "unit_price",
    "amount",
    "cost_price",
    "cost_amount",
    "gross_margin",
    "wholesale_price",
)

SUMMARY_LABELS: Dict[str, Tuple[str, ...]] = {
    "subtotal": ("小計",),
    "special_discount": ("出精値引", "値引"),
    "tax_amount": ("消費税",),
    "total_amount": ("合計", "総合計", "総計"),
}

# Rows of the sections sheet containing these words are totals, not sections.
SECTION_SKIP_WORDS: Tuple[str, ...] = ("小計", "消費税", "合計", "金額", "出精", "値引")

# A stop word containing one of these ends the walk even when sections remain.
GRAND_TOTAL_WORDS: Tuple[str, ...] = ("合計", "総計")

UNIT_KEYWORDS: List[str] = [
    "式",
    "個",
    "本",
    "セット",
    "kg",
    "m",
    "cm",
    "台",
    "枚",
    "組",
    "ペア",
    "ロット",
    "箱",
    "袋",
    "カート",
    "ケース",
]

COMPANY_MARKERS: Tuple[str, ...] = ("株式会社", "有限会社", "合同会社")
HONORIFIC_MARKERS: Tuple[str, ...] = ("御中", "様")

DEFAULT_TAX_RATE = 0.1
CASE_STATUS_NEGOTIATING = "商談中"
