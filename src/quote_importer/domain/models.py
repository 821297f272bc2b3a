"""Domain models for extracted quotations."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, computed_field, field_validator

from quote_importer.utils import collapse_whitespace

QuotationSource = Literal["excel", "excel-mapped", "pdf-text", "pdf-heuristic", "pdf-mapped", "pdf-text-mapped"]


class QuotationHeader(BaseModel):
    """Header fields of a quotation. Every field may be empty after extraction."""

    customer_name: str = Field(default="", alias="customerName", max_length=255)
    subject: str = Field(default="", max_length=500)
    delivery_place: str = Field(default="", alias="deliveryPlace")
    delivery_deadline: str = Field(default="", alias="deliveryDeadline")
    delivery_terms: str = Field(default="", alias="deliveryTerms")
    validity_text: str = Field(default="", alias="validityText")
    payment_terms: str = Field(default="", alias="paymentTerms")
    estimate_date: str = Field(default="", alias="estimateDate")
    estimate_number: str = Field(default="", alias="estimateNo")
    subtotal: Optional[float] = None
    special_discount: Optional[float] = Field(default=None, alias="specialDiscount")
    tax_amount: Optional[float] = Field(default=None, alias="taxAmount")
    total_amount: Optional[float] = Field(default=None, alias="totalAmount")

    class Config:
        populate_by_name = True

    @field_validator(
        "customer_name",
        "subject",
        "delivery_place",
        "delivery_deadline",
        "delivery_terms",
        "validity_text",
        "payment_terms",
        "estimate_date",
        "estimate_number",
        mode="before",
    )
    @classmethod
    def _none_to_empty(cls, value):  # type: ignore[override]
        return "" if value is None else collapse_whitespace(value)


class LineItem(BaseModel):
    """One row of a quotation's detail table."""

    item_name: str = Field(default="", alias="productName")
    spec: str = ""
    unit: str = ""
    quantity: float = 0
    unit_price: float = Field(default=0, alias="unitPrice")
    amount: float = 0
    cost_price: Optional[float] = Field(default=None, alias="costPrice")
    cost_amount: Optional[float] = Field(default=None, alias="costAmount")
    gross_margin: Optional[float] = Field(default=None, alias="grossMargin")
    wholesale_price: Optional[float] = Field(default=None, alias="wholesalePrice")
    section_name: Optional[str] = Field(default=None, alias="sectionName")
    product_id: Optional[int] = Field(default=None, alias="productId")
    comment: Optional[str] = None
    source_row: Optional[int] = Field(default=None, alias="sourceRow")

    class Config:
        populate_by_name = True

    @computed_field
    @property
    def gross_profit(self) -> Optional[float]:
        """Amount minus cost amount, when a cost is known."""
        if self.cost_amount is None:
            return None
        return self.amount - self.cost_amount


class SectionDef(BaseModel):
    """A named, ordered grouping of line items, with the amounts listed on the index sheet."""

    order: int = Field(ge=1)
    name: str = Field(min_length=1)
    amount: float = 0
    wholesale_amount: Optional[float] = Field(default=None, alias="wholesaleAmount")

    class Config:
        populate_by_name = True


class ExtractedQuotation(BaseModel):
    """Structured output of any extraction path."""

    header: QuotationHeader = Field(default_factory=QuotationHeader)
    line_items: List[LineItem] = Field(default_factory=list, alias="lineItems")
    sections: List[SectionDef] = Field(default_factory=list)
    source: QuotationSource = "excel"
    preset_id: Optional[str] = Field(default=None, alias="presetId")
    warnings: List[str] = Field(default_factory=list)

    class Config:
        populate_by_name = True
