"""Operator review of an extracted quotation before it is committed."""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, List, Optional

from quote_importer.domain.constants import DEFAULT_TAX_RATE
from quote_importer.domain.models import ExtractedQuotation, LineItem, QuotationHeader, SectionDef
from quote_importer.errors import ConfirmationError
from quote_importer.logging_config import get_logger
from quote_importer.utils import is_iso_date, parse_date

logger = get_logger(__name__)

_DERIVED_FIELDS = {"amount", "gross_profit"}


def round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def infer_tax_rate(header: QuotationHeader) -> float:
    """Tax rate implied by the imported totals, 10% when they do not tell."""
    if header.subtotal is None or header.tax_amount is None:
        return DEFAULT_TAX_RATE
    base = header.subtotal - (header.special_discount or 0)
    if base <= 0 or header.tax_amount < 0:
        return DEFAULT_TAX_RATE
    return round(header.tax_amount / base, 4)


class ImportConfirmation:
    """
    Editable copy of an extracted quotation.

    The extraction result is copied on construction and never modified. Line
    amounts are derived: any edit of quantity or unit price recomputes
    ``amount = quantity * unit_price`` whatever the imported amount was.
    """

    def __init__(
        self,
        quotation: ExtractedQuotation,
        *,
        file_name: Optional[str] = None,
        customer_id: Optional[int] = None,
        staff_id: Optional[int] = None,
        tax_rate: Optional[float] = None,
    ):
        self.source = quotation.source
        self.file_name = file_name
        self.customer_id = customer_id
        self.staff_id = staff_id
        self.header = quotation.header.model_copy(deep=True)
        self.sections: List[SectionDef] = [s.model_copy() for s in quotation.sections]
        self.line_items: List[LineItem] = [item.model_copy(deep=True) for item in quotation.line_items]
        self.special_discount: float = quotation.header.special_discount or 0
        self.tax_rate = infer_tax_rate(quotation.header) if tax_rate is None else tax_rate

    def _item(self, index: int) -> LineItem:
        if not 0 <= index < len(self.line_items):
            raise IndexError(f"Line {index} out of range ({len(self.line_items)} lines)")
        return self.line_items[index]

    def update_header(self, **changes: Any) -> QuotationHeader:
        unknown = set(changes) - set(QuotationHeader.model_fields)
        if unknown:
            raise ValueError(f"Unknown header fields: {sorted(unknown)}")
        data = self.header.model_dump()
        data.update(changes)
        self.header = QuotationHeader.model_validate(data)
        return self.header

    def update_line(self, index: int, **changes: Any) -> LineItem:
        """
        Edit fields of one line item.

        Args:
            index: Zero-based line index.
            **changes: Field values to set. ``amount`` cannot be set directly.

        Returns:
            LineItem: The updated line.

        Raises:
            IndexError: If the line does not exist.
            ValueError: If a derived or unknown field is given.
        """
        item = self._item(index)
        derived = _DERIVED_FIELDS & set(changes)
        if derived:
            raise ValueError(f"{sorted(derived)} are derived from quantity and unit_price")
        unknown = set(changes) - set(LineItem.model_fields)
        if unknown:
            raise ValueError(f"Unknown line fields: {sorted(unknown)}")

        data = item.model_dump(exclude={"gross_profit"})
        data.update(changes)
        updated = LineItem.model_validate(data)
        if "quantity" in changes or "unit_price" in changes:
            updated.amount = updated.quantity * updated.unit_price
        self.line_items[index] = updated
        return updated

    def add_line(self, item: Optional[LineItem] = None, index: Optional[int] = None) -> LineItem:
        item = item.model_copy(deep=True) if item is not None else LineItem()
        if item.amount == 0 and item.quantity * item.unit_price > 0:
            item.amount = item.quantity * item.unit_price
        if index is None:
            self.line_items.append(item)
        else:
            self.line_items.insert(index, item)
        return item

    def remove_line(self, index: int) -> LineItem:
        self._item(index)
        return self.line_items.pop(index)

    def set_comment(self, index: int, text: Optional[str]) -> LineItem:
        item = self._item(index)
        item.comment = text.strip() if text and text.strip() else None
        return item

    def assign_staff(self, staff_id: int) -> None:
        if staff_id is None or int(staff_id) <= 0:
            raise ValueError(f"Invalid staff id: {staff_id}")
        self.staff_id = int(staff_id)

    def set_special_discount(self, amount: float) -> None:
        if amount < 0:
            raise ValueError("Special discount cannot be negative")
        self.special_discount = amount

    @property
    def subtotal(self) -> float:
        return sum(item.amount for item in self.line_items)

    @property
    def discounted_subtotal(self) -> float:
        return max(0.0, self.subtotal - self.special_discount)

    @property
    def tax_amount(self) -> int:
        return round_half_up(self.discounted_subtotal * self.tax_rate)

    @property
    def total_amount(self) -> float:
        return self.discounted_subtotal + self.tax_amount

    @property
    def gross_profit(self) -> float:
        return sum(item.amount - (item.cost_amount or 0) for item in self.line_items)

    @property
    def gross_margin(self) -> Optional[float]:
        total = self.total_amount
        return self.gross_profit / total if total > 0 else None

    def commit_date(self, today: Optional[date] = None) -> str:
        """Estimate date to store: the header date when valid, else today."""
        candidate = self.header.estimate_date
        if candidate and not is_iso_date(candidate):
            candidate = parse_date(candidate)
        if candidate and is_iso_date(candidate):
            return candidate
        return (today or date.today()).isoformat()

    def validate(self) -> List[str]:
        """List every reason the import cannot be committed yet."""
        issues = []
        if not self.header.customer_name.strip() and self.customer_id is None:
            issues.append("Customer name is required")
        if not self.header.subject.strip():
            issues.append("Subject is required")
        if self.staff_id is None:
            issues.append("A staff member must be assigned")
        if not self.line_items:
            issues.append("At least one line item is required")
        return issues

    def require_valid(self) -> None:
        """
        Raises:
            ConfirmationError: With every open issue, if any.
        """
        issues = self.validate()
        if issues:
            logger.info("Import not ready to commit: %s", issues)
            raise ConfirmationError(issues)
