from datetime import date

import pytest

from quote_importer.domain.models import ExtractedQuotation, LineItem, QuotationHeader
from quote_importer.errors import ConfirmationError
from quote_importer.services.confirmation import ImportConfirmation, infer_tax_rate, round_half_up


def _quotation(**header):
    return ExtractedQuotation(
        header=QuotationHeader(customer_name="株式会社テスト", subject="倉庫改修", **header),
        line_items=[
            LineItem(item_name="ケーブル", quantity=2, unit_price=300, amount=999, cost_amount=400),
            LineItem(item_name="分電盤", quantity=1, unit_price=500, amount=500),
        ],
    )


def test_quantity_edit_recomputes_amount_and_leaves_original_untouched():
    quotation = _quotation()
    confirmation = ImportConfirmation(quotation)

    updated = confirmation.update_line(0, quantity=5)
    assert updated.amount == 1500
    assert confirmation.line_items[0].amount == 1500
    assert quotation.line_items[0].quantity == 2
    assert quotation.line_items[0].amount == 999


def test_unit_price_edit_recomputes_amount():
    confirmation = ImportConfirmation(_quotation())
    assert confirmation.update_line(1, unit_price=750).amount == 750


def test_non_numeric_edit_keeps_imported_amount():
    confirmation = ImportConfirmation(_quotation())
    assert confirmation.update_line(0, spec="VVF").amount == 999


def test_derived_and_unknown_line_fields_rejected():
    confirmation = ImportConfirmation(_quotation())
    with pytest.raises(ValueError):
        confirmation.update_line(0, amount=1)
    with pytest.raises(ValueError):
        confirmation.update_line(0, colour="red")
    with pytest.raises(IndexError):
        confirmation.update_line(5, quantity=1)


def test_header_edit():
    confirmation = ImportConfirmation(_quotation())
    assert confirmation.update_header(subject="  新しい件名 ").subject == "新しい件名"
    with pytest.raises(ValueError):
        confirmation.update_header(colour="red")


def test_tax_rate_inferred_from_imported_totals():
    assert infer_tax_rate(QuotationHeader(subtotal=100000, tax_amount=8000)) == 0.08
    assert infer_tax_rate(QuotationHeader(subtotal=100000)) == 0.1
    assert infer_tax_rate(QuotationHeader(subtotal=0, tax_amount=10)) == 0.1
    assert ImportConfirmation(_quotation(subtotal=1000, tax_amount=80)).tax_rate == 0.08
    assert ImportConfirmation(_quotation(), tax_rate=0.05).tax_rate == 0.05


def test_totals_round_tax_half_up():
    assert round_half_up(334.5) == 335
    assert round_half_up(2.4) == 2

    quotation = ExtractedQuotation(line_items=[LineItem(item_name="x", quantity=1, unit_price=3345, amount=3345)])
    confirmation = ImportConfirmation(quotation)
    assert confirmation.subtotal == 3345
    assert confirmation.tax_amount == 335
    assert confirmation.total_amount == 3680


def test_special_discount_reduces_taxable_base():
    confirmation = ImportConfirmation(_quotation())
    confirmation.update_line(0, quantity=1)
    confirmation.set_special_discount(300)
    assert confirmation.subtotal == 800
    assert confirmation.discounted_subtotal == 500
    assert confirmation.tax_amount == 50
    assert confirmation.total_amount == 550
    with pytest.raises(ValueError):
        confirmation.set_special_discount(-1)


def test_gross_profit_and_margin():
    confirmation = ImportConfirmation(_quotation())
    confirmation.update_line(0, quantity=3)
    assert confirmation.subtotal == 1400
    assert confirmation.gross_profit == 1000
    assert confirmation.gross_margin == pytest.approx(1000 / 1540)
    assert ImportConfirmation(ExtractedQuotation()).gross_margin is None


def test_add_remove_and_comment_lines():
    confirmation = ImportConfirmation(_quotation())
    added = confirmation.add_line(LineItem(item_name="工賃", quantity=3, unit_price=100), index=0)
    assert added.amount == 300
    assert confirmation.line_items[0].item_name == "工賃"
    assert confirmation.add_line().item_name == ""
    assert len(confirmation.line_items) == 4

    assert confirmation.remove_line(3).item_name == ""
    confirmation.set_comment(0, "  要確認 ")
    assert confirmation.line_items[0].comment == "要確認"
    confirmation.set_comment(0, "   ")
    assert confirmation.line_items[0].comment is None


def test_validate_lists_every_issue():
    confirmation = ImportConfirmation(ExtractedQuotation())
    assert confirmation.validate() == [
        "Customer name is required",
        "Subject is required",
        "A staff member must be assigned",
        "At least one line item is required",
    ]
    confirmation.customer_id = 7
    assert "Customer name is required" not in confirmation.validate()

    with pytest.raises(ConfirmationError) as excinfo:
        confirmation.require_valid()
    assert len(excinfo.value.issues) == 3


def test_staff_assignment():
    confirmation = ImportConfirmation(_quotation())
    with pytest.raises(ValueError):
        confirmation.assign_staff(0)
    confirmation.assign_staff(3)
    assert confirmation.validate() == []
    confirmation.require_valid()


@pytest.mark.parametrize(
    "estimate_date, expected",
    [
        ("2025-04-01", "2025-04-01"),
        ("令和7年4月1日", "2025-04-01"),
        ("2025/4/1", "2025-04-01"),
        ("近日発行", "2026-01-02"),
        ("", "2026-01-02"),
        ("2025-02-30", "2026-01-02"),
    ],
)
def test_commit_date(estimate_date, expected):
    confirmation = ImportConfirmation(_quotation(estimate_date=estimate_date))
    assert confirmation.commit_date(today=date(2026, 1, 2)) == expected
