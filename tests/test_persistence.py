import re
from datetime import date

import pytest

from quote_importer.domain.models import ExtractedQuotation, LineItem, QuotationHeader, SectionDef
from quote_importer.errors import ConfirmationError, StoreError
from quote_importer.services.confirmation import ImportConfirmation
from quote_importer.services.persistence import commit_import, generate_case_id, resolve_customer


def _confirmation(customer_name="株式会社テスト", **kwargs):
    quotation = ExtractedQuotation(
        header=QuotationHeader(
            customer_name=customer_name,
            subject="倉庫改修工事",
            estimate_number="Q-2025-001",
            estimate_date="2025-03-15",
        ),
        sections=[SectionDef(order=1, name="電気設備"), SectionDef(order=2, name="空調設備")],
        line_items=[
            LineItem(item_name="ケーブル", spec="VVF 2.0", unit="m", quantity=10, unit_price=120, amount=1200,
                     section_name="電気設備"),
            LineItem(item_name="エアコン", quantity=1, unit_price=98000, amount=98000, cost_amount=70000,
                     section_name="空調設備"),
        ],
    )
    return ImportConfirmation(quotation, file_name="q.xlsx", staff_id=5, **kwargs)


def test_commit_writes_case_sections_and_details(store):
    result = commit_import(store, _confirmation(), today=date(2026, 1, 2))

    assert result.customer_id == 1
    assert result.customer_created is False
    assert (result.section_count, result.detail_count) == (2, 2)
    assert len(result.case_id) == 16

    case = store.rows("cases")[0]
    assert case["case_id"] == result.case_id
    assert case["customer_id"] == 1
    assert case["staff_id"] == 5
    assert case["status"] == "商談中"
    assert case["created_date"] == "2025-03-15"
    assert case["note"] == "Excel取込: q.xlsx / 見積番号: Q-2025-001"
    assert case["tax_amount"] == 9920
    assert case["total_amount"] == 109120

    sections = store.rows("case_sections")
    assert [(s["section_id"], s["section_name"]) for s in sections] == [(1, "電気設備"), (2, "空調設備")]

    cable, aircon = store.rows("case_details")
    assert cable["spec"] == "ケーブル\nVVF 2.0"
    assert cable["section_id"] == 1
    assert cable["gross_profit"] is None
    assert aircon["spec"] == "エアコン"
    assert aircon["section_id"] == 2
    assert aircon["gross_profit"] == 28000


def test_unknown_customer_is_created(store):
    result = commit_import(store, _confirmation(customer_name="新規工業"))
    assert result.customer_id == 101
    assert result.customer_created is True
    assert {"id": 101, "name": "新規工業"} in store.rows("customers")


def test_customer_matched_by_partial_name(store):
    assert resolve_customer(store, "テスト") == (1, False)


def test_like_wildcards_in_name_are_escaped(store):
    customer_id, created = resolve_customer(store, "100%_off")
    assert store.last_ilike == {"name": "%100\\%\\_off%"}
    assert created is True
    assert customer_id == 101


def test_explicit_customer_id_skips_lookup(store):
    commit_import(store, _confirmation(customer_id=42))
    assert ("select", "customers") not in store.calls
    assert store.rows("cases")[0]["customer_id"] == 42


def test_failed_detail_insert_rolls_back_case_rows(store):
    store.fail_insert.add("case_details")

    with pytest.raises(StoreError):
        commit_import(store, _confirmation(customer_name="新規工業"))

    assert store.rows("cases") == []
    assert store.rows("case_sections") == []
    assert [call for call in store.calls if call[0] == "delete"] == [
        ("delete", "case_details"),
        ("delete", "case_sections"),
        ("delete", "cases"),
    ]
    # The customer created on the way is kept.
    assert any(row["name"] == "新規工業" for row in store.rows("customers"))


def test_rollback_continues_past_failed_delete(store):
    store.fail_insert.add("case_details")
    store.fail_delete.add("case_sections")

    with pytest.raises(StoreError) as excinfo:
        commit_import(store, _confirmation())

    assert excinfo.value.table == "case_details"
    assert store.rows("cases") == []


def test_invalid_import_never_touches_store(store):
    confirmation = ImportConfirmation(ExtractedQuotation(), staff_id=5)
    with pytest.raises(ConfirmationError):
        commit_import(store, confirmation)
    assert store.calls == []


def test_generate_case_id():
    first, second = generate_case_id(), generate_case_id()
    assert re.fullmatch(r"[0-9a-f]{16}", first)
    assert first != second


def test_unexpected_error_after_case_insert_still_rolls_back(store, monkeypatch):
    def broken_rows(*args):
        raise KeyError("section_id")

    monkeypatch.setattr("quote_importer.services.persistence._detail_rows", broken_rows)

    with pytest.raises(KeyError):
        commit_import(store, _confirmation())

    assert store.rows("cases") == []
    assert store.rows("case_sections") == []
    assert ("delete", "cases") in store.calls
