"""Commit of a confirmed import to the quotation store."""

from __future__ import annotations

import secrets
import time
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from quote_importer.adapters.supabase_client import QuotationStore
from quote_importer.domain.constants import CASE_STATUS_NEGOTIATING
from quote_importer.errors import StoreError
from quote_importer.logging_config import get_logger
from quote_importer.services.confirmation import ImportConfirmation

logger = get_logger(__name__)

CASE_ID_LENGTH = 16
# Child tables first: rows are removed in this order when a commit fails.
ROLLBACK_TABLES = ("case_details", "case_sections", "cases")


@dataclass
class CommitResult:
    case_id: str
    customer_id: int
    customer_created: bool
    section_count: int
    detail_count: int


def _get_single_id(rows: List[Dict[str, Any]]) -> Optional[int]:
    if not rows:
        return None
    return rows[0].get("id")


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def generate_case_id() -> str:
    """16 hex characters: millisecond timestamp followed by random hex."""
    timestamp = format(int(time.time() * 1000), "x")
    return (timestamp + secrets.token_hex(8))[:CASE_ID_LENGTH]


def resolve_customer(store: QuotationStore, name: str) -> Tuple[int, bool]:
    """
    Find a customer by exact name, then by partial name, else create one.

    Args:
        store: Quotation store.
        name: Customer name from the confirmed header.

    Returns:
        Tuple[int, bool]: Customer id and whether it was created.

    Raises:
        StoreError: If a lookup fails or the insert returns no id.
    """
    name = name.strip()
    customer_id = _get_single_id(store.select("customers", {"name": name}, columns="id,name", limit=1))
    if customer_id is not None:
        return customer_id, False

    customer_id = _get_single_id(
        store.select("customers", columns="id,name", ilike={"name": f"%{_escape_like(name)}%"}, limit=1)
    )
    if customer_id is not None:
        logger.info("Customer %r matched by partial name", name)
        return customer_id, False

    customer_id = _get_single_id(store.insert("customers", [{"name": name}]))
    if customer_id is None:
        raise StoreError("Unable to create customer", table="customers")
    logger.info("Created customer %r (id=%s)", name, customer_id)
    return customer_id, True


def _case_row(confirmation: ImportConfirmation, case_id: str, customer_id: int, today: Optional[date]) -> Dict[str, Any]:
    header = confirmation.header
    origin = "PDF取込" if confirmation.source.startswith("pdf") else "Excel取込"
    note = f"{origin}: {confirmation.file_name or '-'}"
    if header.estimate_number:
        note += f" / 見積番号: {header.estimate_number}"
    return {
        "case_id": case_id,
        "staff_id": confirmation.staff_id,
        "case_no": header.estimate_number or None,
        "created_date": confirmation.commit_date(today),
        "customer_id": customer_id,
        "subject": header.subject or None,
        "special_discount": confirmation.special_discount,
        "tax_amount": confirmation.tax_amount,
        "total_amount": confirmation.total_amount,
        "gross_profit": confirmation.gross_profit,
        "gross_margin": confirmation.gross_margin,
        "status": CASE_STATUS_NEGOTIATING,
        "note": note,
        "delivery_place": header.delivery_place or None,
        "delivery_deadline": header.delivery_deadline or None,
        "delivery_terms": header.delivery_terms or None,
        "validity_text": header.validity_text or None,
        "payment_terms": header.payment_terms or None,
        "layout_type": "vertical",
    }


def _detail_rows(
    confirmation: ImportConfirmation, case_id: str, section_ids: Dict[str, int]
) -> List[Dict[str, Any]]:
    rows = []
    for item in confirmation.line_items:
        rows.append(
            {
                "case_id": case_id,
                "staff_id": confirmation.staff_id,
                "product_id": item.product_id,
                "unregistered_product": item.item_name,
                "spec": f"{item.item_name}\n{item.spec}" if item.spec else item.item_name,
                "unit": item.unit or None,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "amount": item.amount,
                "cost_unit_price": item.cost_price or None,
                "cost_amount": item.cost_amount or None,
                "gross_profit": item.gross_profit if item.cost_amount else None,
                "section_id": section_ids.get(item.section_name) if item.section_name else None,
                "remarks": item.comment,
            }
        )
    return rows


def _rollback(store: QuotationStore, case_id: str) -> None:
    for table in ROLLBACK_TABLES:
        try:
            store.delete(table, {"case_id": case_id})
        except StoreError as e:
            logger.error("Rollback of %s for case %s failed: %s", table, case_id, e)


def commit_import(
    store: QuotationStore,
    confirmation: ImportConfirmation,
    today: Optional[date] = None,
) -> CommitResult:
    """
    Write a confirmed import as one case with its sections and details.

    The store has no multi-table transaction, so a failure after the case row
    is written deletes every row carrying the new case id before the error is
    re-raised. A customer created along the way is kept.

    Args:
        store: Quotation store.
        confirmation: Reviewed import.
        today: Fallback estimate date, defaults to the current date.

    Returns:
        CommitResult: Identifiers and row counts of the written case.

    Raises:
        ConfirmationError: If the import fails the confirmation gate.
        StoreError: If any write fails.
        Exception: Anything raised after the case row is written propagates
            once the partial rows are removed.
    """
    confirmation.require_valid()

    if confirmation.customer_id is not None:
        customer_id, customer_created = confirmation.customer_id, False
    else:
        customer_id, customer_created = resolve_customer(store, confirmation.header.customer_name)

    case_id = generate_case_id()
    store.insert("cases", [_case_row(confirmation, case_id, customer_id, today)])

    try:
        section_ids = {section.name: section.order for section in confirmation.sections}
        if confirmation.sections:
            store.insert(
                "case_sections",
                [
                    {"case_id": case_id, "section_id": section.order, "section_name": section.name}
                    for section in confirmation.sections
                ],
            )
        details = _detail_rows(confirmation, case_id, section_ids)
        store.insert("case_details", details)
    except Exception:
        logger.error("Commit of case %s failed, removing partial rows", case_id)
        _rollback(store, case_id)
        raise

    logger.info("Committed case %s with %d details", case_id, len(details))
    return CommitResult(
        case_id=case_id,
        customer_id=customer_id,
        customer_created=customer_created,
        section_count=len(confirmation.sections),
        detail_count=len(details),
    )
