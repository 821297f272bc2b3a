"""Commit of reviewed imports as cases."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from quote_importer.adapters.supabase_client import QuotationStore
from quote_importer.services import ImportConfirmation, commit_import

from ..config import get_store
from ..schemas.cases import ImportCommitRequest, ImportCommitResponse

router = APIRouter(prefix="/cases", tags=["cases"])


@router.post("/import", summary="Commit a reviewed import", response_model=ImportCommitResponse)
def import_case(payload: ImportCommitRequest, store: QuotationStore = Depends(get_store)):
    """Validate the reviewed quotation and write it as a new case."""
    confirmation = ImportConfirmation(
        payload.quotation,
        file_name=payload.fileName,
        customer_id=payload.customerId,
        staff_id=payload.staffId,
        tax_rate=payload.taxRate,
    )
    if payload.specialDiscount is not None:
        confirmation.set_special_discount(payload.specialDiscount)

    result = commit_import(store, confirmation)
    return ImportCommitResponse(
        caseId=result.case_id,
        customerId=result.customer_id,
        customerCreated=result.customer_created,
        sectionCount=result.section_count,
        detailCount=result.detail_count,
        subtotal=confirmation.subtotal,
        taxAmount=confirmation.tax_amount,
        totalAmount=confirmation.total_amount,
    )
