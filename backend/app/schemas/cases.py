"""API schemas for committing a reviewed import."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from quote_importer.domain.models import ExtractedQuotation


class ImportCommitRequest(BaseModel):
    quotation: ExtractedQuotation
    fileName: Optional[str] = None
    staffId: Optional[int] = Field(default=None, gt=0)
    customerId: Optional[int] = Field(default=None, gt=0)
    taxRate: Optional[float] = Field(default=None, ge=0, le=1)
    specialDiscount: Optional[float] = Field(default=None, ge=0)


class ImportCommitResponse(BaseModel):
    caseId: str
    customerId: int
    customerCreated: bool
    sectionCount: int
    detailCount: int
    subtotal: float
    taxAmount: int
    totalAmount: float
