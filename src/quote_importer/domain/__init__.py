"""Domain exports."""

from .constants import DETAIL_FIELDS, HEADER_FIELDS, UNIT_KEYWORDS
from .models import ExtractedQuotation, LineItem, QuotationHeader, SectionDef

__all__ = [
    "DETAIL_FIELDS",
    "HEADER_FIELDS",
    "UNIT_KEYWORDS",
    "ExtractedQuotation",
    "LineItem",
    "QuotationHeader",
    "SectionDef",
]
