"""Coordinate-mapping sessions for layouts no preset matches."""

from .models import (
    PDF_FIELDS,
    REQUIRED_TEXT_FIELDS,
    SPREADSHEET_FIELDS,
    TEXT_FIELDS,
    AreaLocation,
    CellLocation,
    FieldStatus,
    LineLocation,
    MappingEntry,
    MappingField,
    MappingSet,
    SessionState,
)
from .pdf import PdfMappingSession
from .spreadsheet import SpreadsheetMappingSession
from .text import TextMappingSession

__all__ = [
    "PDF_FIELDS",
    "REQUIRED_TEXT_FIELDS",
    "SPREADSHEET_FIELDS",
    "TEXT_FIELDS",
    "AreaLocation",
    "CellLocation",
    "FieldStatus",
    "LineLocation",
    "MappingEntry",
    "MappingField",
    "MappingSet",
    "PdfMappingSession",
    "SessionState",
    "SpreadsheetMappingSession",
    "TextMappingSession",
]
