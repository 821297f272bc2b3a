"""Import pipelines for workbook and PDF quotations."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from quote_importer.domain.models import ExtractedQuotation, QuotationHeader
from quote_importer.errors import PdfParseError, WorkbookParseError
from quote_importer.extraction.pdfextract.header_patterns import guess_header_fields
from quote_importer.extraction.pdfextract.line_guesser import guess_line_items, to_line_item
from quote_importer.extraction.pdfextract.linearize import DEFAULT_LINE_TOLERANCE, linearize
from quote_importer.extraction.pdfextract.parser import parse_pdf
from quote_importer.extraction.spreadsheet.engine import extract_workbook
from quote_importer.extraction.spreadsheet.workbook import Workbook
from quote_importer.logging_config import get_logger
from quote_importer.presets import detect_preset, get_preset_by_id

logger = get_logger(__name__)


def _read_input(data: bytes | str) -> bytes:
    if isinstance(data, str):
        return Path(data).read_bytes()
    return data


def process_workbook(data: bytes | str, preset_id: str | None = None) -> dict[str, Any]:
    """Extract a quotation from a workbook.

    Args:
        data: Workbook as bytes or file path string
        preset_id: Preset to apply; detected from the workbook when omitted

    Returns:
        Dictionary with processing results:
        - Success case: {"success": True, "quotation": ExtractedQuotation, "preset": dict}
        - Failure case: {"success": False, "error": str, "quotation": None, "preset": None}
    """
    preset = None
    if preset_id:
        preset = get_preset_by_id(preset_id)
        if preset is None:
            return {"success": False, "error": f"Unknown preset: {preset_id}", "quotation": None, "preset": None}

    try:
        workbook = Workbook.from_bytes(_read_input(data))
    except WorkbookParseError as e:
        logger.warning("Workbook rejected: %s", e)
        return {"success": False, "error": str(e), "quotation": None, "preset": None}

    if preset is None:
        preset = detect_preset(workbook)
    quotation = extract_workbook(workbook, preset)
    return {"success": True, "quotation": quotation, "preset": preset.summary()}


def quotation_from_lines(lines: list[str]) -> ExtractedQuotation:
    """Build a quotation from linearized PDF text.

    Header fields come from label patterns. Line items, when any are found,
    come from the trailing-number heuristic and are labelled as such.
    """
    header = QuotationHeader(**guess_header_fields(lines))
    guesses = guess_line_items(lines)
    warnings = []
    if guesses:
        warnings.append(
            f"{len(guesses)} line items were guessed from raw text; check every line before committing"
        )
    else:
        warnings.append("No line items recognised; map the table columns on the page image")
    if not header.customer_name and not header.subject:
        warnings.append("Neither customer nor subject found; is this a text-based PDF?")

    return ExtractedQuotation(
        header=header,
        line_items=[to_line_item(guess) for guess in guesses],
        source="pdf-heuristic" if guesses else "pdf-text",
        warnings=warnings,
    )


def process_pdf(data: bytes | str, tolerance: float = DEFAULT_LINE_TOLERANCE) -> dict[str, Any]:
    """Extract a quotation from a text-based PDF.

    Args:
        data: PDF as bytes or file path string
        tolerance: Baseline tie band for line grouping, in points

    Returns:
        Dictionary with processing results:
        - Success case: {"success": True, "quotation": ExtractedQuotation, "lines": list, "pages": int}
        - Failure case: {"success": False, "error": str, "quotation": None, "lines": None}
    """
    try:
        document = parse_pdf(_read_input(data))
    except PdfParseError as e:
        logger.warning("PDF rejected: %s", e)
        return {"success": False, "error": str(e), "quotation": None, "lines": None}

    lines = linearize(document.records, tolerance)
    quotation = quotation_from_lines(lines)
    return {"success": True, "quotation": quotation, "lines": lines, "pages": document.page_count}
