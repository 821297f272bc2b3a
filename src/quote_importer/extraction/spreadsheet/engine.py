"""Spreadsheet extraction engine: preset in, ExtractedQuotation out."""

from __future__ import annotations

from typing import Mapping, Optional

from quote_importer.domain.models import ExtractedQuotation, QuotationHeader
from quote_importer.logging_config import get_logger
from quote_importer.presets.detector import detect_preset
from quote_importer.presets.models import FormatPreset
from quote_importer.extraction.spreadsheet.cover import extract_cover
from quote_importer.extraction.spreadsheet.details import DetailExtraction, extract_line_items
from quote_importer.extraction.spreadsheet.sections import check_index_total, check_sections, read_index_totals, read_sections
from quote_importer.extraction.spreadsheet.summary import find_summary_amounts
from quote_importer.extraction.spreadsheet.workbook import Workbook

logger = get_logger(__name__)


def build_header(cover_values: Mapping[str, str], amounts: Mapping[str, Optional[float]]) -> QuotationHeader:
    return QuotationHeader(**dict(cover_values), **{k: v for k, v in amounts.items() if v is not None})


def extract_workbook(
    workbook: Workbook,
    preset: Optional[FormatPreset] = None,
    column_overrides: Optional[Mapping[str, int]] = None,
) -> ExtractedQuotation:
    """
    Extract header, sections and line items from ``workbook``.

    Args:
        workbook: Loaded workbook.
        preset: Preset to apply; detected when omitted.
        column_overrides: Detail columns forced by a mapping.

    Returns:
        ExtractedQuotation: Best-effort result. Missing data shows up as empty
        fields and warnings, never as an exception.
    """
    if preset is None:
        preset = detect_preset(workbook)
    logger.info("Extracting workbook with preset '%s'", preset.id)

    warnings = []
    cover = extract_cover(workbook, preset)
    sections = read_sections(workbook, preset.sections)
    details: DetailExtraction = extract_line_items(
        workbook, preset.details, sections=sections, column_overrides=column_overrides
    )

    if details.sheet is None:
        warnings.append("Details sheet not found: " + ", ".join(preset.details.sheet_names))
    elif not details.items:
        warnings.append(f"No line items found on sheet '{details.sheet}'")
    else:
        warnings.extend(check_sections(details.items, sections))

    amounts = dict(cover.amounts)
    if details.sheet is not None and "product_name" in details.columns:
        summary = find_summary_amounts(
            workbook,
            details.sheet,
            details.columns["product_name"],
            details.stop_row - 1 if details.stop_row else details.last_row,
        )
        for field_name, value in summary.as_dict().items():
            if amounts.get(field_name) is None and value is not None:
                amounts[field_name] = value

    mismatch = check_index_total(amounts.get("total_amount"), read_index_totals(workbook, preset.sections))
    if mismatch:
        warnings.append(mismatch)

    for field_name in ("customer_name", "subject"):
        if not cover.values.get(field_name):
            warnings.append(f"{field_name} not found on cover sheet")

    return ExtractedQuotation(
        header=build_header(cover.values, amounts),
        line_items=details.items,
        sections=sections,
        source="excel",
        preset_id=preset.id,
        warnings=warnings,
    )
