"""Turn a completed mapping set into an ExtractedQuotation."""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, List, Optional, Sequence

from quote_importer.domain.constants import AMOUNT_HEADER_FIELDS, TEXT_HEADER_FIELDS
from quote_importer.domain.models import ExtractedQuotation, LineItem, QuotationHeader
from quote_importer.extraction.pdfextract.area import page_height_px, text_in_area, to_point_area
from quote_importer.extraction.pdfextract.models import PdfDocument, PointArea
from quote_importer.extraction.pdfextract.table import extract_column_rows
from quote_importer.extraction.pipeline import quotation_from_lines
from quote_importer.extraction.spreadsheet.details import extract_line_items
from quote_importer.extraction.spreadsheet.engine import extract_workbook
from quote_importer.extraction.spreadsheet.workbook import Workbook, parse_ref
from quote_importer.logging_config import get_logger
from quote_importer.mapping.models import (
    PDF_FIELDS,
    SPREADSHEET_FIELDS,
    TEXT_FIELDS,
    AreaLocation,
    CellLocation,
    LineLocation,
    MappingSet,
)
from quote_importer.presets.detector import detect_preset
from quote_importer.presets.models import FormatPreset
from quote_importer.utils import cell_to_str, coerce_number, collapse_whitespace, parse_date, to_number

logger = get_logger(__name__)

_SUMMARY_WORDS = ("小計", "合計", "消費税", "値引")


def _header_updates(values: Dict[str, str]) -> Dict[str, object]:
    updates: Dict[str, object] = {}
    for field_name, value in values.items():
        if field_name in AMOUNT_HEADER_FIELDS:
            updates[field_name] = to_number(value.replace(" ", ""))
        elif field_name == "estimate_date":
            updates[field_name] = parse_date(value) or value
        elif field_name in TEXT_HEADER_FIELDS:
            updates[field_name] = value
    return updates


def apply_spreadsheet_mapping(
    workbook: Workbook,
    mapping: MappingSet,
    preset: Optional[FormatPreset] = None,
) -> ExtractedQuotation:
    """
    Re-extract a workbook with operator-captured cells taking precedence.

    Header fields read their captured cells (joined with a space). Captured
    detail column cells re-key the line-item walk: the product-name capture
    sets the sheet and header row, data starts on the row below.

    Args:
        workbook: Loaded workbook.
        mapping: Completed spreadsheet mapping.
        preset: Preset for everything not mapped; detected when omitted.

    Returns:
        ExtractedQuotation: Result labelled ``excel-mapped``.
    """
    preset = preset or detect_preset(workbook)
    base = extract_workbook(workbook, preset)

    values: Dict[str, str] = {}
    for field_name in TEXT_HEADER_FIELDS + AMOUNT_HEADER_FIELDS:
        texts = [
            collapse_whitespace(cell_to_str(workbook.cell(entry.location.sheet, entry.location.ref)))
            for entry in mapping.for_field(field_name)
            if isinstance(entry.location, CellLocation)
        ]
        joined = " ".join(text for text in texts if text)
        if joined:
            values[field_name] = joined
    header = base.header.model_copy(update=_header_updates(values))

    column_cells: Dict[str, CellLocation] = {}
    for mapping_field in SPREADSHEET_FIELDS:
        entries = mapping.for_field(mapping_field.key)
        if mapping_field.detail_field and entries and isinstance(entries[0].location, CellLocation):
            column_cells[mapping_field.detail_field] = entries[0].location

    line_items = base.line_items
    warnings = [w for w in base.warnings if w.split(" ", 1)[0] not in values]
    if column_cells:
        anchor = column_cells.get("product_name") or next(iter(column_cells.values()))
        header_row, _ = parse_ref(anchor.ref)
        overrides = {name: parse_ref(loc.ref)[1] for name, loc in column_cells.items()}
        layout = replace(
            preset.details,
            header_row=header_row,
            start_row=header_row + 1,
            max_row=max(preset.details.max_row, workbook.max_row(anchor.sheet)),
        )
        details = extract_line_items(
            workbook, layout, sections=base.sections, column_overrides=overrides, sheet=anchor.sheet
        )
        line_items = details.items
        warnings = [w for w in warnings if not w.startswith(("No line items", "Details sheet"))]
        if not line_items:
            warnings.append(f"No line items below row {header_row} of '{anchor.sheet}'")

    logger.info("Applied spreadsheet mapping: fields %s", list(mapping.fields()))
    return ExtractedQuotation(
        header=header,
        line_items=line_items,
        sections=base.sections,
        source="excel-mapped",
        preset_id=preset.id,
        warnings=warnings,
    )


def _point_area(document: PdfDocument, location: AreaLocation) -> PointArea:
    page = document.page(location.page)
    return to_point_area(
        location.area, location.render_scale, page_height_px(page, location.render_scale)
    )


def _rows_to_line_items(rows: List[Dict[str, str]]) -> List[LineItem]:
    items: List[LineItem] = []
    for row in rows:
        name = row.get("product_name", "").strip()
        spec = row.get("spec", "").strip()
        if not name:
            if spec and items and to_number(row.get("quantity")) is None:
                previous = items[-1]
                previous.spec = f"{previous.spec}\n{spec}" if previous.spec else spec
            continue
        if any(word in name.replace(" ", "") for word in _SUMMARY_WORDS):
            continue
        quantity = coerce_number(row.get("quantity"))
        unit_price = coerce_number(row.get("unit_price"))
        amount = coerce_number(row.get("amount"))
        if amount == 0 and quantity * unit_price > 0:
            amount = quantity * unit_price
        wholesale = to_number(row.get("wholesale_price")) if "wholesale_price" in row else None
        items.append(
            LineItem(
                item_name=name,
                spec=spec,
                quantity=quantity,
                unit_price=unit_price,
                amount=amount,
                wholesale_price=wholesale,
            )
        )
    return items


def apply_pdf_mapping(document: PdfDocument, mapping: MappingSet) -> ExtractedQuotation:
    """
    Resolve a PDF mapping set against a parsed document.

    Header areas return the text inside them. Column areas are combined into
    a table: records under each column are grouped into rows by y.

    Args:
        document: Parsed PDF.
        mapping: Completed PDF mapping.

    Returns:
        ExtractedQuotation: Result labelled ``pdf-mapped``.
    """
    values: Dict[str, str] = {}
    column_areas: Dict[str, PointArea] = {}
    table_page: Optional[int] = None
    warnings: List[str] = []

    for mapping_field in PDF_FIELDS:
        entries = mapping.for_field(mapping_field.key)
        if not entries or not isinstance(entries[0].location, AreaLocation):
            continue
        location = entries[0].location
        area = _point_area(document, location)

        if mapping_field.detail_field is None:
            text = text_in_area(document.records, location.page, area)
            if text:
                values[mapping_field.key] = text
            continue

        if table_page is None:
            table_page = location.page
        if location.page != table_page:
            warnings.append(f"{mapping_field.label} was drawn on page {location.page + 1}, ignored")
            continue
        column_areas[mapping_field.detail_field] = area

    line_items: List[LineItem] = []
    if column_areas:
        rows = extract_column_rows(document.records, table_page, column_areas)
        line_items = _rows_to_line_items(rows)
    if not line_items:
        warnings.append("No line items inside the mapped columns")

    header = QuotationHeader().model_copy(update=_header_updates(values))
    logger.info("Applied PDF mapping: %d line items", len(line_items))
    return ExtractedQuotation(
        header=header,
        line_items=line_items,
        source="pdf-mapped",
        warnings=warnings,
    )


def apply_text_mapping(lines: Sequence[str], mapping: MappingSet) -> ExtractedQuotation:
    """
    Fill header fields from operator-picked text lines.

    Line items still come from the trailing-number guesser over ``lines``
    (edited lines included), so they keep their heuristic comments.

    Args:
        lines: Linearized text as shown to the operator, after any edits.
        mapping: Completed text mapping.

    Returns:
        ExtractedQuotation: Result labelled ``pdf-text-mapped``.
    """
    base = quotation_from_lines(list(lines))

    values: Dict[str, str] = {}
    for mapping_field in TEXT_FIELDS:
        texts = [
            collapse_whitespace(entry.location.text)
            for entry in mapping.for_field(mapping_field.key)
            if isinstance(entry.location, LineLocation)
        ]
        joined = " ".join(text for text in texts if text)
        if joined:
            values[mapping_field.key] = joined

    warnings = list(base.warnings)
    if "customer_name" in values or "subject" in values:
        warnings = [w for w in warnings if not w.startswith("Neither customer nor subject")]

    logger.info("Applied text mapping: fields %s", list(values))
    return ExtractedQuotation(
        header=base.header.model_copy(update=_header_updates(values)),
        line_items=base.line_items,
        source="pdf-text-mapped",
        warnings=warnings,
    )
