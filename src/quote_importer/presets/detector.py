"""Pick the format preset that best matches a workbook's structure."""

from __future__ import annotations

from typing import Optional

from quote_importer.extraction.spreadsheet.workbook import Workbook
from quote_importer.logging_config import get_logger
from quote_importer.presets.models import FormatPreset, with_header_row
from quote_importer.presets.registry import default_preset, get_preset_by_id

logger = get_logger(__name__)

COVER_SHEET_MARKER = "表紙"
DETAILS_SHEET_MARKER = "明細"

# Rows scanned for the detail header of a single-sheet workbook.
SINGLE_SHEET_HEADER_ROWS = range(30, 46)


def _preset(preset_id: str) -> FormatPreset:
    return get_preset_by_id(preset_id) or default_preset()


def _contains_any(text: str, fragments) -> bool:
    return any(fragment in text for fragment in fragments)


def _is_branch_office_layout(workbook: Workbook, details_sheet: str) -> bool:
    return "名称" in workbook.text_at(details_sheet, "B2") or _contains_any(
        workbook.text_at(details_sheet, "I2"), ("貴社仕切", "仕切金額")
    )


def _find_single_sheet_header(workbook: Workbook, sheet: str) -> Optional[int]:
    for row in SINGLE_SHEET_HEADER_ROWS:
        name_cell = workbook.text(sheet, row, 1)
        if "品" not in name_cell:
            continue
        quantity_like = (
            "数" in workbook.text(sheet, row, 6)
            or "単位" in workbook.text(sheet, row, 7)
            or "単価" in workbook.text(sheet, row, 8)
        )
        price_like = "単価" in workbook.text(sheet, row, 8) or "価格" in workbook.text(sheet, row, 9)
        if quantity_like and price_like:
            return row
    return None


def detect_preset(workbook: Workbook) -> FormatPreset:
    """
    Select a preset for ``workbook`` with an ordered decision tree.

    1. Cover and details sheets present: check row 2 of the details sheet for the
       branch-office layout, otherwise the standard layout.
    2. A single sheet: look for a detail header in rows 30-45; found means the
       single-sheet vertical layout keyed to that row, otherwise horizontal.
    3. Anything else falls back to the standard layout.

    Args:
        workbook: Loaded workbook.

    Returns:
        FormatPreset: Never ``None``; the default preset is the final fallback.
    """
    sheet_names = workbook.sheet_names
    cover_sheet = workbook.find_sheet(COVER_SHEET_MARKER)
    details_sheet = workbook.find_sheet(DETAILS_SHEET_MARKER)

    if cover_sheet and details_sheet:
        if _is_branch_office_layout(workbook, details_sheet):
            logger.info("Preset 'minamikyushu': row 2 of '%s' holds detail headers", details_sheet)
            return _preset("minamikyushu")
        if _contains_any(workbook.text_at(details_sheet, "B40"), ("品名", "商品名")) or _contains_any(
            workbook.text_at(details_sheet, "D40"), ("品名", "商品名")
        ):
            logger.info("Preset 'default': row 40 of '%s' holds detail headers", details_sheet)
        else:
            logger.info("Preset 'default': cover and details sheets present")
        return default_preset()

    if len(sheet_names) == 1:
        sheet = sheet_names[0]
        header_row = _find_single_sheet_header(workbook, sheet)
        if header_row is not None:
            logger.info("Preset 'single_vertical': detail header found on row %d", header_row)
            return with_header_row(_preset("single_vertical"), header_row)
        logger.info("Preset 'horizontal': single sheet without a vertical detail header")
        return _preset("horizontal")

    logger.info("Preset 'default': no layout signature matched %s", sheet_names)
    return default_preset()
