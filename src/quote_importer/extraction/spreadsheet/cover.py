"""Cover (header) field extraction from a workbook."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Set, Tuple

from quote_importer.domain.constants import AMOUNT_HEADER_FIELDS, TEXT_HEADER_FIELDS
from quote_importer.logging_config import get_logger
from quote_importer.presets.models import FormatPreset
from quote_importer.utils import first_match, normalize_text, parse_date, to_number
from quote_importer.extraction.spreadsheet.heuristics import guess_customer_name, guess_estimate_date, guess_estimate_number
from quote_importer.extraction.spreadsheet.workbook import Workbook, make_ref

logger = get_logger(__name__)

COVER_SHEET_MARKER = "表紙"
LABEL_SCAN_ROWS = 60
LABEL_SCAN_COLUMNS = 52  # A..AZ
VALUE_LOOKAHEAD = 12
_LABEL_SEPARATORS = ":："


@dataclass
class CoverExtraction:
    """Header values read from the cover sheet and where each came from."""

    sheet: Optional[str]
    values: Dict[str, str] = field(default_factory=dict)
    amounts: Dict[str, Optional[float]] = field(default_factory=dict)
    sources: Dict[str, str] = field(default_factory=dict)


def find_cover_sheet(workbook: Workbook) -> Optional[str]:
    """Sheet whose name contains 表紙, else the first sheet."""
    names = workbook.sheet_names
    if not names:
        return None
    return workbook.find_sheet(COVER_SHEET_MARKER) or names[0]


def read_candidate(workbook: Workbook, sheet: str, candidate: str) -> str:
    """
    Read one candidate cell, or several joined with a space.

    Composite candidates such as ``"AN5,AR5,AU5"`` cover dates split across
    cells; empty parts are dropped.
    """
    refs = [ref.strip() for ref in candidate.split(",") if ref.strip()]
    texts = [workbook.text_at(sheet, ref) for ref in refs]
    return " ".join(text for text in texts if text)


def _strip_separator(text: str) -> str:
    return text.lstrip(_LABEL_SEPARATORS).strip()


def find_labelled_value(
    workbook: Workbook,
    sheet: str,
    keywords: Iterable[str],
    label_keywords: Set[str],
) -> Optional[Tuple[str, str]]:
    """
    Locate a value next to a label cell.

    Keywords are tried in order. A label matches when its normalized text
    contains the keyword. The value is either written inline after a colon,
    the first non-empty non-label cell within twelve columns to the right, or
    the cell directly below.

    Args:
        workbook: Loaded workbook.
        sheet: Sheet to search.
        keywords: Label keywords for one field, in priority order.
        label_keywords: Every normalized label keyword of the preset, used to
            avoid reading a neighbouring label as a value.

    Returns:
        Optional[Tuple[str, str]]: ``(cell reference, value)`` or ``None``.
    """
    row_limit = min(LABEL_SCAN_ROWS, workbook.max_row(sheet))
    col_limit = min(LABEL_SCAN_COLUMNS, workbook.max_column(sheet))

    def is_label(text: str) -> bool:
        return any(keyword in text for keyword in label_keywords)

    for keyword in (normalize_text(k) for k in keywords):
        if not keyword:
            continue
        for row in range(1, row_limit + 1):
            for column in range(1, col_limit + 1):
                text = workbook.text(sheet, row, column)
                if keyword not in text:
                    continue

                remainder = text.split(keyword, 1)[1]
                if remainder[:1] and remainder[0] in _LABEL_SEPARATORS and _strip_separator(remainder):
                    return make_ref(row, column), _strip_separator(remainder)

                for right in range(column + 1, column + VALUE_LOOKAHEAD + 1):
                    value = _strip_separator(workbook.text(sheet, row, right))
                    if value and not is_label(value):
                        return make_ref(row, right), value

                below = _strip_separator(workbook.text(sheet, row + 1, column))
                if below and not is_label(below):
                    return make_ref(row + 1, column), below
    return None


def extract_cover(workbook: Workbook, preset: FormatPreset) -> CoverExtraction:
    """
    Read every header field of ``preset`` from the cover sheet.

    Each text field takes the first non-empty candidate cell, then label
    search, then (customer, estimate number and date only) a workbook-wide
    guess. Fields that stay empty are not errors.

    Args:
        workbook: Loaded workbook.
        preset: Preset providing candidate cells and label keywords.

    Returns:
        CoverExtraction: Values, amounts and their provenance.
    """
    sheet = find_cover_sheet(workbook)
    result = CoverExtraction(sheet=sheet)
    if sheet is None:
        logger.warning("Workbook has no sheets, cover fields left empty")
        return result

    label_keywords = {normalize_text(k) for k in preset.labels.all_keywords() if normalize_text(k)}

    for field_name in TEXT_HEADER_FIELDS:
        match = first_match(
            preset.cover.candidates(field_name),
            lambda candidate: read_candidate(workbook, sheet, candidate),
        )
        if match:
            result.values[field_name] = match[1]
            result.sources[field_name] = match[0]
            continue

        keywords = preset.labels.keywords(field_name)
        labelled = find_labelled_value(workbook, sheet, keywords, label_keywords) if keywords else None
        if labelled:
            result.values[field_name] = labelled[1]
            result.sources[field_name] = f"label:{labelled[0]}"

    guesses = (
        ("customer_name", guess_customer_name),
        ("estimate_number", guess_estimate_number),
        ("estimate_date", guess_estimate_date),
    )
    for field_name, guess in guesses:
        if result.values.get(field_name):
            continue
        guessed = guess(workbook, sheet)
        if guessed:
            result.values[field_name] = guessed
            result.sources[field_name] = "heuristic"

    raw_date = result.values.get("estimate_date")
    if raw_date:
        parsed = parse_date(raw_date)
        if parsed:
            result.values["estimate_date"] = parsed
        else:
            logger.info("Keeping unparsed estimate date %r for review", raw_date)

    for field_name in AMOUNT_HEADER_FIELDS:
        match = first_match(
            preset.cover.candidates(field_name),
            lambda candidate: to_number(workbook.cell(sheet, candidate)),
            usable=lambda value: value is not None,
        )
        result.amounts[field_name] = match[1] if match else None
        if match:
            result.sources[field_name] = match[0]

    logger.info(
        "Cover '%s': found %s",
        sheet,
        sorted(name for name, value in result.values.items() if value),
    )
    return result
