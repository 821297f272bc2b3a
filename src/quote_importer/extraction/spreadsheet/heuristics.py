"""Fallback guesses for cover fields that presets and labels could not locate."""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import List, Optional

from quote_importer.domain.constants import COMPANY_MARKERS
from quote_importer.utils import parse_date
from quote_importer.extraction.spreadsheet.workbook import Workbook

CUSTOMER_SCAN_ROWS = 30
CUSTOMER_SCAN_COLUMNS = 15
ESTIMATE_NUMBER_ROWS = range(3, 13)
ESTIMATE_NUMBER_WINDOW = 12
ESTIMATE_NUMBER_MAX_LENGTH = 40
DATE_SCAN_ROWS = 12
DATE_SCAN_COLUMNS = 60

_ESTIMATE_NUMBER_PATTERNS = (
    re.compile(r"第[0-9０-９A-Za-z\-－]+号"),
    re.compile(r"R\d+-SO\d+[0-9A-Za-z\-]*"),
    re.compile(r"(?:見積番号|No[.．]|NO[.．]|№)[:：]?([0-9A-Za-z][0-9A-Za-z\-]{2,})"),
)
_ERA_MARKERS = ("令和", "平成")
_DATE_RUN_RE = re.compile(r"\d{4}年\d{1,2}月\d{1,2}日")


def _strip_honorific(text: str) -> str:
    for suffix in ("御中", "様"):
        if text.endswith(suffix):
            text = text[: -len(suffix)]
    return text


def guess_customer_name(workbook: Workbook, sheet: str) -> Optional[str]:
    """
    Guess the customer from an addressee line.

    A cell holding 御中 points at the customer: either the same cell before the
    honorific or the nearest non-empty cell to its left. Failing that, the first
    cell carrying a company-form marker wins.
    """
    row_limit = min(CUSTOMER_SCAN_ROWS, workbook.max_row(sheet))
    col_limit = min(CUSTOMER_SCAN_COLUMNS, workbook.max_column(sheet))

    for row in range(1, row_limit + 1):
        for column in range(1, col_limit + 1):
            text = workbook.text(sheet, row, column)
            if "御中" not in text:
                continue
            before = text.split("御中", 1)[0]
            if before:
                return before
            for left in range(column - 1, 0, -1):
                candidate = workbook.text(sheet, row, left)
                if candidate:
                    return _strip_honorific(candidate)

    for row in range(1, row_limit + 1):
        for column in range(1, col_limit + 1):
            text = workbook.text(sheet, row, column)
            if any(marker in text for marker in COMPANY_MARKERS):
                return _strip_honorific(text)
    return None


def guess_estimate_number(workbook: Workbook, sheet: str) -> Optional[str]:
    """Search rows 3-12 for an estimate number split across adjacent cells."""
    col_limit = workbook.max_column(sheet)
    for row in ESTIMATE_NUMBER_ROWS:
        texts = [workbook.text(sheet, row, column) for column in range(1, col_limit + 1)]
        for start, text in enumerate(texts):
            if not text:
                continue
            window = "".join(texts[start : start + ESTIMATE_NUMBER_WINDOW])
            for pattern in _ESTIMATE_NUMBER_PATTERNS:
                match = pattern.search(window)
                if not match:
                    continue
                found = match.group(match.lastindex or 0)
                if len(found) <= ESTIMATE_NUMBER_MAX_LENGTH:
                    return found
    return None


def _joined(texts: List[str], start: int, width: int) -> str:
    return " ".join(t for t in texts[start : start + width] if t)


def guess_estimate_date(workbook: Workbook, sheet: str) -> Optional[str]:
    """
    Find an issue date near the top of the cover sheet.

    Tries era dates split over cells (令和 | 7年 | 9月 | 3日), six-cell
    ``YYYY 年 M 月 D 日`` runs and finally any single date-like cell.
    """
    row_limit = min(DATE_SCAN_ROWS, workbook.max_row(sheet))
    col_limit = min(DATE_SCAN_COLUMNS, workbook.max_column(sheet))

    for row in range(1, row_limit + 1):
        texts = [workbook.text(sheet, row, column) for column in range(1, col_limit + 1)]
        for index, text in enumerate(texts):
            if not text:
                continue
            if any(marker in text for marker in _ERA_MARKERS):
                parsed = parse_date(_joined(texts, index, 6))
                if parsed:
                    return parsed
            run = "".join(texts[index : index + 6])
            if _DATE_RUN_RE.search(run):
                parsed = parse_date(run)
                if parsed:
                    return parsed

    for row in range(1, row_limit + 1):
        for column in range(1, col_limit + 1):
            value = workbook.value(sheet, row, column)
            # Bare numbers are skipped: amounts would pass as Excel serials.
            if isinstance(value, (datetime, date)) or (
                isinstance(value, str) and not value.strip().isdigit()
            ):
                parsed = parse_date(value)
                if parsed:
                    return parsed
    return None
