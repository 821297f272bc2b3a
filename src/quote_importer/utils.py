"""
Utility Functions Module

Text normalization, number coercion and date parsing shared by the spreadsheet
and PDF extraction paths.
"""

from __future__ import annotations

import re
import unicodedata
from datetime import date, datetime, timedelta
from typing import Any, Callable, Iterable, Optional, Tuple

_WHITESPACE_RE = re.compile(r"\s+")
_NUMBER_NOISE = ("¥", "￥", "円", ",", "，")
_NUMBER_RE = re.compile(r"^[-+]?\d+(\.\d+)?$")

# Excel serial numbers inside this window are treated as dates.
EXCEL_SERIAL_MIN = 20000
EXCEL_SERIAL_MAX = 60000
_EXCEL_EPOCH = date(1899, 12, 30)

_ERA_BASE_YEARS = {"令和": 2018, "平成": 1988}

_DATE_PATTERNS = (
    re.compile(r"(\d{4})\s*年\s*(\d{1,2})\s*月\s*(\d{1,2})\s*日?"),
    re.compile(r"(\d{4})\s*[/.\-]\s*(\d{1,2})\s*[/.\-]\s*(\d{1,2})"),
    re.compile(r"^(\d{4})\s+(\d{1,2})\s+(\d{1,2})$"),
)
_ERA_DATE_RE = re.compile(r"(令和|平成)\s*(\d{1,2}|元)\s*年\s*(\d{1,2})\s*月\s*(\d{1,2})\s*日?")


def cell_to_str(value: Any) -> str:
    """
    Render a raw cell value as display text.

    Integral floats lose their trailing ``.0`` and dates become ISO strings.

    Args:
        value: Raw value read from a workbook cell or a PDF record.

    Returns:
        str: Text representation, empty for ``None``.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def normalize_text(value: Any) -> str:
    """Strip every kind of whitespace, ideographic space included."""
    return _WHITESPACE_RE.sub("", cell_to_str(value).replace("　", " "))


def collapse_whitespace(value: Any) -> str:
    """Collapse runs of whitespace into single ASCII spaces."""
    return _WHITESPACE_RE.sub(" ", cell_to_str(value).replace("　", " ")).strip()


def to_number(value: Any) -> Optional[float]:
    """
    Parse a numeric cell or string.

    Full-width digits are folded to ASCII, and currency marks and thousands
    separators are stripped before parsing.

    Args:
        value: Raw value (number, string or ``None``).

    Returns:
        Optional[float]: Parsed number or ``None`` when the value is not numeric.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    text = unicodedata.normalize("NFKC", str(value))
    for noise in _NUMBER_NOISE:
        text = text.replace(noise, "")
    text = _WHITESPACE_RE.sub("", text)
    if not _NUMBER_RE.match(text):
        return None
    return float(text)


def coerce_number(value: Any, default: float = 0.0) -> float:
    """Parse a number, falling back to ``default`` when unparseable."""
    parsed = to_number(value)
    return default if parsed is None else parsed


def first_match(
    candidates: Iterable[str],
    read: Callable[[str], Any],
    usable: Callable[[Any], bool] = bool,
) -> Optional[Tuple[str, Any]]:
    """
    Return the first candidate whose value is usable.

    Every ordered fallback list (cover cells, header keywords, sheet names) goes
    through this helper so the first-match-wins rule lives in one place.

    Args:
        candidates: Ordered candidates to try.
        read: Callable mapping a candidate to its value.
        usable: Predicate deciding whether a value counts as a match.

    Returns:
        Optional[Tuple[str, Any]]: ``(candidate, value)`` of the first match.
    """
    for candidate in candidates:
        value = read(candidate)
        if usable(value):
            return candidate, value
    return None


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_date(value: Any) -> Optional[str]:
    """
    Normalize a date-like value to ``YYYY-MM-DD``.

    Accepts datetime objects, Excel serial numbers, ``YYYY年M月D日``,
    ``YYYY/M/D`` (also ``-`` and ``.``), space separated composites and the
    令和/平成 eras.

    Args:
        value: Raw value.

    Returns:
        Optional[str]: ISO date or ``None`` when no valid date is found.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (int, float)):
        if EXCEL_SERIAL_MIN <= value <= EXCEL_SERIAL_MAX:
            return (_EXCEL_EPOCH + timedelta(days=int(value))).isoformat()
        return None

    text = collapse_whitespace(unicodedata.normalize("NFKC", str(value)))
    if not text:
        return None

    era = _ERA_DATE_RE.search(text)
    if era:
        era_year = 1 if era.group(2) == "元" else int(era.group(2))
        parsed = _safe_date(
            _ERA_BASE_YEARS[era.group(1)] + era_year, int(era.group(3)), int(era.group(4))
        )
        return parsed.isoformat() if parsed else None

    for pattern in _DATE_PATTERNS:
        match = pattern.search(text)
        if match:
            parsed = _safe_date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
            if parsed:
                return parsed.isoformat()

    serial = to_number(text)
    if serial is not None and EXCEL_SERIAL_MIN <= serial <= EXCEL_SERIAL_MAX:
        return (_EXCEL_EPOCH + timedelta(days=int(serial))).isoformat()
    return None


def is_iso_date(value: Optional[str]) -> bool:
    """Check that ``value`` is a real calendar date in ``YYYY-MM-DD`` form."""
    if not value or not re.fullmatch(r"\d{4}-\d{2}-\d{2}", value):
        return False
    year, month, day = (int(part) for part in value.split("-"))
    return _safe_date(year, month, day) is not None
