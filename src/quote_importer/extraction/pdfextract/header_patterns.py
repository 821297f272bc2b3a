"""Header field guesses from linearized PDF text."""

import re
from re import Pattern
from typing import Dict, Iterable, List, Optional, Sequence, Union

from quote_importer.utils import parse_date, to_number

_CUSTOMER_PATTERNS = (
    re.compile(r"(\S+?)\s*御中"),
    # 仕様 and 模様 are not honorifics.
    re.compile(r"(\S+?)\s*(?<!仕)(?<!模)様"),
)

_TEXT_FIELD_PATTERNS: Dict[str, Sequence[Pattern]] = {
    "subject": (
        re.compile(r"件\s*名\s*[:：]?\s*(.+)"),
        re.compile(r"工事名\s*[:：]?\s*(.+)"),
        re.compile(r"案件名\s*[:：]?\s*(.+)"),
    ),
    "delivery_place": (
        re.compile(r"受\s*渡\s*場\s*所\s*[:：]?\s*(.+)"),
        re.compile(r"納\s*入\s*場\s*所\s*[:：]?\s*(.+)"),
        re.compile(r"納\s*品\s*場\s*所\s*[:：]?\s*(.+)"),
    ),
    "delivery_deadline": (
        re.compile(r"受\s*渡\s*期\s*限\s*[:：]?\s*(.+)"),
        re.compile(r"納\s*入\s*期\s*限\s*[:：]?\s*(.+)"),
        re.compile(r"納\s*期\s*[:：]?\s*(.+)"),
    ),
    "delivery_terms": (
        re.compile(r"受\s*渡\s*条\s*件\s*[:：]?\s*(.+)"),
        re.compile(r"納\s*入\s*条\s*件\s*[:：]?\s*(.+)"),
    ),
    "validity_text": (
        re.compile(r"(?:本書|見積)?有\s*効\s*期\s*限\s*[:：]?\s*(.+)"),
    ),
    "payment_terms": (
        re.compile(r"(?:御|お)?支\s*払\s*条\s*件\s*[:：]?\s*(.+)"),
        re.compile(r"支\s*払\s*方\s*法\s*[:：]?\s*(.+)"),
    ),
}

_ESTIMATE_NUMBER_RE = re.compile(r"(?:見積番号|見積No\.?|No\.|番号)\s*[:：]?\s*([A-Za-z0-9][A-Za-z0-9\-]*)")
_DATE_RE = re.compile(r"(?:令和|平成)\s*(?:\d+|元)\s*年\s*\d+\s*月\s*\d+\s*日|\d{4}\s*[年/.\-]\s*\d{1,2}\s*[月/.\-]\s*\d{1,2}\s*日?")

_AMOUNT_PATTERNS: Dict[str, Pattern] = {
    "subtotal": re.compile(r"小\s*計\s*[:：]?\s*[¥￥]?\s*([0-9,，]+)"),
    "tax_amount": re.compile(r"消\s*費\s*税(?:\s*額)?\s*[:：]?\s*[¥￥]?\s*([0-9,，]+)"),
    "total_amount": re.compile(r"(?:総\s*合\s*計|合\s*計|総\s*額)(?:\s*金\s*額)?\s*[:：]?\s*[¥￥]?\s*([0-9,，]+)"),
}


def _first_group(lines: Iterable[str], patterns: Sequence[Pattern]) -> Optional[str]:
    for pattern in patterns:
        for line in lines:
            match = pattern.search(line)
            if match and match.group(1).strip():
                return match.group(1).strip()
    return None


def guess_header_fields(lines: List[str]) -> Dict[str, Union[str, float]]:
    """Guess header fields line by line.

    Label patterns capture the rest of their line, so a value never bleeds into
    the next line of the document.

    Args:
        lines: Linearized text lines

    Returns:
        Field name to guessed value; fields not found are absent
    """
    guesses: Dict[str, Union[str, float]] = {}

    customer = _first_group(lines, _CUSTOMER_PATTERNS)
    if customer:
        guesses["customer_name"] = customer

    for field_name, patterns in _TEXT_FIELD_PATTERNS.items():
        value = _first_group(lines, patterns)
        if value:
            guesses[field_name] = value

    estimate_number = _first_group(lines, (_ESTIMATE_NUMBER_RE,))
    if estimate_number:
        guesses["estimate_number"] = estimate_number

    for line in lines:
        match = _DATE_RE.search(line)
        if match:
            parsed = parse_date(match.group(0))
            if parsed:
                guesses["estimate_date"] = parsed
                break

    # Amounts: the first occurrence wins, 小計 lines are checked before 合計.
    for field_name, pattern in _AMOUNT_PATTERNS.items():
        for line in lines:
            if field_name == "total_amount" and "小計" in line.replace(" ", ""):
                continue
            match = pattern.search(line)
            if match:
                amount = to_number(match.group(1))
                if amount is not None:
                    guesses[field_name] = amount
                    break
    return guesses
