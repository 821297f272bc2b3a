"""Best-effort line-item guesses from raw PDF text lines.

Output of this module is labelled ``source="heuristic"`` and must never be
presented with the confidence of area-based or cell-based extraction. A
description ending in numbers (model numbers, sizes) is a known source of
false positives.
"""

import re
from typing import Iterable, List, Optional, Tuple

from quote_importer.domain.constants import UNIT_KEYWORDS
from quote_importer.domain.models import LineItem
from quote_importer.extraction.pdfextract.models import GuessedLineItem
from quote_importer.utils import to_number

MAX_TRAILING_NUMBERS = 3
_SUMMARY_WORDS = ("小計", "合計", "消費税", "総額")
_UNIT_ALTERNATION = "|".join(sorted((re.escape(u) for u in UNIT_KEYWORDS), key=len, reverse=True))
_FUSED_QUANTITY_RE = re.compile(rf"^([0-9０-９][0-9０-９,.]*)({_UNIT_ALTERNATION})$")


def _split_quantity_unit(tokens: List[str], index: int) -> Optional[Tuple[float, str, int]]:
    """Read ``<number> <unit>`` ending at ``index``.

    Returns:
        (quantity, unit, index of the first token of the pair) or None
    """
    if index < 0:
        return None
    fused = _FUSED_QUANTITY_RE.match(tokens[index])
    if fused:
        quantity = to_number(fused.group(1))
        return (quantity, fused.group(2), index) if quantity is not None else None
    if tokens[index] in UNIT_KEYWORDS and index >= 1:
        quantity = to_number(tokens[index - 1])
        if quantity is not None:
            return quantity, tokens[index], index - 1
    return None


def guess_line_item(line: str) -> Optional[GuessedLineItem]:
    """Guess one line item from a text line.

    The line must end in one to three numbers preceded by a quantity and a
    unit keyword. Three numbers read as unit price, amount and wholesale
    price; two as unit price and amount; one as amount only.

    Args:
        line: Linearized text line

    Returns:
        GuessedLineItem or None when the line does not look like an item
    """
    if any(word in line.replace(" ", "") for word in _SUMMARY_WORDS):
        return None
    tokens = line.split()
    if len(tokens) < 3:
        return None

    trailing: List[float] = []
    index = len(tokens) - 1
    while index >= 0 and len(trailing) < MAX_TRAILING_NUMBERS:
        value = to_number(tokens[index])
        if value is None:
            break
        trailing.insert(0, value)
        index -= 1
    if not trailing:
        return None

    pair = _split_quantity_unit(tokens, index)
    if pair is None:
        return None
    quantity, unit, pair_start = pair
    if pair_start < 1:
        return None

    wholesale_price = None
    if len(trailing) == 3:
        unit_price, amount, wholesale_price = trailing
    elif len(trailing) == 2:
        unit_price, amount = trailing
    else:
        amount = trailing[0]
        unit_price = amount / quantity if quantity else 0

    return GuessedLineItem(
        item_name=tokens[0],
        spec=" ".join(tokens[1:pair_start]),
        quantity=quantity,
        unit=unit,
        unit_price=unit_price,
        amount=amount,
        wholesale_price=wholesale_price,
        source_line=line,
    )


def guess_line_items(lines: Iterable[str]) -> List[GuessedLineItem]:
    """Guess line items from every qualifying line, in text order."""
    guesses = []
    for line in lines:
        guess = guess_line_item(line)
        if guess is not None:
            guesses.append(guess)
    return guesses


def to_line_item(guess: GuessedLineItem) -> LineItem:
    return LineItem(
        item_name=guess.item_name,
        spec=guess.spec,
        unit=guess.unit,
        quantity=guess.quantity,
        unit_price=guess.unit_price,
        amount=guess.amount,
        wholesale_price=guess.wholesale_price,
        comment=f"heuristic: {guess.source_line}",
    )
