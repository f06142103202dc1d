# Overview: Colombian peso formatting for receipts and parsing of typed amounts.

"""
Currency and number formatting

DISPLAY (receipts, reports):
- format_currency(100000) -> "$ 100.000"
- "." groups thousands, "," separates decimals
- COP is shown without decimals unless asked for

INPUT (form fields):
- Number inputs group thousands with apostrophes: "1'234'567"
- strip_input_separators("1'234'567") -> "1234567" before the value is parsed
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP


CURRENCY_SYMBOL = "$"
THOUSANDS_SEPARATOR = "."
DECIMAL_SEPARATOR = ","
INPUT_THOUSANDS_SEPARATOR = "'"

_GROUP_RE = re.compile(r"\B(?=(\d{3})+(?!\d))")


def _to_decimal(amount) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    if isinstance(amount, bool):
        raise TypeError("amount must be a number")
    try:
        return Decimal(str(amount if amount is not None else 0))
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {amount!r}")


def _group(digits: str, separator: str) -> str:
    return _GROUP_RE.sub(separator, digits)


def format_currency(amount, decimals: int = 0) -> str:
    value = _to_decimal(amount)
    quantum = Decimal(1).scaleb(-decimals)
    value = value.quantize(quantum, rounding=ROUND_HALF_UP)

    sign = "-" if value < 0 else ""
    integer_part, _, fraction = f"{abs(value):f}".partition(".")

    text = _group(integer_part, THOUSANDS_SEPARATOR)
    if decimals > 0:
        text = f"{text}{DECIMAL_SEPARATOR}{fraction.ljust(decimals, '0')}"
    return f"{sign}{CURRENCY_SYMBOL} {text}"


def strip_input_separators(value: str) -> str:
    """Drop the apostrophe grouping a number input adds while typing."""
    return value.strip().replace(INPUT_THOUSANDS_SEPARATOR, "")
