"""
quotegen/core/numbers.py — Lenient number parsing + currency formatting

Form input arrives as whatever the browser posted: numbers, numeric strings,
empty strings, "abc", null. Everything that feeds a total goes through
parse_or_default() so an in-progress form never breaks a preview or a PDF.
Unparseable values become the default instead of raising.

format_currency() is the single formatter used by the PDF renderer and the
live-preview API, so both always print the same string.
"""

import math
import re
from decimal import Decimal
from typing import Optional

CURRENCY_PREFIX = "N$"

# Leading numeric prefix, same acceptance as a browser's parseFloat("12.5kg")
_NUMBER_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_or_default(value, default: float = 0.0) -> float:
    """Parse value as a finite float, or return default.

    Accepts ints, floats and strings with a leading number ("12", " 3.5 ",
    "7pcs"). None, booleans, blanks, NaN/inf and anything else → default.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else default
    if isinstance(value, str):
        m = _NUMBER_PREFIX.match(value)
        if not m:
            return default
        try:
            number = float(m.group(1))
        except (ValueError, OverflowError):
            return default
        return number if math.isfinite(number) else default
    return default


def parse_optional(value) -> Optional[float]:
    """Like parse_or_default but returns None when nothing usable was given."""
    number = parse_or_default(value, default=math.nan)
    return None if math.isnan(number) else number


def format_currency(amount) -> str:
    """N$ + fixed two decimals, no thousands separators: 1234.5 → 'N$1234.50'."""
    value = round(parse_or_default(amount, 0.0), 2)
    if value == 0:
        value = 0.0  # no "-0.00"
    return f"{CURRENCY_PREFIX}{value:.2f}"


def parse_currency(text) -> float:
    """Inverse of format_currency: 'N$143.75' → 143.75, junk → 0.0."""
    if isinstance(text, str):
        s = text.strip()
        negative = s.startswith("-")
        if negative:
            s = s[1:].lstrip()
        if s.startswith(CURRENCY_PREFIX):
            s = s[len(CURRENCY_PREFIX):]
        value = parse_or_default(s, 0.0)
        return -value if negative else value
    return parse_or_default(text, 0.0)


def format_number(value) -> str:
    """Compact display for quantities and percentages: 15.0 → "15", 7.5 → "7.5".

    Uses the shortest repr of the float, so tiny values such as 1e-7 keep
    their digits instead of collapsing to "0".
    """
    number = parse_or_default(value, 0.0)
    text = format(Decimal(repr(number)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("", "-0"):
        return "0"
    return text
