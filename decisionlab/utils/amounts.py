"""Currency-like amount parsing and formatting.

Handles the shorthand people type into scenario fields: "$2M", "-$500K",
"1,250,000", "3.5b".
"""

import math
import re
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Optional

_STRIP_PATTERN = re.compile(r"[$€£¥,\s]")

_SUFFIX_MULTIPLIERS = {
    "k": 1e3,
    "m": 1e6,
    "b": 1e9,
}


def parse_amount(text: Optional[str]) -> float:
    """Parse a currency-like string into a signed number.

    Currency symbols, thousands separators and whitespace are stripped; a
    trailing k/m/b (any case) multiplies the remaining literal.

    Args:
        text: User-entered amount, e.g. "$2M" or "-$500K".

    Returns:
        The parsed value, or NaN when the text is empty or not a number.
    """
    if not text:
        return math.nan

    cleaned = _STRIP_PATTERN.sub("", str(text)).lower()
    multiplier = 1.0
    if cleaned and cleaned[-1] in _SUFFIX_MULTIPLIERS:
        multiplier = _SUFFIX_MULTIPLIERS[cleaned[-1]]
        cleaned = cleaned[:-1]

    # float() also takes Python-only literals such as "1_000"
    if "_" in cleaned:
        return math.nan
    try:
        value = float(cleaned) * multiplier
    except ValueError:
        return math.nan
    if not math.isfinite(value):
        return math.nan
    return value


def _fixed(value: float, digits: int) -> str:
    # Half-up rounding, so 2.5K renders as "3K" rather than banker's "2K"
    quantum = Decimal(1).scaleb(-digits)
    return str(
        Decimal(repr(value)).quantize(
            quantum, rounding=ROUND_HALF_UP, context=Context(prec=400)
        )
    )


def format_amount(value: Optional[float]) -> str:
    """Render a number as an abbreviated currency string.

    >>> format_amount(2_500_000)
    '$2.5M'
    >>> format_amount(-750)
    '-$750'
    """
    if value is None or not isinstance(value, (int, float)):
        return "$0"
    try:
        value = float(value)
    except OverflowError:
        return "$0"
    if not math.isfinite(value):
        return "$0"

    sign = "-" if value < 0 else ""
    magnitude = abs(value)
    if magnitude >= 1e9:
        return f"{sign}${_fixed(magnitude / 1e9, 1)}B"
    if magnitude >= 1e6:
        return f"{sign}${_fixed(magnitude / 1e6, 1)}M"
    if magnitude >= 1e3:
        return f"{sign}${_fixed(magnitude / 1e3, 0)}K"
    return f"{sign}${_fixed(magnitude, 0)}"


def range_bar_position(value: float, range_min: float, range_max: float) -> float:
    """Position of value inside [range_min, range_max] as a 0-100 percentage."""
    span = range_max - range_min
    if span == 0:
        return 50.0
    return min(100.0, max(0.0, (value - range_min) / span * 100.0))
