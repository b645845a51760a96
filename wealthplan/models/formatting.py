"""Display formatting for projection numbers.

Values are rounded here and nowhere else.
"""

import math
import re
from typing import Optional

_NUMBER_PATTERN = re.compile(r"-?(\d+\.?\d*|\.\d+)")


def round_for_display(value: float) -> int:
    """Round to the nearest whole dollar, halves rounding up."""
    return int(math.floor(value + 0.5))


def format_currency(value: float) -> str:
    """Format a dollar amount, abbreviating millions.

    >>> format_currency(1_500_000)
    '$1.50M'
    >>> format_currency(-1234.6)
    '-$1,235'
    """
    if abs(value) >= 1_000_000:
        sign = "-" if value < 0 else ""
        return f"{sign}${abs(value) / 1_000_000:.2f}M"
    rounded = round_for_display(value)
    sign = "-" if rounded < 0 else ""
    return f"{sign}${abs(rounded):,}"


def format_percent(value: float, decimals: int = 1) -> str:
    """Format a fraction as a percentage."""
    return f"{value * 100:.{decimals}f}%"


def format_input_value(value: float) -> str:
    """Format a number for an input field; zero shows as empty."""
    if value == 0:
        return ""
    return f"{round_for_display(value):,}"


def parse_input_value(text: Optional[str]) -> int:
    """Parse user input such as "$1,250,000" into whole dollars.

    Unparseable input yields 0.
    """
    cleaned = re.sub(r"[^0-9.\-]", "", text or "")
    match = _NUMBER_PATTERN.match(cleaned)
    if not match:
        return 0
    return round_for_display(float(match.group()))
