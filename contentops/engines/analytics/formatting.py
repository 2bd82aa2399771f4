"""
Human-readable number formatting for dashboard cards.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Union


def _one_decimal(value: Decimal) -> str:
    return str(value.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def format_number(n: Union[int, float]) -> str:
    """
    Compact a count: 1_250_000 -> "1.3M", 1_500 -> "1.5K", 999 -> "999".
    """
    value = Decimal(str(n))
    if value >= 1_000_000:
        return f"{_one_decimal(value / 1_000_000)}M"
    if value >= 1_000:
        return f"{_one_decimal(value / 1_000)}K"
    return str(int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP)))
