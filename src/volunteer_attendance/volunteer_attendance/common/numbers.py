from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (builtin round() is banker's)."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def percentage(part: int, whole: int) -> int:
    """Integer percentage in [0, 100]; 0 when ``whole`` is not positive."""
    if whole <= 0:
        return 0
    return max(0, min(100, round_half_up(100 * part / whole)))
