# Overview: Decimal helpers for 2-place money amounts.

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value) -> Decimal:
    """Convert int/float/str/Decimal to Decimal without rounding."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise InvalidOperation("boolean is not a number")
    if isinstance(value, float):
        # str() keeps the shortest repr (0.1 -> "0.1", not the binary expansion)
        return Decimal(str(value))
    return Decimal(value)


def round_money(value) -> Decimal:
    """Round half-up to 2 decimal places."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def money_float(value) -> float | None:
    """JSON representation of a money column."""
    if value is None:
        return None
    return float(round_money(value))
