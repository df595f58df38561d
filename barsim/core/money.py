"""barsim.core.money

Cash bookkeeping in cents.

Binary floats drift when thousands of trades are netted against a balance.
Every monetary operand is rounded to cents (half up) before it is combined,
and every result is rounded to cents again. Results come back as float so the
rest of the system keeps plain numeric types.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def _dec(value: float | int | Decimal) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps the shortest repr, so 0.1 stays 0.1 instead of 0.1000000000000000055...
    return Decimal(str(value))


def to_cents(value: float | int | Decimal) -> Decimal:
    return _dec(value).quantize(CENT, rounding=ROUND_HALF_UP)


def multiply(amount: float, factor: float) -> float:
    """``amount * factor`` with ``amount`` and the product rounded to cents."""

    return float((to_cents(amount) * _dec(factor)).quantize(CENT, rounding=ROUND_HALF_UP))


def add(a: float, b: float) -> float:
    return float(to_cents(a) + to_cents(b))


def subtract(a: float, b: float) -> float:
    return float(to_cents(a) - to_cents(b))


def percent_change(new: float, old: float) -> float:
    """Percent change from ``old`` to ``new`` (0-100 scale). Zero when ``old`` is zero."""

    if old == 0:
        return 0.0
    return float((_dec(new) - _dec(old)) / _dec(old) * 100)
