from __future__ import annotations

from decimal import Decimal

from barsim.core import money


def test_to_cents_rounds_half_up() -> None:
    assert money.to_cents(1.005) == Decimal("1.01")
    assert money.to_cents(2.675) == Decimal("2.68")
    assert money.to_cents(-1.005) == Decimal("-1.01")


def test_multiply_rounds_operand_and_product() -> None:
    assert money.multiply(3, 33.333) == 100.0
    assert money.multiply(10, 12) == 120.0
    # the amount is rounded to cents before multiplying
    assert money.multiply(0.125, 100) == 13.0


def test_add_and_subtract_do_not_drift() -> None:
    cash = 1.0
    for _ in range(10):
        cash = money.subtract(cash, 0.1)
    assert cash == 0.0

    total = 0.0
    for _ in range(3):
        total = money.add(total, 0.1)
    assert total == 0.3


def test_percent_change() -> None:
    assert money.percent_change(110, 100) == 10.0
    assert money.percent_change(90, 100) == -10.0
    assert money.percent_change(5, 0) == 0.0
