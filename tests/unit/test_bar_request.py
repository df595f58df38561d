from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from barsim.data.base import BarRequest


def test_symbol_is_normalized():
    req = BarRequest(symbol="  aapl ", start_date="2024-01-01")
    assert req.symbol == "AAPL"
    assert req.start_date == date(2024, 1, 1)
    assert req.end_date is None
    assert req.resolution_value == 1
    assert req.resolution_period == "day"


def test_blank_symbol_rejected():
    with pytest.raises(ValidationError):
        BarRequest(symbol="   ", start_date="2024-01-01")


def test_end_before_start_rejected():
    with pytest.raises(ValidationError):
        BarRequest(symbol="SPY", start_date="2024-02-01", end_date="2024-01-01")


def test_same_day_range_allowed():
    req = BarRequest(symbol="SPY", start_date="2024-01-01", end_date="2024-01-01")
    assert req.end_date == req.start_date


@pytest.mark.parametrize("kwargs", [{"resolution_value": 0}, {"resolution_period": "fortnight"}])
def test_resolution_validated(kwargs):
    with pytest.raises(ValidationError):
        BarRequest(symbol="SPY", start_date="2024-01-01", **kwargs)


def test_request_is_frozen():
    req = BarRequest(symbol="SPY", start_date="2024-01-01")
    with pytest.raises(ValidationError):
        req.symbol = "QQQ"
