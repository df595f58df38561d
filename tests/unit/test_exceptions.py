from __future__ import annotations

from barsim.core.exceptions import (
    BacktestCancelledError,
    BacktestError,
    BarsimError,
    ConfigError,
    DataSourceError,
    NegativeBalanceError,
    StrategyExecutionError,
)


def test_exception_hierarchy_is_structural() -> None:
    assert issubclass(ConfigError, BarsimError)
    assert issubclass(DataSourceError, BarsimError)
    assert issubclass(BacktestError, BarsimError)
    for cls in (NegativeBalanceError, StrategyExecutionError, BacktestCancelledError):
        assert issubclass(cls, BacktestError)


def test_negative_balance_carries_state() -> None:
    e = NegativeBalanceError("cash below zero", step_index=3, shares_owned=1.0, available_cash=-5.0)
    assert str(e) == "cash below zero"
    assert (e.step_index, e.shares_owned, e.available_cash) == (3, 1.0, -5.0)


def test_cancelled_defaults() -> None:
    e = BacktestCancelledError()
    assert str(e) == "backtest was cancelled"
    assert e.history == ()

    e = BacktestCancelledError(history=[1, 2])
    assert e.history == (1, 2)
