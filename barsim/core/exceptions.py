"""barsim.core.exceptions

Errors are part of the interface.

Fatal run errors are never retried here. Retry policy belongs to the caller.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any


class BarsimError(Exception):
    """Base exception for barsim."""


class ConfigError(BarsimError):
    """Configuration is missing, invalid, or inconsistent."""


class DataSourceError(BarsimError):
    """Bars could not be fetched or parsed."""


class BacktestError(BarsimError):
    """A simulation run was aborted. No result is produced."""


class NegativeBalanceError(BacktestError):
    """Shares owned or available cash went below zero."""

    def __init__(self, message: str, *, step_index: int, shares_owned: float, available_cash: float) -> None:
        super().__init__(message)
        self.step_index = step_index
        self.shares_owned = shares_owned
        self.available_cash = available_cash


class StrategyExecutionError(BacktestError):
    """The strategy raised, or returned something that is not a result.

    The underlying exception is available as ``__cause__``.
    """

    def __init__(self, message: str, *, step_index: int, timestamp: datetime | None = None) -> None:
        super().__init__(message)
        self.step_index = step_index
        self.timestamp = timestamp


class BacktestCancelledError(BacktestError):
    """Cooperative cancellation was observed. Not a bug, not a partial success."""

    def __init__(self, message: str = "backtest was cancelled", *, history: Sequence[Any] = ()) -> None:
        super().__init__(message)
        # Steps completed before cancellation. Informational only; not resumable.
        self.history: tuple[Any, ...] = tuple(history)
