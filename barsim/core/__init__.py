"""barsim.core

Core primitives.

If a module needs to exist, it should probably depend only on this package.
"""

from .cancellation import CancellationToken
from .config import Config
from .exceptions import (
    BacktestCancelledError,
    BacktestError,
    BarsimError,
    ConfigError,
    DataSourceError,
    NegativeBalanceError,
    StrategyExecutionError,
)
from .time import parse_dt, utc_now
from .types import BacktestResult, Bar, PortfolioData, PortfolioSnapshot, StrategyHistory, StrategyResult

__all__ = [
    "BacktestCancelledError",
    "BacktestError",
    "BacktestResult",
    "Bar",
    "BarsimError",
    "CancellationToken",
    "Config",
    "ConfigError",
    "DataSourceError",
    "NegativeBalanceError",
    "PortfolioData",
    "PortfolioSnapshot",
    "StrategyExecutionError",
    "StrategyHistory",
    "StrategyResult",
    "parse_dt",
    "utc_now",
]
