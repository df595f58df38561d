"""barsim.core.types

Lightweight dataclasses for hot-path objects.

Pydantic models own IO boundaries; dataclasses keep the bar loop lean.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from barsim.backtest.metrics import PerformanceMetrics


@dataclass(frozen=True, slots=True)
class Bar:
    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float


@dataclass(slots=True)
class PortfolioData:
    """Live portfolio state. One mutable instance per run."""

    shares_owned: float
    available_cash: float
    starting_cash: float
    portfolio_value: float
    portfolio_percent_change: float = 0.0  # 0-100 scale
    stock_percent_change: float = 0.0  # 0-100 scale

    @classmethod
    def opening(cls, starting_cash: float) -> PortfolioData:
        cash = float(starting_cash)
        return cls(shares_owned=0.0, available_cash=cash, starting_cash=cash, portfolio_value=cash)

    def snapshot(self) -> PortfolioSnapshot:
        """Frozen value copy. Later mutation of ``self`` does not reach it."""

        return PortfolioSnapshot(**asdict(self))


@dataclass(frozen=True, slots=True)
class PortfolioSnapshot:
    """Portfolio state as recorded in history. Read-only once taken."""

    shares_owned: float
    available_cash: float
    starting_cash: float
    portfolio_value: float
    portfolio_percent_change: float = 0.0
    stock_percent_change: float = 0.0


@dataclass(frozen=True, slots=True)
class StrategyResult:
    change_in_shares: float | None = None  # >0 buy, <0 sell, None/0 hold
    price: float | None = None
    meta: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_trade(self) -> bool:
        return bool(self.change_in_shares)

    @classmethod
    def coerce(cls, value: Any) -> StrategyResult:
        """Accept a StrategyResult or a mapping; anything else is a TypeError."""

        if isinstance(value, StrategyResult):
            return value
        if isinstance(value, Mapping):
            change = value.get("change_in_shares", value.get("changeInShares"))
            price = value.get("price")
            meta = value.get("meta") or {}
            if not isinstance(meta, Mapping):
                raise TypeError(f"strategy meta must be a mapping, got {type(meta).__name__}")
            return cls(
                change_in_shares=None if change is None else float(change),
                price=None if price is None else float(price),
                meta=dict(meta),
            )
        raise TypeError(f"strategy must return StrategyResult or a mapping, got {type(value).__name__}")


@dataclass(frozen=True, slots=True)
class StrategyHistory:
    """One simulated step. Append-only; never mutated once written.

    ``portfolio_snapshot`` is the state before this step's trade.
    """

    bar: Bar
    strategy_result: StrategyResult
    portfolio_snapshot: PortfolioSnapshot
    execution_price: float | None = None  # None for holds


@dataclass(frozen=True, slots=True)
class BacktestResult:
    portfolio_data: PortfolioSnapshot
    history: tuple[StrategyHistory, ...]
    performance_metrics: PerformanceMetrics
    timestamp: datetime
