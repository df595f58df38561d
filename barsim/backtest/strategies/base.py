"""barsim.backtest.strategies.base

Backtest strategy contract.

A strategy is a callable invoked once per tradable bar. It sees the current,
previous and next bar, the live portfolio, the history so far, and a scratch
dict it owns for the duration of one run. It may be a plain function or a
coroutine function.

Result convention:
- change_in_shares > 0 = buy
- change_in_shares < 0 = sell
- None or 0           = hold

``price`` is the execution price; when omitted the simulator fills at the next
bar's open.
"""

from __future__ import annotations

from collections.abc import Awaitable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, overload, runtime_checkable

from barsim.core.types import Bar, PortfolioData, StrategyHistory, StrategyResult


class HistoryView(Sequence[StrategyHistory]):
    """Read-only window onto the simulator's history list."""

    __slots__ = ("_items",)

    def __init__(self, items: list[StrategyHistory]) -> None:
        self._items = items

    @overload
    def __getitem__(self, index: int) -> StrategyHistory: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[StrategyHistory]: ...

    def __getitem__(self, index):
        if isinstance(index, slice):
            return tuple(self._items[index])
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[StrategyHistory]:
        return iter(self._items)

    def __repr__(self) -> str:
        return f"HistoryView(len={len(self._items)})"


@dataclass(frozen=True, slots=True)
class StepInput:
    step_index: int
    current_bar: Bar
    previous_bar: Bar
    next_bar: Bar
    portfolio: PortfolioData  # live, not a snapshot
    history: Sequence[StrategyHistory]
    scratch: dict[str, Any]


@runtime_checkable
class Strategy(Protocol):
    def __call__(self, data: StepInput) -> StrategyResult | Awaitable[StrategyResult]: ...


class BaseStrategy:
    """Convenience base: subclasses implement ``step``."""

    name: str = "strategy"

    def step(self, data: StepInput) -> StrategyResult:
        raise NotImplementedError

    def __call__(self, data: StepInput) -> StrategyResult:
        return self.step(data)


def hold(**meta: Any) -> StrategyResult:
    return StrategyResult(meta=meta)
