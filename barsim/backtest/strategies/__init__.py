"""barsim.backtest.strategies

Strategy library.

These are intentionally simple baselines. The goal is correctness and
comparability, not sophistication.
"""

from collections.abc import Callable

from barsim.backtest.strategies.base import BaseStrategy, HistoryView, StepInput, Strategy, hold
from barsim.backtest.strategies.buy_and_hold import BuyAndHoldStrategy
from barsim.backtest.strategies.ma_crossover import MACrossoverStrategy
from barsim.backtest.strategies.momentum import MomentumStrategy

STRATEGIES: dict[str, Callable[[], BaseStrategy]] = {
    "buy_and_hold": BuyAndHoldStrategy,
    "ma_crossover": MACrossoverStrategy,
    "momentum": MomentumStrategy,
}

__all__ = [
    "STRATEGIES",
    "BaseStrategy",
    "BuyAndHoldStrategy",
    "HistoryView",
    "MACrossoverStrategy",
    "MomentumStrategy",
    "StepInput",
    "Strategy",
    "hold",
]
