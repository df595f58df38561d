"""barsim.backtest.strategies.ma_crossover

Moving average crossover:
- buy with ``fraction`` of cash when fast SMA > slow SMA
- sell everything when fast SMA < slow SMA

No shorting. Closes are accumulated in the run's scratch dict, so one instance
can drive any number of independent runs.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from barsim.backtest.strategies.base import BaseStrategy, StepInput, hold
from barsim.core.types import StrategyResult


@dataclass(frozen=True, slots=True)
class MACrossoverStrategy(BaseStrategy):
    name: str = "ma_crossover"
    fast: int = 10
    slow: int = 50
    fraction: float = 1.0

    def step(self, data: StepInput) -> StrategyResult:
        closes: list[float] = data.scratch.setdefault("closes", [])
        closes.append(float(data.current_bar.close))

        fast, slow = int(self.fast), int(self.slow)
        if fast <= 0 or slow <= 0 or fast >= slow or len(closes) < slow:
            return hold()

        window = np.asarray(closes[-slow:], dtype=np.float64)
        f = float(np.mean(window[-fast:]))
        s = float(np.mean(window))
        meta = {"fast_ma": f, "slow_ma": s}

        owned = data.portfolio.shares_owned
        if f > s and owned == 0:
            fill = data.next_bar.open
            shares = math.floor(data.portfolio.available_cash * self.fraction / fill) if fill > 0 else 0
            if shares > 0:
                return StrategyResult(change_in_shares=shares, meta=meta)
        elif f < s and owned > 0:
            return StrategyResult(change_in_shares=-owned, meta=meta)
        return StrategyResult(meta=meta)
