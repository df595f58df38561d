"""barsim.backtest.strategies.momentum

Simple momentum strategy:
- long if close / close[n bars ago] - 1 > threshold
- flat otherwise

No shorting.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from barsim.backtest.strategies.base import BaseStrategy, StepInput, hold
from barsim.core.types import StrategyResult


@dataclass(frozen=True, slots=True)
class MomentumStrategy(BaseStrategy):
    name: str = "momentum"
    lookback: int = 20
    threshold: float = 0.02

    def step(self, data: StepInput) -> StrategyResult:
        closes: list[float] = data.scratch.setdefault("closes", [])
        closes.append(float(data.current_bar.close))

        n = int(self.lookback)
        if n <= 0 or len(closes) <= n or closes[-n - 1] == 0:
            return hold()

        mom = closes[-1] / closes[-n - 1] - 1.0
        owned = data.portfolio.shares_owned
        if mom > float(self.threshold) and owned == 0:
            fill = data.next_bar.open
            shares = math.floor(data.portfolio.available_cash / fill) if fill > 0 else 0
            if shares > 0:
                return StrategyResult(change_in_shares=shares, meta={"momentum": mom})
        elif mom <= float(self.threshold) and owned > 0:
            return StrategyResult(change_in_shares=-owned, meta={"momentum": mom})
        return hold(momentum=mom)
