"""barsim.backtest.strategies.buy_and_hold

Buy $1000 worth (or all cash, with ``notional=None``) on the first step,
hold to the end.

The baseline every other strategy has to beat.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from barsim.backtest.strategies.base import BaseStrategy, StepInput, hold
from barsim.core.types import StrategyResult


@dataclass(frozen=True, slots=True)
class BuyAndHoldStrategy(BaseStrategy):
    name: str = "buy_and_hold"
    notional: float | None = 1000.0  # None = all available cash

    def step(self, data: StepInput) -> StrategyResult:
        if data.step_index != 0:
            return hold()

        price = data.current_bar.open
        budget = data.portfolio.available_cash if self.notional is None else min(self.notional, data.portfolio.available_cash)
        if price <= 0 or budget <= 0:
            return hold(reason="nothing_to_buy")

        shares = math.floor(budget / price)
        if shares <= 0:
            return hold(reason="budget_below_one_share")
        return StrategyResult(change_in_shares=shares, price=price, meta={"entry": price})
