"""barsim.backtest.trades

Round-trip reconstruction from share-change events.

Average-cost-basis accounting, not FIFO lots: every sell is one trade, valued
against the weighted-average price of the shares held at that moment.
Positions still open at the end of history are unrealized and excluded.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from barsim.core.types import StrategyHistory

# Residual share counts below this are treated as a flat position.
POSITION_EPSILON = 1e-4


def _execution_price(entry: StrategyHistory) -> float:
    if entry.execution_price is not None:
        return entry.execution_price
    return entry.strategy_result.price or entry.bar.close


def match_trades(history: Sequence[StrategyHistory]) -> list[float]:
    """Return one fractional return per realized (sell) trade, in order."""

    trades: list[float] = []
    shares_held = 0.0
    cost_basis = 0.0

    for entry in history:
        change = entry.strategy_result.change_in_shares or 0.0
        if change == 0:
            continue

        price = _execution_price(entry)
        if change > 0:
            cost_basis += change * price
            shares_held += change
            continue

        if shares_held <= 0:
            continue

        sold = abs(change)
        avg_cost = cost_basis / shares_held
        cost_of_sold = sold * avg_cost
        if cost_of_sold > 0:
            trades.append((sold * price - cost_of_sold) / cost_of_sold)

        cost_basis -= cost_of_sold
        shares_held -= sold
        if shares_held < POSITION_EPSILON:
            shares_held = 0.0
            cost_basis = 0.0

    return trades


@dataclass(frozen=True, slots=True)
class TradeStats:
    win_rate: float
    payoff_ratio: float
    total_trades: int
    winning_trades: int
    losing_trades: int
    average_win: float
    average_loss: float  # magnitude, >= 0


def trade_stats(trade_returns: Sequence[float]) -> TradeStats:
    if not trade_returns:
        return TradeStats(
            win_rate=0.0,
            payoff_ratio=0.0,
            total_trades=0,
            winning_trades=0,
            losing_trades=0,
            average_win=0.0,
            average_loss=0.0,
        )

    wins = [t for t in trade_returns if t > 0]
    losses = [t for t in trade_returns if t < 0]
    average_win = sum(wins) / len(wins) if wins else 0.0
    average_loss = abs(sum(losses) / len(losses)) if losses else 0.0

    return TradeStats(
        win_rate=len(wins) / len(trade_returns),
        payoff_ratio=math.inf if average_loss == 0 else average_win / average_loss,
        total_trades=len(trade_returns),
        winning_trades=len(wins),
        losing_trades=len(losses),
        average_win=average_win,
        average_loss=average_loss,
    )
