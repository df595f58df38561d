"""barsim.backtest.metrics

Performance metrics over a completed simulation history.

Conventions:
- strategy returns come from ``portfolio_snapshot.portfolio_value``; market
  returns from ``bar.close``
- all statistics are population statistics (divide by N)
- annualization uses 252 periods per year whatever the bar resolution; on
  intraday or weekly bars the annualized figures are only comparable to each
  other, not to published daily-bar ratios
- the "market" is buy-and-hold of the same instrument, not a broad index, so
  alpha and beta measure timing skill against simply holding the asset
- ``max_drawdown_percent`` is a fraction (0-1)
- "no downside" ratios are ``math.inf``, never NaN or a sentinel number

``compute_metrics`` never raises: fewer than two history entries yields the
all-zero metrics object.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from barsim.backtest import stats
from barsim.backtest.trades import match_trades, trade_stats
from barsim.core.types import StrategyHistory

DEFAULT_RISK_FREE_RATE = 0.02


@dataclass(frozen=True, slots=True)
class PerformanceMetrics:
    # Risk-adjusted returns
    sharpe_ratio: float = 0.0
    sortino_ratio: float = 0.0

    # Drawdown
    max_drawdown: float = 0.0
    max_drawdown_percent: float = 0.0

    # Market comparison
    alpha: float = 0.0
    beta: float = 0.0

    # Trade analysis
    win_rate: float = 0.0
    payoff_ratio: float = 0.0
    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    average_win: float = 0.0
    average_loss: float = 0.0

    # Additional
    volatility: float = 0.0
    market_volatility: float = 0.0
    correlation: float = 0.0
    information_ratio: float = 0.0
    calmar_ratio: float = 0.0


def daily_returns(history: Sequence[StrategyHistory], kind: str = "strategy") -> np.ndarray:
    if kind == "strategy":
        values = [h.portfolio_snapshot.portfolio_value for h in history]
    elif kind == "market":
        values = [h.bar.close for h in history]
    else:
        raise ValueError(f"unknown return series: {kind}")
    return stats.simple_returns(values)


def sharpe_ratio(returns: np.ndarray, *, risk_free_rate: float, volatility: float) -> float:
    if returns.size == 0 or volatility == 0:
        return 0.0
    return (stats.annualized_mean(returns) - risk_free_rate) / volatility


def sortino_ratio(returns: np.ndarray, *, risk_free_rate: float) -> float:
    if returns.size == 0:
        return 0.0
    downside = stats.downside_deviation(returns)
    if not downside:
        return math.inf
    return (stats.annualized_mean(returns) - risk_free_rate) / downside


def beta(strategy_returns: np.ndarray, market_returns: np.ndarray) -> float:
    var_m = stats.pvariance(market_returns)
    if var_m == 0 or strategy_returns.shape != market_returns.shape:
        return 0.0
    return stats.pcovariance(strategy_returns, market_returns) / var_m


def alpha(strategy_returns: np.ndarray, market_returns: np.ndarray, *, beta: float, risk_free_rate: float) -> float:
    """CAPM excess return over buy-and-hold of the same instrument."""

    if strategy_returns.size == 0 or market_returns.size == 0:
        return 0.0
    rs = stats.annualized_mean(strategy_returns)
    rm = stats.annualized_mean(market_returns)
    return rs - (risk_free_rate + beta * (rm - risk_free_rate))


def correlation(strategy_returns: np.ndarray, market_returns: np.ndarray) -> float:
    if strategy_returns.size == 0 or strategy_returns.shape != market_returns.shape:
        return 0.0
    denom = math.sqrt(stats.pvariance(strategy_returns) * stats.pvariance(market_returns))
    if denom == 0:
        return 0.0
    return stats.pcovariance(strategy_returns, market_returns) / denom


def max_drawdown(history: Sequence[StrategyHistory]) -> tuple[float, float]:
    """Largest peak-to-trough fall in portfolio value: (dollars, fraction of peak).

    The running peak is seeded from the first entry's snapshot, not from
    starting cash.
    """

    if not history:
        return 0.0, 0.0

    peak = history[0].portfolio_snapshot.portfolio_value
    worst = 0.0
    worst_pct = 0.0
    for h in history:
        value = h.portfolio_snapshot.portfolio_value
        if value > peak:
            peak = value
        dd = peak - value
        if dd > worst:
            worst = dd
            worst_pct = dd / peak if peak > 0 else 0.0
    return worst, worst_pct


def information_ratio(strategy_returns: np.ndarray, market_returns: np.ndarray) -> float:
    if strategy_returns.size == 0 or strategy_returns.shape != market_returns.shape:
        return 0.0
    excess = strategy_returns - market_returns
    tracking_error = stats.annualized_volatility(excess)
    if tracking_error == 0:
        return 0.0
    return stats.annualized_mean(excess) / tracking_error


def calmar_ratio(returns: np.ndarray, max_drawdown_percent: float) -> float:
    if returns.size == 0 or max_drawdown_percent == 0:
        return 0.0
    return stats.annualized_mean(returns) / max_drawdown_percent


def compute_metrics(
    history: Sequence[StrategyHistory],
    starting_cash: float,
    risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
) -> PerformanceMetrics:
    """Score a completed history. Pure and deterministic.

    ``starting_cash`` is accepted for interface stability; drawdown is seeded
    from the recorded history instead.
    """

    if len(history) < 2:
        return PerformanceMetrics()

    strat = daily_returns(history, "strategy")
    market = daily_returns(history, "market")

    vol = stats.annualized_volatility(strat)
    b = beta(strat, market)
    dd, dd_pct = max_drawdown(history)
    trades = trade_stats(match_trades(history))

    return PerformanceMetrics(
        sharpe_ratio=sharpe_ratio(strat, risk_free_rate=risk_free_rate, volatility=vol),
        sortino_ratio=sortino_ratio(strat, risk_free_rate=risk_free_rate),
        max_drawdown=dd,
        max_drawdown_percent=dd_pct,
        alpha=alpha(strat, market, beta=b, risk_free_rate=risk_free_rate),
        beta=b,
        win_rate=trades.win_rate,
        payoff_ratio=trades.payoff_ratio,
        total_trades=trades.total_trades,
        winning_trades=trades.winning_trades,
        losing_trades=trades.losing_trades,
        average_win=trades.average_win,
        average_loss=trades.average_loss,
        volatility=vol,
        market_volatility=stats.annualized_volatility(market),
        correlation=correlation(strat, market),
        information_ratio=information_ratio(strat, market),
        calmar_ratio=calmar_ratio(strat, dd_pct),
    )
