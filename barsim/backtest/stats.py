"""barsim.backtest.stats

Population statistics over return series.

A backtest is treated as the complete population of its own period, so every
variance divides by N, never N-1. Empty input yields 0.0 rather than NaN.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from barsim import TRADING_DAYS_PER_YEAR


def _arr(x: Sequence[float] | np.ndarray) -> np.ndarray:
    return np.asarray(x, dtype=np.float64)


def simple_returns(values: Sequence[float] | np.ndarray) -> np.ndarray:
    """(cur - prev) / prev for each adjacent pair. A zero ``prev`` yields 0."""

    v = _arr(values)
    if v.size < 2:
        return np.zeros(0, dtype=np.float64)
    prev, cur = v[:-1], v[1:]
    out = np.zeros(prev.shape[0], dtype=np.float64)
    np.divide(cur - prev, prev, out=out, where=prev != 0)
    return out


def mean(returns: Sequence[float] | np.ndarray) -> float:
    r = _arr(returns)
    return float(np.mean(r)) if r.size else 0.0


def pvariance(returns: Sequence[float] | np.ndarray) -> float:
    r = _arr(returns)
    return float(np.var(r, ddof=0)) if r.size else 0.0


def pcovariance(a: Sequence[float] | np.ndarray, b: Sequence[float] | np.ndarray) -> float:
    x, y = _arr(a), _arr(b)
    if x.size == 0 or x.shape != y.shape:
        return 0.0
    return float(np.mean((x - x.mean()) * (y - y.mean())))


def annualized_mean(returns: Sequence[float] | np.ndarray) -> float:
    return mean(returns) * TRADING_DAYS_PER_YEAR


def annualized_volatility(returns: Sequence[float] | np.ndarray) -> float:
    return math.sqrt(pvariance(returns)) * math.sqrt(TRADING_DAYS_PER_YEAR)


def downside_deviation(returns: Sequence[float] | np.ndarray) -> float | None:
    """Annualized root-mean-square of the negative returns.

    Returns None when there are no negative returns (no downside observed).
    """

    r = _arr(returns)
    neg = r[r < 0]
    if neg.size == 0:
        return None
    return math.sqrt(float(np.mean(neg**2))) * math.sqrt(TRADING_DAYS_PER_YEAR)
