"""barsim.backtest

The core: bar-loop simulator, performance metrics, trade matcher.
"""

from barsim.backtest.engine import backtest, run_backtest, run_backtest_sync
from barsim.backtest.metrics import PerformanceMetrics, compute_metrics
from barsim.backtest.simulator import SimResult, Simulator, simulate
from barsim.backtest.trades import TradeStats, match_trades, trade_stats

__all__ = [
    "PerformanceMetrics",
    "SimResult",
    "Simulator",
    "TradeStats",
    "backtest",
    "compute_metrics",
    "match_trades",
    "run_backtest",
    "run_backtest_sync",
    "simulate",
    "trade_stats",
]
