"""barsim.backtest.engine

Backtest entry points.

- ``run_backtest``: bars in hand → simulate → score → BacktestResult
- ``backtest``: fetch bars once from a data source, then ``run_backtest``
- ``run_backtest_sync``: the same for callers without an event loop

Nothing here retries. A failed run raises; the caller decides what next.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from barsim.backtest.metrics import DEFAULT_RISK_FREE_RATE, compute_metrics
from barsim.backtest.simulator import Simulator
from barsim.backtest.strategies.base import Strategy
from barsim.core.cancellation import CancellationToken
from barsim.core.types import BacktestResult, Bar
from barsim.data.base import BarRequest, DataSource

logger = logging.getLogger(__name__)


async def run_backtest(
    *,
    bars: Sequence[Bar],
    strategy: Strategy,
    starting_cash: float,
    cancellation: CancellationToken | None = None,
    risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
) -> BacktestResult:
    sim = await Simulator().run(bars, strategy, starting_cash, cancellation)
    metrics = compute_metrics(sim.history, starting_cash, risk_free_rate)
    return BacktestResult(
        portfolio_data=sim.portfolio_data,
        history=sim.history,
        performance_metrics=metrics,
        timestamp=sim.timestamp,
    )


async def backtest(
    *,
    data_source: DataSource,
    request: BarRequest,
    strategy: Strategy,
    starting_cash: float,
    cancellation: CancellationToken | None = None,
    risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
) -> BacktestResult:
    if cancellation is not None:
        cancellation.raise_if_cancelled()

    bars = await data_source.get_bars(request, cancellation)
    logger.info("bars_fetched", extra={"symbol": request.symbol, "count": len(bars)})

    if cancellation is not None:
        cancellation.raise_if_cancelled()

    return await run_backtest(
        bars=bars,
        strategy=strategy,
        starting_cash=starting_cash,
        cancellation=cancellation,
        risk_free_rate=risk_free_rate,
    )


def run_backtest_sync(
    *,
    bars: Sequence[Bar],
    strategy: Strategy,
    starting_cash: float,
    cancellation: CancellationToken | None = None,
    risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
) -> BacktestResult:
    return asyncio.run(
        run_backtest(
            bars=bars,
            strategy=strategy,
            starting_cash=starting_cash,
            cancellation=cancellation,
            risk_free_rate=risk_free_rate,
        )
    )
