"""barsim.backtest.simulator

Single-asset, bar-by-bar portfolio simulator.

Loop contract:
- every bar with a neighbour on both sides is one step; the first and last bar
  of the series are context only
- steps run strictly in order; each strategy call (sync or async) completes
  before the next step starts
- history records the portfolio as it was *before* the step's trade
- trades fill at the strategy's price, else at the next bar's open
- cash is booked in cents (see barsim.core.money)
- negative shares or negative cash aborts the run; nothing is returned

No leverage, no shorting, no fees. The loop owns no state beyond one run.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import datetime
from types import MappingProxyType
from typing import Any

from barsim.backtest.strategies.base import HistoryView, StepInput, Strategy
from barsim.core import money
from barsim.core.cancellation import CancellationToken
from barsim.core.exceptions import BacktestCancelledError, NegativeBalanceError, StrategyExecutionError
from barsim.core.time import utc_now
from barsim.core.types import Bar, PortfolioData, PortfolioSnapshot, StrategyHistory, StrategyResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SimResult:
    portfolio_data: PortfolioSnapshot
    history: tuple[StrategyHistory, ...]
    timestamp: datetime


class Simulator:
    """Drives one strategy over one bar series.

    An instance may be reused for sequential runs; every ``run`` call builds
    its own portfolio, history and scratch dict. Give each concurrent run its
    own instance.
    """

    async def run(
        self,
        bars: Sequence[Bar],
        strategy: Strategy,
        starting_cash: float,
        cancellation: CancellationToken | None = None,
    ) -> SimResult:
        history: list[StrategyHistory] = []
        if cancellation is not None:
            cancellation.raise_if_cancelled(history=history)

        portfolio = PortfolioData.opening(starting_cash)
        scratch: dict[str, Any] = {}
        view = HistoryView(history)
        n = len(bars)
        first_open: float | None = None

        logger.info("simulation_started", extra={"bars": n, "starting_cash": portfolio.starting_cash})

        for i in range(1, n - 1):
            if cancellation is not None and cancellation.cancelled:
                logger.info("simulation_cancelled", extra={"completed_steps": len(history)})
                cancellation.raise_if_cancelled(history=history)

            bar, prev_bar, next_bar = bars[i], bars[i - 1], bars[i + 1]
            if first_open is None:
                first_open = bar.open

            snapshot = portfolio.snapshot()
            step = StepInput(
                step_index=len(history),
                current_bar=bar,
                previous_bar=prev_bar,
                next_bar=next_bar,
                portfolio=portfolio,
                history=view,
                scratch=scratch,
            )
            try:
                result = await self._invoke(strategy, step)
            except BacktestCancelledError as e:
                # Raised by the strategy itself; still a cancellation, not a failure.
                logger.info("simulation_cancelled", extra={"completed_steps": len(history)})
                raise BacktestCancelledError(str(e), history=history) from e

            if result.is_trade:
                execution_price = result.price if result.price is not None else next_bar.open
            else:
                # A hold has no execution price, whatever the strategy said.
                execution_price = None
                if result.price is not None:
                    result = replace(result, price=None)
            result = replace(result, meta=MappingProxyType(dict(result.meta)))

            history.append(
                StrategyHistory(
                    bar=bar,
                    strategy_result=result,
                    portfolio_snapshot=snapshot,
                    execution_price=execution_price,
                )
            )

            if execution_price is not None:
                change = float(result.change_in_shares)
                portfolio.shares_owned += change
                portfolio.available_cash = money.subtract(
                    portfolio.available_cash, money.multiply(change, execution_price)
                )
                logger.debug(
                    "simulation_trade",
                    extra={"step": step.step_index, "change_in_shares": change, "price": execution_price},
                )

            self._check_solvency(portfolio, step.step_index)

            mark = execution_price if execution_price is not None else next_bar.open
            portfolio.portfolio_value = money.add(money.multiply(portfolio.shares_owned, mark), portfolio.available_cash)
            portfolio.portfolio_percent_change = money.percent_change(portfolio.portfolio_value, portfolio.starting_cash)
            portfolio.stock_percent_change = money.percent_change(next_bar.open, first_open)

        logger.info(
            "simulation_finished",
            extra={"steps": len(history), "portfolio_value": portfolio.portfolio_value},
        )
        return SimResult(portfolio_data=portfolio.snapshot(), history=tuple(history), timestamp=utc_now())

    @staticmethod
    async def _invoke(strategy: Strategy, step: StepInput) -> StrategyResult:
        try:
            raw = strategy(step)
            if inspect.isawaitable(raw):
                raw = await raw
            return StrategyResult.coerce(raw)
        except BacktestCancelledError:
            raise
        except Exception as e:
            ts = step.current_bar.timestamp
            logger.exception("strategy_failed", extra={"step": step.step_index, "bar_ts": str(ts)})
            raise StrategyExecutionError(
                f"strategy failed at step {step.step_index} ({ts}): {type(e).__name__}: {e}",
                step_index=step.step_index,
                timestamp=ts,
            ) from e

    @staticmethod
    def _check_solvency(portfolio: PortfolioData, step_index: int) -> None:
        if portfolio.shares_owned < 0:
            what = "shares owned"
        elif portfolio.available_cash < 0:
            what = "available cash"
        else:
            return
        logger.error(
            "negative_balance",
            extra={
                "step": step_index,
                "shares_owned": portfolio.shares_owned,
                "available_cash": portfolio.available_cash,
            },
        )
        raise NegativeBalanceError(
            f"{what} is negative at step {step_index}",
            step_index=step_index,
            shares_owned=portfolio.shares_owned,
            available_cash=portfolio.available_cash,
        )


async def simulate(
    *,
    bars: Sequence[Bar],
    strategy: Strategy,
    starting_cash: float,
    cancellation: CancellationToken | None = None,
) -> SimResult:
    return await Simulator().run(bars, strategy, starting_cash, cancellation)
