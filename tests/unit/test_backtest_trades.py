from __future__ import annotations

import math

import pytest

from barsim.backtest.trades import match_trades, trade_stats
from barsim.core.types import StrategyHistory, StrategyResult
from tests.unit._bars import make_history


def test_single_round_trip() -> None:
    hist = make_history([1000, 1000, 1020], trades={0: (10, 10.0), 1: (-10, 12.0)})
    assert match_trades(hist) == pytest.approx([0.2])


def test_average_cost_across_buys() -> None:
    # 10 @ 10 and 10 @ 20 -> average cost 15; selling 20 @ 18 returns +20%
    hist = make_history(
        [1000] * 4,
        trades={0: (10, 10.0), 1: (10, 20.0), 2: (-20, 18.0)},
    )
    assert match_trades(hist) == pytest.approx([0.2])


def test_partial_sells_are_separate_trades() -> None:
    hist = make_history(
        [1000] * 4,
        trades={0: (10, 10.0), 1: (-5, 12.0), 2: (-5, 8.0)},
    )
    assert match_trades(hist) == pytest.approx([0.2, -0.2])


def test_open_position_is_unrealized() -> None:
    hist = make_history([1000] * 3, trades={0: (10, 10.0), 1: (5, 11.0)})
    assert match_trades(hist) == []


def test_sell_without_position_is_ignored() -> None:
    hist = make_history([1000] * 3, trades={0: (-5, 10.0), 1: (5, 10.0)})
    assert match_trades(hist) == []


def test_residual_position_clamps_to_flat() -> None:
    # The tiny residual is cleared, so the next buy starts a fresh cost basis.
    hist = make_history(
        [1000] * 5,
        trades={0: (10, 10.0), 1: (-9.99995, 10.0), 2: (4, 20.0), 3: (-4, 25.0)},
    )
    out = match_trades(hist)
    assert len(out) == 2
    assert out[1] == pytest.approx(0.25)


def test_missing_prices_fall_back_to_bar_close() -> None:
    hist = make_history([1000] * 3, closes=[10, 12, 12])
    hist = [
        StrategyHistory(
            bar=h.bar,
            strategy_result=StrategyResult(change_in_shares=change),
            portfolio_snapshot=h.portfolio_snapshot,
        )
        for h, change in zip(hist, [10, -10, None], strict=True)
    ]
    assert match_trades(hist) == pytest.approx([0.2])


def test_zero_cost_basis_is_skipped() -> None:
    hist = make_history([1000] * 3, trades={0: (10, 0.0), 1: (-10, 0.0)})
    assert match_trades(hist) == []


def test_trade_stats_counts_and_averages() -> None:
    s = trade_stats([0.2, -0.1, 0.4, 0.0])
    assert s.total_trades == 4
    assert s.winning_trades == 2
    assert s.losing_trades == 1
    assert s.win_rate == 0.5
    assert s.average_win == pytest.approx(0.3)
    assert s.average_loss == pytest.approx(0.1)
    assert s.payoff_ratio == pytest.approx(3.0)


def test_trade_stats_no_losses_is_infinite_payoff() -> None:
    s = trade_stats([0.1, 0.3])
    assert s.payoff_ratio == math.inf
    assert s.average_loss == 0.0


def test_trade_stats_empty() -> None:
    s = trade_stats([])
    assert s.total_trades == 0
    assert s.payoff_ratio == 0.0
    assert s.win_rate == 0.0
