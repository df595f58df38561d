from __future__ import annotations

import pytest

from barsim.core.cancellation import CancellationToken
from barsim.core.exceptions import BacktestCancelledError


def test_token_starts_live() -> None:
    token = CancellationToken()
    assert token.cancelled is False
    token.raise_if_cancelled()


def test_cancel_is_sticky_and_keeps_reason() -> None:
    token = CancellationToken()
    token.cancel("shutdown")
    token.cancel()
    assert token.cancelled is True
    assert token.reason == "shutdown"

    with pytest.raises(BacktestCancelledError, match="shutdown") as ei:
        token.raise_if_cancelled(history=["a"])
    assert ei.value.history == ("a",)
