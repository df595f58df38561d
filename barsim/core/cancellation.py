"""barsim.core.cancellation

Cooperative cancellation. The run checks; nobody interrupts.
"""

from __future__ import annotations

from barsim.core.exceptions import BacktestCancelledError


class CancellationToken:
    """A one-way flag shared between a caller and a running backtest."""

    __slots__ = ("_cancelled", "reason")

    def __init__(self) -> None:
        self._cancelled = False
        self.reason: str | None = None

    def cancel(self, reason: str | None = None) -> None:
        self._cancelled = True
        if reason is not None:
            self.reason = reason

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self, *, history=()) -> None:
        if self._cancelled:
            msg = "backtest was cancelled" if not self.reason else f"backtest was cancelled: {self.reason}"
            raise BacktestCancelledError(msg, history=history)
