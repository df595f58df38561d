"""barsim.data.base

Data source contract.

A data source answers one question: bars for a symbol between two dates, in
ascending timestamp order. Pagination, rate limits and credentials are its
own business; the simulator only ever sees the final list.
"""

from __future__ import annotations

from datetime import date
from typing import Literal, Protocol, runtime_checkable

from pydantic import BaseModel, Field, field_validator, model_validator

from barsim.core.cancellation import CancellationToken
from barsim.core.types import Bar

ResolutionPeriod = Literal["minute", "hour", "day", "week", "month"]


class BarRequest(BaseModel):
    symbol: str
    start_date: date
    end_date: date | None = None
    resolution_value: int = Field(default=1, ge=1)
    resolution_period: ResolutionPeriod = "day"

    model_config = {"frozen": True}

    @field_validator("symbol")
    @classmethod
    def symbol_is_normalized(cls, v: str) -> str:
        sym = v.strip().upper()
        if not sym:
            raise ValueError("symbol must be non-empty")
        return sym

    @model_validator(mode="after")
    def end_not_before_start(self) -> BarRequest:
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must not precede start_date")
        return self


@runtime_checkable
class DataSource(Protocol):
    name: str

    async def get_bars(self, request: BarRequest, cancellation: CancellationToken | None = None) -> list[Bar]: ...
