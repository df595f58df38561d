"""barsim.data.csvfile

Bars from a CSV file.

CSV schema:
- required: timestamp, open, high, low, close
- optional: volume (defaults to 0)

Timestamps are ISO-8601; naive values are taken as UTC. Rows are filtered to
the request's date range (inclusive, by UTC calendar date) and sorted.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path

from barsim.core.cancellation import CancellationToken
from barsim.core.exceptions import DataSourceError
from barsim.core.time import parse_dt
from barsim.core.types import Bar
from barsim.data.base import BarRequest

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("timestamp", "open", "high", "low", "close")


def load_bars_csv(path: str | Path) -> list[Bar]:
    p = Path(path)
    if not p.exists():
        raise DataSourceError(f"CSV file not found: {p}")

    with p.open("r", encoding="utf-8", newline="") as f:
        r = csv.DictReader(f)
        header = {(h or "").strip().lower() for h in (r.fieldnames or [])}
        missing = [c for c in REQUIRED_COLUMNS if c not in header]
        if missing:
            raise DataSourceError(f"CSV missing required column(s): {', '.join(missing)}")

        bars: list[Bar] = []
        for line_no, row in enumerate(r, start=2):
            clean = {k.strip().lower(): (v or "").strip() for k, v in row.items() if k is not None}
            try:
                bars.append(
                    Bar(
                        timestamp=parse_dt(clean["timestamp"]),
                        open=float(clean["open"]),
                        high=float(clean["high"]),
                        low=float(clean["low"]),
                        close=float(clean["close"]),
                        volume=float(clean.get("volume") or 0.0),
                    )
                )
            except ValueError as e:
                raise DataSourceError(f"{p}:{line_no}: invalid row: {e}") from e

    bars.sort(key=lambda b: b.timestamp)
    return bars


class CsvDataSource:
    name = "csv"

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    async def get_bars(self, request: BarRequest, cancellation: CancellationToken | None = None) -> list[Bar]:
        if cancellation is not None:
            cancellation.raise_if_cancelled()

        bars = load_bars_csv(self.path)
        start, end = request.start_date, request.end_date
        out = [b for b in bars if b.timestamp.date() >= start and (end is None or b.timestamp.date() <= end)]
        logger.debug(
            "csv_bars_loaded",
            extra={"path": str(self.path), "rows": len(bars), "in_range": len(out), "symbol": request.symbol},
        )
        return out
