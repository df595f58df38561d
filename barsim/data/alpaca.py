"""barsim.data.alpaca

Alpaca market-data v2 stock bars.

The endpoint pages with ``next_page_token``; pages are followed until the
token is absent. Cancellation is checked before every page.

Auth is two headers. A 401 means the credentials are wrong and is reported as
such; it is never retried.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from barsim.core.cancellation import CancellationToken
from barsim.core.client import DataClient
from barsim.core.exceptions import DataSourceError
from barsim.core.time import market_end_of_day_utc, parse_dt
from barsim.core.types import Bar
from barsim.data.base import BarRequest

logger = logging.getLogger(__name__)

_TIMEFRAME_UNITS = {
    "minute": "Min",
    "hour": "Hour",
    "day": "Day",
    "week": "Week",
    "month": "Month",
}


def alpaca_timeframe(value: int, period: str) -> str:
    unit = _TIMEFRAME_UNITS.get(period)
    if unit is None:
        return "1Day"
    return f"{int(value)}{unit}"


def _parse_bar(raw: dict[str, Any]) -> Bar:
    return Bar(
        timestamp=parse_dt(str(raw["t"])),
        open=float(raw["o"]),
        high=float(raw["h"]),
        low=float(raw["l"]),
        close=float(raw["c"]),
        volume=float(raw.get("v") or 0.0),
    )


class AlpacaDataSource:
    name = "alpaca"

    def __init__(
        self,
        *,
        api_key: str,
        api_secret: str,
        client: DataClient | None = None,
        base_url: str = "https://data.alpaca.markets",
        feed: str = "iex",
        page_limit: int = 1000,
    ) -> None:
        self.api_key = api_key
        self.api_secret = api_secret
        self.client = client or DataClient()
        self.base_url = base_url.rstrip("/")
        self.feed = feed
        self.page_limit = int(page_limit)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.api_secret)

    def _params(self, request: BarRequest) -> dict[str, Any]:
        params: dict[str, Any] = {
            "timeframe": alpaca_timeframe(request.resolution_value, request.resolution_period),
            "limit": self.page_limit,
            "feed": self.feed,
            "sort": "asc",
            "start": request.start_date.isoformat(),
            "adjustment": "split",
        }
        if request.end_date is not None:
            params["end"] = market_end_of_day_utc(request.end_date).isoformat().replace("+00:00", "Z")
        return params

    async def get_bars(self, request: BarRequest, cancellation: CancellationToken | None = None) -> list[Bar]:
        if not self.is_configured:
            raise DataSourceError("alpaca credentials are not configured")

        url = f"{self.base_url}/v2/stocks/{request.symbol}/bars"
        headers = {
            "accept": "application/json",
            "APCA-API-KEY-ID": self.api_key,
            "APCA-API-SECRET-KEY": self.api_secret,
        }
        params = self._params(request)

        bars: list[Bar] = []
        page_token: str | None = None
        pages = 0
        while True:
            if cancellation is not None:
                cancellation.raise_if_cancelled()

            page_params = dict(params)
            if page_token:
                page_params["page_token"] = page_token

            data = await self._fetch_page(url, headers=headers, params=page_params)
            pages += 1
            try:
                bars.extend(_parse_bar(b) for b in (data.get("bars") or []))
            except (KeyError, TypeError, ValueError) as e:
                raise DataSourceError(f"alpaca returned a malformed bar: {e}") from e

            page_token = data.get("next_page_token")
            if not page_token:
                break

        logger.info("alpaca_bars_fetched", extra={"symbol": request.symbol, "bar_count": len(bars), "pages": pages})
        return bars

    async def _fetch_page(self, url: str, *, headers: dict[str, str], params: dict[str, Any]) -> dict[str, Any]:
        try:
            resp = await self.client.request("GET", url, headers=headers, params=params)
        except httpx.HTTPStatusError as e:
            code = e.response.status_code
            if code == 401:
                raise DataSourceError("invalid API credentials") from e
            raise DataSourceError(f"failed to get bars (HTTP {code})") from e
        except httpx.HTTPError as e:
            raise DataSourceError(f"failed to get bars: {type(e).__name__}: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise DataSourceError("alpaca returned invalid JSON") from e
        if not isinstance(data, dict):
            raise DataSourceError("alpaca response schema mismatch")
        return data
