from __future__ import annotations

import httpx
import pytest

from barsim.core.client import CircuitBreaker, ClientConfig, DataClient


def _client(handler, **cfg) -> DataClient:
    config = ClientConfig(rate_limit_rps=1000.0, **cfg)
    return DataClient(config, transport=httpx.MockTransport(handler))


@pytest.fixture()
def _no_sleep(monkeypatch):
    async def _sleep(_s: float) -> None:
        return None

    monkeypatch.setattr("barsim.core.client.asyncio.sleep", _sleep)


@pytest.mark.anyio
async def test_request_success():
    client = _client(lambda r: httpx.Response(200, json={"ok": True}))
    resp = await client.request("GET", "https://example.com/x")
    await client.aclose()
    assert resp.json() == {"ok": True}


@pytest.mark.anyio
async def test_retries_on_5xx_then_succeeds(_no_sleep):
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        if calls < 3:
            return httpx.Response(503)
        return httpx.Response(200, json={"ok": True})

    client = _client(handler, max_retries=3)
    resp = await client.request("GET", "https://example.com/x")
    await client.aclose()
    assert resp.status_code == 200
    assert calls == 3


@pytest.mark.anyio
async def test_gives_up_after_max_retries(_no_sleep):
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(429)

    client = _client(handler, max_retries=2)
    with pytest.raises(httpx.HTTPStatusError):
        await client.request("GET", "https://example.com/x")
    await client.aclose()
    assert calls == 3


@pytest.mark.anyio
async def test_client_errors_are_not_retried(_no_sleep):
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(401)

    client = _client(handler, max_retries=3)
    with pytest.raises(httpx.HTTPStatusError):
        await client.request("GET", "https://example.com/x")
    await client.aclose()
    assert calls == 1


@pytest.mark.anyio
async def test_open_breaker_short_circuits(_no_sleep):
    client = _client(lambda r: httpx.Response(500), max_retries=0, circuit_breaker_threshold=1)
    with pytest.raises(httpx.HTTPStatusError):
        await client.request("GET", "https://example.com/x")
    with pytest.raises(httpx.TransportError, match="circuit breaker open"):
        await client.request("GET", "https://example.com/x")
    await client.aclose()


def test_breaker_recovers_after_cooldown():
    br = CircuitBreaker(threshold=2, cooldown_s=10.0)
    br.on_failure()
    assert br.allow() is True
    br.on_failure()
    assert br.allow() is False

    br.opened_at -= 10.0
    assert br.allow() is True
    assert br.failures == 0
