# tests/unit/infrastructure/external_apis/test_massive_client.py
from __future__ import annotations

from datetime import date

import httpx
import pytest
import respx

from tickerbot.domain.exceptions.upstream import (
    UpstreamMalformedResponse,
    UpstreamNotFound,
    UpstreamUnavailable,
)
from tickerbot.infrastructure.external_apis.massive.client import MassiveClient
from tickerbot.infrastructure.resilience.retry import NO_RETRY

BASE = "https://api.massive.com"


@pytest.mark.asyncio
@respx.mock
async def test_previous_close_sends_key_and_returns_bar() -> None:
    route = respx.get(f"{BASE}/v2/aggs/ticker/AAPL/prev").mock(
        return_value=httpx.Response(
            200,
            json={"status": "OK", "results": [{"o": 171.33, "c": 175.43, "t": 1_700_000_000_000}]},
        )
    )
    async with httpx.AsyncClient() as http:
        client = MassiveClient(api_key="k", http=http, retry_policy=NO_RETRY)
        bar = await client.previous_close("AAPL")

    assert bar["c"] == 175.43
    params = route.calls.last.request.url.params
    assert params["apiKey"] == "k"
    assert params["adjusted"] == "true"


@pytest.mark.asyncio
@respx.mock
async def test_daily_aggregates_builds_range_path() -> None:
    route = respx.get(
        f"{BASE}/v2/aggs/ticker/X:BTCUSD/range/1/day/2025-01-01/2025-01-08"
    ).mock(
        return_value=httpx.Response(
            200, json={"results": [{"c": 1.0, "t": 1000}, {"c": 2.0, "t": 2000}]}
        )
    )
    async with httpx.AsyncClient() as http:
        client = MassiveClient(api_key="k", http=http, retry_policy=NO_RETRY)
        bars = await client.daily_aggregates("X:BTCUSD", date(2025, 1, 1), date(2025, 1, 8))

    assert [b["c"] for b in bars] == [1.0, 2.0]
    assert route.calls.last.request.url.params["sort"] == "asc"


@pytest.mark.asyncio
@respx.mock
@pytest.mark.parametrize("body", [{"results": []}, {"status": "OK", "resultsCount": 0}])
async def test_empty_results_mean_unknown_ticker(body: dict) -> None:
    respx.get(f"{BASE}/v2/aggs/ticker/ZZZZ/prev").mock(return_value=httpx.Response(200, json=body))
    async with httpx.AsyncClient() as http:
        client = MassiveClient(api_key="k", http=http, retry_policy=NO_RETRY)
        with pytest.raises(UpstreamNotFound):
            await client.previous_close("ZZZZ")


@pytest.mark.asyncio
@respx.mock
async def test_error_envelope_is_unavailable() -> None:
    respx.get(f"{BASE}/v2/aggs/ticker/AAPL/prev").mock(
        return_value=httpx.Response(200, json={"status": "ERROR", "error": "plan limit"})
    )
    async with httpx.AsyncClient() as http:
        client = MassiveClient(api_key="k", http=http, retry_policy=NO_RETRY)
        with pytest.raises(UpstreamUnavailable):
            await client.previous_close("AAPL")


@pytest.mark.asyncio
@respx.mock
async def test_bar_without_close_is_malformed() -> None:
    respx.get(f"{BASE}/v2/aggs/ticker/AAPL/prev").mock(
        return_value=httpx.Response(200, json={"results": [{"o": 1.0, "t": 1}]})
    )
    async with httpx.AsyncClient() as http:
        client = MassiveClient(api_key="k", http=http, retry_policy=NO_RETRY)
        with pytest.raises(UpstreamMalformedResponse):
            await client.previous_close("AAPL")
