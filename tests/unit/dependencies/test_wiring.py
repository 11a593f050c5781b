# tests/unit/dependencies/test_wiring.py
from __future__ import annotations

import re

import httpx
import pytest
import respx

from tickerbot.application.schemas.dto.chat import CommandInput
from tickerbot.application.services.rate_limiter import FixedCooldownPolicy, SlidingWindowPolicy
from tickerbot.dependencies.wiring import (
    build_cache_ttls,
    build_handle_command,
    build_key_value_stores,
    build_orchestrator_configs,
    build_rate_limit_policy,
)
from tickerbot.domain.enums.data_kind import DataKind
from tickerbot.infrastructure.caching.memory_store import InMemoryKeyValueStore


def test_ttls_cover_every_kind(make_settings) -> None:
    ttls = build_cache_ttls(make_settings(CACHE_TTL_QUOTE_S=120))
    assert set(ttls) == set(DataKind)
    assert ttls[DataKind.STOCK_QUOTE] == ttls[DataKind.CRYPTO_QUOTE] == 120


def test_policy_selection(make_settings) -> None:
    assert isinstance(build_rate_limit_policy(make_settings()), FixedCooldownPolicy)
    sliding = build_rate_limit_policy(
        make_settings(RATE_LIMIT_POLICY="sliding", RATE_LIMIT_MAX_REQUESTS=5)
    )
    assert isinstance(sliding, SlidingWindowPolicy)


def test_crypto_quote_deadline_follows_exchange_timeout(make_settings) -> None:
    stock, crypto = build_orchestrator_configs(
        make_settings(MASSIVE_TIMEOUT_S=9.0, FINNHUB_TIMEOUT_S=4.0)
    )
    assert stock.quote_timeout_s == 9.0
    assert crypto.quote_timeout_s == 4.0
    assert crypto.history_timeout_s == stock.history_timeout_s == 9.0


def test_memory_backend_uses_separate_stores(make_settings) -> None:
    cache_kv, limiter_kv = build_key_value_stores(make_settings())
    assert isinstance(cache_kv, InMemoryKeyValueStore)
    assert cache_kv is not limiter_kv


@pytest.mark.asyncio
@respx.mock
async def test_stock_command_end_to_end(make_settings) -> None:
    settings = make_settings(
        MASSIVE_API_KEY="m-key",
        FINNHUB_API_KEY="f-key",
        OPENAI_API_KEY="o-key",
        UPSTREAM_MAX_RETRIES=0,
    )
    respx.get("https://api.massive.com/v2/aggs/ticker/AAPL/prev").mock(
        return_value=httpx.Response(
            200, json={"results": [{"o": 171.33, "c": 175.43, "t": 1_700_000_000_000}]}
        )
    )
    history = respx.get(url__regex=re.compile(r".*/v2/aggs/ticker/AAPL/range/1/day/.*")).mock(
        return_value=httpx.Response(
            200,
            json={"results": [{"c": 170.0 + i, "t": 1_700_000_000_000 + i * 86_400_000} for i in range(7)]},
        )
    )
    respx.get("https://finnhub.io/api/v1/quote").mock(
        return_value=httpx.Response(200, json={"c": 175.0, "pc": 174.0, "t": 0})
    )
    respx.post("https://api.openai.com/v1/chat/completions").mock(
        return_value=httpx.Response(
            200, json={"choices": [{"message": {"content": "Shares rose after earnings."}}]}
        )
    )

    stores = (InMemoryKeyValueStore(), InMemoryKeyValueStore())
    async with httpx.AsyncClient() as http:
        handle = build_handle_command(settings, http=http, stores=stores)
        first = await handle.execute(
            CommandInput(command_name="stock", options={"ticker": "aapl"}, user_id="u-1")
        )
        second = await handle.execute(
            CommandInput(command_name="stock", options={"ticker": "AAPL"}, user_id="u-1")
        )
        other_user = await handle.execute(
            CommandInput(command_name="stock", options={"ticker": "AAPL"}, user_id="u-2")
        )

    assert first.is_private is False
    assert first.embed is not None
    assert first.embed.title == "📊 AAPL - Apple Inc."
    assert first.embed.fields[-1].value == "Shares rose after earnings."

    assert second.is_private is True
    assert second.text is not None and "Slow Down" in second.text

    assert other_user.embed is not None
    assert history.call_count == 1
