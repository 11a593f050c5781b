# tests/unit/application/use_cases/test_get_symbol_snapshot.py
from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any

import pytest

from tickerbot.application.services.cache_store import CacheStore, default_ttls
from tickerbot.application.use_cases.get_symbol_snapshot import (
    CRYPTO_KINDS,
    GetSymbolSnapshot,
    OrchestratorConfig,
)
from tickerbot.domain.entities.market_data import Quote, ValidatedSymbol
from tickerbot.domain.enums.asset_class import AssetClass
from tickerbot.domain.enums.data_kind import DataKind
from tickerbot.domain.exceptions.bot import BotError, BotErrorKind
from tickerbot.domain.exceptions.upstream import (
    UpstreamNotFound,
    UpstreamRateLimited,
    UpstreamUnavailable,
)


class _Spawner:
    def __init__(self) -> None:
        self.pending: list[tuple[str, Coroutine[Any, Any, Any]]] = []

    def __call__(self, coro: Coroutine[Any, Any, Any], *, name: str) -> None:
        self.pending.append((name, coro))

    async def run_all(self) -> None:
        for _, coro in self.pending:
            await coro


def _stock(cache: CacheStore, sources, **kwargs: Any) -> GetSymbolSnapshot:
    return GetSymbolSnapshot(
        cache=cache,
        quotes=sources,
        history=sources,
        summaries=sources,
        market_status=sources,
        **kwargs,
    )


@pytest.mark.asyncio
async def test_cold_cache_fetches_everything_and_writes_back(cache, sources, aapl) -> None:
    result = await _stock(cache, sources).execute(aapl)

    assert result.symbol == "AAPL"
    assert result.display_name == "Apple Inc."
    assert result.quote.price == pytest.approx(175.43)
    assert result.series == sources.history.closes
    assert result.summary == sources.summary
    assert result.market_open is True
    assert result.history_days == 7
    assert sources.calls == {"quote": 1, "history": 1, "summary": 1, "status": 1}

    assert await cache.get(DataKind.STOCK_QUOTE, "AAPL") is not None
    assert await cache.get(DataKind.STOCK_HISTORY, "AAPL", 7) is not None
    assert await cache.get(DataKind.STOCK_SUMMARY, "AAPL") == {"text": sources.summary}
    assert await cache.get(DataKind.MARKET_STATUS, "AAPL") is not None


@pytest.mark.asyncio
async def test_warm_cache_makes_no_upstream_calls(cache, sources, aapl) -> None:
    use_case = _stock(cache, sources)
    first = await use_case.execute(aapl)

    spawner = _Spawner()
    second = await _stock(cache, sources, spawn=spawner).execute(aapl)

    assert second == first
    assert sources.calls == {"quote": 1, "history": 1, "summary": 1, "status": 1}
    assert spawner.pending == []


@pytest.mark.asyncio
async def test_only_missing_kinds_are_fetched(cache, sources, aapl) -> None:
    await cache.set(
        DataKind.STOCK_QUOTE,
        "AAPL",
        {"price": 10.0, "change": 1.0, "change_percent": 11.1, "as_of": 5, "is_live": False},
    )
    result = await _stock(cache, sources).execute(aapl)

    assert result.quote.price == 10.0
    assert sources.calls["quote"] == 0
    assert sources.calls["history"] == 1


@pytest.mark.asyncio
async def test_invalid_cached_payload_is_refetched(cache, sources, aapl) -> None:
    await cache.set(DataKind.STOCK_QUOTE, "AAPL", {"unexpected": True})
    result = await _stock(cache, sources).execute(aapl)
    assert sources.calls["quote"] == 1
    assert result.quote == sources.quote


@pytest.mark.asyncio
async def test_summary_failure_degrades_without_caching(cache, sources, aapl) -> None:
    sources.summary_error = UpstreamUnavailable("502", provider="openai")
    result = await _stock(cache, sources).execute(aapl)

    assert result.summary is None
    assert await cache.get(DataKind.STOCK_SUMMARY, "AAPL") is None
    assert await cache.get(DataKind.STOCK_QUOTE, "AAPL") is not None


@pytest.mark.asyncio
async def test_market_status_failure_reads_as_unknown(cache, sources, aapl) -> None:
    sources.status_error = UpstreamRateLimited("429", provider="finnhub")
    result = await _stock(cache, sources).execute(aapl)
    assert result.market_open is None


@pytest.mark.asyncio
async def test_slow_summary_is_cut_off_by_its_deadline(cache, sources, aapl) -> None:
    sources.summary_delay = 1.0
    config = OrchestratorConfig(summary_timeout_s=0.05)
    result = await _stock(cache, sources, config=config).execute(aapl)
    assert result.summary is None


@pytest.mark.asyncio
async def test_unknown_symbol_is_not_found_with_suggestions(cache, sources) -> None:
    appl = ValidatedSymbol(symbol="APPL", asset_class=AssetClass.STOCK, provider_ticker="APPL")
    sources.quote_error = UpstreamNotFound("no bars", provider="massive")

    with pytest.raises(BotError) as info:
        await _stock(cache, sources).execute(appl)

    err = info.value
    assert err.kind is BotErrorKind.NOT_FOUND
    assert '"APPL"' in err.message
    assert err.suggestions[0] == "AAPL"
    assert "APPL" not in err.suggestions


@pytest.mark.asyncio
async def test_critical_failure_is_upstream_failure(cache, sources, aapl) -> None:
    sources.history_error = UpstreamUnavailable("boom", provider="massive")
    with pytest.raises(BotError) as info:
        await _stock(cache, sources).execute(aapl)

    err = info.value
    assert err.kind is BotErrorKind.UPSTREAM_FAILURE
    assert "boom" not in err.message
    assert err.message == "Unable to fetch stock data. Please try again later."
    assert "stock:history" in err.details["failures"]
    assert await cache.get(DataKind.STOCK_QUOTE, "AAPL") is None


@pytest.mark.asyncio
async def test_unexpected_gateway_exception_is_classified(cache, sources, aapl) -> None:
    sources.quote_error = RuntimeError("bug")
    with pytest.raises(BotError) as info:
        await _stock(cache, sources).execute(aapl)
    assert info.value.kind is BotErrorKind.UPSTREAM_FAILURE


@pytest.mark.asyncio
async def test_crypto_failure_message_names_crypto_data(cache, sources, btc) -> None:
    sources.quote_error = UpstreamUnavailable("boom", provider="finnhub")
    use_case = GetSymbolSnapshot(
        cache=cache, quotes=sources, history=sources, summaries=sources, kinds=CRYPTO_KINDS
    )
    with pytest.raises(BotError) as info:
        await use_case.execute(btc)

    assert info.value.kind is BotErrorKind.UPSTREAM_FAILURE
    assert info.value.message == "Unable to fetch crypto data. Please try again later."


@pytest.mark.asyncio
async def test_writes_are_handed_to_the_spawner(cache, sources, aapl) -> None:
    spawner = _Spawner()
    await _stock(cache, sources, spawn=spawner).execute(aapl)

    assert [name for name, _ in spawner.pending] == ["cache_write"]
    assert await cache.get(DataKind.STOCK_QUOTE, "AAPL") is None

    await spawner.run_all()
    assert await cache.get(DataKind.STOCK_QUOTE, "AAPL") is not None


@pytest.mark.asyncio
async def test_crypto_appends_live_price_and_skips_market_status(cache, sources, btc) -> None:
    sources.quote = Quote(
        price=43_000.0, change=500.0, change_percent=1.18, as_of=1, is_live=True, exchange="BINANCE"
    )
    use_case = GetSymbolSnapshot(
        cache=cache,
        quotes=sources,
        history=sources,
        summaries=sources,
        kinds=CRYPTO_KINDS,
    )
    result = await use_case.execute(btc)

    assert result.display_name == "Bitcoin"
    assert result.series[-1] == 43_000.0
    assert result.series[:-1] == sources.history.closes
    assert result.market_open is None
    assert sources.calls["status"] == 0
    assert await cache.get(DataKind.CRYPTO_QUOTE, "BTC") is not None


@pytest.mark.asyncio
async def test_series_is_capped_to_chart_points(cache, sources, aapl) -> None:
    config = OrchestratorConfig(chart_points=3)
    result = await _stock(cache, sources, config=config).execute(aapl)
    assert result.series == sources.history.closes[-3:]


def test_config_validation() -> None:
    with pytest.raises(ValueError):
        OrchestratorConfig(history_days=0)
    with pytest.raises(ValueError):
        OrchestratorConfig(chart_points=1)


@pytest.mark.asyncio
async def test_awaited_writes_respect_grace_period(sources, aapl) -> None:
    class _SlowStore:
        async def get(self, key: str) -> str | None:
            return None

        async def set(self, key: str, value: str, *, ttl: int) -> None:
            await asyncio.sleep(1.0)

    slow_cache = CacheStore(_SlowStore(), default_ttls())
    config = OrchestratorConfig(cache_write_grace_s=0.05)
    result = await asyncio.wait_for(
        _stock(slow_cache, sources, config=config).execute(aapl), timeout=0.5
    )
    assert result.symbol == "AAPL"


class _GatedStore:
    """Key-value store whose reads only complete once ``parties`` are pending."""

    def __init__(self, parties: int) -> None:
        self._barrier = asyncio.Barrier(parties)
        self.data: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        await self._barrier.wait()
        return None

    async def set(self, key: str, value: str, *, ttl: int) -> None:
        self.data[key] = value


class _GatedSources:
    """Gateways that only answer once every fetch is in flight."""

    def __init__(self, base, parties: int) -> None:
        self._base = base
        self._barrier = asyncio.Barrier(parties)

    async def fetch_quote(self, symbol: ValidatedSymbol) -> Quote:
        await self._barrier.wait()
        return await self._base.fetch_quote(symbol)

    async def fetch_history(self, symbol: ValidatedSymbol, days: int):
        await self._barrier.wait()
        return await self._base.fetch_history(symbol, days)

    async def fetch_summary(self, symbol: ValidatedSymbol, display_name: str) -> str:
        await self._barrier.wait()
        return await self._base.fetch_summary(symbol, display_name)

    async def fetch_market_status(self, symbol: ValidatedSymbol):
        await self._barrier.wait()
        return await self._base.fetch_market_status(symbol)


@pytest.mark.asyncio
async def test_cache_reads_and_fetches_are_issued_together(sources, aapl) -> None:
    # Each read and each fetch blocks until all four are pending at once.
    store = _GatedStore(parties=4)
    gated = _GatedSources(sources, parties=4)
    use_case = _stock(CacheStore(store, default_ttls()), gated)

    async with asyncio.timeout(2.0):
        result = await use_case.execute(aapl)

    assert result.summary == sources.summary
    assert result.market_open is True
    assert sources.calls == {"quote": 1, "history": 1, "summary": 1, "status": 1}
    assert len(store.data) == 4

