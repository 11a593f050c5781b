# tests/unit/application/services/test_cache_store.py
from __future__ import annotations

import pytest

from tickerbot.application.services.cache_store import CacheStore, build_key, default_ttls
from tickerbot.domain.enums.data_kind import DataKind
from tickerbot.infrastructure.caching.memory_store import InMemoryKeyValueStore


class _BrokenStore:
    async def get(self, key: str) -> str | None:
        raise ConnectionError("redis down")

    async def set(self, key: str, value: str, *, ttl: int) -> None:
        raise ConnectionError("redis down")


class _RecordingStore(InMemoryKeyValueStore):
    def __init__(self) -> None:
        super().__init__()
        self.ttls: dict[str, int] = {}

    async def set(self, key: str, value: str, *, ttl: int) -> None:
        self.ttls[key] = ttl
        await super().set(key, value, ttl=ttl)


def test_keys_are_deterministic() -> None:
    assert build_key(DataKind.STOCK_QUOTE, "aapl") == "stock:price:AAPL"
    assert build_key(DataKind.STOCK_HISTORY, "AAPL", 7) == "stock:history:AAPL:7"
    assert build_key(DataKind.CRYPTO_SUMMARY, " btc ") == "crypto:summary:BTC"


def test_ttl_table_must_cover_every_kind() -> None:
    ttls = dict(default_ttls())
    del ttls[DataKind.MARKET_STATUS]
    with pytest.raises(ValueError, match="MARKET_STATUS"):
        CacheStore(InMemoryKeyValueStore(), ttls)


def test_ttl_table_rejects_non_positive_values() -> None:
    ttls = dict(default_ttls())
    ttls[DataKind.STOCK_QUOTE] = 0
    with pytest.raises(ValueError, match="STOCK_QUOTE"):
        CacheStore(InMemoryKeyValueStore(), ttls)


@pytest.mark.asyncio
@pytest.mark.parametrize("kind", list(DataKind), ids=lambda k: k.name)
async def test_round_trip_and_miss(cache: CacheStore, kind: DataKind) -> None:
    params = 7 if kind in (DataKind.STOCK_HISTORY, DataKind.CRYPTO_HISTORY) else None
    payload = {"value": 1.5, "points": [1, 2, 3]}
    assert await cache.get(kind, "AAPL", params) is None
    await cache.set(kind, "AAPL", payload, params)
    assert await cache.get(kind, "aapl", params) == payload


@pytest.mark.asyncio
async def test_history_entries_are_isolated_by_lookback(cache: CacheStore) -> None:
    await cache.set(DataKind.STOCK_HISTORY, "AAPL", {"closes": [1.0, 2.0]}, 7)
    assert await cache.get(DataKind.STOCK_HISTORY, "AAPL", 30) is None
    assert await cache.get(DataKind.STOCK_HISTORY, "AAPL", 7) == {"closes": [1.0, 2.0]}
    assert await cache.get(DataKind.CRYPTO_HISTORY, "AAPL", 7) is None


@pytest.mark.asyncio
async def test_writes_use_the_kind_ttl() -> None:
    store = _RecordingStore()
    cache = CacheStore(store, default_ttls())
    await cache.set(DataKind.STOCK_SUMMARY, "AAPL", {"text": "x"})
    await cache.set(DataKind.MARKET_STATUS, "AAPL", {"is_open": True, "as_of": 1})
    assert store.ttls == {"stock:summary:AAPL": 28_800, "stock:market_status:AAPL": 60}


@pytest.mark.asyncio
async def test_backend_faults_are_absorbed() -> None:
    cache = CacheStore(_BrokenStore(), default_ttls())
    assert await cache.get(DataKind.STOCK_QUOTE, "AAPL") is None
    await cache.set(DataKind.STOCK_QUOTE, "AAPL", {"price": 1.0})


@pytest.mark.asyncio
async def test_undecodable_entry_is_a_miss(memory_kv: InMemoryKeyValueStore, cache: CacheStore) -> None:
    await memory_kv.set("stock:price:AAPL", "{not json", ttl=60)
    assert await cache.get(DataKind.STOCK_QUOTE, "AAPL") is None


@pytest.mark.asyncio
async def test_unserializable_payload_is_skipped(cache: CacheStore) -> None:
    await cache.set(DataKind.STOCK_QUOTE, "AAPL", {"price": float("nan")})
    assert await cache.get(DataKind.STOCK_QUOTE, "AAPL") is None
