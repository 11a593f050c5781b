# tests/conftest.py
from __future__ import annotations

import asyncio
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

import pytest

from tickerbot.application.services.cache_store import CacheStore, default_ttls
from tickerbot.config.settings import Settings, get_settings
from tickerbot.domain.entities.market_data import (
    MarketStatus,
    PriceHistory,
    Quote,
    ValidatedSymbol,
)
from tickerbot.domain.enums.asset_class import AssetClass
from tickerbot.infrastructure.caching.memory_store import InMemoryKeyValueStore


class FakeClock:
    """Settable clock for TTL and rate-limit tests."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass
class FakeSources:
    """In-test implementation of every upstream gateway port.

    Set ``<kind>_error`` to make a call raise and ``<kind>_delay`` to make it
    sleep first.
    """

    quote: Quote = field(
        default_factory=lambda: Quote(price=175.43, change=4.10, change_percent=2.39, as_of=1)
    )
    history: PriceHistory = field(
        default_factory=lambda: PriceHistory(
            closes=(170.0, 171.5, 169.8, 172.2, 173.0, 174.1, 175.43),
            timestamps=(1, 2, 3, 4, 5, 6, 7),
        )
    )
    summary: str = "Shares rose after strong earnings."
    status: MarketStatus = field(default_factory=lambda: MarketStatus(is_open=True, as_of=1))

    quote_error: Exception | None = None
    history_error: Exception | None = None
    summary_error: Exception | None = None
    status_error: Exception | None = None
    summary_delay: float = 0.0

    calls: dict[str, int] = field(
        default_factory=lambda: {"quote": 0, "history": 0, "summary": 0, "status": 0}
    )

    async def _serve(self, kind: str, value: Any, error: Exception | None, delay: float = 0.0) -> Any:
        self.calls[kind] += 1
        if delay:
            await asyncio.sleep(delay)
        if error is not None:
            raise error
        return value

    async def fetch_quote(self, symbol: ValidatedSymbol) -> Quote:
        return await self._serve("quote", self.quote, self.quote_error)

    async def fetch_history(self, symbol: ValidatedSymbol, days: int) -> PriceHistory:
        return await self._serve("history", self.history, self.history_error)

    async def fetch_summary(self, symbol: ValidatedSymbol, display_name: str) -> str:
        return await self._serve("summary", self.summary, self.summary_error, self.summary_delay)

    async def fetch_market_status(self, symbol: ValidatedSymbol) -> MarketStatus:
        return await self._serve("status", self.status, self.status_error)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_kv() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def cache(memory_kv: InMemoryKeyValueStore) -> CacheStore:
    return CacheStore(memory_kv, default_ttls())


@pytest.fixture
def sources() -> FakeSources:
    return FakeSources()


@pytest.fixture
def aapl() -> ValidatedSymbol:
    return ValidatedSymbol(symbol="AAPL", asset_class=AssetClass.STOCK, provider_ticker="AAPL")


@pytest.fixture
def btc() -> ValidatedSymbol:
    return ValidatedSymbol(symbol="BTC", asset_class=AssetClass.CRYPTO, provider_ticker="X:BTCUSD")


@pytest.fixture
def make_settings(monkeypatch: pytest.MonkeyPatch):
    """Build isolated Settings from alias-style keyword overrides."""
    for name in ("ENVIRONMENT", "DEV_MODE", "CACHE_BACKEND", "DISCORD_PUBLIC_KEY"):
        monkeypatch.delenv(name, raising=False)

    def _make(**overrides: Any) -> Settings:
        values: dict[str, Any] = {"ENVIRONMENT": "test", "CACHE_BACKEND": "memory"}
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Iterator[None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
