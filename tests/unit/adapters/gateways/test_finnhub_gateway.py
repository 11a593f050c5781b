# tests/unit/adapters/gateways/test_finnhub_gateway.py
from __future__ import annotations

from typing import Any

import pytest

from tickerbot.adapters.gateways.finnhub_gateway import FinnhubGateway
from tickerbot.domain.entities.market_data import ValidatedSymbol

NOW = 1_700_000_000


class _StubFinnhub:
    def __init__(self, raw: dict[str, Any]) -> None:
        self.raw = raw
        self.symbols: list[str] = []

    async def quote(self, symbol: str) -> dict[str, Any]:
        self.symbols.append(symbol)
        return self.raw


@pytest.mark.asyncio
async def test_crypto_quote_uses_exchange_pair(btc: ValidatedSymbol) -> None:
    client = _StubFinnhub({"c": 110.0, "pc": 100.0, "t": NOW})
    gateway = FinnhubGateway(client, crypto_exchange="COINBASE")  # type: ignore[arg-type]

    quote = await gateway.fetch_quote(btc)

    assert client.symbols == ["COINBASE:BTCUSDT"]
    assert quote.change == pytest.approx(10.0)
    assert quote.change_percent == pytest.approx(10.0)
    assert quote.is_live is True
    assert quote.exchange == "COINBASE"


@pytest.mark.asyncio
@pytest.mark.parametrize(("age", "expected"), [(0, True), (299, True), (300, False), (86_400, False)])
async def test_market_open_while_quote_is_fresh(aapl: ValidatedSymbol, age: int, expected: bool) -> None:
    client = _StubFinnhub({"c": 1.0, "pc": 1.0, "t": NOW - age})
    gateway = FinnhubGateway(client, clock=lambda: float(NOW))  # type: ignore[arg-type]

    status = await gateway.fetch_market_status(aapl)

    assert client.symbols == ["AAPL"]
    assert status.is_open is expected
    assert status.as_of == NOW - age


@pytest.mark.asyncio
async def test_zero_timestamp_means_closed(aapl: ValidatedSymbol) -> None:
    gateway = FinnhubGateway(_StubFinnhub({"c": 1.0, "pc": 1.0, "t": 0}), clock=lambda: 10.0)  # type: ignore[arg-type]
    assert (await gateway.fetch_market_status(aapl)).is_open is False
