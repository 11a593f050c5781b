# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""
Adapter Gateway: Finnhub quotes -> live crypto quote and market status.

Purpose:
    * Crypto quotes from the ``<EXCHANGE>:<SYM>USDT`` pair (live price,
      change against the previous close).
    * Stock market status: the market counts as open while the latest stock
      quote is younger than ``open_threshold_s``.

Layer:
    adapters
"""

from __future__ import annotations

import time
from collections.abc import Callable

from tickerbot.application.interfaces.gateways import MarketStatusGateway, QuoteGateway
from tickerbot.domain.entities.market_data import MarketStatus, Quote, ValidatedSymbol
from tickerbot.domain.exceptions.upstream import UpstreamMalformedResponse
from tickerbot.infrastructure.external_apis.finnhub.client import FinnhubClient

DEFAULT_CRYPTO_EXCHANGE = "BINANCE"
DEFAULT_OPEN_THRESHOLD_S = 300


class FinnhubGateway(QuoteGateway, MarketStatusGateway):
    """Finnhub-backed crypto quote and stock market status gateway."""

    def __init__(
        self,
        client: FinnhubClient,
        *,
        crypto_exchange: str = DEFAULT_CRYPTO_EXCHANGE,
        open_threshold_s: int = DEFAULT_OPEN_THRESHOLD_S,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._client = client
        self._exchange = crypto_exchange
        self._open_threshold_s = open_threshold_s
        self._clock = clock

    def crypto_pair(self, symbol: ValidatedSymbol) -> str:
        return f"{self._exchange}:{symbol.symbol}USDT"

    async def fetch_quote(self, symbol: ValidatedSymbol) -> Quote:
        raw = await self._client.quote(self.crypto_pair(symbol))
        price, prev_close = float(raw["c"]), float(raw["pc"])
        change = price - prev_close
        try:
            return Quote(
                price=price,
                change=change,
                change_percent=(change / prev_close * 100) if prev_close else 0.0,
                as_of=int(raw["t"]),
                is_live=True,
                exchange=self._exchange,
            )
        except ValueError as exc:
            raise UpstreamMalformedResponse(
                "invalid crypto quote", provider="finnhub", details={"error": str(exc)}
            ) from exc

    async def fetch_market_status(self, symbol: ValidatedSymbol) -> MarketStatus:
        raw = await self._client.quote(symbol.symbol)
        as_of = int(raw["t"])
        age = self._clock() - as_of
        return MarketStatus(is_open=as_of > 0 and age < self._open_threshold_s, as_of=as_of)
