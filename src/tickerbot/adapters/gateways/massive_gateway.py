# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""
Adapter Gateway: Massive aggregates -> quote and price history.

Purpose:
    Map previous-close and daily-range bars from :class:`MassiveClient` into
    :class:`Quote` and :class:`PriceHistory`. Serves the stock quote and the
    history of both asset classes (crypto uses ``X:<SYM>USD`` tickers).

Layer:
    adapters
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, date, datetime, timedelta

from tickerbot.application.interfaces.gateways import HistoryGateway, QuoteGateway
from tickerbot.domain.entities.market_data import PriceHistory, Quote, ValidatedSymbol
from tickerbot.domain.exceptions.upstream import UpstreamMalformedResponse
from tickerbot.infrastructure.external_apis.massive.client import MassiveClient
from tickerbot.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)


def _today_utc() -> date:
    return datetime.now(UTC).date()


class MassiveGateway(QuoteGateway, HistoryGateway):
    """Quote and history gateway backed by Massive.com.

    Args:
        client: Massive transport client.
        today: Returns the current UTC date; injectable for tests.
    """

    def __init__(self, client: MassiveClient, *, today: Callable[[], date] = _today_utc) -> None:
        self._client = client
        self._today = today

    async def fetch_quote(self, symbol: ValidatedSymbol) -> Quote:
        """Previous trading day as a quote: change is close minus open."""
        bar = await self._client.previous_close(symbol.provider_ticker)
        open_, close = float(bar["o"]), float(bar["c"])
        change = close - open_
        try:
            return Quote(
                price=close,
                change=change,
                change_percent=(change / open_ * 100) if open_ else 0.0,
                as_of=int(bar["t"]) // 1000,
                is_live=False,
            )
        except ValueError as exc:
            raise UpstreamMalformedResponse(
                "invalid previous-close bar", provider="massive", details={"error": str(exc)}
            ) from exc

    async def fetch_history(self, symbol: ValidatedSymbol, days: int) -> PriceHistory:
        """Daily closes from ``days`` days ago through today, oldest first."""
        date_to = self._today()
        date_from = date_to - timedelta(days=days)
        bars = await self._client.daily_aggregates(symbol.provider_ticker, date_from, date_to)
        logger.debug(
            "massive.history",
            extra={"extra": {"ticker": symbol.provider_ticker, "bars": len(bars), "days": days}},
        )
        try:
            return PriceHistory(
                closes=tuple(float(b["c"]) for b in bars),
                timestamps=tuple(int(b["t"]) // 1000 for b in bars),
            )
        except ValueError as exc:
            raise UpstreamMalformedResponse(
                "invalid daily bars", provider="massive", details={"error": str(exc)}
            ) from exc
