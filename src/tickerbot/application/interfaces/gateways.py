# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""Application Ports: upstream data gateways.

Each port fetches one data kind for a validated symbol and returns a domain
entity. Implementations raise :mod:`tickerbot.domain.exceptions.upstream`
errors on failure; deadlines are enforced by the caller through
cancellation, so implementations must be cancellation-safe.
"""

from __future__ import annotations

from typing import Protocol

from tickerbot.domain.entities.market_data import (
    MarketStatus,
    PriceHistory,
    Quote,
    ValidatedSymbol,
)


class QuoteGateway(Protocol):
    """Fetch the current (or previous-close) quote."""

    async def fetch_quote(self, symbol: ValidatedSymbol) -> Quote:
        """Return the quote for ``symbol``.

        Raises:
            UpstreamError: Any typed provider failure.
        """
        ...


class HistoryGateway(Protocol):
    """Fetch daily closes for a lookback window."""

    async def fetch_history(self, symbol: ValidatedSymbol, days: int) -> PriceHistory:
        """Return ascending daily closes covering the last ``days`` days.

        Raises:
            UpstreamNotFound: If the provider has no bars in the window.
        """
        ...


class SummaryGateway(Protocol):
    """Produce a short AI news summary."""

    async def fetch_summary(self, symbol: ValidatedSymbol, display_name: str) -> str:
        """Return a non-empty plain-text summary."""
        ...


class MarketStatusGateway(Protocol):
    """Report whether the symbol's market is currently trading."""

    async def fetch_market_status(self, symbol: ValidatedSymbol) -> MarketStatus:
        """Return the market status for ``symbol``."""
        ...
