# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""
Market Data Entities

Purpose:
    Immutable values produced by the upstream gateways and merged into a
    :class:`UnifiedResult` for presentation (no I/O).

Layer: domain/entities
"""
from __future__ import annotations

import math
from dataclasses import dataclass

from tickerbot.domain.enums.asset_class import AssetClass

from .base import BaseEntity


@dataclass(frozen=True, slots=True)
class ValidatedSymbol(BaseEntity):
    """A symbol that passed validation.

    Args:
        symbol: Canonical upper-case symbol; the cache key component.
        asset_class: Stock or crypto.
        provider_ticker: Ticker as the aggregates provider expects it
            (``AAPL``, ``X:BTCUSD``).
    """

    symbol: str
    asset_class: AssetClass
    provider_ticker: str

    def __post_init__(self) -> None:
        if not self.symbol or self.symbol != self.symbol.upper():
            raise ValueError("symbol must be upper-case non-empty")
        if not self.provider_ticker:
            raise ValueError("provider_ticker must be non-empty")


@dataclass(frozen=True, slots=True)
class Quote(BaseEntity):
    """Point-in-time price with its change against a reference price.

    Args:
        price: Current (or last close) price.
        change: ``price - reference``.
        change_percent: ``change / reference * 100``.
        as_of: Observation time, epoch seconds.
        is_live: ``True`` when ``price`` is a live trade rather than the
            previous session's close. Live prices are appended to the chart.
        exchange: Venue the price comes from, when known.
    """

    price: float
    change: float
    change_percent: float
    as_of: int
    is_live: bool = False
    exchange: str | None = None

    def __post_init__(self) -> None:
        for name in ("price", "change", "change_percent"):
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"{name} must be finite")
        if self.price < 0:
            raise ValueError("price must be >= 0")


@dataclass(frozen=True, slots=True)
class PriceHistory(BaseEntity):
    """Daily closes in ascending time order.

    Raises:
        ValueError: If the series is empty, lengths differ, or timestamps are
            not ascending.
    """

    closes: tuple[float, ...]
    timestamps: tuple[int, ...]

    def __post_init__(self) -> None:
        if not self.closes:
            raise ValueError("closes must be non-empty")
        if len(self.closes) != len(self.timestamps):
            raise ValueError("closes and timestamps must have equal length")
        if any(b < a for a, b in zip(self.timestamps, self.timestamps[1:], strict=False)):
            raise ValueError("timestamps must be ascending")


@dataclass(frozen=True, slots=True)
class MarketStatus(BaseEntity):
    """Whether the symbol's primary market is trading right now."""

    is_open: bool
    as_of: int


@dataclass(frozen=True, slots=True)
class UnifiedResult(BaseEntity):
    """Everything the reply needs, assembled after all critical data succeeded.

    Args:
        symbol: Canonical symbol.
        asset_class: Stock or crypto.
        display_name: Company or coin name.
        quote: Current or previous-close quote.
        series: Chart points, oldest first.
        history_days: Lookback the series was fetched with.
        summary: AI news summary, ``None`` when unavailable.
        market_open: Stock market status; ``None`` when unknown. Crypto
            trades around the clock and leaves it ``None``.
    """

    symbol: str
    asset_class: AssetClass
    display_name: str
    quote: Quote
    series: tuple[float, ...]
    history_days: int
    summary: str | None = None
    market_open: bool | None = None
