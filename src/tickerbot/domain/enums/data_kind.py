# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""
Cached Data Kinds

Purpose:
    Closed enumeration of everything the bot caches. The member value is the
    key segment used to build cache keys; the default TTL is attached to the
    member so a new kind cannot be added without choosing its expiry.

Layer: domain/enums
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType


class DataKind(str, Enum):
    """Cacheable data kinds, valued by their key segment."""

    STOCK_QUOTE = "stock:price"
    STOCK_HISTORY = "stock:history"
    STOCK_SUMMARY = "stock:summary"
    MARKET_STATUS = "stock:market_status"
    CRYPTO_QUOTE = "crypto:quote"
    CRYPTO_HISTORY = "crypto:history"
    CRYPTO_SUMMARY = "crypto:summary"

    @property
    def segment(self) -> str:
        """Key prefix for entries of this kind."""
        return self.value

    @property
    def default_ttl_s(self) -> int:
        """Expiry used when configuration does not override it."""
        return _DEFAULT_TTLS[self]


_DEFAULT_TTLS = MappingProxyType(
    {
        DataKind.STOCK_QUOTE: 300,
        DataKind.STOCK_HISTORY: 3600,
        DataKind.STOCK_SUMMARY: 28_800,
        DataKind.MARKET_STATUS: 60,
        DataKind.CRYPTO_QUOTE: 300,
        DataKind.CRYPTO_HISTORY: 3600,
        DataKind.CRYPTO_SUMMARY: 28_800,
    }
)
