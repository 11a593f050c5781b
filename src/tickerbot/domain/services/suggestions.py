# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""
Symbol Suggestions

Purpose:
    Offer up to five alternate symbols when a lookup finds nothing: exact
    corrections first, then popular symbols that share a prefix with the
    input or differ from it in a single position.

Layer: domain/services
"""

from __future__ import annotations

from typing import Final

from tickerbot.domain.services.symbol_tables import (
    CRYPTO_PAIRS,
    POPULAR_CRYPTOS,
    POPULAR_TICKERS,
    TICKER_CORRECTIONS,
    pair_symbol,
)

__all__ = ["MAX_SUGGESTIONS", "is_close_match", "suggest_tickers", "suggest_cryptos"]

MAX_SUGGESTIONS: Final[int] = 5
_MIN_FUZZY_LEN: Final[int] = 2


def is_close_match(a: str, b: str) -> bool:
    """Return ``True`` when ``a`` and ``b`` differ in exactly one position.

    Positions are compared index by index over the longer string, so a single
    trailing insertion or deletion also counts as one difference.
    """
    if abs(len(a) - len(b)) > 1:
        return False
    differences = 0
    for i in range(max(len(a), len(b))):
        left = a[i] if i < len(a) else None
        right = b[i] if i < len(b) else None
        if left != right:
            differences += 1
            if differences > 1:
                return False
    return differences == 1


def suggest_tickers(text: str | None) -> list[str]:
    """Suggest stock tickers for ``text``; empty input yields no suggestions."""
    if not text or not text.strip():
        return []

    query = text.strip().upper()
    found: dict[str, None] = {}

    correction = TICKER_CORRECTIONS.get(query)
    if correction is not None:
        found[correction] = None

    if len(query) >= _MIN_FUZZY_LEN:
        for ticker in POPULAR_TICKERS:
            if ticker == query or ticker.startswith(query) or is_close_match(query, ticker):
                found[ticker] = None

    return list(found)[:MAX_SUGGESTIONS]


def suggest_cryptos(text: str | None) -> list[str]:
    """Suggest coin tickers for ``text``; empty input yields the most popular coins."""
    if not text or not text.strip():
        return list(POPULAR_CRYPTOS[:MAX_SUGGESTIONS])

    query = text.strip().upper().removeprefix("X:").removesuffix("USD")
    found: dict[str, None] = {}

    if query in CRYPTO_PAIRS:
        found[pair_symbol(CRYPTO_PAIRS[query])] = None

    if len(query) >= _MIN_FUZZY_LEN:
        for coin in POPULAR_CRYPTOS:
            if coin.startswith(query) or query.startswith(coin):
                found[coin] = None

    if query:
        for name, pair in CRYPTO_PAIRS.items():
            if query in name or name in query:
                found[pair_symbol(pair)] = None

    return list(found)[:MAX_SUGGESTIONS]
