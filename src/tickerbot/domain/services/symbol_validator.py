# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""
Symbol Validation

Purpose:
    Turn raw command input into a canonical symbol, or a human-readable
    rejection reason, before any I/O happens. Pure and deterministic: the
    canonical output of a valid symbol validates to itself.

Rules (stocks):
    absent -> empty; non-string -> rejected; trim + upper-case; empty ->
    rejected; longer than 10 -> rejected; anything but A-Z -> rejected.

Rules (crypto):
    ``X:<SYM>USD`` pair form -> validated as ``<SYM>``; name/ticker table
    lookup; ``<SYM>USD`` suffix construction; length 2-10; A-Z only; any
    remaining alphabetic token is accepted as ``X:<SYM>USD``.

Layer: domain/services
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from tickerbot.domain.entities.market_data import ValidatedSymbol
from tickerbot.domain.enums.asset_class import AssetClass
from tickerbot.domain.services.symbol_tables import CRYPTO_PAIRS, pair_symbol

__all__ = ["SymbolValidation", "validate_ticker", "validate_crypto", "validate_symbol"]

_LETTERS: Final[re.Pattern[str]] = re.compile(r"^[A-Z]+$")
_PAIR: Final[re.Pattern[str]] = re.compile(r"^X:([A-Z]+)USD$")

_TICKER_MAX_LEN: Final[int] = 10
_CRYPTO_MIN_LEN: Final[int] = 2
_CRYPTO_MAX_LEN: Final[int] = 10


@dataclass(frozen=True, slots=True)
class SymbolValidation:
    """Outcome of validating one raw symbol.

    Attributes:
        valid: Whether the input was accepted.
        symbol: Canonical symbol, or the cleaned input when rejected after
            cleaning (``""`` when rejected before).
        asset_class: Asset class the input was validated as.
        reason: Rejection message shown to the user, ``None`` when valid.
        provider_ticker: Aggregates-provider ticker (``X:BTCUSD`` for crypto).
    """

    valid: bool
    symbol: str
    asset_class: AssetClass
    reason: str | None = None
    provider_ticker: str = ""

    def to_validated(self) -> ValidatedSymbol:
        """Return the validated symbol entity.

        Raises:
            ValueError: If the validation failed.
        """
        if not self.valid:
            raise ValueError(f"symbol rejected: {self.reason}")
        return ValidatedSymbol(
            symbol=self.symbol,
            asset_class=self.asset_class,
            provider_ticker=self.provider_ticker,
        )


def _reject(asset_class: AssetClass, reason: str, symbol: str = "") -> SymbolValidation:
    return SymbolValidation(valid=False, symbol=symbol, asset_class=asset_class, reason=reason)


def validate_ticker(value: object) -> SymbolValidation:
    """Validate a stock ticker."""
    if value is None:
        return _reject(AssetClass.STOCK, "Ticker cannot be empty")
    if not isinstance(value, str):
        return _reject(AssetClass.STOCK, "Ticker must be a string")

    cleaned = value.strip().upper()
    if not cleaned:
        return _reject(AssetClass.STOCK, "Ticker cannot be empty")
    if len(cleaned) > _TICKER_MAX_LEN:
        return _reject(AssetClass.STOCK, "Ticker must be 1-10 letters only", cleaned)
    if not _LETTERS.match(cleaned):
        return _reject(
            AssetClass.STOCK,
            "Ticker must contain letters only (no numbers or special characters)",
            cleaned,
        )
    return SymbolValidation(
        valid=True, symbol=cleaned, asset_class=AssetClass.STOCK, provider_ticker=cleaned
    )


def _crypto_ok(symbol: str, pair: str) -> SymbolValidation:
    return SymbolValidation(
        valid=True, symbol=symbol, asset_class=AssetClass.CRYPTO, provider_ticker=pair
    )


def _validate_crypto_token(token: str) -> SymbolValidation:
    pair = CRYPTO_PAIRS.get(token)
    if pair is not None:
        return _crypto_ok(pair_symbol(pair), pair)

    if token.endswith("USD"):
        base = token.removesuffix("USD")
        if _CRYPTO_MIN_LEN <= len(base) <= _CRYPTO_MAX_LEN and _LETTERS.match(base):
            return _validate_crypto_token(base)

    if not _CRYPTO_MIN_LEN <= len(token) <= _CRYPTO_MAX_LEN:
        return _reject(AssetClass.CRYPTO, "Crypto symbol must be 2-10 characters", token)
    if not _LETTERS.match(token):
        return _reject(AssetClass.CRYPTO, "Crypto symbol must contain letters only", token)
    return _crypto_ok(token, f"X:{token}USD")


def validate_crypto(value: object) -> SymbolValidation:
    """Validate a crypto symbol, coin name or ``X:<SYM>USD`` pair."""
    if value is None:
        return _reject(AssetClass.CRYPTO, "Crypto symbol cannot be empty")
    if not isinstance(value, str):
        return _reject(AssetClass.CRYPTO, "Crypto symbol must be a string")

    cleaned = value.strip().upper()
    if not cleaned:
        return _reject(AssetClass.CRYPTO, "Crypto symbol cannot be empty")

    if cleaned.startswith("X:"):
        match = _PAIR.match(cleaned)
        if match is None:
            return _reject(
                AssetClass.CRYPTO,
                "Invalid crypto pair format. Use format like X:BTCUSD or just BTC",
                cleaned,
            )
        return _validate_crypto_token(match.group(1))

    return _validate_crypto_token(cleaned)


def validate_symbol(value: object, asset_class: AssetClass) -> SymbolValidation:
    """Validate ``value`` as a symbol of ``asset_class``."""
    if asset_class is AssetClass.CRYPTO:
        return validate_crypto(value)
    return validate_ticker(value)
