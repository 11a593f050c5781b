# tests/unit/domain/services/test_symbol_validator.py
from __future__ import annotations

import pytest

from tickerbot.domain.enums.asset_class import AssetClass
from tickerbot.domain.services.symbol_validator import (
    validate_crypto,
    validate_symbol,
    validate_ticker,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("aapl", "AAPL"), ("  net ", "NET"), ("GOOGL", "GOOGL"), ("abcdefghij", "ABCDEFGHIJ")],
)
def test_ticker_is_trimmed_and_upper_cased(raw: str, expected: str) -> None:
    result = validate_ticker(raw)
    assert result.valid
    assert result.symbol == expected
    assert result.provider_ticker == expected
    assert result.reason is None


@pytest.mark.parametrize(
    ("raw", "reason"),
    [
        (None, "Ticker cannot be empty"),
        ("", "Ticker cannot be empty"),
        ("   ", "Ticker cannot be empty"),
        (42, "Ticker must be a string"),
        ("ABCDEFGHIJK", "Ticker must be 1-10 letters only"),
        ("BRK.B", "Ticker must contain letters only (no numbers or special characters)"),
        ("A1", "Ticker must contain letters only (no numbers or special characters)"),
    ],
)
def test_ticker_rejections(raw: object, reason: str) -> None:
    result = validate_ticker(raw)
    assert not result.valid
    assert result.reason == reason


def test_valid_ticker_is_a_fixed_point() -> None:
    first = validate_ticker(" msft ")
    again = validate_ticker(first.symbol)
    assert again.valid and again.symbol == first.symbol


def test_to_validated_refuses_rejections() -> None:
    with pytest.raises(ValueError):
        validate_ticker("1234").to_validated()


@pytest.mark.parametrize(
    ("raw", "symbol", "pair"),
    [
        ("btc", "BTC", "X:BTCUSD"),
        ("Bitcoin", "BTC", "X:BTCUSD"),
        ("ethereum", "ETH", "X:ETHUSD"),
        ("X:ETHUSD", "ETH", "X:ETHUSD"),
        ("dogeusd", "DOGE", "X:DOGEUSD"),
        ("PEPE", "PEPE", "X:PEPEUSD"),
    ],
)
def test_crypto_forms_normalize_to_pair(raw: str, symbol: str, pair: str) -> None:
    result = validate_crypto(raw)
    assert result.valid
    assert result.symbol == symbol
    assert result.provider_ticker == pair
    assert result.asset_class is AssetClass.CRYPTO


@pytest.mark.parametrize(
    ("raw", "reason"),
    [
        (None, "Crypto symbol cannot be empty"),
        ("", "Crypto symbol cannot be empty"),
        (3.5, "Crypto symbol must be a string"),
        ("X", "Crypto symbol must be 2-10 characters"),
        ("ABCDEFGHIJKL", "Crypto symbol must be 2-10 characters"),
        ("B7C", "Crypto symbol must contain letters only"),
        ("X:BTC-USD", "Invalid crypto pair format. Use format like X:BTCUSD or just BTC"),
    ],
)
def test_crypto_rejections(raw: object, reason: str) -> None:
    result = validate_crypto(raw)
    assert not result.valid
    assert result.reason == reason


def test_valid_crypto_is_a_fixed_point() -> None:
    first = validate_crypto("solana")
    again = validate_crypto(first.symbol)
    assert again.valid and again.symbol == first.symbol == "SOL"


def test_validate_symbol_dispatches_on_asset_class() -> None:
    assert validate_symbol("eth", AssetClass.CRYPTO).provider_ticker == "X:ETHUSD"
    assert validate_symbol("eth", AssetClass.STOCK).provider_ticker == "ETH"
