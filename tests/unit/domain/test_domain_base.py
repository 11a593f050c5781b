# tests/unit/domain/test_domain_base.py
from __future__ import annotations

from tickerbot.domain.entities.market_data import PriceHistory, Quote, ValidatedSymbol
from tickerbot.domain.enums.asset_class import AssetClass
from tickerbot.domain.exceptions.bot import BotError, BotErrorKind
from tickerbot.domain.exceptions.upstream import UpstreamTimeout


def test_entity_payload_is_json_ready() -> None:
    history = PriceHistory(closes=(1.0, 2.0), timestamps=(10, 20))
    assert history.to_payload() == {"closes": [1.0, 2.0], "timestamps": [10, 20]}

    symbol = ValidatedSymbol(symbol="BTC", asset_class=AssetClass.CRYPTO, provider_ticker="X:BTCUSD")
    assert symbol.to_payload()["asset_class"] == AssetClass.CRYPTO.value

    quote = Quote(price=1.0, change=0.0, change_percent=0.0, as_of=5)
    assert quote.to_payload()["exchange"] is None


def test_log_fields_merge_details() -> None:
    err = UpstreamTimeout("deadline hit", provider="massive", details={"endpoint": "prev"})
    assert err.log_fields() == {
        "error_code": "UPSTREAM_TIMEOUT",
        "error": "deadline hit",
        "endpoint": "prev",
    }


def test_bot_error_keeps_message_and_copies_details() -> None:
    details = {"symbol": "AAPL"}
    err = BotError(BotErrorKind.NOT_FOUND, "Ticker not found: AAPL", details=details)
    details["symbol"] = "MSFT"
    assert err.message == "Ticker not found: AAPL"
    assert err.details == {"symbol": "AAPL"}
