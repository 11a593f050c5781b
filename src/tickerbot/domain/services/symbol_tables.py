# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""
Static Symbol Tables

Purpose:
    Read-only lookup data used by validation, suggestions and presentation:
    ticker corrections, popular symbols, company names and crypto pair
    mappings. Loaded once at import; never mutated.

Layer: domain/services
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Final

__all__ = [
    "TICKER_CORRECTIONS",
    "POPULAR_TICKERS",
    "TICKER_COMPANY_NAMES",
    "CRYPTO_PAIRS",
    "POPULAR_CRYPTOS",
    "CRYPTO_DISPLAY_NAMES",
    "EXAMPLE_TICKERS",
    "company_name",
    "crypto_display_name",
    "pair_symbol",
]

# Typos and company names mapped to tickers; valid tickers map to themselves.
TICKER_CORRECTIONS: Final = MappingProxyType(
    {
        "APPL": "AAPL",
        "GOGL": "GOOGL",
        "APPLE": "AAPL",
        "NVIDIA": "NVDA",
        "GOOGLE": "GOOGL",
        "ALPHABET": "GOOGL",
        "MICROSOFT": "MSFT",
        "AMAZON": "AMZN",
        "TESLA": "TSLA",
        "FACEBOOK": "META",
        "META": "META",
        "NETFLIX": "NFLX",
        "CLOUDFLARE": "NET",
        "AMD": "AMD",
        "INTEL": "INTC",
        "DISNEY": "DIS",
        "BOEING": "BA",
        "VISA": "V",
        "JPMORGAN": "JPM",
        "WALMART": "WMT",
        "COCACOLA": "KO",
        "PEPSI": "PEP",
        "MCDONALD": "MCD",
        "MCDONALDS": "MCD",
        "STARBUCKS": "SBUX",
        "NIKE": "NKE",
        "ORACLE": "ORCL",
        "SALESFORCE": "CRM",
        "ADOBE": "ADBE",
        "PAYPAL": "PYPL",
        "UBER": "UBER",
        "LYFT": "LYFT",
        "SPOTIFY": "SPOT",
        "SNAPCHAT": "SNAP",
        "TWITTER": "X",
        "AIRBNB": "ABNB",
        "ZOOM": "ZM",
        "PINTEREST": "PINS",
        "ROBLOX": "RBLX",
        "SHOPIFY": "SHOP",
        "SQUARE": "SQ",
        "AAPL": "AAPL",
        "NVDA": "NVDA",
        "GOOGL": "GOOGL",
        "GOOG": "GOOG",
        "MSFT": "MSFT",
        "AMZN": "AMZN",
        "TSLA": "TSLA",
        "NFLX": "NFLX",
        "NET": "NET",
        "INTC": "INTC",
        "DIS": "DIS",
        "BA": "BA",
        "V": "V",
        "JPM": "JPM",
    }
)

POPULAR_TICKERS: Final[tuple[str, ...]] = (
    "AAPL",
    "GOOGL",
    "GOOG",
    "MSFT",
    "AMZN",
    "TSLA",
    "META",
    "NVDA",
    "NFLX",
    "NET",
    "AMD",
    "INTC",
    "DIS",
    "BA",
    "V",
    "JPM",
)

# Shown when a ticker is unknown and nothing close matches.
EXAMPLE_TICKERS: Final[tuple[tuple[str, str], ...]] = (
    ("AAPL", "Apple"),
    ("GOOGL", "Google"),
    ("MSFT", "Microsoft"),
    ("NET", "Cloudflare"),
    ("TSLA", "Tesla"),
)

TICKER_COMPANY_NAMES: Final = MappingProxyType(
    {
        "AAPL": "Apple Inc.",
        "MSFT": "Microsoft Corporation",
        "GOOGL": "Alphabet Inc.",
        "GOOG": "Alphabet Inc.",
        "AMZN": "Amazon.com Inc.",
        "NVDA": "NVIDIA Corporation",
        "META": "Meta Platforms Inc.",
        "TSLA": "Tesla Inc.",
        "LLY": "Eli Lilly and Company",
        "V": "Visa Inc.",
        "UNH": "UnitedHealth Group Inc.",
        "XOM": "Exxon Mobil Corporation",
        "WMT": "Walmart Inc.",
        "JPM": "JPMorgan Chase & Co.",
        "MA": "Mastercard Inc.",
        "JNJ": "Johnson & Johnson",
        "PG": "Procter & Gamble Co.",
        "AVGO": "Broadcom Inc.",
        "HD": "The Home Depot Inc.",
        "CVX": "Chevron Corporation",
        "MRK": "Merck & Co. Inc.",
        "ABBV": "AbbVie Inc.",
        "COST": "Costco Wholesale Corporation",
        "KO": "The Coca-Cola Company",
        "PEP": "PepsiCo Inc.",
        "ADBE": "Adobe Inc.",
        "NFLX": "Netflix Inc.",
        "CRM": "Salesforce Inc.",
        "DIS": "The Walt Disney Company",
        "CSCO": "Cisco Systems Inc.",
        "ORCL": "Oracle Corporation",
        "INTC": "Intel Corporation",
        "AMD": "Advanced Micro Devices Inc.",
        "NKE": "Nike Inc.",
        "PYPL": "PayPal Holdings Inc.",
        "CMCSA": "Comcast Corporation",
        "TMO": "Thermo Fisher Scientific Inc.",
        "QCOM": "QUALCOMM Inc.",
        "TXN": "Texas Instruments Inc.",
        "BA": "The Boeing Company",
        "UNP": "Union Pacific Corporation",
        "NEE": "NextEra Energy Inc.",
        "HON": "Honeywell International Inc.",
        "SBUX": "Starbucks Corporation",
        "PM": "Philip Morris International Inc.",
        "T": "AT&T Inc.",
        "VZ": "Verizon Communications Inc.",
        "GE": "General Electric Company",
        "IBM": "International Business Machines",
        "CAT": "Caterpillar Inc.",
        "GS": "The Goldman Sachs Group Inc.",
        "MS": "Morgan Stanley",
        "AXP": "American Express Company",
        "MMM": "3M Company",
        "NET": "Cloudflare Inc.",
        "UBER": "Uber Technologies Inc.",
        "LYFT": "Lyft Inc.",
        "ABNB": "Airbnb Inc.",
        "SNOW": "Snowflake Inc.",
        "ZM": "Zoom Video Communications",
        "SPOT": "Spotify Technology",
        "SNAP": "Snap Inc.",
        "PINS": "Pinterest Inc.",
        "RBLX": "Roblox Corporation",
        "SHOP": "Shopify Inc.",
        "SQ": "Block Inc.",
        "COIN": "Coinbase Global Inc.",
        "ROKU": "Roku Inc.",
        "DKNG": "DraftKings Inc.",
        "PLTR": "Palantir Technologies Inc.",
    }
)

# Coin tickers and common names mapped to aggregates-provider pairs.
CRYPTO_PAIRS: Final = MappingProxyType(
    {
        "BTC": "X:BTCUSD",
        "BITCOIN": "X:BTCUSD",
        "ETH": "X:ETHUSD",
        "ETHEREUM": "X:ETHUSD",
        "USDT": "X:USDTUSD",
        "TETHER": "X:USDTUSD",
        "BNB": "X:BNBUSD",
        "BINANCE": "X:BNBUSD",
        "SOL": "X:SOLUSD",
        "SOLANA": "X:SOLUSD",
        "XRP": "X:XRPUSD",
        "RIPPLE": "X:XRPUSD",
        "USDC": "X:USDCUSD",
        "ADA": "X:ADAUSD",
        "CARDANO": "X:ADAUSD",
        "AVAX": "X:AVAXUSD",
        "AVALANCHE": "X:AVAXUSD",
        "DOGE": "X:DOGEUSD",
        "DOGECOIN": "X:DOGEUSD",
        "DOT": "X:DOTUSD",
        "POLKADOT": "X:DOTUSD",
        "TRX": "X:TRXUSD",
        "TRON": "X:TRXUSD",
        "MATIC": "X:MATICUSD",
        "POLYGON": "X:MATICUSD",
        "LTC": "X:LTCUSD",
        "LITECOIN": "X:LTCUSD",
        "SHIB": "X:SHIBUSD",
        "SHIBA": "X:SHIBUSD",
        "UNI": "X:UNIUSD",
        "UNISWAP": "X:UNIUSD",
        "LINK": "X:LINKUSD",
        "CHAINLINK": "X:LINKUSD",
        "ATOM": "X:ATOMUSD",
        "COSMOS": "X:ATOMUSD",
        "XLM": "X:XLMUSD",
        "STELLAR": "X:XLMUSD",
        "BCH": "X:BCHUSD",
        "BITCOINCASH": "X:BCHUSD",
        "ETC": "X:ETCUSD",
        "ETHEREUMCLASSIC": "X:ETCUSD",
    }
)

POPULAR_CRYPTOS: Final[tuple[str, ...]] = (
    "BTC",
    "ETH",
    "USDT",
    "BNB",
    "SOL",
    "XRP",
    "ADA",
    "DOGE",
    "MATIC",
    "LTC",
    "DOT",
    "UNI",
    "LINK",
)

CRYPTO_DISPLAY_NAMES: Final = MappingProxyType(
    {
        "BTC": "Bitcoin",
        "ETH": "Ethereum",
        "USDT": "Tether",
        "BNB": "Binance Coin",
        "SOL": "Solana",
        "XRP": "Ripple",
        "USDC": "USD Coin",
        "ADA": "Cardano",
        "AVAX": "Avalanche",
        "DOGE": "Dogecoin",
        "DOT": "Polkadot",
        "TRX": "Tron",
        "MATIC": "Polygon",
        "LTC": "Litecoin",
        "SHIB": "Shiba Inu",
        "UNI": "Uniswap",
        "LINK": "Chainlink",
        "ATOM": "Cosmos",
        "XLM": "Stellar",
        "BCH": "Bitcoin Cash",
        "ETC": "Ethereum Classic",
    }
)


def pair_symbol(pair: str) -> str:
    """Return the coin ticker inside an ``X:<SYM>USD`` pair."""
    inner = pair.removeprefix("X:")
    return inner.removesuffix("USD") or inner


def company_name(ticker: str) -> str:
    """Return the company name for ``ticker``, or the ticker itself."""
    return TICKER_COMPANY_NAMES.get(ticker.upper(), ticker)


def crypto_display_name(symbol: str) -> str:
    """Return the coin name for ``symbol`` (bare or pair form), or the symbol."""
    sym = symbol.upper()
    if sym.startswith("X:"):
        sym = pair_symbol(sym)
    return CRYPTO_DISPLAY_NAMES.get(sym, sym)
