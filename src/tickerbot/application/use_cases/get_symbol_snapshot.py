# src/tickerbot/application/use_cases/get_symbol_snapshot.py
# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""
Use Case: Get Symbol Snapshot

Purpose:
    Produce the :class:`UnifiedResult` for one validated symbol by combining
    the cache and the upstream gateways:

    1. Read every data kind from the cache concurrently.
    2. Fetch every missed kind concurrently, each under its own deadline.
    3. Classify outcomes. A failed quote or history aborts the request with a
       :class:`BotError`; a failed summary or market status is absorbed.
    4. Write freshly fetched kinds back to the cache without delaying the
       reply (detached via ``spawn``, or awaited under a short grace timeout
       when no spawner is wired).
    5. Assemble the result.

    When every kind is a cache hit no upstream call and no cache write is made.

Layer: application/use_cases
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Coroutine, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from tickerbot.application.interfaces.gateways import (
    HistoryGateway,
    MarketStatusGateway,
    QuoteGateway,
    SummaryGateway,
)
from tickerbot.application.services.cache_store import CacheStore
from tickerbot.domain.entities.market_data import (
    MarketStatus,
    PriceHistory,
    Quote,
    UnifiedResult,
    ValidatedSymbol,
)
from tickerbot.domain.enums.asset_class import AssetClass
from tickerbot.domain.enums.data_kind import DataKind
from tickerbot.domain.exceptions.base import DomainError
from tickerbot.domain.exceptions.bot import BotError, BotErrorKind
from tickerbot.domain.exceptions.upstream import (
    UpstreamError,
    UpstreamNotFound,
    UpstreamTimeout,
)
from tickerbot.domain.services.suggestions import suggest_cryptos, suggest_tickers
from tickerbot.domain.services.symbol_tables import company_name, crypto_display_name
from tickerbot.infrastructure.logging.logger import get_json_logger

__all__ = [
    "CRYPTO_KINDS",
    "STOCK_KINDS",
    "Failed",
    "FetchOutcome",
    "Fetched",
    "GetSymbolSnapshot",
    "Hit",
    "OrchestratorConfig",
    "SnapshotKinds",
    "Spawner",
]

logger = get_json_logger(__name__)

# Formatted with the asset class value ("stock" or "crypto").
SERVICE_UNAVAILABLE_MESSAGE = "Unable to fetch {asset} data. Please try again later."


# --------------------------------------------------------------------------- #
# Configuration
# --------------------------------------------------------------------------- #


@dataclass(frozen=True)
class SnapshotKinds:
    """Data kinds fetched for one asset class."""

    quote: DataKind
    history: DataKind
    summary: DataKind
    market_status: DataKind | None = None


STOCK_KINDS = SnapshotKinds(
    quote=DataKind.STOCK_QUOTE,
    history=DataKind.STOCK_HISTORY,
    summary=DataKind.STOCK_SUMMARY,
    market_status=DataKind.MARKET_STATUS,
)
CRYPTO_KINDS = SnapshotKinds(
    quote=DataKind.CRYPTO_QUOTE,
    history=DataKind.CRYPTO_HISTORY,
    summary=DataKind.CRYPTO_SUMMARY,
)


@dataclass(frozen=True)
class OrchestratorConfig:
    """Timeouts and shaping knobs for :class:`GetSymbolSnapshot`.

    Attributes:
        history_days: Lookback for the price history (also a cache key part).
        chart_points: Maximum number of points in the chart series.
        quote_timeout_s: Deadline for the quote fetch.
        history_timeout_s: Deadline for the history fetch.
        summary_timeout_s: Deadline for the AI summary fetch.
        status_timeout_s: Deadline for the market status fetch.
        cache_write_grace_s: Bound on awaited cache writes when no spawner
            is available.
    """

    history_days: int = 7
    chart_points: int = 30
    quote_timeout_s: float = 10.0
    history_timeout_s: float = 10.0
    summary_timeout_s: float = 30.0
    status_timeout_s: float = 5.0
    cache_write_grace_s: float = 2.0

    def __post_init__(self) -> None:
        if self.history_days < 1:
            raise ValueError("history_days must be >= 1")
        if self.chart_points < 2:
            raise ValueError("chart_points must be >= 2")


class Spawner(Protocol):
    """Schedules a coroutine detached from the caller."""

    def __call__(self, coro: Coroutine[Any, Any, Any], *, name: str) -> Any: ...


# --------------------------------------------------------------------------- #
# Outcomes
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class Hit:
    """Value served from the cache."""

    value: Any


@dataclass(frozen=True, slots=True)
class Fetched:
    """Value freshly fetched from upstream."""

    value: Any


@dataclass(frozen=True, slots=True)
class Failed:
    """Fetch failed; ``error`` is the typed cause."""

    error: Exception


type FetchOutcome = Hit | Fetched | Failed


# --------------------------------------------------------------------------- #
# Cache payload codecs
# --------------------------------------------------------------------------- #


def quote_to_payload(q: Quote) -> dict[str, Any]:
    return q.to_payload()


def payload_to_quote(payload: Mapping[str, Any]) -> Quote:
    return Quote(
        price=float(payload["price"]),
        change=float(payload["change"]),
        change_percent=float(payload["change_percent"]),
        as_of=int(payload["as_of"]),
        is_live=bool(payload.get("is_live", False)),
        exchange=payload.get("exchange"),
    )


def history_to_payload(h: PriceHistory) -> dict[str, Any]:
    return h.to_payload()


def payload_to_history(payload: Mapping[str, Any]) -> PriceHistory:
    return PriceHistory(
        closes=tuple(float(c) for c in payload["closes"]),
        timestamps=tuple(int(t) for t in payload["timestamps"]),
    )


def summary_to_payload(text: str) -> dict[str, Any]:
    return {"text": text}


def payload_to_summary(payload: Mapping[str, Any]) -> str:
    text = payload["text"]
    if not isinstance(text, str) or not text:
        raise ValueError("summary text must be a non-empty string")
    return text


def status_to_payload(s: MarketStatus) -> dict[str, Any]:
    return s.to_payload()


def payload_to_status(payload: Mapping[str, Any]) -> MarketStatus:
    return MarketStatus(is_open=bool(payload["is_open"]), as_of=int(payload["as_of"]))


@dataclass(frozen=True, slots=True)
class _Slot:
    """One data kind to resolve for the current request."""

    kind: DataKind
    params: object | None
    critical: bool
    timeout_s: float
    fetch: Callable[[], Awaitable[Any]]
    encode: Callable[[Any], Any]
    decode: Callable[[Mapping[str, Any]], Any]


# --------------------------------------------------------------------------- #
# Use case
# --------------------------------------------------------------------------- #


class GetSymbolSnapshot:
    """Cache-then-fetch orchestration for one asset class.

    Args:
        cache: Typed cache store.
        quotes: Critical quote source.
        history: Critical history source.
        summaries: Non-critical AI summary source.
        market_status: Non-critical market status source; only used when
            ``kinds.market_status`` is set.
        kinds: Data kinds for this asset class.
        config: Timeouts and chart shaping.
        spawn: Detached task scheduler for cache write-back.
    """

    def __init__(
        self,
        *,
        cache: CacheStore,
        quotes: QuoteGateway,
        history: HistoryGateway,
        summaries: SummaryGateway,
        market_status: MarketStatusGateway | None = None,
        kinds: SnapshotKinds = STOCK_KINDS,
        config: OrchestratorConfig | None = None,
        spawn: Spawner | None = None,
    ) -> None:
        self._cache = cache
        self._quotes = quotes
        self._history = history
        self._summaries = summaries
        self._market_status = market_status
        self._kinds = kinds
        self._config = config or OrchestratorConfig()
        self._spawn = spawn

    @property
    def config(self) -> OrchestratorConfig:
        return self._config

    def _slots(self, symbol: ValidatedSymbol, display_name: str) -> list[_Slot]:
        cfg = self._config
        slots = [
            _Slot(
                kind=self._kinds.quote,
                params=None,
                critical=True,
                timeout_s=cfg.quote_timeout_s,
                fetch=lambda: self._quotes.fetch_quote(symbol),
                encode=quote_to_payload,
                decode=payload_to_quote,
            ),
            _Slot(
                kind=self._kinds.history,
                params=cfg.history_days,
                critical=True,
                timeout_s=cfg.history_timeout_s,
                fetch=lambda: self._history.fetch_history(symbol, cfg.history_days),
                encode=history_to_payload,
                decode=payload_to_history,
            ),
            _Slot(
                kind=self._kinds.summary,
                params=None,
                critical=False,
                timeout_s=cfg.summary_timeout_s,
                fetch=lambda: self._summaries.fetch_summary(symbol, display_name),
                encode=summary_to_payload,
                decode=payload_to_summary,
            ),
        ]
        status_gateway = self._market_status
        if self._kinds.market_status is not None and status_gateway is not None:
            slots.append(
                _Slot(
                    kind=self._kinds.market_status,
                    params=None,
                    critical=False,
                    timeout_s=cfg.status_timeout_s,
                    fetch=lambda: status_gateway.fetch_market_status(symbol),
                    encode=status_to_payload,
                    decode=payload_to_status,
                )
            )
        return slots

    async def execute(self, symbol: ValidatedSymbol) -> UnifiedResult:
        """Return the snapshot for ``symbol``.

        Raises:
            BotError: ``NOT_FOUND`` when a critical source does not know the
                symbol, ``UPSTREAM_FAILURE`` for any other critical failure.
        """
        display_name = _display_name(symbol)
        slots = self._slots(symbol, display_name)

        cached = await asyncio.gather(
            *(self._cache.get(s.kind, symbol.symbol, s.params) for s in slots)
        )

        outcomes: dict[DataKind, FetchOutcome] = {}
        misses: list[_Slot] = []
        for slot, payload in zip(slots, cached, strict=True):
            value = self._decode_cached(slot, symbol, payload)
            if value is None:
                misses.append(slot)
            else:
                outcomes[slot.kind] = Hit(value)

        if misses:
            fetched = await asyncio.gather(*(self._fetch(slot) for slot in misses))
            outcomes.update(zip((s.kind for s in misses), fetched, strict=True))

        self._classify(symbol, slots, outcomes)

        writes = [
            (slot, outcome.value)
            for slot in slots
            if isinstance(outcome := outcomes[slot.kind], Fetched)
        ]
        if writes:
            await self._write_back(symbol, writes)

        logger.info(
            "snapshot.completed",
            extra={
                "extra": {
                    "symbol": symbol.symbol,
                    "asset_class": symbol.asset_class.value,
                    "hits": sum(isinstance(o, Hit) for o in outcomes.values()),
                    "fetched": sum(isinstance(o, Fetched) for o in outcomes.values()),
                    "failed": sum(isinstance(o, Failed) for o in outcomes.values()),
                }
            },
        )
        return self._assemble(symbol, display_name, outcomes)

    def _decode_cached(self, slot: _Slot, symbol: ValidatedSymbol, payload: Any) -> Any:
        """Turn a cached payload back into an entity; shape errors count as a miss."""
        if payload is None:
            return None
        try:
            return slot.decode(payload)
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning(
                "cache.payload_invalid",
                extra={
                    "extra": {"kind": slot.kind.value, "symbol": symbol.symbol, "error": repr(exc)}
                },
            )
            return None

    async def _fetch(self, slot: _Slot) -> FetchOutcome:
        try:
            async with asyncio.timeout(slot.timeout_s):
                value = await slot.fetch()
        except TimeoutError:
            return Failed(
                UpstreamTimeout(
                    f"{slot.kind.value} timed out",
                    details={"kind": slot.kind.value, "timeout_s": slot.timeout_s},
                )
            )
        except UpstreamError as exc:
            return Failed(exc)
        except Exception as exc:  # noqa: BLE001
            # Entity invariants or gateway bugs; classified like any upstream failure.
            return Failed(exc)
        return Fetched(value)

    def _classify(
        self,
        symbol: ValidatedSymbol,
        slots: Sequence[_Slot],
        outcomes: Mapping[DataKind, FetchOutcome],
    ) -> None:
        critical: dict[str, Exception] = {}
        for slot in slots:
            outcome = outcomes[slot.kind]
            if not isinstance(outcome, Failed):
                continue
            if slot.critical:
                critical[slot.kind.value] = outcome.error
            else:
                error = outcome.error
                fields = (
                    error.log_fields()
                    if isinstance(error, DomainError)
                    else {"error_code": type(error).__name__, "error": str(error)}
                )
                logger.warning(
                    "snapshot.degraded",
                    extra={"extra": {"symbol": symbol.symbol, "kind": slot.kind.value, **fields}},
                )

        if not critical:
            return

        details = {
            "symbol": symbol.symbol,
            "failures": {kind: f"{type(err).__name__}: {err}" for kind, err in critical.items()},
        }
        if any(isinstance(err, UpstreamNotFound) for err in critical.values()):
            raise BotError(
                BotErrorKind.NOT_FOUND,
                _not_found_message(symbol),
                suggestions=_suggestions(symbol),
                details=details,
            )
        raise BotError(
            BotErrorKind.UPSTREAM_FAILURE,
            SERVICE_UNAVAILABLE_MESSAGE.format(asset=symbol.asset_class.value),
            details=details,
        )

    async def _store_all(self, symbol: ValidatedSymbol, writes: Sequence[tuple[_Slot, Any]]) -> None:
        await asyncio.gather(
            *(
                self._cache.set(slot.kind, symbol.symbol, slot.encode(value), slot.params)
                for slot, value in writes
            )
        )

    async def _write_back(self, symbol: ValidatedSymbol, writes: Sequence[tuple[_Slot, Any]]) -> None:
        if self._spawn is not None:
            self._spawn(self._store_all(symbol, writes), name="cache_write")
            return
        try:
            async with asyncio.timeout(self._config.cache_write_grace_s):
                await self._store_all(symbol, writes)
        except TimeoutError:
            logger.warning(
                "cache.write_grace_expired",
                extra={
                    "extra": {
                        "symbol": symbol.symbol,
                        "kinds": [slot.kind.value for slot, _ in writes],
                    }
                },
            )

    def _assemble(
        self,
        symbol: ValidatedSymbol,
        display_name: str,
        outcomes: Mapping[DataKind, FetchOutcome],
    ) -> UnifiedResult:
        quote: Quote = _value(outcomes[self._kinds.quote])
        history: PriceHistory = _value(outcomes[self._kinds.history])
        summary: str | None = _value(outcomes[self._kinds.summary])

        market_open: bool | None = None
        if self._kinds.market_status is not None:
            status: MarketStatus | None = _value(outcomes.get(self._kinds.market_status))
            market_open = status.is_open if status is not None else None

        return UnifiedResult(
            symbol=symbol.symbol,
            asset_class=symbol.asset_class,
            display_name=display_name,
            quote=quote,
            series=_build_series(history, quote, self._config.chart_points),
            history_days=self._config.history_days,
            summary=summary,
            market_open=market_open,
        )


def _value(outcome: FetchOutcome | None) -> Any:
    if isinstance(outcome, Hit | Fetched):
        return outcome.value
    return None


def _build_series(history: PriceHistory, quote: Quote, chart_points: int) -> tuple[float, ...]:
    """Chart points oldest first; a live price is appended after the history."""
    closes = list(history.closes)
    if not quote.is_live:
        return tuple(closes[-chart_points:])
    return (*closes[-(chart_points - 1) :], quote.price)


def _display_name(symbol: ValidatedSymbol) -> str:
    if symbol.asset_class is AssetClass.CRYPTO:
        return crypto_display_name(symbol.symbol)
    return company_name(symbol.symbol)


def _not_found_message(symbol: ValidatedSymbol) -> str:
    if symbol.asset_class is AssetClass.CRYPTO:
        return (
            f'Cryptocurrency **"{symbol.symbol}"** not found. '
            "Please check the symbol and try again."
        )
    return (
        f'Stock ticker **"{symbol.symbol}"** not found. '
        "Please check the ticker symbol and try again."
    )


def _suggestions(symbol: ValidatedSymbol) -> list[str]:
    if symbol.asset_class is AssetClass.CRYPTO:
        return [s for s in suggest_cryptos(symbol.symbol) if s != symbol.symbol]
    return [s for s in suggest_tickers(symbol.symbol) if s != symbol.symbol]
