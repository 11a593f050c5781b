# src/tickerbot/dependencies/wiring.py
# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""Dependency wiring for the command pipeline.

Overview:
    Builds the explicit configuration objects (TTL table, rate-limit policy,
    orchestrator configs, retry policy) from :class:`Settings` and assembles
    the transport clients, gateways and use cases around a shared
    ``httpx.AsyncClient``. Nothing here holds module-level state; the web
    lifespan and the CLI each call :func:`build_container` once.

Layer:
    dependencies

Design:
    * Key-value backend by ``CACHE_BACKEND``: Redis (shared across workers) or
      the in-process store (local runs and tests).
    * Cache and rate-limit state live in separate keyspaces.
    * Stock quotes come from the previous-close aggregate, crypto quotes from
      the live exchange pair; both use the aggregates history.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from types import MappingProxyType

import httpx
from pydantic import SecretStr

from tickerbot.adapters.gateways.ai_summary_gateway import AiSummaryGateway
from tickerbot.adapters.gateways.finnhub_gateway import FinnhubGateway
from tickerbot.adapters.gateways.massive_gateway import MassiveGateway
from tickerbot.adapters.presenters.reply_presenter import ChatReplyPresenter, HelpContext
from tickerbot.application.interfaces.key_value_store import KeyValueStore
from tickerbot.application.services.cache_store import CacheStore
from tickerbot.application.services.rate_limiter import (
    FixedCooldownPolicy,
    RateLimiter,
    RateLimitPolicy,
    SlidingWindowPolicy,
)
from tickerbot.application.use_cases.get_symbol_snapshot import (
    CRYPTO_KINDS,
    STOCK_KINDS,
    GetSymbolSnapshot,
    OrchestratorConfig,
    Spawner,
)
from tickerbot.application.use_cases.handle_command import HandleCommand
from tickerbot.config.settings import Settings
from tickerbot.domain.enums.data_kind import DataKind
from tickerbot.infrastructure.caching.memory_store import InMemoryKeyValueStore
from tickerbot.infrastructure.caching.redis_store import (
    CACHE_NAMESPACE,
    RATE_LIMIT_NAMESPACE,
    RedisKeyValueStore,
)
from tickerbot.infrastructure.external_apis.base_client import default_retry_policy
from tickerbot.infrastructure.external_apis.chat_completions.client import ChatCompletionsClient
from tickerbot.infrastructure.external_apis.discord.client import DiscordClient
from tickerbot.infrastructure.external_apis.finnhub.client import FinnhubClient
from tickerbot.infrastructure.external_apis.massive.client import MassiveClient
from tickerbot.infrastructure.logging.logger import get_json_logger
from tickerbot.infrastructure.resilience.retry import RetryPolicy

__all__ = [
    "Container",
    "build_cache_ttls",
    "build_container",
    "build_handle_command",
    "build_key_value_stores",
    "build_orchestrator_configs",
    "build_rate_limit_policy",
]

logger = get_json_logger(__name__)


@dataclass
class Container:
    """Objects the web app and CLI need at runtime."""

    handle_command: HandleCommand
    discord: DiscordClient


def _secret(value: SecretStr | None, name: str) -> SecretStr:
    if value is None:
        logger.warning("wiring.missing_api_key", extra={"extra": {"key": name}})
        return SecretStr("")
    return value


def build_cache_ttls(settings: Settings) -> Mapping[DataKind, int]:
    """TTL table for every :class:`DataKind` from settings."""
    return MappingProxyType(
        {
            DataKind.STOCK_QUOTE: settings.cache_ttl_quote_s,
            DataKind.CRYPTO_QUOTE: settings.cache_ttl_quote_s,
            DataKind.STOCK_HISTORY: settings.cache_ttl_history_s,
            DataKind.CRYPTO_HISTORY: settings.cache_ttl_history_s,
            DataKind.STOCK_SUMMARY: settings.cache_ttl_summary_s,
            DataKind.CRYPTO_SUMMARY: settings.cache_ttl_summary_s,
            DataKind.MARKET_STATUS: settings.cache_ttl_market_status_s,
        }
    )


def build_rate_limit_policy(settings: Settings) -> RateLimitPolicy:
    if settings.rate_limit_policy == "sliding":
        return SlidingWindowPolicy(
            window_s=settings.rate_limit_window_seconds,
            max_requests=settings.rate_limit_max_requests,
        )
    return FixedCooldownPolicy(window_s=settings.rate_limit_window_seconds)


def build_orchestrator_configs(settings: Settings) -> tuple[OrchestratorConfig, OrchestratorConfig]:
    """Return ``(stock_config, crypto_config)``; they differ in the quote deadline."""
    stock = OrchestratorConfig(
        history_days=settings.history_days,
        chart_points=settings.chart_points,
        quote_timeout_s=settings.massive_timeout_s,
        history_timeout_s=settings.massive_timeout_s,
        summary_timeout_s=settings.summary_timeout_s,
        status_timeout_s=settings.finnhub_timeout_s,
        cache_write_grace_s=settings.cache_write_grace_s,
    )
    return stock, replace(stock, quote_timeout_s=settings.finnhub_timeout_s)


def build_retry_policy(settings: Settings) -> RetryPolicy:
    return default_retry_policy(
        total=settings.upstream_max_retries, base=settings.upstream_backoff_base_s
    )


def build_key_value_stores(settings: Settings) -> tuple[KeyValueStore, KeyValueStore]:
    """Return ``(cache_store, rate_limit_store)`` for the configured backend."""
    if settings.cache_backend == "memory":
        return InMemoryKeyValueStore(), InMemoryKeyValueStore()
    return (
        RedisKeyValueStore(namespace=CACHE_NAMESPACE),
        RedisKeyValueStore(namespace=RATE_LIMIT_NAMESPACE),
    )


def build_handle_command(
    settings: Settings,
    *,
    http: httpx.AsyncClient,
    spawn: Spawner | None = None,
    stores: tuple[KeyValueStore, KeyValueStore] | None = None,
) -> HandleCommand:
    """Assemble :class:`HandleCommand` and everything beneath it."""
    cache_kv, limiter_kv = stores or build_key_value_stores(settings)
    ttls = build_cache_ttls(settings)
    cache = CacheStore(cache_kv, ttls)
    retry = build_retry_policy(settings)

    massive = MassiveGateway(
        MassiveClient(
            api_key=_secret(settings.massive_api_key, "MASSIVE_API_KEY"),
            base_url=settings.massive_base_url,
            http=http,
            timeout_s=settings.massive_timeout_s,
            retry_policy=retry,
        )
    )
    finnhub = FinnhubGateway(
        FinnhubClient(
            api_key=_secret(settings.finnhub_api_key, "FINNHUB_API_KEY"),
            base_url=settings.finnhub_base_url,
            http=http,
            timeout_s=settings.finnhub_timeout_s,
            retry_policy=retry,
        )
    )
    base_url, api_key, model = settings.summary_credentials()
    summaries = AiSummaryGateway(
        ChatCompletionsClient(
            api_key=_secret(api_key, f"{settings.summary_provider.upper()}_API_KEY"),
            base_url=base_url,
            model=model,
            provider=settings.summary_provider,
            http=http,
            timeout_s=settings.summary_timeout_s,
            retry_policy=retry,
        ),
        style=settings.summary_provider,
    )

    stock_config, crypto_config = build_orchestrator_configs(settings)
    stock = GetSymbolSnapshot(
        cache=cache,
        quotes=massive,
        history=massive,
        summaries=summaries,
        market_status=finnhub,
        kinds=STOCK_KINDS,
        config=stock_config,
        spawn=spawn,
    )
    crypto = GetSymbolSnapshot(
        cache=cache,
        quotes=finnhub,
        history=massive,
        summaries=summaries,
        kinds=CRYPTO_KINDS,
        config=crypto_config,
        spawn=spawn,
    )

    renderer = ChatReplyPresenter(
        HelpContext(
            rate_limit_window_s=settings.rate_limit_window_seconds,
            rate_limit_max_requests=(
                settings.rate_limit_max_requests if settings.rate_limit_policy == "sliding" else 1
            ),
            history_days=settings.history_days,
            ttls=ttls,
        )
    )
    return HandleCommand(
        stock=stock,
        crypto=crypto,
        limiter=RateLimiter(limiter_kv, build_rate_limit_policy(settings)),
        renderer=renderer,
        command_timeout_s=settings.command_timeout_s,
    )


def build_discord_client(settings: Settings, *, http: httpx.AsyncClient) -> DiscordClient:
    return DiscordClient(
        base_url=settings.discord_api_base_url,
        bot_token=settings.discord_bot_token,
        http=http,
        timeout_s=settings.discord_timeout_s,
        retry_policy=build_retry_policy(settings),
    )


def build_container(
    settings: Settings,
    *,
    http: httpx.AsyncClient,
    spawn: Spawner | None = None,
    stores: tuple[KeyValueStore, KeyValueStore] | None = None,
) -> Container:
    return Container(
        handle_command=build_handle_command(settings, http=http, spawn=spawn, stores=stores),
        discord=build_discord_client(settings, http=http),
    )
