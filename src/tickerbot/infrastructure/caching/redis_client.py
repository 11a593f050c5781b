# src/tickerbot/infrastructure/caching/redis_client.py
# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""Process-wide async Redis client.

The cache and the rate limiter share one connection pool. The web lifespan
calls :func:`init_redis` and :func:`close_redis`; :func:`get_redis_client`
lazily initializes from settings for the CLI and scripts. Redis being down is
not fatal: :func:`ping_redis` reports it and the stores fail open.
"""

from __future__ import annotations

from contextlib import suppress
from typing import Any, Protocol, runtime_checkable

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from tickerbot.config.settings import Settings, get_settings
from tickerbot.infrastructure.logging.logger import get_json_logger

__all__ = [
    "RedisClient",
    "close_redis",
    "get_redis_client",
    "init_redis",
    "ping_redis",
]

logger = get_json_logger(__name__)


@runtime_checkable
class RedisClient(Protocol):
    """The slice of the redis-py asyncio API the key-value stores use."""

    async def ping(self) -> Any: ...
    async def aclose(self) -> None: ...
    async def get(self, key: str) -> Any: ...
    async def set(self, key: str, value: Any, *, ex: int | None = None) -> Any: ...


_client: RedisClient | None = None


def init_redis(settings: Settings) -> None:
    """Create the shared client from ``REDIS_URL`` (idempotent, no I/O)."""
    global _client
    if _client is not None:
        return
    _client = aioredis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        health_check_interval=settings.redis_health_check_interval_s,
        socket_timeout=settings.redis_socket_timeout_s,
        socket_connect_timeout=settings.redis_socket_connect_timeout_s,
    )


async def ping_redis() -> bool:
    """Return whether Redis answers; failures are logged, not raised."""
    try:
        await get_redis_client().ping()
    except (RedisError, OSError) as exc:
        logger.warning("redis.unreachable", extra={"extra": {"error": str(exc)}})
        return False
    return True


async def close_redis() -> None:
    """Close the shared client at shutdown."""
    global _client
    if _client is not None:
        with suppress(RuntimeError):
            await _client.aclose()
        _client = None


def get_redis_client() -> RedisClient:
    """Return the shared client, initializing it from settings on first use."""
    if _client is None:
        init_redis(get_settings())
    if _client is None:
        raise RuntimeError("Redis client not initialized")
    return _client
