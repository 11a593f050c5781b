# src/tickerbot/infrastructure/caching/redis_store.py
# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""Redis Key-Value Store.

Synopsis:
    Implements the application :class:`KeyValueStore` port on top of the
    shared Redis client from ``infrastructure/caching/redis_client.py``.
    Expiry is delegated to Redis (``SET key value EX ttl``).

Design:
    * Namespace prefix owns product + keyspace + version, e.g.
      ``tickerbot:cache:v1`` and ``tickerbot:ratelimit:v1``; callers pass
      the remaining segments (``stock:price:AAPL``).
    * Backend faults propagate; the cache store and rate limiter decide how
      to degrade.

Layer:
    infrastructure/caching
"""

from __future__ import annotations

import time
from contextlib import suppress
from typing import Final

from tickerbot.application.interfaces.key_value_store import KeyValueStore
from tickerbot.infrastructure.caching.redis_client import RedisClient, get_redis_client
from tickerbot.infrastructure.observability.metrics import get_kv_latency_seconds

__all__ = ["RedisKeyValueStore", "CACHE_NAMESPACE", "RATE_LIMIT_NAMESPACE"]

CACHE_NAMESPACE: Final[str] = "tickerbot:cache:v1"
RATE_LIMIT_NAMESPACE: Final[str] = "tickerbot:ratelimit:v1"


class RedisKeyValueStore(KeyValueStore):
    """Namespaced Redis-backed key-value store.

    Args:
        namespace: Prefix applied to all keys to separate keyspaces.
        client: Explicit client; defaults to the process-wide client,
            resolved on each call so tests can swap it.
    """

    def __init__(
        self,
        *,
        namespace: str = CACHE_NAMESPACE,
        client: RedisClient | None = None,
    ) -> None:
        self._ns = namespace
        self._client = client
        self._latency = get_kv_latency_seconds()

    @property
    def namespace(self) -> str:
        """Key prefix of this store."""
        return self._ns

    def _k(self, key: str) -> str:
        """Return the namespaced key for ``key``."""
        return f"{self._ns}:{key.lstrip(':')}"

    def _redis(self) -> RedisClient:
        return self._client if self._client is not None else get_redis_client()

    def _observe(self, op: str, start: float, outcome: str) -> None:
        with suppress(Exception):
            self._latency.labels("redis", op, outcome).observe(time.perf_counter() - start)

    async def get(self, key: str) -> str | None:
        """Return the value at ``key`` or ``None``."""
        start = time.perf_counter()
        outcome = "error"
        try:
            raw = await self._redis().get(self._k(key))
            outcome = "miss" if raw is None else "hit"
            return None if raw is None else str(raw)
        finally:
            self._observe("get", start, outcome)

    async def set(self, key: str, value: str, *, ttl: int) -> None:
        """Store ``value`` at ``key`` with an expiry of ``ttl`` seconds."""
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        start = time.perf_counter()
        outcome = "error"
        try:
            await self._redis().set(self._k(key), value, ex=ttl)
            outcome = "ok"
        finally:
            self._observe("set", start, outcome)
