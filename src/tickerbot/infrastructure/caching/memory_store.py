# src/tickerbot/infrastructure/caching/memory_store.py
# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""In-process Key-Value Store.

Synopsis:
    Dictionary-backed :class:`KeyValueStore` with per-entry expiry, for local
    development (``CACHE_BACKEND=memory``) and tests. Entries expire exactly
    at ``written_at + ttl`` against an injectable monotonic clock.

Layer:
    infrastructure/caching
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable

from tickerbot.application.interfaces.key_value_store import KeyValueStore

__all__ = ["InMemoryKeyValueStore"]


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store with TTL; not shared across workers.

    Args:
        clock: Monotonic seconds clock.
    """

    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._data: dict[str, tuple[float, str]] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> str | None:
        """Return the value at ``key`` unless missing or expired."""
        async with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._data[key]
                return None
            return value

    async def set(self, key: str, value: str, *, ttl: int) -> None:
        """Store ``value`` until ``ttl`` seconds from now."""
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        async with self._lock:
            self._data[key] = (self._clock() + ttl, value)

    def __len__(self) -> int:
        return len(self._data)
