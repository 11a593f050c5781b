# src/tickerbot/application/interfaces/key_value_store.py
# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""Application Interface: Key-Value Store Port.

Synopsis:
    String key-value storage with per-entry expiry, used for both the data
    cache and the rate-limit keyspace. Enables swapping Redis, in-memory, or
    other backends.

Layer:
    application/interfaces
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class KeyValueStore(Protocol):
    """String store with TTL semantics.

    Expiry is enforced by the implementation; callers never re-check age.
    Implementations may raise on backend faults; callers decide whether a
    fault is fatal.
    """

    async def get(self, key: str) -> str | None:
        """Return the value stored at ``key``, or ``None`` if absent or expired.

        Args:
            key: Logical key (implementations may add a namespace).
        """
        ...

    async def set(self, key: str, value: str, *, ttl: int) -> None:
        """Store ``value`` at ``key`` for ``ttl`` seconds.

        Args:
            key: Logical key (implementations may add a namespace).
            value: Serialized value.
            ttl: Time-to-live in seconds (must be positive).
        """
        ...
