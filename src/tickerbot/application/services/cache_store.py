# src/tickerbot/application/services/cache_store.py
# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""
Typed Cache Store

Purpose:
    JSON get/set over a :class:`KeyValueStore`, keyed by data kind, symbol
    and an optional parameter (history lookback days). The TTL of every write
    comes from the kind.

Failure semantics:
    Caching only accelerates. Read faults and undecodable entries are
    reported as misses; write faults and unserializable payloads are logged
    and dropped. Nothing here raises into the request path.

Layer: application/services
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from tickerbot.application.interfaces.key_value_store import KeyValueStore
from tickerbot.domain.enums.data_kind import DataKind
from tickerbot.infrastructure.logging.logger import get_json_logger
from tickerbot.infrastructure.observability.metrics import get_cache_operations_total

__all__ = ["CacheStore", "build_key", "default_ttls"]

logger = get_json_logger(__name__)


def build_key(kind: DataKind, symbol: str, params: object | None = None) -> str:
    """Build the deterministic cache key for ``(kind, symbol, params)``.

    Examples:
        ``stock:price:AAPL``, ``stock:history:AAPL:7``.
    """
    key = f"{kind.segment}:{symbol.strip().upper()}"
    if params is not None:
        key = f"{key}:{params}"
    return key


def default_ttls() -> Mapping[DataKind, int]:
    """Return the built-in TTL for every data kind."""
    return MappingProxyType({kind: kind.default_ttl_s for kind in DataKind})


class CacheStore:
    """Kind-aware JSON cache.

    Args:
        store: Backing key-value store.
        ttls: TTL in seconds for every :class:`DataKind`.

    Raises:
        ValueError: If ``ttls`` misses a kind or holds a non-positive TTL.
    """

    def __init__(self, store: KeyValueStore, ttls: Mapping[DataKind, int]) -> None:
        missing = [kind.name for kind in DataKind if kind not in ttls]
        if missing:
            raise ValueError(f"TTL table missing kinds: {', '.join(missing)}")
        bad = [kind.name for kind, ttl in ttls.items() if ttl <= 0]
        if bad:
            raise ValueError(f"TTL must be positive for: {', '.join(bad)}")
        self._store = store
        self._ttls = MappingProxyType(dict(ttls))
        self._ops = get_cache_operations_total()

    def ttl_for(self, kind: DataKind) -> int:
        """Return the TTL applied to writes of ``kind``."""
        return self._ttls[kind]

    async def get(self, kind: DataKind, symbol: str, params: object | None = None) -> Any | None:
        """Return the cached payload, or ``None`` on miss or any fault."""
        key = build_key(kind, symbol, params)
        try:
            raw = await self._store.get(key)
        except Exception as exc:  # noqa: BLE001
            self._ops.labels(kind.name.lower(), "error").inc()
            logger.warning(
                "cache.read_failed",
                extra={"extra": {"key": key, "error": repr(exc)}},
            )
            return None

        if raw is None:
            self._ops.labels(kind.name.lower(), "miss").inc()
            logger.debug("cache.miss", extra={"extra": {"key": key}})
            return None

        try:
            payload = json.loads(raw)
        except ValueError as exc:
            self._ops.labels(kind.name.lower(), "error").inc()
            logger.warning(
                "cache.decode_failed",
                extra={"extra": {"key": key, "error": str(exc)}},
            )
            return None

        self._ops.labels(kind.name.lower(), "hit").inc()
        logger.debug("cache.hit", extra={"extra": {"key": key}})
        return payload

    async def set(
        self, kind: DataKind, symbol: str, payload: Any, params: object | None = None
    ) -> None:
        """Store ``payload`` under the kind's TTL; never raises."""
        key = build_key(kind, symbol, params)
        try:
            raw = json.dumps(payload, separators=(",", ":"), allow_nan=False)
        except (TypeError, ValueError) as exc:
            self._ops.labels(kind.name.lower(), "write_error").inc()
            logger.warning(
                "cache.serialize_failed",
                extra={"extra": {"key": key, "error": str(exc)}},
            )
            return

        ttl = self._ttls[kind]
        try:
            await self._store.set(key, raw, ttl=ttl)
        except Exception as exc:  # noqa: BLE001
            self._ops.labels(kind.name.lower(), "write_error").inc()
            logger.warning(
                "cache.write_failed",
                extra={"extra": {"key": key, "error": repr(exc)}},
            )
            return

        self._ops.labels(kind.name.lower(), "write").inc()
        logger.debug("cache.set", extra={"extra": {"key": key, "ttl": ttl}})
