# src/tickerbot/application/services/rate_limiter.py
# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""
Per-User Rate Limiter

Purpose:
    Admit or deny one command per user according to a policy, recording the
    admitted request in the same call.

Policies:
    * :class:`FixedCooldownPolicy` keeps the last admitted timestamp (epoch
      ms, a JSON number) and denies until one window has elapsed.
    * :class:`SlidingWindowPolicy` keeps a JSON list of admitted timestamps,
      drops the ones older than the window, and admits while fewer than
      ``max_requests`` remain.

    A denial reports the whole seconds until the oldest counted request
    leaves the window, rounded up.

Failure semantics:
    The limiter fails open. A store read fault admits the request; a write
    fault after admission is logged and ignored; a corrupt record counts as
    no record. Concurrent checks for one user may both be admitted (last
    write wins).

Layer: application/services
"""

from __future__ import annotations

import json
import math
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from tickerbot.application.interfaces.key_value_store import KeyValueStore
from tickerbot.infrastructure.logging.logger import get_json_logger
from tickerbot.infrastructure.observability.metrics import get_rate_limit_decisions_total

__all__ = [
    "Admitted",
    "Denied",
    "RateLimitDecision",
    "RateLimitPolicy",
    "FixedCooldownPolicy",
    "SlidingWindowPolicy",
    "RateLimiter",
    "rate_limit_key",
]

logger = get_json_logger(__name__)


@dataclass(frozen=True, slots=True)
class Admitted:
    """The request may proceed.

    Attributes:
        remaining: Further requests the user may make in the current window.
    """

    remaining: int = 0


@dataclass(frozen=True, slots=True)
class Denied:
    """The request must be rejected.

    Attributes:
        seconds_remaining: Whole seconds until a request will be admitted.
    """

    seconds_remaining: int


type RateLimitDecision = Admitted | Denied


class CorruptRecord(ValueError):
    """Stored limiter state could not be parsed."""


class RateLimitPolicy(Protocol):
    """Decision rule over a serialized per-user record."""

    name: str
    window_s: int
    max_requests: int

    def evaluate(self, raw: str | None, now_ms: int) -> tuple[RateLimitDecision, str | None]:
        """Return the decision and, when admitted, the record to store.

        Raises:
            CorruptRecord: If ``raw`` is not a record this policy wrote.
        """
        ...


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _ceil_seconds(ms: float) -> int:
    return max(1, math.ceil(ms / 1000))


@dataclass(frozen=True, slots=True)
class FixedCooldownPolicy:
    """One request per ``window_s`` seconds."""

    window_s: int
    name: str = "fixed"
    max_requests: int = 1

    def evaluate(self, raw: str | None, now_ms: int) -> tuple[RateLimitDecision, str | None]:
        window_ms = self.window_s * 1000
        if raw is not None:
            try:
                last = json.loads(raw)
            except ValueError as exc:
                raise CorruptRecord(str(exc)) from exc
            if not _is_number(last):
                raise CorruptRecord(f"expected a timestamp, got {type(last).__name__}")
            elapsed = now_ms - last
            if elapsed < window_ms:
                remaining_ms = min(window_ms, last + window_ms - now_ms)
                return Denied(_ceil_seconds(remaining_ms)), None
        return Admitted(0), json.dumps(now_ms)


@dataclass(frozen=True, slots=True)
class SlidingWindowPolicy:
    """Up to ``max_requests`` requests in any ``window_s``-second window."""

    window_s: int
    max_requests: int
    name: str = "sliding"

    def __post_init__(self) -> None:
        if self.max_requests < 1:
            raise ValueError("max_requests must be >= 1")

    def evaluate(self, raw: str | None, now_ms: int) -> tuple[RateLimitDecision, str | None]:
        window_ms = self.window_s * 1000
        stamps: list[float] = []
        if raw is not None:
            try:
                decoded = json.loads(raw)
            except ValueError as exc:
                raise CorruptRecord(str(exc)) from exc
            if not isinstance(decoded, list) or not all(_is_number(t) for t in decoded):
                raise CorruptRecord("expected a list of timestamps")
            stamps = decoded

        recent = sorted(t for t in stamps if now_ms - t < window_ms)
        if len(recent) >= self.max_requests:
            oldest = recent[-self.max_requests]
            remaining_ms = min(window_ms, oldest + window_ms - now_ms)
            return Denied(_ceil_seconds(remaining_ms)), None

        recent.append(now_ms)
        kept = recent[-self.max_requests :]
        return Admitted(self.max_requests - len(kept)), json.dumps(kept)


def rate_limit_key(user_id: str) -> str:
    """Return the store key holding ``user_id``'s limiter record."""
    return f"ratelimit:{user_id}"


class RateLimiter:
    """Check-and-record limiter over a :class:`KeyValueStore`.

    Args:
        store: Rate-limit keyspace.
        policy: Decision rule.
        clock: Epoch-seconds clock; injectable for tests.
    """

    def __init__(
        self,
        store: KeyValueStore,
        policy: RateLimitPolicy,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._policy = policy
        self._clock = clock
        self._decisions = get_rate_limit_decisions_total()

    @property
    def policy(self) -> RateLimitPolicy:
        """Active policy."""
        return self._policy

    def _fail_open(self, user_id: str, event: str, exc: Exception) -> Admitted:
        self._decisions.labels(self._policy.name, "fail_open").inc()
        logger.warning(
            event,
            extra={"extra": {"user_id": user_id, "error": repr(exc)}},
        )
        return Admitted(self._policy.max_requests - 1)

    async def check_and_admit(self, user_id: str) -> RateLimitDecision:
        """Decide on a request from ``user_id`` and record it when admitted."""
        key = rate_limit_key(user_id)
        now_ms = int(self._clock() * 1000)

        try:
            raw = await self._store.get(key)
        except Exception as exc:  # noqa: BLE001
            return self._fail_open(user_id, "rate_limit.store_unavailable", exc)

        try:
            decision, record = self._policy.evaluate(raw, now_ms)
        except CorruptRecord as exc:
            logger.warning(
                "rate_limit.corrupt_record",
                extra={"extra": {"user_id": user_id, "error": str(exc)}},
            )
            decision, record = self._policy.evaluate(None, now_ms)

        if isinstance(decision, Denied):
            self._decisions.labels(self._policy.name, "denied").inc()
            logger.info(
                "rate_limit.denied",
                extra={
                    "extra": {
                        "user_id": user_id,
                        "seconds_remaining": decision.seconds_remaining,
                    }
                },
            )
            return decision

        if record is not None:
            try:
                await self._store.set(key, record, ttl=self._policy.window_s)
            except Exception as exc:  # noqa: BLE001
                logger.warning(
                    "rate_limit.record_failed",
                    extra={"extra": {"user_id": user_id, "error": repr(exc)}},
                )

        self._decisions.labels(self._policy.name, "admitted").inc()
        return decision
