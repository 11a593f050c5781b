# src/tickerbot/infrastructure/external_apis/base_client.py
# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""Shared JSON-over-HTTP transport for upstream providers.

Every provider client issues its calls through :meth:`JsonApiClient._request`,
which provides:

* Async HTTP (httpx) with a per-request timeout.
* Deterministic mapping of HTTP statuses and transport faults to
  :mod:`tickerbot.domain.exceptions.upstream` errors.
* Bounded jittered retries for transient failures only (network errors,
  non-4xx statuses and provider throttling); not-found, auth, malformed
  payloads and timeouts are never retried.
* Prometheus latency/error/retry metrics and request-id propagation.

Deadlines belong to the caller: the orchestrator wraps each call in
``asyncio.timeout`` and cancellation propagates through httpx.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from contextlib import suppress
from typing import Any, Final

import httpx

from tickerbot.domain.exceptions.upstream import (
    UpstreamAuthFailed,
    UpstreamError,
    UpstreamMalformedResponse,
    UpstreamNotFound,
    UpstreamRateLimited,
    UpstreamTimeout,
    UpstreamUnavailable,
)
from tickerbot.infrastructure.logging.logger import get_json_logger, get_request_id
from tickerbot.infrastructure.observability.metrics import (
    get_upstream_errors_total,
    get_upstream_latency_seconds,
    get_upstream_retries_total,
)
from tickerbot.infrastructure.resilience.retry import RetryPolicy, retry_async

__all__ = ["JsonApiClient", "default_retry_policy", "is_transient"]

logger = get_json_logger(__name__)

_DEFAULT_HEADERS: Final[dict[str, str]] = {
    "Accept": "application/json",
    "User-Agent": "tickerbot/0.1",
}


def default_retry_policy(total: int = 1, base: float = 1.0) -> RetryPolicy:
    """Return the standard upstream retry policy (one retry, short backoff)."""
    return RetryPolicy(total=total, base=base, cap=max(base, base * 2), jitter=True)


def is_transient(exc: Exception) -> bool:
    """Return ``True`` for failures worth one more attempt.

    Provider throttling qualifies, as does :class:`UpstreamUnavailable` when it
    did not come from a 4xx response.
    """
    if isinstance(exc, UpstreamRateLimited):
        return True
    if not isinstance(exc, UpstreamUnavailable):
        return False
    status = exc.details.get("status")
    return not (isinstance(status, int) and 400 <= status < 500)


def _parse_retry_after(val: str | None) -> float | None:
    """Parse the HTTP ``Retry-After`` header (seconds form only)."""
    if not val:
        return None
    try:
        return max(0.0, float(val))
    except ValueError:
        return None


class JsonApiClient:
    """Base class for provider transport clients.

    Args:
        provider: Provider label used in errors, logs and metrics.
        base_url: Provider base URL (no trailing slash needed).
        http: Optional shared ``httpx.AsyncClient``. If omitted, a client is
            created and owned by this instance.
        timeout_s: Per-request timeout in seconds.
        retry_policy: Retry configuration for transient failures.
    """

    def __init__(
        self,
        *,
        provider: str,
        base_url: str,
        http: httpx.AsyncClient | None = None,
        timeout_s: float = 10.0,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._provider = provider
        self._base_url = str(base_url).rstrip("/")
        self._timeout = float(timeout_s)
        self._owns_client = http is None
        self._client = http or httpx.AsyncClient(
            timeout=self._timeout,
            headers=_DEFAULT_HEADERS.copy(),
        )
        self._retry = retry_policy or default_retry_policy()

        self._latency = get_upstream_latency_seconds()
        self._errors = get_upstream_errors_total()
        self._retries_total = get_upstream_retries_total()

    @property
    def provider(self) -> str:
        """Provider label."""
        return self._provider

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance owns it."""
        if self._owns_client and not self._client.is_closed:
            await self._client.aclose()

    def _map_status(self, op: str, response: httpx.Response) -> None:
        """Raise the upstream error matching a non-2xx ``response``."""
        status = response.status_code
        if status < 400:
            return
        details: dict[str, Any] = {"status": status, "endpoint": op}
        if status == 404:
            raise UpstreamNotFound("not found", provider=self._provider, details=details)
        if status in (401, 403):
            raise UpstreamAuthFailed("credentials rejected", provider=self._provider, details=details)
        if status == 429:
            retry_after = _parse_retry_after(response.headers.get("Retry-After"))
            if retry_after is not None:
                details["retry_after_s"] = retry_after
            raise UpstreamRateLimited("throttled", provider=self._provider, details=details)
        raise UpstreamUnavailable(f"http {status}", provider=self._provider, details=details)

    async def _request(
        self,
        *,
        op: str,
        method: str,
        path: str,
        params: Mapping[str, Any] | None = None,
        json_body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """Issue one logical call (with retries) and return the decoded JSON body."""
        url = f"{self._base_url}{path}"
        outbound: dict[str, str] = dict(headers or {})
        request_id = get_request_id()
        if request_id:
            outbound.setdefault("X-Request-ID", request_id)

        async def _call() -> Any:
            try:
                response = await self._client.request(
                    method,
                    url,
                    params=params,
                    json=json_body,
                    headers=outbound,
                    timeout=self._timeout,
                )
            except httpx.TimeoutException as exc:
                raise UpstreamTimeout(
                    "request timed out", provider=self._provider, details={"endpoint": op}
                ) from exc
            except httpx.RequestError as exc:
                raise UpstreamUnavailable(
                    "transport error",
                    provider=self._provider,
                    details={"endpoint": op, "error": type(exc).__name__},
                ) from exc

            self._map_status(op, response)
            if response.status_code == 204 or not response.content:
                return None

            try:
                return response.json()
            except ValueError as exc:
                raise UpstreamMalformedResponse(
                    "non-json body", provider=self._provider, details={"endpoint": op}
                ) from exc

        def _on_retry(attempt: int, exc: Exception) -> None:
            with suppress(Exception):
                self._retries_total.labels(self._provider, op, type(exc).__name__).inc()
            logger.warning(
                "upstream.retry",
                extra={
                    "extra": {
                        "provider": self._provider,
                        "endpoint": op,
                        "attempt": attempt + 2,
                        "error": type(exc).__name__,
                    }
                },
            )

        start = time.perf_counter()
        error_reason: str | None = None
        try:
            return await retry_async(
                _call, policy=self._retry, retry_on=is_transient, on_retry=_on_retry
            )
        except UpstreamError as exc:
            error_reason = type(exc).__name__
            raise
        finally:
            elapsed = time.perf_counter() - start
            with suppress(Exception):
                outcome = "error" if error_reason else "success"
                self._latency.labels(self._provider, op, outcome).observe(elapsed)
                if error_reason:
                    self._errors.labels(self._provider, op, error_reason).inc()
            logger.debug(
                "upstream.call",
                extra={
                    "extra": {
                        "provider": self._provider,
                        "endpoint": op,
                        "duration_ms": round(elapsed * 1000, 1),
                        "error": error_reason,
                    }
                },
            )

    def _malformed(self, op: str, reason: str) -> UpstreamMalformedResponse:
        return UpstreamMalformedResponse(
            reason, provider=self._provider, details={"endpoint": op, "reason": reason}
        )
