# src/tickerbot/infrastructure/external_apis/massive/client.py
# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""Massive.com aggregates transport client.

Massive exposes the Polygon-compatible aggregates API:

* ``GET /v2/aggs/ticker/{ticker}/prev``: previous trading day bar.
* ``GET /v2/aggs/ticker/{ticker}/range/1/day/{from}/{to}``: daily bars.

Both return ``{"status": ..., "resultsCount": n, "results": [{o, h, l, c, v, t}]}``.
A body reporting ``status == "ERROR"`` (or carrying ``error``) is a provider
fault even under HTTP 200; an empty ``results`` list means the ticker is
unknown or has no data in the window.

Return shapes are raw bar dictionaries; mapping to entities happens in
:mod:`tickerbot.adapters.gateways.massive_gateway`.
"""

from __future__ import annotations

from datetime import date
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import SecretStr

from tickerbot.domain.exceptions.upstream import UpstreamNotFound, UpstreamUnavailable
from tickerbot.infrastructure.external_apis.base_client import JsonApiClient
from tickerbot.infrastructure.resilience.retry import RetryPolicy

__all__ = ["MassiveClient"]

_PROVIDER = "massive"


class MassiveClient(JsonApiClient):
    """Async client for the Massive aggregates endpoints.

    Args:
        api_key: Massive API key (sent as the ``apiKey`` query parameter).
        base_url: API base URL.
        http: Optional shared ``httpx.AsyncClient``.
        timeout_s: Per-request timeout in seconds.
        retry_policy: Retry configuration for transient failures.
    """

    def __init__(
        self,
        *,
        api_key: SecretStr | str,
        base_url: str = "https://api.massive.com",
        http: httpx.AsyncClient | None = None,
        timeout_s: float = 10.0,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        super().__init__(
            provider=_PROVIDER,
            base_url=base_url,
            http=http,
            timeout_s=timeout_s,
            retry_policy=retry_policy,
        )
        self._api_key = api_key if isinstance(api_key, SecretStr) else SecretStr(api_key)

    def _params(self, **extra: Any) -> dict[str, Any]:
        return {"adjusted": "true", **extra, "apiKey": self._api_key.get_secret_value()}

    def _bars(self, op: str, ticker: str, payload: Any) -> list[dict[str, Any]]:
        """Validate an aggregates envelope and return its bars."""
        if not isinstance(payload, dict):
            raise self._malformed(op, "envelope is not an object")
        if payload.get("status") == "ERROR" or payload.get("error"):
            raise UpstreamUnavailable(
                "provider reported an error",
                provider=_PROVIDER,
                details={"endpoint": op, "status": 200, "error": str(payload.get("error", ""))},
            )
        results = payload.get("results")
        if results is None or (isinstance(results, list) and not results):
            raise UpstreamNotFound(
                "no aggregates", provider=_PROVIDER, details={"endpoint": op, "ticker": ticker}
            )
        if not isinstance(results, list) or not all(isinstance(r, dict) for r in results):
            raise self._malformed(op, "results is not a list of bars")
        return results

    async def previous_close(self, ticker: str) -> dict[str, Any]:
        """Return the previous trading day bar for ``ticker``.

        Raises:
            UpstreamNotFound: Unknown ticker or no bar available.
            UpstreamMalformedResponse: Bar lacks open/close/timestamp.
        """
        op = "prev"
        payload = await self._request(
            op=op,
            method="GET",
            path=f"/v2/aggs/ticker/{quote(ticker, safe=':')}/prev",
            params=self._params(),
        )
        bar = self._bars(op, ticker, payload)[0]
        if not all(isinstance(bar.get(k), int | float) for k in ("o", "c", "t")):
            raise self._malformed(op, "bar missing o/c/t")
        return bar

    async def daily_aggregates(
        self, ticker: str, date_from: date, date_to: date
    ) -> list[dict[str, Any]]:
        """Return daily bars for ``ticker`` between two dates (inclusive, ascending).

        Raises:
            UpstreamNotFound: No bars in the window.
            UpstreamMalformedResponse: A bar lacks close/timestamp.
        """
        op = "range"
        payload = await self._request(
            op=op,
            method="GET",
            path=(
                f"/v2/aggs/ticker/{quote(ticker, safe=':')}/range/1/day/"
                f"{date_from.isoformat()}/{date_to.isoformat()}"
            ),
            params=self._params(sort="asc"),
        )
        bars = self._bars(op, ticker, payload)
        for bar in bars:
            if not all(isinstance(bar.get(k), int | float) for k in ("c", "t")):
                raise self._malformed(op, "bar missing c/t")
        return bars
