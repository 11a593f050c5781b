# src/tickerbot/infrastructure/external_apis/finnhub/client.py
# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""Finnhub quote transport client.

``GET /quote?symbol=...&token=...`` returns
``{"c": current, "d": change, "dp": pct, "h", "l", "o", "pc": prev_close, "t": epoch_s}``.
Finnhub answers unknown symbols with HTTP 200 and an all-zero body, so a zero
current price together with a zero previous close is treated as not found.
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import SecretStr

from tickerbot.domain.exceptions.upstream import UpstreamNotFound
from tickerbot.infrastructure.external_apis.base_client import JsonApiClient
from tickerbot.infrastructure.resilience.retry import RetryPolicy

__all__ = ["FinnhubClient"]

_PROVIDER = "finnhub"


class FinnhubClient(JsonApiClient):
    """Async client for the Finnhub quote endpoint."""

    def __init__(
        self,
        *,
        api_key: SecretStr | str,
        base_url: str = "https://finnhub.io/api/v1",
        http: httpx.AsyncClient | None = None,
        timeout_s: float = 5.0,
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

    async def quote(self, symbol: str) -> dict[str, Any]:
        """Return the raw quote for ``symbol`` (e.g. ``AAPL`` or ``BINANCE:BTCUSDT``).

        Raises:
            UpstreamNotFound: Finnhub has no data for the symbol.
            UpstreamMalformedResponse: Body is not a quote object.
        """
        op = "quote"
        payload = await self._request(
            op=op,
            method="GET",
            path="/quote",
            params={"symbol": symbol, "token": self._api_key.get_secret_value()},
        )
        if not isinstance(payload, dict):
            raise self._malformed(op, "quote is not an object")
        if not all(isinstance(payload.get(k), int | float) for k in ("c", "pc", "t")):
            raise self._malformed(op, "quote missing c/pc/t")
        if payload["c"] == 0 and payload["pc"] == 0:
            raise UpstreamNotFound(
                "no quote data", provider=_PROVIDER, details={"endpoint": op, "symbol": symbol}
            )
        return payload
