# src/tickerbot/infrastructure/external_apis/chat_completions/client.py
# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""OpenAI-compatible chat completions client.

Works against any ``/chat/completions`` endpoint speaking the OpenAI wire
format (OpenAI itself, Perplexity). Returns the first choice's message
content.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import httpx
from pydantic import SecretStr

from tickerbot.infrastructure.external_apis.base_client import JsonApiClient
from tickerbot.infrastructure.resilience.retry import RetryPolicy

__all__ = ["ChatCompletionsClient"]


class ChatCompletionsClient(JsonApiClient):
    """Bearer-authenticated chat completions transport.

    Args:
        api_key: Provider API key.
        base_url: Provider base URL (``https://api.openai.com/v1``,
            ``https://api.perplexity.ai``).
        model: Model name sent with each request.
        provider: Label for logs and metrics.
    """

    def __init__(
        self,
        *,
        api_key: SecretStr | str,
        base_url: str,
        model: str,
        provider: str = "openai",
        http: httpx.AsyncClient | None = None,
        timeout_s: float = 30.0,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        super().__init__(
            provider=provider,
            base_url=base_url,
            http=http,
            timeout_s=timeout_s,
            retry_policy=retry_policy,
        )
        self._api_key = api_key if isinstance(api_key, SecretStr) else SecretStr(api_key)
        self._model = model

    @property
    def model(self) -> str:
        return self._model

    async def complete(
        self,
        messages: Sequence[Mapping[str, str]],
        *,
        max_tokens: int = 300,
        temperature: float | None = 0.3,
        extra_body: Mapping[str, Any] | None = None,
    ) -> str:
        """Return the stripped content of the first completion choice.

        Raises:
            UpstreamMalformedResponse: No choices or empty content.
        """
        op = "chat"
        body: dict[str, Any] = {
            "model": self._model,
            "messages": [dict(m) for m in messages],
            "max_tokens": max_tokens,
        }
        if temperature is not None:
            body["temperature"] = temperature
        if extra_body:
            body.update(extra_body)

        payload = await self._request(
            op=op,
            method="POST",
            path="/chat/completions",
            json_body=body,
            headers={"Authorization": f"Bearer {self._api_key.get_secret_value()}"},
        )
        try:
            content = payload["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise self._malformed(op, "no completion choice") from exc
        if not isinstance(content, str) or not content.strip():
            raise self._malformed(op, "empty completion")
        return content.strip()
