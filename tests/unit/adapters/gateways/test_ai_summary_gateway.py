# tests/unit/adapters/gateways/test_ai_summary_gateway.py
from __future__ import annotations

from datetime import date
from typing import Any

import pytest

from tickerbot.adapters.gateways.ai_summary_gateway import SYSTEM_MESSAGE, AiSummaryGateway
from tickerbot.domain.entities.market_data import ValidatedSymbol


class _StubChat:
    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []

    async def complete(self, messages: list[dict[str, str]], **kwargs: Any) -> str:
        self.calls.append({"messages": messages, **kwargs})
        return "Shares rose."


@pytest.mark.asyncio
async def test_openai_style_sends_single_prompt(aapl: ValidatedSymbol) -> None:
    chat = _StubChat()
    text = await AiSummaryGateway(chat).fetch_summary(aapl, "Apple Inc.")  # type: ignore[arg-type]

    assert text == "Shares rose."
    call = chat.calls[0]
    assert [m["role"] for m in call["messages"]] == ["user"]
    assert "Apple Inc. (AAPL)" in call["messages"][0]["content"]
    assert call["max_tokens"] == 300
    assert call["temperature"] == 0.3


@pytest.mark.asyncio
async def test_perplexity_style_is_date_anchored(aapl: ValidatedSymbol) -> None:
    chat = _StubChat()
    gateway = AiSummaryGateway(chat, style="perplexity", today=lambda: date(2025, 6, 2))  # type: ignore[arg-type]

    await gateway.fetch_summary(aapl, "Apple Inc.")

    call = chat.calls[0]
    assert call["messages"][0] == {"role": "system", "content": SYSTEM_MESSAGE}
    assert "Today's date is 2025-06-02" in call["messages"][1]["content"]
    assert call["max_tokens"] == 800
    assert call["temperature"] is None
    assert call["extra_body"] == {"search_recency_filter": "week"}
