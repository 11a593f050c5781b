# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""
Adapter Gateway: chat completions -> AI news summary.

Purpose:
    Build the news prompt for a symbol and return the model's plain-text
    summary. Two prompt styles are supported:

    * ``openai``: single user prompt, short answer (300 tokens).
    * ``perplexity``: web-search model with a system message, a date-anchored
      prompt and a one-week search recency filter (800 tokens).

Layer:
    adapters
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, date, datetime
from typing import Literal

from tickerbot.application.interfaces.gateways import SummaryGateway
from tickerbot.domain.entities.market_data import ValidatedSymbol
from tickerbot.infrastructure.external_apis.chat_completions.client import ChatCompletionsClient

type SummaryStyle = Literal["openai", "perplexity"]

SYSTEM_MESSAGE = (
    "You are a financial news analyst. Use succinct, plain language focused on "
    "accuracy and professionalism."
)


def build_basic_prompt(symbol: str, display_name: str) -> str:
    return (
        "You are a financial news analyst. Search the web for recent news about "
        f"{display_name} ({symbol}) and provide a concise 2-4 sentence summary focusing on:\n"
        "1. Recent factual developments that may impact stock price\n"
        "2. Current market sentiment (cautious interpretation, not bold predictions)\n"
        "\n"
        "Note: Price data shown is from the previous trading day's close, not real-time.\n"
        "Be factual about numbers and events. Provide cautious, balanced interpretation.\n"
        "Do not make buy/sell recommendations."
    )


def build_search_prompt(symbol: str, display_name: str, today: date) -> str:
    day = today.isoformat()
    return (
        f"Today's date is {day}. You are a financial news analyst with web search "
        "capabilities. Search the web for the most recent news and developments about "
        f"{display_name} ({symbol}) from the last 72 hours ONLY. Prioritize any "
        "significant events from the last 24 hours.\n"
        "\n"
        f"IMPORTANT: Only include news dated {day} or within the past 3 days. Ignore any "
        "older information. If you cannot find news from this timeframe, state that no "
        "recent news is available, and only in those cases, provide a more general summary "
        "of the company's recent performance and market sentiment.\n"
        "\n"
        "Provide a concise summary (3-4 sentences, max 800 characters) focusing on:\n"
        "1. Recent factual developments that may impact stock price (earnings, product "
        "launches, regulatory news, etc.)\n"
        "2. Current market sentiment based on analyst opinions and market reactions\n"
        "\n"
        "Important guidelines:\n"
        "- Use web search to find the latest, most current information\n"
        "- Be factual about numbers and events\n"
        "- Provide cautious, balanced interpretation\n"
        "- Do not make buy/sell recommendations\n"
        "- Do not reference a recent specific price, we are getting that data elsewhere\n"
        "- CRITICAL: Keep response under 800 characters (about 70-90 words). Be extremely concise.\n"
        "- CRITICAL: Provide a plain text summary without any markdown, headers, numbering, "
        "bullet points, or special formatting.\n"
        "- CRITICAL: NO preamble or follow-ups, NO citations, NO URLs, NO links."
    )


class AiSummaryGateway(SummaryGateway):
    """Summary gateway over an OpenAI-compatible chat completions client."""

    def __init__(
        self,
        client: ChatCompletionsClient,
        *,
        style: SummaryStyle = "openai",
        today: Callable[[], date] = lambda: datetime.now(UTC).date(),
    ) -> None:
        self._client = client
        self._style = style
        self._today = today

    async def fetch_summary(self, symbol: ValidatedSymbol, display_name: str) -> str:
        if self._style == "perplexity":
            return await self._client.complete(
                [
                    {"role": "system", "content": SYSTEM_MESSAGE},
                    {
                        "role": "user",
                        "content": build_search_prompt(symbol.symbol, display_name, self._today()),
                    },
                ],
                max_tokens=800,
                temperature=None,
                extra_body={"search_recency_filter": "week"},
            )
        return await self._client.complete(
            [{"role": "user", "content": build_basic_prompt(symbol.symbol, display_name)}],
            max_tokens=300,
            temperature=0.3,
        )
