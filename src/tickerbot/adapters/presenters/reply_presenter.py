# src/tickerbot/adapters/presenters/reply_presenter.py
# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""Reply presenter: :class:`UnifiedResult` -> embed reply.

Synopsis:
    Pure functions that shape lookup results and the help card into
    :class:`ReplyPayload`, plus :class:`ChatReplyPresenter`, the
    :class:`ReplyRenderer` implementation wired into the command pipeline.

Layer:
    adapters/presenters
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Final

from tickerbot.adapters.presenters.error_presenter import format_error, log_bot_error
from tickerbot.application.interfaces.reply_renderer import ReplyRenderer
from tickerbot.application.schemas.dto.chat import ColorTag, Embed, EmbedField, ReplyPayload
from tickerbot.domain.entities.market_data import Quote, UnifiedResult
from tickerbot.domain.enums.asset_class import AssetClass
from tickerbot.domain.enums.data_kind import DataKind
from tickerbot.domain.exceptions.bot import BotError
from tickerbot.domain.services.sparkline import format_chart_with_labels

__all__ = [
    "COLOR_VALUES",
    "ChatReplyPresenter",
    "HelpContext",
    "SUMMARY_MAX_CHARS",
    "assemble",
    "build_help_reply",
    "color_tag_for",
    "format_change",
]

SUMMARY_MAX_CHARS: Final[int] = 1020
SUMMARY_UNAVAILABLE: Final[str] = "⚠️ AI summary unavailable"
FOOTER: Final[str] = "Data: Finnhub & Massive.com • AI: OpenAI"

COLOR_VALUES: Final[Mapping[ColorTag, int]] = {
    ColorTag.POSITIVE: 0x00FF00,
    ColorTag.NEGATIVE: 0xFF0000,
    ColorTag.NEUTRAL: 0x808080,
}


def color_tag_for(change_percent: float) -> ColorTag:
    """Accent from the sign of the change; zero is neutral."""
    if change_percent > 0:
        return ColorTag.POSITIVE
    if change_percent < 0:
        return ColorTag.NEGATIVE
    return ColorTag.NEUTRAL


def format_change(quote: Quote) -> str:
    """``**$175.43** +$4.10 (+2.39%)``."""
    amount = (
        f"+${quote.change:.2f}" if quote.change >= 0 else f"-${abs(quote.change):.2f}"
    )
    sign = "+" if quote.change_percent >= 0 else ""
    return f"**${quote.price:.2f}** {amount} ({sign}{quote.change_percent:.2f}%)"


def _truncate_summary(summary: str | None) -> str:
    if not summary:
        return SUMMARY_UNAVAILABLE
    if len(summary) > SUMMARY_MAX_CHARS:
        return summary[:SUMMARY_MAX_CHARS] + "..."
    return summary


def assemble(result: UnifiedResult) -> ReplyPayload:
    """Build the public embed reply for a successful lookup."""
    quote = result.quote
    is_crypto = result.asset_class is AssetClass.CRYPTO

    if is_crypto:
        title = f"₿ {result.symbol} - {result.display_name}"
        price_label = "💰 Current Price"
        status_field = EmbedField(
            name="🌐 Market Status",
            value=f"✅ 24/7 Trading • Exchange: {quote.exchange or 'N/A'}",
        )
    else:
        title = f"📊 {result.symbol} - {result.display_name}"
        # Stock quotes are the previous session's bar unless the gateway says otherwise.
        price_label = "💰 Current Price" if quote.is_live else "💰 Previous Close"
        status_field = EmbedField(
            name="🕐 Market Status",
            value="✅ Market Open" if result.market_open else "🔴 Market Closed (Last Close)",
        )

    fields = [
        EmbedField(name=price_label, value=format_change(quote)),
        EmbedField(
            name=f"📈 {result.history_days}-Day Trend",
            value=f"```\n{format_chart_with_labels(result.series)}\n```",
        ),
        status_field,
        EmbedField(name="📰 News & Sentiment", value=_truncate_summary(result.summary)),
    ]
    return ReplyPayload(
        is_private=False,
        embed=Embed(
            title=title,
            color_tag=color_tag_for(quote.change_percent),
            fields=fields,
            footer=FOOTER,
        ),
    )


@dataclass(frozen=True)
class HelpContext:
    """Operational facts quoted on the help card."""

    rate_limit_window_s: int = 60
    rate_limit_max_requests: int = 1
    history_days: int = 7
    ttls: Mapping[DataKind, int] | None = None


def _humanize(seconds: int) -> str:
    if seconds % 3600 == 0:
        hours = seconds // 3600
        return f"{hours} hour" + ("s" if hours != 1 else "")
    if seconds % 60 == 0:
        minutes = seconds // 60
        return f"{minutes} min"
    return f"{seconds} s"


def build_help_reply(context: HelpContext | None = None) -> ReplyPayload:
    """Return the public usage card."""
    ctx = context or HelpContext()
    ttls: Mapping[DataKind, int] = ctx.ttls or {kind: kind.default_ttl_s for kind in DataKind}
    window = ctx.rate_limit_window_s
    per = f"{window} seconds" if window != 1 else "second"
    assets = "1 asset" if ctx.rate_limit_max_requests == 1 else f"{ctx.rate_limit_max_requests} assets"

    fields = [
        EmbedField(
            name="📌 Commands",
            value=(
                "**`/stock <ticker>`** - Get stock information\n"
                "**`/crypto <symbol>`** - Get cryptocurrency information\n"
                "**`/help`** - Show this help message"
            ),
        ),
        EmbedField(
            name="💡 Stock Examples",
            value="`/stock AAPL` - Apple Inc.\n`/stock NET` - Cloudflare\n`/stock GOOGL` - Google",
        ),
        EmbedField(
            name="₿ Crypto Examples",
            value="`/crypto BTC` - Bitcoin\n`/crypto ETH` - Ethereum\n`/crypto DOGE` - Dogecoin",
        ),
        EmbedField(
            name="⏱️ Rate Limits",
            value=f"You can query **{assets} every {per}** to keep the bot running smoothly.",
        ),
        EmbedField(
            name="📊 Data Sources",
            value=(
                "**Real-Time Quotes:** Finnhub (live prices & market status)\n"
                f"**Historical Data:** Massive.com ({ctx.history_days}-day trends)\n"
                "**AI Summaries:** OpenAI-compatible models with web search"
            ),
        ),
        EmbedField(
            name="🔄 Data Freshness",
            value=(
                f"Market status cached {_humanize(ttls[DataKind.MARKET_STATUS])}\n"
                f"Stock prices cached {_humanize(ttls[DataKind.STOCK_QUOTE])}\n"
                f"Charts cached {_humanize(ttls[DataKind.STOCK_HISTORY])}\n"
                f"News summaries cached {_humanize(ttls[DataKind.STOCK_SUMMARY])}"
            ),
        ),
    ]
    return ReplyPayload(
        is_private=False,
        embed=Embed(
            title="📊 Stock Bot - Help",
            description=(
                "Get real-time stock prices, cryptocurrency data, market status, trends, "
                "and AI-powered news summaries."
            ),
            color_tag=ColorTag.NEUTRAL,
            fields=fields,
            footer="Stock Bot • tickerbot",
        ),
    )


class ChatReplyPresenter(ReplyRenderer):
    """Default :class:`ReplyRenderer`."""

    def __init__(self, help_context: HelpContext | None = None) -> None:
        self._help = build_help_reply(help_context)

    def render_result(self, result: UnifiedResult) -> ReplyPayload:
        return assemble(result)

    def render_help(self) -> ReplyPayload:
        return self._help

    def render_error(self, error: BotError, **context: Any) -> ReplyPayload:
        log_bot_error(error, **context)
        return format_error(error)
