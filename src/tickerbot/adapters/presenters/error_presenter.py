# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""Error presenter: :class:`BotError` -> private chat reply.

Every error reply is private to the requester. Only the error's message and
suggestions reach the user; ``details`` are written to the log record by
:func:`log_bot_error` and nowhere else.

Layer:
    adapters/presenters
"""

from __future__ import annotations

import logging
from typing import Any, Final, assert_never

from tickerbot.application.schemas.dto.chat import ReplyPayload
from tickerbot.domain.exceptions.bot import BotError, BotErrorKind
from tickerbot.domain.services.symbol_tables import EXAMPLE_TICKERS
from tickerbot.infrastructure.logging.logger import get_json_logger

__all__ = ["format_error", "log_bot_error"]

logger = get_json_logger(__name__)

SERVICE_UNAVAILABLE_HEADING: Final[str] = "⚠️ **Service Unavailable**"
SERVICE_UNAVAILABLE_FALLBACK: Final[str] = "Unable to fetch market data. Please try again later."
UNEXPECTED: Final[str] = "❌ **Unexpected Error**\nSomething went wrong. Please try again later."

_USER_CAUSED: Final[frozenset[BotErrorKind]] = frozenset(
    {BotErrorKind.INVALID_INPUT, BotErrorKind.RATE_LIMITED, BotErrorKind.NOT_FOUND}
)


def _example_tip() -> str:
    lines = "\n".join(f"• **{ticker}** ({name})" for ticker, name in EXAMPLE_TICKERS)
    return f"💡 **Tip:** Use valid stock ticker symbols like:\n{lines}"


def format_error(error: BotError) -> ReplyPayload:
    """Return the private reply for ``error``."""
    match error.kind:
        case BotErrorKind.INVALID_INPUT:
            text = f"❌ **Invalid Input**\n{error.message}"
            if error.suggestions:
                text += f"\n\n💡 **Suggestions:** {', '.join(error.suggestions)}"
        case BotErrorKind.RATE_LIMITED:
            seconds = error.details.get("seconds_remaining")
            if isinstance(seconds, int) and seconds > 0:
                text = (
                    "⏰ **Slow Down!**\nYou're querying too quickly! "
                    f"Please wait {seconds} seconds before trying again."
                )
            else:
                text = f"⏰ **Slow Down!**\n{error.message}"
        case BotErrorKind.NOT_FOUND:
            text = f"🔍 **Not Found**\n{error.message}"
            if error.suggestions:
                text += f"\n\n💡 **Did you mean:** {', '.join(error.suggestions[:5])}"
            else:
                text += f"\n\n{_example_tip()}"
        case BotErrorKind.UPSTREAM_FAILURE:
            text = f"{SERVICE_UNAVAILABLE_HEADING}\n{error.message or SERVICE_UNAVAILABLE_FALLBACK}"
        case BotErrorKind.PARTIAL_FAILURE:
            text = f"⚠️ **Partial Data**\n{error.message}"
        case BotErrorKind.UNKNOWN:
            text = UNEXPECTED
        case _:
            assert_never(error.kind)
    return ReplyPayload(is_private=True, text=text)


def log_bot_error(error: BotError, **context: Any) -> None:
    """Emit the structured log record for ``error``."""
    level = logging.WARNING if error.kind in _USER_CAUSED else logging.ERROR
    logger.log(
        level,
        "command.failed",
        extra={
            "extra": {
                "kind": error.kind.value,
                "message": error.message,
                "suggestions": list(error.suggestions),
                "details": error.details,
                **{k: v for k, v in context.items() if v is not None},
            }
        },
    )
