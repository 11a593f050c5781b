# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""
Bot Errors

Purpose:
    The closed set of failures a command can end in. Each carries a user-safe
    message, optional symbol suggestions, and log-only details that never
    reach the chat reply.

Layer: domain/exceptions
"""
from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import Any

from .base import DomainError


class BotErrorKind(str, Enum):
    """Failure categories surfaced to users."""

    INVALID_INPUT = "invalid-input"
    RATE_LIMITED = "rate-limited"
    NOT_FOUND = "not-found"
    UPSTREAM_FAILURE = "upstream-failure"
    PARTIAL_FAILURE = "partial-failure"
    UNKNOWN = "unknown"


class BotError(DomainError):
    """A command failure with a user-facing message.

    Args:
        kind: Failure category; drives the reply template.
        message: Short human message. May reference the symbol but must not
            contain provider error text.
        suggestions: Alternate symbols offered for ``NOT_FOUND`` and
            ``INVALID_INPUT``.
        details: Structured metadata for the log record only.
    """

    code = "BOT_ERROR"

    def __init__(
        self,
        kind: BotErrorKind,
        message: str,
        *,
        suggestions: Iterable[str] = (),
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details)
        self.kind = kind
        self.suggestions: tuple[str, ...] = tuple(suggestions)

    def __repr__(self) -> str:
        return f"BotError(kind={self.kind.value!r}, message={self.message!r})"
