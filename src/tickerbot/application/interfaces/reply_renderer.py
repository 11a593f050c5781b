# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""Application Port: turning results and failures into chat replies."""

from __future__ import annotations

from typing import Any, Protocol

from tickerbot.application.schemas.dto.chat import ReplyPayload
from tickerbot.domain.entities.market_data import UnifiedResult
from tickerbot.domain.exceptions.bot import BotError


class ReplyRenderer(Protocol):
    """Presentation boundary used by the command pipeline."""

    def render_result(self, result: UnifiedResult) -> ReplyPayload:
        """Return the reply for a successful lookup."""
        ...

    def render_help(self) -> ReplyPayload:
        """Return the usage reply."""
        ...

    def render_error(self, error: BotError, **context: Any) -> ReplyPayload:
        """Log ``error`` with ``context`` and return its private reply."""
        ...
