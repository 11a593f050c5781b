# src/tickerbot/application/schemas/dto/chat.py
# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""Application DTOs for chat commands and replies.

Synopsis:
    Platform-neutral shapes exchanged between the command pipeline and the
    chat adapter. The Discord mapper converts raw interactions into
    :class:`CommandInput` and :class:`ReplyPayload` into interaction
    responses.

Layer:
    application/schemas/dto
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import Field

from tickerbot.application.schemas.dto.base import BaseDTO


class ColorTag(str, Enum):
    """Embed accent derived from the sign of the price change."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class CommandInput(BaseDTO):
    """A slash command invocation.

    Attributes:
        command_name: Lower-case command name (``stock``, ``crypto``, ``help``).
        options: Option values flattened by option name.
        user_id: Invoking user; keys the rate limiter.
        guild_id: Guild the command ran in, ``None`` in DMs.
        interaction_id: Platform interaction id, used for log correlation.
    """

    command_name: str
    options: dict[str, Any] = Field(default_factory=dict)
    user_id: str
    guild_id: str | None = None
    interaction_id: str | None = None


class EmbedField(BaseDTO):
    """One name/value block of an embed."""

    name: str
    value: str
    inline: bool = False


class Embed(BaseDTO):
    """Rich reply card."""

    title: str
    color_tag: ColorTag = ColorTag.NEUTRAL
    fields: list[EmbedField] = Field(default_factory=list)
    footer: str | None = None
    description: str | None = None


class ReplyPayload(BaseDTO):
    """What the bot answers with: plain text, an embed, or both.

    Attributes:
        is_private: Only the invoking user sees the reply.
        text: Message content.
        embed: Optional embed card.
    """

    is_private: bool = False
    text: str | None = None
    embed: Embed | None = None
