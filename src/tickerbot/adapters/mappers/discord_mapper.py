# src/tickerbot/adapters/mappers/discord_mapper.py
# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""Discord interaction mapping.

Purpose:
    Translate between Discord's interaction wire format and the
    platform-neutral chat DTOs:

    * Incoming ``APPLICATION_COMMAND`` interactions -> :class:`CommandInput`.
    * :class:`ReplyPayload` -> interaction response / webhook message bodies
      (embeds carry integer colours, private replies the ephemeral flag).

Layer:
    adapters/mappers
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from enum import IntEnum
from typing import Any, Final

from tickerbot.adapters.presenters.reply_presenter import COLOR_VALUES
from tickerbot.application.schemas.dto.chat import CommandInput, Embed, ReplyPayload

__all__ = [
    "EPHEMERAL_FLAG",
    "InteractionType",
    "ResponseType",
    "deferred",
    "embed_to_dict",
    "parse_interaction",
    "pong",
    "to_interaction_response",
    "to_message_body",
]

EPHEMERAL_FLAG: Final[int] = 64


class InteractionType(IntEnum):
    PING = 1
    APPLICATION_COMMAND = 2


class ResponseType(IntEnum):
    PONG = 1
    CHANNEL_MESSAGE_WITH_SOURCE = 4
    DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE = 5


def parse_interaction(raw: Mapping[str, Any]) -> CommandInput:
    """Build a :class:`CommandInput` from an application command interaction.

    Options are flattened by name. The user comes from ``member.user`` in
    guilds and from ``user`` in DMs.

    Raises:
        ValueError: If the interaction has no command name or no user.
    """
    data = raw.get("data") or {}
    name = str(data.get("name") or "").strip().lower()
    if not name:
        raise ValueError("interaction has no command name")

    options: dict[str, Any] = {}
    for option in data.get("options") or []:
        if isinstance(option, Mapping) and "name" in option:
            options[str(option["name"])] = option.get("value")

    member = raw.get("member") or {}
    user = member.get("user") or raw.get("user") or {}
    user_id = user.get("id")
    if not user_id:
        raise ValueError("interaction has no user")

    guild_id = raw.get("guild_id")
    interaction_id = raw.get("id")
    return CommandInput(
        command_name=name,
        options=options,
        user_id=str(user_id),
        guild_id=str(guild_id) if guild_id else None,
        interaction_id=str(interaction_id) if interaction_id else None,
    )


def embed_to_dict(embed: Embed, *, timestamp: datetime | None = None) -> dict[str, Any]:
    """Serialize ``embed`` in Discord's embed object shape."""
    body: dict[str, Any] = {
        "title": embed.title,
        "color": COLOR_VALUES[embed.color_tag],
        "fields": [
            {"name": f.name, "value": f.value, "inline": f.inline} for f in embed.fields
        ],
    }
    if embed.description:
        body["description"] = embed.description
    if embed.footer:
        body["footer"] = {"text": embed.footer}
    if timestamp is not None:
        body["timestamp"] = timestamp.isoformat()
    return body


def to_message_body(reply: ReplyPayload, *, timestamp: datetime | None = None) -> dict[str, Any]:
    """Message object used both inside interaction responses and for follow-ups."""
    body: dict[str, Any] = {}
    if reply.text is not None:
        body["content"] = reply.text
    if reply.embed is not None:
        body["embeds"] = [embed_to_dict(reply.embed, timestamp=timestamp)]
    if reply.is_private:
        body["flags"] = EPHEMERAL_FLAG
    return body


def to_interaction_response(
    reply: ReplyPayload, *, timestamp: datetime | None = None
) -> dict[str, Any]:
    """Immediate ``CHANNEL_MESSAGE_WITH_SOURCE`` response for ``reply``."""
    return {
        "type": int(ResponseType.CHANNEL_MESSAGE_WITH_SOURCE),
        "data": to_message_body(reply, timestamp=timestamp),
    }


def pong() -> dict[str, Any]:
    return {"type": int(ResponseType.PONG)}


def deferred(*, private: bool = False) -> dict[str, Any]:
    """Acknowledge now and answer later through a follow-up message."""
    response: dict[str, Any] = {"type": int(ResponseType.DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE)}
    if private:
        response["data"] = {"flags": EPHEMERAL_FLAG}
    return response
