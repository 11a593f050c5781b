# src/tickerbot/infrastructure/external_apis/discord/client.py
# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""Discord REST client.

Covers the two calls the bot makes outside the interaction response itself:

* Follow-up messages for deferred interactions
  (``POST /webhooks/{application_id}/{token}``, authenticated by the
  interaction token in the path).
* Application command registration
  (``PUT /applications/{id}/commands`` or the guild-scoped variant,
  authenticated with the bot token).
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import httpx
from pydantic import SecretStr

from tickerbot.infrastructure.external_apis.base_client import JsonApiClient
from tickerbot.infrastructure.resilience.retry import RetryPolicy

__all__ = ["DiscordClient"]


class DiscordClient(JsonApiClient):
    """Async Discord REST client."""

    def __init__(
        self,
        *,
        base_url: str = "https://discord.com/api/v10",
        bot_token: SecretStr | str | None = None,
        http: httpx.AsyncClient | None = None,
        timeout_s: float = 10.0,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        super().__init__(
            provider="discord",
            base_url=base_url,
            http=http,
            timeout_s=timeout_s,
            retry_policy=retry_policy,
        )
        if isinstance(bot_token, str):
            bot_token = SecretStr(bot_token)
        self._bot_token = bot_token

    def _bot_headers(self) -> dict[str, str]:
        if self._bot_token is None:
            raise RuntimeError("DISCORD_BOT_TOKEN is required for command registration")
        return {"Authorization": f"Bot {self._bot_token.get_secret_value()}"}

    @staticmethod
    def _commands_path(application_id: str, guild_id: str | None) -> str:
        if guild_id:
            return f"/applications/{application_id}/guilds/{guild_id}/commands"
        return f"/applications/{application_id}/commands"

    async def send_followup(
        self, application_id: str, token: str, body: Mapping[str, Any]
    ) -> None:
        """Post the follow-up message for a deferred interaction."""
        await self._request(
            op="followup",
            method="POST",
            path=f"/webhooks/{application_id}/{token}",
            json_body=body,
        )

    async def put_commands(
        self,
        application_id: str,
        commands: Sequence[Mapping[str, Any]],
        guild_id: str | None = None,
    ) -> Any:
        """Bulk-overwrite the application's slash commands (global or per guild)."""
        return await self._request(
            op="put_commands",
            method="PUT",
            path=self._commands_path(application_id, guild_id),
            json_body=[dict(c) for c in commands],
            headers=self._bot_headers(),
        )

    async def delete_commands(self, application_id: str, guild_id: str | None = None) -> None:
        """Remove every registered slash command."""
        await self.put_commands(application_id, [], guild_id=guild_id)
