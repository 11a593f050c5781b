# src/tickerbot/tasks/cli.py
# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""Tickerbot CLI: operational commands (slash command registration, local lookups).

Commands:
    commands register   Register the slash commands globally or for one guild.
    commands delete     Remove all registered slash commands.
    lookup stock        Run the stock pipeline locally and print the reply JSON.
    lookup crypto       Run the crypto pipeline locally and print the reply JSON.

Environment:
    DISCORD_APPLICATION_ID   Application (client) id.
    DISCORD_BOT_TOKEN        Bot token used for command registration.
    MASSIVE_API_KEY, FINNHUB_API_KEY, OPENAI_API_KEY / PERPLEXITY_API_KEY
                             Provider keys for ``lookup``.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Final

import httpx
import typer

from tickerbot.application.schemas.dto.chat import CommandInput
from tickerbot.config.settings import Settings, get_settings
from tickerbot.dependencies.wiring import build_discord_client, build_handle_command
from tickerbot.infrastructure.caching.memory_store import InMemoryKeyValueStore
from tickerbot.infrastructure.logging.logger import configure_root_logging, get_json_logger

configure_root_logging()
log = get_json_logger(__name__)

app = typer.Typer(add_completion=False, no_args_is_help=True)
commands_app = typer.Typer(no_args_is_help=True)
lookup_app = typer.Typer(no_args_is_help=True)
app.add_typer(commands_app, name="commands")
app.add_typer(lookup_app, name="lookup")

# Discord application command option type for strings.
_STRING_OPTION: Final[int] = 3

COMMAND_DEFINITIONS: Final[list[dict[str, Any]]] = [
    {
        "name": "stock",
        "description": "Get stock price, 7-day trend, and AI-powered news summary",
        "options": [
            {
                "name": "ticker",
                "description": "Stock ticker symbol (e.g., AAPL, NET, GOOGL)",
                "type": _STRING_OPTION,
                "required": True,
            }
        ],
    },
    {
        "name": "crypto",
        "description": "Get cryptocurrency price, 7-day trend, and AI-powered news summary",
        "options": [
            {
                "name": "symbol",
                "description": "Crypto symbol (e.g., BTC, ETH, DOGE)",
                "type": _STRING_OPTION,
                "required": True,
            }
        ],
    },
    {
        "name": "help",
        "description": "Show bot usage instructions, rate limits, and data sources",
        "options": [],
    },
]


def _application_id(settings: Settings) -> str:
    if not settings.discord_application_id:
        raise typer.BadParameter("DISCORD_APPLICATION_ID is not set")
    if settings.discord_bot_token is None:
        raise typer.BadParameter("DISCORD_BOT_TOKEN is not set")
    return settings.discord_application_id


@commands_app.command("register")
def commands_register(
    guild_id: str | None = typer.Option(  # noqa: B008
        None, envvar="GUILD_ID", help="Register to one guild (instant) instead of globally."
    ),
) -> None:
    """Register the slash commands.

    Global registration can take up to an hour to propagate; guild
    registration is immediate and meant for testing.
    """
    settings = get_settings()
    application_id = _application_id(settings)

    async def _run() -> None:
        async with httpx.AsyncClient() as http:
            discord = build_discord_client(settings, http=http)
            await discord.put_commands(application_id, COMMAND_DEFINITIONS, guild_id=guild_id)

    asyncio.run(_run())
    log.info(
        "commands.registered",
        extra={
            "extra": {
                "scope": "guild" if guild_id else "global",
                "guild_id": guild_id,
                "commands": [c["name"] for c in COMMAND_DEFINITIONS],
            }
        },
    )


@commands_app.command("delete")
def commands_delete(
    guild_id: str | None = typer.Option(  # noqa: B008
        None, envvar="GUILD_ID", help="Delete one guild's commands instead of the global set."
    ),
) -> None:
    """Remove every registered slash command in the chosen scope."""
    settings = get_settings()
    application_id = _application_id(settings)

    async def _run() -> None:
        async with httpx.AsyncClient() as http:
            discord = build_discord_client(settings, http=http)
            await discord.delete_commands(application_id, guild_id=guild_id)

    asyncio.run(_run())
    log.info(
        "commands.deleted",
        extra={"extra": {"scope": "guild" if guild_id else "global", "guild_id": guild_id}},
    )


def _lookup(command_name: str, option: str, symbol: str) -> None:
    settings = get_settings()

    async def _run() -> dict[str, Any]:
        async with httpx.AsyncClient() as http:
            handle = build_handle_command(
                settings,
                http=http,
                stores=(InMemoryKeyValueStore(), InMemoryKeyValueStore()),
            )
            reply = await handle.execute(
                CommandInput(command_name=command_name, options={option: symbol}, user_id="cli")
            )
            return reply.to_json_dict()

    typer.echo(json.dumps(asyncio.run(_run()), indent=2, ensure_ascii=False))


@lookup_app.command("stock")
def lookup_stock(ticker: str = typer.Argument(..., help="Stock ticker, e.g. AAPL.")) -> None:  # noqa: B008
    """Print the reply the bot would send for ``/stock TICKER``."""
    _lookup("stock", "ticker", ticker)


@lookup_app.command("crypto")
def lookup_crypto(symbol: str = typer.Argument(..., help="Crypto symbol, e.g. BTC.")) -> None:  # noqa: B008
    """Print the reply the bot would send for ``/crypto SYMBOL``."""
    _lookup("crypto", "symbol", symbol)


if __name__ == "__main__":  # pragma: no cover
    app()
