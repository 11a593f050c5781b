# src/tickerbot/application/use_cases/handle_command.py
# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""
Use Case: Handle Command

Purpose:
    Top of the command pipeline. Turns a :class:`CommandInput` into a
    :class:`ReplyPayload` and never raises:

        validate -> rate limit -> snapshot (raced against the command
        timeout) -> render

    Validation runs before any I/O and the rate limit before any upstream
    call. :class:`BotError` is rendered as a private error reply; anything
    else becomes an ``UNKNOWN`` error with a generic message.

Layer: application/use_cases
"""

from __future__ import annotations

import asyncio
import time
from contextlib import suppress
from typing import Final

from tickerbot.application.interfaces.reply_renderer import ReplyRenderer
from tickerbot.application.schemas.dto.chat import CommandInput, ReplyPayload
from tickerbot.application.services.rate_limiter import Denied, RateLimiter
from tickerbot.application.use_cases.get_symbol_snapshot import GetSymbolSnapshot
from tickerbot.domain.enums.asset_class import AssetClass
from tickerbot.domain.exceptions.bot import BotError, BotErrorKind
from tickerbot.domain.services.symbol_validator import validate_symbol
from tickerbot.infrastructure.logging.logger import get_json_logger
from tickerbot.infrastructure.observability.metrics import (
    get_command_latency_seconds,
    get_commands_total,
)

__all__ = ["HandleCommand", "SYMBOL_OPTIONS", "TIMEOUT_MESSAGE", "UNEXPECTED_MESSAGE"]

logger = get_json_logger(__name__)

TIMEOUT_MESSAGE: Final[str] = (
    "Request timed out. The {asset} data is taking too long to fetch. "
    "Please try again in a moment."
)
UNEXPECTED_MESSAGE: Final[str] = "An unexpected error occurred. Please try again later."

# Option names accepted for the symbol, in lookup order.
SYMBOL_OPTIONS: Final[dict[AssetClass, tuple[str, ...]]] = {
    AssetClass.STOCK: ("ticker", "symbol"),
    AssetClass.CRYPTO: ("symbol", "crypto"),
}

_LOOKUP_COMMANDS: Final[dict[str, AssetClass]] = {
    "stock": AssetClass.STOCK,
    "crypto": AssetClass.CRYPTO,
}


class HandleCommand:
    """Run one slash command end to end.

    Args:
        stock: Snapshot use case for equities.
        crypto: Snapshot use case for coins.
        limiter: Per-user rate limiter (lookups only; help is free).
        renderer: Presentation port.
        command_timeout_s: Deadline for the whole snapshot step.
    """

    def __init__(
        self,
        *,
        stock: GetSymbolSnapshot,
        crypto: GetSymbolSnapshot,
        limiter: RateLimiter,
        renderer: ReplyRenderer,
        command_timeout_s: float = 35.0,
    ) -> None:
        self._snapshots = {AssetClass.STOCK: stock, AssetClass.CRYPTO: crypto}
        self._limiter = limiter
        self._renderer = renderer
        self._timeout = command_timeout_s
        self._commands = get_commands_total()
        self._latency = get_command_latency_seconds()

    async def execute(self, command: CommandInput) -> ReplyPayload:
        """Return the reply for ``command``; failures are rendered, not raised."""
        name = command.command_name.strip().lower()
        start = time.perf_counter()
        outcome = "ok"
        context = {
            "command": name,
            "user_id": command.user_id,
            "guild_id": command.guild_id,
            "interaction_id": command.interaction_id,
        }
        try:
            if name == "help":
                return self._renderer.render_help()
            asset_class = _LOOKUP_COMMANDS.get(name)
            if asset_class is None:
                raise BotError(
                    BotErrorKind.UNKNOWN,
                    f"Unknown command: {name}",
                    details={"command": name},
                )
            return await self._lookup(command, asset_class)
        except BotError as err:
            outcome = err.kind.value
            return self._renderer.render_error(err, **context)
        except Exception as exc:  # noqa: BLE001
            outcome = BotErrorKind.UNKNOWN.value
            logger.exception("command.unexpected_error", extra={"extra": context})
            err = BotError(
                BotErrorKind.UNKNOWN,
                UNEXPECTED_MESSAGE,
                details={"error": f"{type(exc).__name__}: {exc}"},
            )
            return self._renderer.render_error(err, **context)
        finally:
            with suppress(Exception):
                self._commands.labels(name, outcome).inc()
                self._latency.labels(name).observe(time.perf_counter() - start)

    async def _lookup(self, command: CommandInput, asset_class: AssetClass) -> ReplyPayload:
        raw = _symbol_option(command, asset_class)
        validation = validate_symbol(raw, asset_class)
        if not validation.valid:
            raise BotError(
                BotErrorKind.INVALID_INPUT,
                validation.reason or "Invalid symbol.",
                details={"input": raw},
            )
        symbol = validation.to_validated()

        decision = await self._limiter.check_and_admit(command.user_id)
        if isinstance(decision, Denied):
            raise BotError(
                BotErrorKind.RATE_LIMITED,
                f"You're querying too quickly! Please wait {decision.seconds_remaining} "
                "seconds before trying again.",
                details={"seconds_remaining": decision.seconds_remaining},
            )

        try:
            async with asyncio.timeout(self._timeout):
                result = await self._snapshots[asset_class].execute(symbol)
        except TimeoutError as exc:
            raise BotError(
                BotErrorKind.UPSTREAM_FAILURE,
                TIMEOUT_MESSAGE.format(asset=asset_class.value),
                details={"symbol": symbol.symbol, "timeout_s": self._timeout},
            ) from exc

        logger.info(
            "command.completed",
            extra={
                "extra": {
                    "command": command.command_name,
                    "symbol": symbol.symbol,
                    "user_id": command.user_id,
                    "has_summary": result.summary is not None,
                }
            },
        )
        return self._renderer.render_result(result)


def _symbol_option(command: CommandInput, asset_class: AssetClass) -> object:
    for option in SYMBOL_OPTIONS[asset_class]:
        value = command.options.get(option)
        if value is not None:
            return value
    return None
