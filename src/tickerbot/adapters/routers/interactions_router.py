# src/tickerbot/adapters/routers/interactions_router.py
# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""Discord interactions endpoint (Adapters Layer).

Purpose:
    Receive signed interaction webhooks and route them into the command
    pipeline.

Design:
    * Signature verification on the raw body, skipped only in ``DEV_MODE``.
    * ``PING`` is answered with ``PONG``.
    * Lookups (``stock``, ``crypto``) are acknowledged with a deferred
      response; the pipeline runs on the background runner and its reply is
      delivered as a webhook follow-up.
    * ``help`` is answered inline.
    * Chat-level failures (unknown command or interaction type, malformed
      interaction) answer HTTP 200 with a private formatted reply.

Layer:
    adapters/routers
"""

from __future__ import annotations

import json
import time
from datetime import UTC, datetime
from typing import Annotated, Any, Final

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from tickerbot.adapters.mappers.discord_mapper import (
    InteractionType,
    deferred,
    parse_interaction,
    pong,
    to_interaction_response,
    to_message_body,
)
from tickerbot.adapters.presenters.error_presenter import format_error, log_bot_error
from tickerbot.application.schemas.dto.chat import CommandInput
from tickerbot.dependencies.bootstrap import BootstrapState, get_bootstrap_state
from tickerbot.domain.exceptions.bot import BotError, BotErrorKind
from tickerbot.infrastructure.logging.logger import get_json_logger, set_request_context
from tickerbot.infrastructure.security.discord_signature import (
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
    verify_signature,
)

__all__ = ["router", "DEFERRED_COMMANDS"]

logger = get_json_logger(__name__)
router = APIRouter()

DEFERRED_COMMANDS: Final[frozenset[str]] = frozenset({"stock", "crypto"})

State = Annotated[BootstrapState, Depends(get_bootstrap_state)]


def _error_response(error: BotError, **context: Any) -> JSONResponse:
    log_bot_error(error, **context)
    return JSONResponse(to_interaction_response(format_error(error)))


async def _process_and_follow_up(
    state: BootstrapState,
    command: CommandInput,
    application_id: str,
    token: str,
) -> None:
    start = time.perf_counter()
    reply = await state.handle_command.execute(command)
    body = to_message_body(reply, timestamp=datetime.now(tz=UTC))
    try:
        await state.discord.send_followup(application_id, token, body)
    except Exception:
        logger.exception(
            "interaction.followup_failed",
            extra={"extra": {"command": command.command_name, "user_id": command.user_id}},
        )
        return
    logger.info(
        "interaction.followup_sent",
        extra={
            "extra": {
                "command": command.command_name,
                "user_id": command.user_id,
                "duration_ms": round((time.perf_counter() - start) * 1000, 1),
            }
        },
    )


@router.get("/", include_in_schema=False)
async def health() -> dict[str, str]:
    """Liveness payload for uptime monitors."""
    return {
        "status": "ok",
        "message": "Discord Stock Bot is running",
        "timestamp": datetime.now(tz=UTC).isoformat(),
    }


@router.post("/interactions", include_in_schema=False)
async def interactions(request: Request, state: State) -> JSONResponse:
    """Handle one Discord interaction webhook."""
    body = await request.body()
    settings = state.settings

    if not settings.dev_mode:
        valid = verify_signature(
            settings.discord_public_key or "",
            request.headers.get(SIGNATURE_HEADER),
            request.headers.get(TIMESTAMP_HEADER),
            body,
        )
        if not valid:
            logger.warning("interaction.invalid_signature")
            return JSONResponse({"error": "Invalid request signature"}, status_code=401)

    try:
        raw = json.loads(body)
    except ValueError:
        logger.warning("interaction.invalid_json")
        return JSONResponse({"error": "Invalid JSON body"}, status_code=400)
    if not isinstance(raw, dict):
        return JSONResponse({"error": "Invalid JSON body"}, status_code=400)

    interaction_type = raw.get("type")
    if interaction_type == InteractionType.PING:
        logger.info("interaction.ping")
        return JSONResponse(pong())

    if interaction_type != InteractionType.APPLICATION_COMMAND:
        return _error_response(
            BotError(BotErrorKind.UNKNOWN, "Unsupported interaction type"),
            interaction_type=interaction_type,
        )

    try:
        command = parse_interaction(raw)
    except ValueError as exc:
        return _error_response(
            BotError(BotErrorKind.UNKNOWN, "Command name missing from interaction"),
            reason=str(exc),
        )

    set_request_context(interaction_id=command.interaction_id)
    logger.info(
        "interaction.received",
        extra={"extra": {"command": command.command_name, "user_id": command.user_id}},
    )

    if command.command_name in DEFERRED_COMMANDS:
        application_id = str(raw.get("application_id") or settings.discord_application_id or "")
        token = str(raw.get("token") or "")
        state.runner.spawn(
            _process_and_follow_up(state, command, application_id, token),
            name="followup",
        )
        return JSONResponse(deferred())

    reply = await state.handle_command.execute(command)
    return JSONResponse(to_interaction_response(reply))
