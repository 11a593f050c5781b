# src/tickerbot/dependencies/bootstrap.py
# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""Core bootstrap for shared infrastructure (Redis, HTTP, background tasks).

This module owns the lifecycle of everything the web app shares across
requests. Configuration is read from Settings; construction of the command
pipeline is delegated to :mod:`tickerbot.dependencies.wiring`.

The public surface is :func:`bootstrap`, an async context manager yielding a
:class:`BootstrapState`, and :func:`get_bootstrap_state`, the FastAPI
dependency routers use to reach it.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import httpx
from fastapi import FastAPI, Request

from tickerbot.application.use_cases.handle_command import HandleCommand
from tickerbot.config.settings import Settings, get_settings
from tickerbot.dependencies.wiring import build_container
from tickerbot.infrastructure.external_apis.discord.client import DiscordClient
from tickerbot.infrastructure.logging.logger import get_json_logger
from tickerbot.infrastructure.tasks.background import BackgroundTaskRunner

__all__ = ["BootstrapState", "bootstrap", "get_bootstrap_state"]

logger = get_json_logger(__name__)


@dataclass
class BootstrapState:
    """State yielded by the bootstrap context manager."""

    settings: Settings
    http_client: httpx.AsyncClient
    runner: BackgroundTaskRunner
    handle_command: HandleCommand
    discord: DiscordClient


def _user_agent(settings: Settings) -> str:
    return f"{settings.service_name}/{settings.service_version or 'dev'}"


@asynccontextmanager
async def bootstrap(app: FastAPI) -> AsyncGenerator[BootstrapState, None]:
    """Initialize and tear down shared infrastructure.

    Responsibilities:
        * Resolve settings (``app.state.settings`` wins over the environment).
        * Initialize the Redis client when the Redis backend is selected.
        * Create the shared HTTPX AsyncClient and the background task runner.
        * Drain background work, then close HTTP and Redis on exit.

    Args:
        app: FastAPI application instance.

    Yields:
        BootstrapState: Settings, shared clients and the command pipeline.
    """
    settings: Settings = getattr(app.state, "settings", None) or get_settings()
    logger.info(
        "bootstrap.start",
        extra={"extra": {"cache_backend": settings.cache_backend}},
    )

    # Imported here so tests can monkeypatch init/close.
    import tickerbot.infrastructure.caching.redis_client as redis_client

    if settings.cache_backend == "redis":
        redis_client.init_redis(settings)
        await redis_client.ping_redis()

    http_client = httpx.AsyncClient(headers={"User-Agent": _user_agent(settings)})
    runner = BackgroundTaskRunner()
    container = build_container(settings, http=http_client, spawn=runner.spawn)

    state = BootstrapState(
        settings=settings,
        http_client=http_client,
        runner=runner,
        handle_command=container.handle_command,
        discord=container.discord,
    )
    app.state.bootstrap = state

    try:
        yield state
    finally:
        try:
            await runner.drain(settings.background_drain_timeout_s)
        except Exception:
            logger.exception("bootstrap.drain_failed")

        try:
            await http_client.aclose()
        except Exception:
            logger.exception("bootstrap.http_client_close_failed")

        if settings.cache_backend == "redis":
            try:
                await redis_client.close_redis()
            except Exception:
                logger.exception("bootstrap.redis_close_failed")

        logger.info("bootstrap.stop")


def get_bootstrap_state(request: Request) -> BootstrapState:
    """FastAPI dependency returning the state created by :func:`bootstrap`."""
    state: BootstrapState | None = getattr(request.app.state, "bootstrap", None)
    if state is None:
        raise RuntimeError("Application state not initialized; is the lifespan running?")
    return state
