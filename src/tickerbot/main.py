# src/tickerbot/main.py
# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""
Application Entry

Synopsis:
    FastAPI factory for the interactions webhook. ``create_app`` wires the
    request-id middleware, the JSON error envelope and the routers; the
    lifespan delegates to :func:`tickerbot.dependencies.bootstrap.bootstrap`
    for Redis, the shared HTTP client and the background runner.

    ``app`` is an eagerly built instance for ASGI servers pointed at
    ``tickerbot.main:app``; ``tickerbot-serve`` runs the factory under uvicorn.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from tickerbot import __version__
from tickerbot.adapters.routers import interactions, metrics
from tickerbot.config.settings import Settings, get_settings
from tickerbot.dependencies.bootstrap import bootstrap
from tickerbot.infrastructure.http.errors import install_exception_handlers
from tickerbot.infrastructure.logging.logger import configure_root_logging, get_json_logger
from tickerbot.infrastructure.middleware.request_id import RequestIdMiddleware

configure_root_logging()
logger = get_json_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    async with bootstrap(app):
        yield


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the web application.

    Args:
        settings: Explicit settings (tests, CLI); defaults to the environment.
    """
    settings = settings or get_settings()
    if settings.log_level:
        configure_root_logging(settings.log_level.upper())
    version = settings.service_version or __version__

    app = FastAPI(
        title="Tickerbot",
        version=version,
        description="Discord slash-command bot for stock and crypto snapshots.",
        lifespan=lifespan,
        docs_url=None if settings.environment.value == "production" else "/docs",
        redoc_url=None,
    )
    # Read by the lifespan; wins over the process environment.
    app.state.settings = settings

    install_exception_handlers(app)
    app.add_middleware(RequestIdMiddleware)
    app.include_router(interactions)
    app.include_router(metrics)

    logger.info(
        "service_startup",
        extra={
            "extra": {
                "service": settings.service_name,
                "env": settings.environment.value,
                "version": version,
                "dev_mode": settings.dev_mode,
                "cache_backend": settings.cache_backend,
            }
        },
    )
    return app


app: FastAPI = create_app()


def serve() -> None:  # pragma: no cover
    import uvicorn

    uvicorn.run(
        "tickerbot.main:create_app",
        factory=True,
        host=os.getenv("HOST", "0.0.0.0"),  # noqa: S104
        port=int(os.getenv("PORT", "8080")),
    )


if __name__ == "__main__":  # pragma: no cover
    serve()
