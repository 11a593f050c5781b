# src/tickerbot/adapters/routers/metrics_router.py
# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""Prometheus scrape endpoint (`/metrics`).

Touches the command collectors before rendering so their series exist on
the very first scrape, before any command has run.

Layer:
    adapters/routers
"""

from __future__ import annotations

from contextlib import suppress

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from tickerbot.infrastructure.observability.metrics import (
    get_command_latency_seconds,
    get_commands_total,
)

router = APIRouter()


@router.get("/metrics", include_in_schema=False)
async def metrics_probe() -> Response:
    """Expose Prometheus metrics in the text format."""
    with suppress(Exception):
        get_commands_total()
        get_command_latency_seconds()
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
