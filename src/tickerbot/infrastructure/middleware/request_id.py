# src/tickerbot/infrastructure/middleware/request_id.py
# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""Request correlation and access logging.

Every HTTP request gets a correlation id (the caller's ``X-Request-ID`` when
it is safe, else a UUID4). The id is stored on ``request.state``, pushed into
the logging context so interaction handling and spawned follow-ups inherit
it, echoed on the response, and written to one ``http.request`` access line
with status and duration.
"""

from __future__ import annotations

import re
import time
import uuid
from typing import Final

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from tickerbot.infrastructure.logging.logger import get_json_logger, set_request_context

__all__ = ["REQUEST_ID_HEADER", "RequestIdMiddleware", "coerce_request_id"]

REQUEST_ID_HEADER: Final[str] = "X-Request-ID"
_SAFE_RE: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9\-_.:@]{1,128}$")

# Scrapes and health probes are too frequent to log.
_QUIET_PATHS: Final[frozenset[str]] = frozenset({"/", "/metrics"})

logger = get_json_logger(__name__)


def coerce_request_id(raw: str | None) -> str:
    if raw and _SAFE_RE.match(raw):
        return raw
    return str(uuid.uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Correlation id on request, log context and response, plus an access line."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = coerce_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        set_request_context(request_id=request_id)

        start = time.perf_counter()
        response: Response = await call_next(request)
        response.headers.setdefault(REQUEST_ID_HEADER, request_id)

        if request.url.path not in _QUIET_PATHS:
            logger.info(
                "http.request",
                extra={
                    "extra": {
                        "method": request.method,
                        "path": request.url.path,
                        "status": response.status_code,
                        "duration_ms": round((time.perf_counter() - start) * 1000, 1),
                    }
                },
            )
        return response
