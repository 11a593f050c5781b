# src/tickerbot/infrastructure/http/errors.py
# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""JSON error envelope for HTTP-level failures.

Chat-level failures never reach these handlers: the interactions router
answers them with a formatted reply and HTTP 200. These cover malformed
requests, framework HTTP errors and unhandled exceptions at the web layer,
all rendered as::

    {"error": {"code": ..., "http_status": ..., "message": ..., "request_id": ...}}
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from tickerbot.infrastructure.logging.logger import get_json_logger

__all__ = ["error_envelope", "install_exception_handlers"]

logger = get_json_logger(__name__)


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def error_envelope(
    *,
    code: str,
    http_status: int,
    message: str,
    details: dict[str, Any] | None = None,
    request_id: str | None = None,
) -> dict[str, Any]:
    err: dict[str, Any] = {"code": code, "http_status": http_status, "message": message}
    if details is not None:
        err["details"] = details
    if request_id is not None:
        err["request_id"] = request_id
    return {"error": err}


async def _on_validation_error(request: Request, exc: Exception) -> Response:
    if not isinstance(exc, RequestValidationError):
        raise exc
    payload = error_envelope(
        code="VALIDATION_ERROR",
        http_status=422,
        message="Request validation failed",
        details={"errors": exc.errors()},
        request_id=_request_id(request),
    )
    return JSONResponse(status_code=422, content=jsonable_encoder(payload))


async def _on_http_error(request: Request, exc: Exception) -> Response:
    if not isinstance(exc, StarletteHTTPException):
        raise exc
    detail_is_text = isinstance(exc.detail, str)
    payload = error_envelope(
        code="HTTP_ERROR",
        http_status=exc.status_code,
        message=exc.detail if detail_is_text else "HTTP error",
        details=None if detail_is_text else {"detail": exc.detail},
        request_id=_request_id(request),
    )
    return JSONResponse(status_code=exc.status_code, content=payload, headers=exc.headers)


async def _on_unhandled(request: Request, exc: Exception) -> Response:
    logger.error(
        "http.unhandled_exception",
        exc_info=(type(exc), exc, exc.__traceback__),
        extra={"extra": {"path": request.url.path, "method": request.method}},
    )
    payload = error_envelope(
        code="INTERNAL_ERROR",
        http_status=500,
        message="Internal server error",
        request_id=_request_id(request),
    )
    return JSONResponse(status_code=500, content=payload)


def install_exception_handlers(app: FastAPI) -> None:
    """Register the envelope handlers on ``app``."""
    app.add_exception_handler(RequestValidationError, _on_validation_error)
    app.add_exception_handler(StarletteHTTPException, _on_http_error)
    app.add_exception_handler(Exception, _on_unhandled)
