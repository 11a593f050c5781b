# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""
Upstream Provider Exceptions

Purpose:
    Typed outcomes for a failed call to a quote, history, summary or market
    status provider. Transport clients raise them; the snapshot use case
    classifies them into user-facing errors.

Layer: domain/exceptions
"""
from __future__ import annotations

from typing import Any

from .base import DomainError


class UpstreamError(DomainError):
    """Base class for provider failures."""

    code = "UPSTREAM_ERROR"

    def __init__(
        self,
        message: str = "",
        *,
        provider: str = "unknown",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message or self.code.lower(), details=details)
        self.provider = provider


class UpstreamNotFound(UpstreamError):
    """Provider has no data for the requested symbol."""

    code = "UPSTREAM_NOT_FOUND"


class UpstreamTimeout(UpstreamError):
    """Call did not complete before its deadline."""

    code = "UPSTREAM_TIMEOUT"


class UpstreamRateLimited(UpstreamError):
    """Provider throttled the request (HTTP 429)."""

    code = "UPSTREAM_RATE_LIMITED"


class UpstreamAuthFailed(UpstreamError):
    """Credentials were rejected or missing (HTTP 401/403)."""

    code = "UPSTREAM_AUTH_FAILED"


class UpstreamMalformedResponse(UpstreamError):
    """Provider answered with a payload that does not match its contract."""

    code = "UPSTREAM_MALFORMED_RESPONSE"


class UpstreamUnavailable(UpstreamError):
    """Network error, 5xx, or an unclassified provider failure."""

    code = "UPSTREAM_UNAVAILABLE"
