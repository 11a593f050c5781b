# src/tickerbot/domain/exceptions/base.py
# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""
Base Domain Exceptions.

Summary:
    Root of the bot's exception hierarchy. Upstream provider failures and
    user-facing command failures both derive from :class:`DomainError`, so
    the pipeline top can tell explained failures from programming errors.

    ``details`` is log-only metadata; nothing in it is ever shown in chat.

Layer:
    domain/exceptions
"""
from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base class for all domain/application exceptions.

    Attributes:
        code: Stable machine-readable identifier, overridden per subclass.
        message: Human-readable summary.
        details: Structured context for log records.
    """

    code: str = "DOMAIN_ERROR"

    def __init__(self, message: str = "", *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = dict(details) if details else {}

    def log_fields(self) -> dict[str, Any]:
        """Flat mapping for ``extra={"extra": ...}`` log records."""
        return {"error_code": self.code, "error": self.message, **self.details}
