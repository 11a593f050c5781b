# src/tickerbot/application/schemas/dto/base.py
# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""Base DTO (Application Layer).

Purpose:
    Pydantic base for the chat DTOs exchanged between the command pipeline
    and the platform adapters. Platform-neutral: no Discord field names.

Layer: application/schemas/dto
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class BaseDTO(BaseModel):
    """Strict, whitespace-trimming DTO base (``extra='forbid'``)."""

    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        validate_assignment=True,
    )

    def to_json_dict(self) -> dict[str, Any]:
        """JSON-mode dump without unset optionals (enums as values)."""
        return self.model_dump(mode="json", exclude_none=True)
