# src/tickerbot/domain/entities/base.py
# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""Base Entity (Domain Layer).

Purpose:
    Mixin for the immutable market-data values. Subclasses declare fields
    and check invariants in ``__post_init__``; :meth:`BaseEntity.to_payload`
    gives the JSON-ready form the cache stores.

Layer:
    domain/entities
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, tuple | list):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    return value


@dataclass(frozen=True, slots=True)
class BaseEntity:
    """Base mixin for domain entities."""

    def __post_init__(self) -> None:
        return

    def to_payload(self) -> dict[str, Any]:
        """Field mapping with tuples as lists and enums as their values."""
        return {k: _jsonable(v) for k, v in asdict(self).items()}
