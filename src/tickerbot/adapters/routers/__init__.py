"""Routers Package Export (Adapters Layer).

Purpose:
    Provide stable, explicit exports for the routers the FastAPI application
    mounts at startup.

Layer:
    adapters/routers
"""

from __future__ import annotations

from .interactions_router import router as interactions  # noqa: F401
from .metrics_router import router as metrics  # noqa: F401

__all__ = ["interactions", "metrics"]
