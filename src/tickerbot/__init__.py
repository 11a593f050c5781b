# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""Tickerbot: stock and crypto snapshots for chat slash commands."""

from __future__ import annotations

__version__ = "0.1.0"
