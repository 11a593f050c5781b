# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""Asset classes served by the bot."""

from __future__ import annotations

from enum import Enum


class AssetClass(str, Enum):
    """Kind of instrument a symbol names."""

    STOCK = "stock"
    CRYPTO = "crypto"
