# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""
Sparkline Rendering

Purpose:
    Render a price series as one line of block characters plus start/end and
    low/high labels, for display inside a monospace code block.

Layer: domain/services
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Final

__all__ = ["SPARK_CHARS", "sparkline", "format_chart_with_labels", "format_price"]

SPARK_CHARS: Final[str] = "▁▂▃▄▅▆▇█"


def sparkline(prices: Sequence[float]) -> str:
    """Return a min/max-normalized sparkline for ``prices``.

    A single point or a flat series renders at full height.
    """
    if not prices:
        return ""
    top = SPARK_CHARS[-1]
    low, high = min(prices), max(prices)
    span = high - low
    if len(prices) == 1 or span == 0:
        return top * len(prices)

    levels = len(SPARK_CHARS) - 1
    return "".join(
        SPARK_CHARS[min(round((p - low) / span * levels), levels)] for p in prices
    )


def format_price(price: float) -> str:
    """Format ``price`` as dollars with two decimals and a leading sign for negatives."""
    return f"-${abs(price):.2f}" if price < 0 else f"${price:.2f}"


def format_chart_with_labels(prices: Sequence[float]) -> str:
    """Return the sparkline, a start/end price line, and a low/high line."""
    line = sparkline(prices)
    start = format_price(prices[0] if prices else 0.0)
    end = format_price(prices[-1] if prices else 0.0)
    low = format_price(min(prices) if prices else 0.0)
    high = format_price(max(prices) if prices else 0.0)

    if not line:
        labels = start
    else:
        padding = len(line) - len(start) - len(end)
        labels = f"{start}{' ' * padding}{end}" if padding > 0 else f"{start} {end}"

    return f"{line}\n{labels}\nLow: {low} • High: {high}"
