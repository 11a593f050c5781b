# src/tickerbot/infrastructure/observability/metrics.py
# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""Tickerbot Prometheus metrics.

Collectors (names are part of the dashboard contract and must remain stable):

* ``tickerbot_cache_operations_total`` (Counter: kind, outcome)
* ``tickerbot_kv_latency_seconds`` (Histogram: backend, op, outcome)
* ``tickerbot_upstream_latency_seconds`` (Histogram: provider, endpoint, outcome)
* ``tickerbot_upstream_errors_total`` (Counter: provider, endpoint, reason)
* ``tickerbot_upstream_retries_total`` (Counter: provider, endpoint, reason)
* ``tickerbot_rate_limit_decisions_total`` (Counter: policy, decision)
* ``tickerbot_commands_total`` (Counter: command, outcome)
* ``tickerbot_command_latency_seconds`` (Histogram: command)
* ``tickerbot_background_tasks_total`` (Counter: name, outcome)

All collectors are created lazily against the *current* default registry and
reused when already registered, so module re-imports and tests that swap
:data:`prometheus_client.REGISTRY` do not raise duplicate-timeseries errors.
"""

from __future__ import annotations

from collections.abc import Sequence

import prometheus_client as prom
from prometheus_client import Counter, Histogram
from prometheus_client.registry import CollectorRegistry

__all__ = [
    "get_cache_operations_total",
    "get_kv_latency_seconds",
    "get_upstream_latency_seconds",
    "get_upstream_errors_total",
    "get_upstream_retries_total",
    "get_rate_limit_decisions_total",
    "get_commands_total",
    "get_command_latency_seconds",
    "get_background_tasks_total",
]

_LATENCY_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)


def _get_or_create_histogram(
    name: str,
    doc: str,
    labelnames: Sequence[str] | None = None,
) -> Histogram:
    """Return a histogram bound to the current default registry.

    Args:
        name: Metric name.
        doc: Human-readable metric description.
        labelnames: Optional iterable of label names.

    Returns:
        A :class:`Histogram` bound to the current :data:`prom.REGISTRY`.
    """
    registry: CollectorRegistry = prom.REGISTRY
    mapping = getattr(registry, "_names_to_collectors", {})  # internal but stable
    existing = mapping.get(name)
    if isinstance(existing, Histogram):
        return existing

    labels = tuple(labelnames) if labelnames is not None else ()
    try:
        return Histogram(name, doc, labels, buckets=_LATENCY_BUCKETS, registry=registry)
    except ValueError as exc:
        if "Duplicated timeseries" in str(exc):
            again = getattr(registry, "_names_to_collectors", {}).get(name)
            if isinstance(again, Histogram):
                return again
        raise


def _get_or_create_counter(
    name: str,
    doc: str,
    labelnames: Sequence[str] | None = None,
) -> Counter:
    """Return a counter bound to the current default registry.

    Mirrors :func:`_get_or_create_histogram` for :class:`Counter` collectors.
    """
    registry: CollectorRegistry = prom.REGISTRY
    mapping = getattr(registry, "_names_to_collectors", {})
    existing = mapping.get(name)
    if isinstance(existing, Counter):
        return existing

    labels = tuple(labelnames) if labelnames is not None else ()
    try:
        return Counter(name, doc, labels, registry=registry)
    except ValueError as exc:
        if "Duplicated timeseries" in str(exc):
            again = getattr(registry, "_names_to_collectors", {}).get(name)
            if isinstance(again, Counter):
                return again
        raise


def get_cache_operations_total() -> Counter:
    """Cache reads and writes by data kind and outcome (hit/miss/error/write/write_error)."""
    return _get_or_create_counter(
        "tickerbot_cache_operations_total",
        "Cache operations by data kind and outcome.",
        ("kind", "outcome"),
    )


def get_kv_latency_seconds() -> Histogram:
    """Latency of key-value backend operations."""
    return _get_or_create_histogram(
        "tickerbot_kv_latency_seconds",
        "Key-value store operation latency in seconds.",
        ("backend", "op", "outcome"),
    )


def get_upstream_latency_seconds() -> Histogram:
    """Latency of upstream provider calls, retries included."""
    return _get_or_create_histogram(
        "tickerbot_upstream_latency_seconds",
        "Upstream provider call latency in seconds.",
        ("provider", "endpoint", "outcome"),
    )


def get_upstream_errors_total() -> Counter:
    """Upstream failures by provider, endpoint and error class."""
    return _get_or_create_counter(
        "tickerbot_upstream_errors_total",
        "Upstream provider errors.",
        ("provider", "endpoint", "reason"),
    )


def get_upstream_retries_total() -> Counter:
    """Retries issued against upstream providers."""
    return _get_or_create_counter(
        "tickerbot_upstream_retries_total",
        "Upstream retries by provider, endpoint and reason.",
        ("provider", "endpoint", "reason"),
    )


def get_rate_limit_decisions_total() -> Counter:
    """Limiter decisions (admitted/denied/fail_open)."""
    return _get_or_create_counter(
        "tickerbot_rate_limit_decisions_total",
        "Per-user rate limiter decisions.",
        ("policy", "decision"),
    )


def get_commands_total() -> Counter:
    """Completed commands by name and outcome (ok or the error kind)."""
    return _get_or_create_counter(
        "tickerbot_commands_total",
        "Slash commands handled.",
        ("command", "outcome"),
    )


def get_command_latency_seconds() -> Histogram:
    """End-to-end command latency."""
    return _get_or_create_histogram(
        "tickerbot_command_latency_seconds",
        "Slash command latency in seconds.",
        ("command",),
    )


def get_background_tasks_total() -> Counter:
    """Detached background tasks by name and outcome."""
    return _get_or_create_counter(
        "tickerbot_background_tasks_total",
        "Background tasks completed.",
        ("name", "outcome"),
    )
