# src/tickerbot/infrastructure/tasks/background.py
# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""Detached background task runner.

Synopsis:
    Runs fire-and-forget coroutines (cache write-back, deferred interaction
    processing) outside the request that scheduled them. The runner keeps a
    strong reference to every task until it finishes, since the event loop
    only holds weak ones, and logs failures instead of surfacing them.

Layer:
    infrastructure/tasks
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from contextlib import suppress
from typing import Any

from tickerbot.infrastructure.logging.logger import get_json_logger
from tickerbot.infrastructure.observability.metrics import get_background_tasks_total

__all__ = ["BackgroundTaskRunner"]

logger = get_json_logger(__name__)


class BackgroundTaskRunner:
    """Owns detached asyncio tasks for the lifetime of the process."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()
        self._counter = get_background_tasks_total()

    def __len__(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: str) -> asyncio.Task[Any]:
        """Schedule ``coro`` on the running loop and return its task.

        Args:
            coro: Coroutine to run detached.
            name: Short label for logs and metrics (``cache_write``, ``followup``).
        """
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        name = task.get_name()
        if task.cancelled():
            outcome = "cancelled"
        elif (exc := task.exception()) is not None:
            outcome = "error"
            logger.error(
                "background.task_failed",
                exc_info=(type(exc), exc, exc.__traceback__),
                extra={"extra": {"task": name}},
            )
        else:
            outcome = "ok"
        with suppress(Exception):
            self._counter.labels(name, outcome).inc()

    def _unfinished(self) -> set[asyncio.Task[Any]]:
        return {task for task in self._tasks if not task.done()}

    async def drain(self, timeout: float) -> None:
        """Wait up to ``timeout`` seconds for outstanding tasks, then cancel the rest.

        Tasks spawned by draining tasks (a follow-up scheduling its cache
        write) are waited for under the same deadline.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        still_running: set[asyncio.Task[Any]] = set()
        while pending := self._unfinished():
            remaining = deadline - loop.time()
            if remaining <= 0:
                still_running = pending
                break
            _, still_running = await asyncio.wait(pending, timeout=remaining)
            if still_running:
                still_running = self._unfinished()
                break
        if still_running:
            logger.warning(
                "background.drain_timeout",
                extra={"extra": {"cancelled": len(still_running)}},
            )
            for task in still_running:
                task.cancel()
            await asyncio.gather(*still_running, return_exceptions=True)
