"""In-process notification that the jargon table changed."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class JargonUpdateEvent:
    message: str


JargonListener = Callable[[JargonUpdateEvent], Awaitable[object]]


class JargonUpdateNotifier:
    """Fan out jargon mutation events to async listeners.

    ``publish`` schedules each listener as a background task and returns
    immediately, so the request that mutated the table never waits for a
    dictionary reload. Listener errors are logged, never raised.
    """

    def __init__(self) -> None:
        self._listeners: list[JargonListener] = []
        self._tasks: set[asyncio.Task] = set()

    def subscribe(self, listener: JargonListener) -> None:
        self._listeners.append(listener)

    def publish(self, event: JargonUpdateEvent) -> list[asyncio.Task]:
        logger.info("Jargon update event: %s", event.message)
        scheduled: list[asyncio.Task] = []
        for listener in self._listeners:
            task = asyncio.create_task(self._run(listener, event))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            scheduled.append(task)
        return scheduled

    async def _run(self, listener: JargonListener, event: JargonUpdateEvent) -> None:
        try:
            await listener(event)
        except Exception:
            logger.exception("Jargon update listener failed for %r", event.message)

    async def drain(self) -> None:
        """Wait for every scheduled listener to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks))
