"""
Cancellable periodic task whose interval can change in place.

``set_interval`` wakes the sleeping loop and re-arms it with the new
interval; the underlying asyncio task keeps running, so there is nothing to
tear down and rebuild.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicTask:
    def __init__(
        self,
        func: Callable[[], Awaitable[object]],
        interval: float,
        *,
        name: str = "periodic-task",
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.func = func
        self.name = name
        self._interval = interval
        self._task: Optional[asyncio.Task] = None
        self._wake = asyncio.Event()
        self._stopping = False

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._stopping = False
        self._wake = asyncio.Event()
        self._task = asyncio.create_task(self._loop(), name=self.name)
        logger.info("%s started (interval=%gs)", self.name, self._interval)

    async def stop(self) -> None:
        self._stopping = True
        self._wake.set()
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("%s stopped", self.name)

    def set_interval(self, seconds: float) -> None:
        if seconds <= 0:
            raise ValueError("interval must be positive")
        if seconds == self._interval:
            return
        logger.debug("%s interval %gs -> %gs", self.name, self._interval, seconds)
        self._interval = seconds
        self._wake.set()

    async def _loop(self) -> None:
        while not self._stopping:
            try:
                await self.func()
            except Exception:
                logger.exception("Unhandled error in %s", self.name)

            # Sleep for the interval; an interval change re-arms the wait
            while True:
                self._wake.clear()
                try:
                    await asyncio.wait_for(self._wake.wait(), timeout=self._interval)
                except asyncio.TimeoutError:
                    break  # next tick
                if self._stopping:
                    return
