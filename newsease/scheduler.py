"""Periodic auto-refresh on the running event loop."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class AutoRefresher:
    """Call ``callback`` every ``interval`` seconds until stopped.

    A failing refresh is logged and the loop keeps going. ``start`` while
    already running and ``stop`` while stopped are both no-ops.
    """

    def __init__(self, callback: Callable[[], Awaitable[None]], interval: float):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.callback = callback
        self.interval = interval
        self.runs = 0
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._loop())
        logger.info("Auto-refresh every %.0fs", self.interval)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Auto-refresh stopped after %d runs", self.runs)

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.callback()
            except Exception:
                logger.exception("Auto-refresh failed")
            self.runs += 1
