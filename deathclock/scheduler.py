"""
deathclock/scheduler.py

Asyncio-based tick loop that drives countdown re-rendering.

A single background task calls the tick callback at a fixed interval.
Ticks carry no state, so the engine tolerates any number of them.
"""

import asyncio
import inspect
import logging
from typing import Awaitable, Callable, Optional, Union


TickCallback = Callable[[], Union[None, Awaitable[None]]]


class TickScheduler:
    """
    Calls a callback once per interval until stopped.

    Args:
        interval: Seconds between ticks (default: 1.0).
        on_tick: Sync or async callable invoked each tick.
    """

    def __init__(self, interval: float = 1.0, on_tick: Optional[TickCallback] = None):
        self.interval = interval
        self.on_tick = on_tick
        self.running = False
        self.tick_count = 0
        self._task: Optional[asyncio.Task] = None
        self.logger = logging.getLogger("deathclock.scheduler")

    async def start(self) -> None:
        """Start the tick loop as a background task."""
        if self.running:
            self.logger.warning("Tick scheduler already running")
            return

        self.running = True
        self._task = asyncio.create_task(self._tick_loop())
        self.logger.info(f"Tick scheduler started (interval: {self.interval}s)")

    async def stop(self) -> None:
        """
        Stop the tick loop gracefully.

        Cancels the background task and waits for it to finish.
        """
        if not self.running:
            return

        self.running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        self.logger.info("Tick scheduler stopped")

    async def _tick_loop(self) -> None:
        """Invoke on_tick every interval; callback errors are logged, not fatal."""
        self.logger.debug("Tick loop started")

        while self.running:
            try:
                self.tick_count += 1
                if self.on_tick:
                    result = self.on_tick()
                    if inspect.isawaitable(result):
                        await result
            except asyncio.CancelledError:
                self.logger.debug("Tick loop cancelled")
                raise
            except Exception as e:
                self.logger.exception(f"Error in tick callback: {e}")

            await asyncio.sleep(self.interval)

        self.logger.debug("Tick loop ended")
