"""In-process periodic sweep of unprocessed system events."""
from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Optional

from app.config import settings
from app.services.event_processor import EventProcessor, event_processor

logger = logging.getLogger(__name__)


class EventSweepScheduler:
    """Runs the event processor once on start, then every ``interval`` seconds.

    One instance lives on ``app.state`` for the lifetime of the process.
    ``start`` is idempotent; ``stop`` resets the instance so it can be
    started again.
    """

    def __init__(
        self,
        processor: Optional[EventProcessor] = None,
        interval: Optional[float] = None,
    ):
        self.processor = processor if processor is not None else event_processor
        self.interval = interval if interval is not None else settings.EVENT_SWEEP_INTERVAL_SECONDS
        if self.interval <= 0:
            raise ValueError(f"Sweep interval must be positive, got {self.interval}")
        self._task: Optional[asyncio.Task] = None
        self.runs = 0

    @property
    def started(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> bool:
        """Start the loop. Returns False if it was already running."""
        if self.started:
            logger.info("Event sweep already initialized")
            return False

        logger.info(f"Initializing event sweep every {self.interval:g}s")
        self._task = asyncio.get_running_loop().create_task(self._run(), name="event-sweep")
        self._task.add_done_callback(self._on_done)
        return True

    def _on_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Event sweep loop exited", exc_info=exc)

    async def _tick(self) -> None:
        try:
            await self.processor.process_system_events()
        except Exception:
            logger.exception("Error in event sweep")
        finally:
            self.runs += 1

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        # Fixed-rate schedule: a slow pass does not push later ticks back.
        next_run = loop.time()
        while True:
            await self._tick()
            next_run += self.interval
            delay = next_run - loop.time()
            if delay < 0:
                skipped = int(-delay // self.interval) + 1
                next_run += skipped * self.interval
                delay = next_run - loop.time()
            await asyncio.sleep(delay)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Event sweep stopped")
