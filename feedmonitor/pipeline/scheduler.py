"""Drive the staleness scanner at a fixed interval, one scan at a time."""

import asyncio
import time
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
import structlog

from .scanner import StalenessScanner
from ..events.bus import EventBus
from ..events.types import ErrorEvent

logger = structlog.get_logger()


class ScanScheduler:
    """Fires ``tick`` every ``rate_seconds``.

    A tick that arrives while the previous scan or any of its feed cycles
    is still running is dropped, not queued.
    """

    def __init__(self, scanner: StalenessScanner, bus: EventBus, rate_seconds: float):
        self.scanner = scanner
        self.bus = bus
        self.rate_seconds = rate_seconds
        self.scheduler = AsyncIOScheduler()
        self.started = False
        self._current: Optional[asyncio.Task] = None

    @property
    def busy(self) -> bool:
        return self._current is not None and not self._current.done()

    async def tick(self) -> bool:
        """Start a scan unless one is in flight; True if a scan was started."""
        if self.busy:
            logger.warning("scan_skipped", reason="previous scan still running")
            return False

        self._current = asyncio.create_task(self._run_scan())
        return True

    async def _run_scan(self) -> int:
        start_time = time.time()
        try:
            due = await self.scanner.scan()
        except Exception as e:
            logger.error("scan_crashed", error=str(e), exc_info=True)
            await self.bus.publish(ErrorEvent(cause=e))
            return 0

        logger.info("scan_finished", due=due, elapsed_seconds=round(time.time() - start_time, 3))
        return due

    async def wait_idle(self) -> int:
        """Wait for the in-flight scan, if any; return how many feeds it found due."""
        if self._current is None:
            return 0
        return await self._current

    def start(self) -> None:
        """Schedule ticks; must be called with the event loop running."""
        if self.started:
            return

        self.scheduler.add_job(
            self.tick,
            IntervalTrigger(seconds=self.rate_seconds),
            id="scan_feeds",
            name="Scan for stale feeds",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self.scheduler.start()
        self.started = True
        logger.info("scheduler_started", rate_seconds=self.rate_seconds)

    async def shutdown(self) -> None:
        """Stop ticking and let the in-flight scan run to completion."""
        if self.started:
            self.scheduler.shutdown(wait=False)
            self.started = False
            logger.info("scheduler_stopped")
        await self.wait_idle()
