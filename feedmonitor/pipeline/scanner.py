"""Find stale feeds and start a cycle for each."""

import asyncio
from contextlib import aclosing

import structlog

from ..errors import StoreError
from ..events.bus import EventBus
from ..events.types import ErrorEvent, FeedDue
from ..storage.database import utcnow
from ..storage.registry import FeedRegistry

logger = structlog.get_logger()


class StalenessScanner:
    """One pass over the feed registry.

    Every stale feed gets a ``FeedDue`` published in its own task, so cycles
    overlap; ``scan`` returns once all of them have finished. A store error
    stops the pass early; feeds not reached are picked up by the next scan.
    """

    def __init__(self, bus: EventBus, registry: FeedRegistry, threshold_seconds: float):
        self.bus = bus
        self.registry = registry
        self.threshold_seconds = threshold_seconds

    async def scan(self) -> int:
        """Publish FeedDue for every stale feed; return how many were due."""
        started = utcnow()
        cycles = []

        try:
            async with aclosing(self.registry.stream_stale(self.threshold_seconds, now=started)) as urls:
                async for url in urls:
                    logger.debug("feed_due", feed=url)
                    cycles.append(asyncio.create_task(self.bus.publish(FeedDue(url=url))))
        except StoreError as e:
            logger.error("scan_failed", error=str(e), due_before_failure=len(cycles))
            await self.bus.publish(ErrorEvent(cause=e))
        finally:
            if cycles:
                await asyncio.gather(*cycles, return_exceptions=True)

        logger.info("scan_completed", due=len(cycles), started_at=started.isoformat())
        return len(cycles)
