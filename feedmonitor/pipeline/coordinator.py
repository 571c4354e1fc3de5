"""Per-feed ingestion cycle: fetch, parse, forward entries, signal completion."""

import time
from contextlib import AsyncExitStack, aclosing
from typing import AsyncIterator

import structlog

from .retry import NEXT_SCAN, RetryPolicy
from ..errors import FetchError, ParseError
from ..events.bus import EventBus
from ..events.types import EntryObserved, ErrorEvent, FeedDue, FeedParsed
from ..ingestion.interfaces import FetcherInterface, ParserInterface

logger = structlog.get_logger()


class IngestionCoordinator:
    """Runs one cycle per ``FeedDue`` event.

    Entries are published as ``EntryObserved`` in parse order and each is
    fully handled before the next is read. ``FeedParsed`` follows only when
    the whole feed went through; a fetch or parse failure publishes an
    ``ErrorEvent`` instead and leaves already-stored entries in place.
    """

    def __init__(
        self,
        bus: EventBus,
        fetcher: FetcherInterface,
        parser: ParserInterface,
        retry_policy: RetryPolicy = NEXT_SCAN,
    ):
        self.bus = bus
        self.fetcher = fetcher
        self.parser = parser
        self.retry_policy = retry_policy

    async def on_feed_due(self, event: FeedDue) -> None:
        url = event.url
        start_time = time.time()
        forwarded = 0

        try:
            async with AsyncExitStack() as stack:
                chunks = await self._open(stack, url)
                entries = await stack.enter_async_context(aclosing(self.parser.parse(url, chunks)))
                async for entry in entries:
                    forwarded += 1
                    await self.bus.publish(EntryObserved(entry=entry, feed_url=url))
        except (FetchError, ParseError) as e:
            logger.warning(
                "feed_cycle_failed",
                feed=url,
                forwarded=forwarded,
                error=str(e)
            )
            await self.bus.publish(ErrorEvent(cause=e, feed_url=url))
            return

        logger.info(
            "feed_parsed",
            feed=url,
            entries=forwarded,
            time_ms=int((time.time() - start_time) * 1000)
        )
        await self.bus.publish(FeedParsed(url=url, entries=forwarded))

    async def _open(self, stack: AsyncExitStack, url: str) -> AsyncIterator[bytes]:
        async for attempt in self.retry_policy.retrying():
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.info("feed_fetch_retry", feed=url, attempt=attempt.retry_state.attempt_number)
                return await stack.enter_async_context(self.fetcher.open(url))
