"""Feed monitor: wires storage, fetcher and pipeline onto one event bus."""

from typing import Iterable, Optional

import structlog

from .config.settings import Settings, settings as default_settings
from .errors import StartupError, StoreError
from .events.bus import EventBus
from .events.types import EntryObserved, ErrorEvent, FeedDue, FeedParsed
from .ingestion.fetcher import FeedFetcher
from .ingestion.interfaces import FetcherInterface, ParserInterface
from .ingestion.parser import FeedParser
from .pipeline.coordinator import IngestionCoordinator
from .pipeline.persister import EntryPersister
from .pipeline.retry import NEXT_SCAN, RetryPolicy
from .pipeline.scanner import StalenessScanner
from .pipeline.scheduler import ScanScheduler
from .pipeline.updater import TimestampUpdater
from .storage.database import Database
from .storage.entries import EntryStore
from .storage.registry import FeedRegistry

logger = structlog.get_logger()


class FeedMonitor:
    """Polls a fixed set of feeds and records every entry id it has seen.

    ``start`` refuses to run against a store it cannot reach or prepare:
    it raises ``StartupError`` before any scan is scheduled.
    """

    def __init__(
        self,
        feeds: Iterable[str],
        rate: float,
        threshold: float,
        database_url: str,
        bus: EventBus = None,
        fetcher: FetcherInterface = None,
        parser: ParserInterface = None,
        retry_policy: RetryPolicy = NEXT_SCAN,
        create_schema: bool = True,
    ):
        self.feeds = list(feeds)
        self.rate = rate
        self.threshold = threshold
        self.database_url = database_url
        self.create_schema = create_schema

        self.bus = bus or EventBus()
        self.fetcher = fetcher or FeedFetcher()
        self.parser = parser or FeedParser()
        self.retry_policy = retry_policy

        self.db: Optional[Database] = None
        self.registry: Optional[FeedRegistry] = None
        self.entries: Optional[EntryStore] = None
        self.scanner: Optional[StalenessScanner] = None
        self.scheduler: Optional[ScanScheduler] = None

    @classmethod
    def from_settings(cls, feeds: Iterable[str], s: Settings = None, **kwargs) -> "FeedMonitor":
        s = s or default_settings
        kwargs.setdefault("retry_policy", RetryPolicy.from_settings(s))
        kwargs.setdefault(
            "fetcher",
            FeedFetcher(
                timeout_seconds=s.fetch_timeout_seconds,
                user_agent=s.user_agent,
                chunk_size=s.fetch_chunk_size,
            ),
        )
        return cls(
            feeds=feeds,
            rate=s.poll_rate_seconds,
            threshold=s.staleness_threshold_seconds,
            database_url=s.resolved_database_url(),
            create_schema=s.create_schema,
            **kwargs,
        )

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, *args):
        await self.stop()

    async def setup(self) -> None:
        """Connect, prepare the schema, register feeds and wire handlers."""
        if self.db is not None:
            return

        try:
            db = Database(self.database_url)
        except StoreError as e:
            raise StartupError(str(e)) from e

        try:
            await db.ping()
            if self.create_schema:
                await db.create_schema()
            registry = FeedRegistry(db)
            await registry.register(self.feeds)
        except StoreError as e:
            logger.error("startup_failed", error=str(e))
            await db.dispose()
            raise StartupError(f"cannot start against store: {e}") from e

        self.db = db
        self.registry = registry
        self.entries = EntryStore(db)
        self.scanner = StalenessScanner(self.bus, self.registry, self.threshold)
        self.scheduler = ScanScheduler(self.scanner, self.bus, self.rate)
        self._wire()

        logger.info("monitor_ready", feeds=len(self.feeds), rate=self.rate, threshold=self.threshold)

    def _wire(self) -> None:
        coordinator = IngestionCoordinator(self.bus, self.fetcher, self.parser, self.retry_policy)
        persister = EntryPersister(self.bus, self.entries)
        updater = TimestampUpdater(self.bus, self.registry)

        self.bus.subscribe(FeedDue, coordinator.on_feed_due)
        self.bus.subscribe(EntryObserved, persister.on_entry_observed)
        self.bus.subscribe(FeedParsed, updater.on_feed_parsed)
        self.bus.subscribe(ErrorEvent, self._log_error)

    async def _log_error(self, event: ErrorEvent) -> None:
        logger.warning(
            "monitor_error",
            feed=event.feed_url,
            error_type=type(event.cause).__name__,
            error=str(event.cause)
        )

    async def start(self) -> None:
        await self.setup()
        self.scheduler.start()

    async def run_once(self) -> int:
        """Run one scan now and wait for every cycle it started.

        Goes through the scheduler like a timed tick: if a scan is already
        in flight nothing is started and 0 is returned.
        """
        await self.setup()
        if not await self.scheduler.tick():
            return 0
        return await self.scheduler.wait_idle()

    async def stop(self) -> None:
        if self.scheduler is not None:
            await self.scheduler.shutdown()
        await self.fetcher.close()
        if self.db is not None:
            await self.db.dispose()
        logger.info("monitor_stopped")
