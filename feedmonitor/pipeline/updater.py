"""Mark feeds fresh once a cycle completes."""

import structlog

from ..errors import StoreError
from ..events.bus import EventBus
from ..events.types import ErrorEvent, FeedParsed, FeedRefreshed
from ..storage.registry import FeedRegistry

logger = structlog.get_logger()


class TimestampUpdater:

    def __init__(self, bus: EventBus, registry: FeedRegistry):
        self.bus = bus
        self.registry = registry

    async def on_feed_parsed(self, event: FeedParsed) -> None:
        try:
            refreshed_at = await self.registry.mark_refreshed(event.url)
        except StoreError as e:
            logger.error("feed_refresh_failed", feed=event.url, error=str(e))
            await self.bus.publish(ErrorEvent(cause=e, feed_url=event.url))
            return

        logger.debug("feed_refreshed", feed=event.url, at=refreshed_at.isoformat())
        await self.bus.publish(FeedRefreshed(url=event.url))
