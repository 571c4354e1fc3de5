"""Deduplicate observed entries and persist the new ones."""

import structlog

from ..errors import StoreError
from ..events.bus import EventBus
from ..events.types import EntryNew, EntryObserved, ErrorEvent
from ..storage.entries import EntryStore

logger = structlog.get_logger()


class EntryPersister:
    """Stores each observed entry once; publishes ``EntryNew`` for first sightings."""

    def __init__(self, bus: EventBus, entries: EntryStore):
        self.bus = bus
        self.entries = entries

    async def on_entry_observed(self, event: EntryObserved) -> None:
        try:
            is_new = await self.entries.insert_if_absent(event.entry, event.feed_url)
        except StoreError as e:
            logger.error("entry_persist_failed", id=event.entry.guid[:80], feed=event.feed_url, error=str(e))
            await self.bus.publish(ErrorEvent(cause=e, feed_url=event.feed_url))
            return

        if is_new:
            logger.info("entry_new", id=event.entry.guid[:80], feed=event.feed_url)
            await self.bus.publish(EntryNew(entry=event.entry, feed_url=event.feed_url))
