"""Event routing between pipeline components."""

from .bus import EventBus
from .types import (
    Event, FeedDue, EntryObserved, EntryNew, FeedParsed, FeedRefreshed, ErrorEvent
)

__all__ = [
    "EventBus", "Event", "FeedDue", "EntryObserved", "EntryNew",
    "FeedParsed", "FeedRefreshed", "ErrorEvent",
]
