"""Staleness-driven feed monitor."""

from .monitor import FeedMonitor
from .events import (
    EventBus, FeedDue, EntryObserved, EntryNew, FeedParsed, FeedRefreshed, ErrorEvent
)
from .errors import FeedMonitorError, FetchError, ParseError, StartupError, StoreError

__all__ = [
    "FeedMonitor", "EventBus", "FeedDue", "EntryObserved", "EntryNew",
    "FeedParsed", "FeedRefreshed", "ErrorEvent",
    "FeedMonitorError", "FetchError", "ParseError", "StartupError", "StoreError",
]
