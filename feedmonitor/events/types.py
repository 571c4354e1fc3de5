"""Events passed between pipeline components."""

from dataclasses import dataclass
from typing import ClassVar, Optional

from ..ingestion.interfaces import FeedEntry


@dataclass(frozen=True)
class Event:
    name: ClassVar[str] = "event"


@dataclass(frozen=True)
class FeedDue(Event):
    """A feed is stale and should be fetched."""
    name: ClassVar[str] = "feed-due"
    url: str


@dataclass(frozen=True)
class EntryObserved(Event):
    """An entry was parsed from a feed; it may or may not be new."""
    name: ClassVar[str] = "entry-observed"
    entry: FeedEntry
    feed_url: str


@dataclass(frozen=True)
class EntryNew(Event):
    """An entry id was stored for the first time."""
    name: ClassVar[str] = "entry-new"
    entry: FeedEntry
    feed_url: str


@dataclass(frozen=True)
class FeedParsed(Event):
    """Every entry of a feed was forwarded without error."""
    name: ClassVar[str] = "feed-parsed"
    url: str
    entries: int = 0


@dataclass(frozen=True)
class FeedRefreshed(Event):
    name: ClassVar[str] = "feed-refreshed"
    url: str


@dataclass(frozen=True)
class ErrorEvent(Event):
    """Failure reported by any component, optionally tied to a feed."""
    name: ClassVar[str] = "error"
    cause: BaseException
    feed_url: Optional[str] = None
