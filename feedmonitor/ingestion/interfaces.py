"""Interface definitions for feed fetching and parsing."""

from dataclasses import dataclass
from datetime import datetime
from typing import AsyncContextManager, AsyncIterator, Optional


@dataclass
class FeedEntry:
    """One entry observed on a feed."""
    guid: str
    feed_url: str = ""
    title: str = ""
    link: str = ""
    summary: str = ""
    published_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "guid": self.guid,
            "feed_url": self.feed_url,
            "title": self.title,
            "link": self.link,
            "summary": self.summary,
            "published_at": self.published_at.isoformat() if self.published_at else None,
        }


class FetcherInterface:
    """Interface for feed transport."""

    def open(self, url: str) -> AsyncContextManager[AsyncIterator[bytes]]:
        """Open a feed and yield its body as a stream of byte chunks.

        Raises FetchError on transport failure or a non-success status.
        """
        raise NotImplementedError

    async def close(self) -> None:
        """Release transport resources."""


class ParserInterface:
    """Interface for turning a feed body into entries."""

    def parse(self, url: str, chunks: AsyncIterator[bytes]) -> AsyncIterator[FeedEntry]:
        """Yield entries from the body in document order.

        Raises ParseError when the body is not a usable feed.
        """
        raise NotImplementedError
