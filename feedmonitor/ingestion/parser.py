"""Feed body parsing on top of feedparser."""

from datetime import datetime
from typing import AsyncIterator, Optional

import feedparser
import structlog

from .interfaces import FeedEntry, ParserInterface
from ..errors import ParseError

logger = structlog.get_logger()


class FeedParser(ParserInterface):
    """Turn a streamed feed body into FeedEntry objects.

    feedparser works on whole documents, so the body is collected as it
    arrives and entries are handed out one at a time once it is complete.
    """

    async def parse(self, url: str, chunks: AsyncIterator[bytes]) -> AsyncIterator[FeedEntry]:
        body = bytearray()
        async for chunk in chunks:
            body.extend(chunk)

        feed = feedparser.parse(bytes(body))

        if feed.bozo and not feed.entries:
            raise ParseError(url, f"unparseable feed: {feed.get('bozo_exception')!r}")
        if feed.bozo:
            logger.warning("feed_malformed", feed=url, error=str(feed.get("bozo_exception")))

        for raw in feed.entries:
            entry = self._parse_entry(raw, url)
            if entry is None:
                logger.warning("entry_without_id", feed=url, title=raw.get("title", "")[:50])
                continue
            yield entry

    def _parse_entry(self, raw, url: str) -> Optional[FeedEntry]:
        """Map a feedparser entry to a FeedEntry; None if it has no identity."""
        link = raw.get("link", "")
        guid = raw.get("id") or link
        if not guid:
            return None

        # Parse date
        published_at = None
        for attr in ["published_parsed", "updated_parsed"]:
            parsed = raw.get(attr)
            if parsed:
                try:
                    published_at = datetime(*parsed[:6])
                    break
                except (TypeError, ValueError):
                    pass

        return FeedEntry(
            guid=guid,
            feed_url=url,
            title=raw.get("title", ""),
            link=link,
            summary=raw.get("summary", ""),
            published_at=published_at,
        )
