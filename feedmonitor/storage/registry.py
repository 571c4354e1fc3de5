"""Feed registry: known feeds and when each was last refreshed."""

from datetime import datetime, timedelta
from typing import AsyncIterator, Iterable, List, Optional

from sqlalchemy import or_, select, update
import structlog

from .database import Database, utcnow
from .models import FeedModel
from .statements import insert_if_absent

logger = structlog.get_logger()


class FeedRegistry:
    """Access to the ``feeds`` table."""

    def __init__(self, db: Database):
        self.db = db

    async def register(self, urls: Iterable[str]) -> int:
        """Insert every URL not yet known; return how many were new."""
        rows = [{"url": url} for url in dict.fromkeys(urls)]
        if not rows:
            return 0

        stmt = insert_if_absent(self.db.dialect, FeedModel).values(rows)
        async with self.db.session() as session:
            result = await session.execute(stmt)
            added = max(result.rowcount, 0)

        logger.info("feeds_registered", configured=len(rows), added=added)
        return added

    async def stream_stale(self, threshold_seconds: float, now: datetime = None) -> AsyncIterator[str]:
        """Yield URLs of feeds never refreshed or refreshed before now - threshold.

        Rows are streamed from a server-side cursor, so the session stays
        open until the iterator is exhausted or closed.
        """
        cutoff = (now or utcnow()) - timedelta(seconds=threshold_seconds)
        stmt = (
            select(FeedModel.url)
            .where(or_(
                FeedModel.last_refreshed_at.is_(None),
                FeedModel.last_refreshed_at < cutoff,
            ))
            .order_by(FeedModel.url)
        )

        async with self.db.session() as session:
            result = await session.stream_scalars(stmt)
            async for url in result:
                yield url

    async def mark_refreshed(self, url: str, at: datetime = None) -> datetime:
        """Set last_refreshed_at for a feed; return the timestamp written."""
        at = at or utcnow()
        stmt = (
            update(FeedModel)
            .where(FeedModel.url == url)
            .values(last_refreshed_at=at)
        )
        async with self.db.session() as session:
            result = await session.execute(stmt)
            if result.rowcount == 0:
                logger.warning("refresh_unknown_feed", feed=url)
        return at

    async def last_refreshed(self, url: str) -> Optional[datetime]:
        async with self.db.session() as session:
            return await session.scalar(
                select(FeedModel.last_refreshed_at).where(FeedModel.url == url)
            )

    async def list_feeds(self) -> List[dict]:
        """All registered feeds with their freshness."""
        async with self.db.session() as session:
            rows = await session.execute(
                select(FeedModel.url, FeedModel.last_refreshed_at).order_by(FeedModel.url)
            )
            return [
                {"url": row.url, "last_refreshed_at": row.last_refreshed_at}
                for row in rows
            ]
