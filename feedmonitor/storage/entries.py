"""Entry store: every entry id ever seen, across all feeds."""

from typing import Optional

from sqlalchemy import func, select
import structlog

from .database import Database
from .models import EntryModel
from .statements import insert_if_absent
from ..ingestion.interfaces import FeedEntry

logger = structlog.get_logger()


class EntryStore:
    """Access to the ``entries`` table."""

    def __init__(self, db: Database):
        self.db = db

    async def insert_if_absent(self, entry: FeedEntry, feed_url: str) -> bool:
        """Store the entry unless its id exists; True when it was new.

        One atomic statement: no existence check precedes the insert.
        """
        stmt = insert_if_absent(self.db.dialect, EntryModel).values(
            id=entry.guid,
            feed_url=feed_url,
        )
        async with self.db.session() as session:
            result = await session.execute(stmt)
            inserted = result.rowcount == 1

        if inserted:
            logger.debug("entry_saved", id=entry.guid[:80], feed=feed_url)
        else:
            logger.debug("entry_duplicate", id=entry.guid[:80], feed=feed_url)
        return inserted

    async def get(self, entry_id: str) -> Optional[dict]:
        async with self.db.session() as session:
            model = await session.get(EntryModel, entry_id)
            if not model:
                return None
            return {"id": model.id, "feed_url": model.feed_url}

    async def count(self, feed_url: str = None) -> int:
        """Number of stored entries, optionally for one feed."""
        stmt = select(func.count()).select_from(EntryModel)
        if feed_url:
            stmt = stmt.where(EntryModel.feed_url == feed_url)
        async with self.db.session() as session:
            return await session.scalar(stmt)
