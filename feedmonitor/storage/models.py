"""SQLAlchemy models for the feed monitor database."""

from sqlalchemy import Column, Text, DateTime, Index
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class FeedModel(Base):
    """A known feed and when it was last refreshed successfully."""
    __tablename__ = "feeds"

    url = Column(Text, primary_key=True)
    last_refreshed_at = Column(DateTime, nullable=True)  # NULL = never refreshed

    __table_args__ = (
        Index('idx_feeds_last_refreshed', 'last_refreshed_at'),
    )


class EntryModel(Base):
    """An entry seen on any feed, keyed by its source guid."""
    __tablename__ = "entries"

    id = Column(Text, primary_key=True)
    feed_url = Column(Text)  # first feed the entry was observed on


async def init_db(engine) -> None:
    """Create all tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
