"""Database storage and models."""

from .database import Database, to_async_url, utcnow
from .entries import EntryStore
from .models import Base, EntryModel, FeedModel, init_db
from .registry import FeedRegistry

__all__ = [
    "Database", "to_async_url", "utcnow", "EntryStore", "FeedRegistry",
    "Base", "EntryModel", "FeedModel", "init_db",
]
