"""Async engine and scoped sessions shared by the feed registry and entry store."""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
import structlog

from .models import init_db
from ..errors import StoreError

logger = structlog.get_logger()

# Plain URLs are pointed at the asyncio drivers
ASYNC_DRIVERS = {
    "postgres": "postgresql+asyncpg",
    "postgresql": "postgresql+asyncpg",
    "postgresql+psycopg2": "postgresql+asyncpg",
    "sqlite": "sqlite+aiosqlite",
}

SUPPORTED_DIALECTS = ("postgresql", "sqlite")

STORE_ERRORS = (SQLAlchemyError, OSError)


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_async_url(database_url: str) -> str:
    """Map a plain database URL onto its asyncio driver."""
    url = make_url(database_url)
    drivername = ASYNC_DRIVERS.get(url.drivername)
    if drivername:
        url = url.set(drivername=drivername)
    return url.render_as_string(hide_password=False)


def _sqlite_pragmas(dbapi_connection, connection_record):
    # WAL lets a streaming scan read while cycles write
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()


class Database:
    """Owns the async engine; hands out sessions that are always released."""

    def __init__(self, database_url: str):
        self.url = to_async_url(database_url)
        parsed = make_url(self.url)

        if parsed.get_backend_name() not in SUPPORTED_DIALECTS:
            raise StoreError(f"unsupported database backend: {parsed.get_backend_name()}")

        engine_kwargs = {"echo": False}
        if parsed.get_backend_name() == "sqlite":
            # Ensure data directory exists
            if parsed.database and parsed.database != ":memory:":
                try:
                    Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)
                except OSError as e:
                    raise StoreError(f"cannot create database directory: {e}") from e
            engine_kwargs["connect_args"] = {"timeout": 30}
        else:
            engine_kwargs["pool_pre_ping"] = True

        self.engine = create_async_engine(self.url, **engine_kwargs)
        if self.dialect == "sqlite":
            event.listen(self.engine.sync_engine, "connect", _sqlite_pragmas)
        self.Session = async_sessionmaker(self.engine, expire_on_commit=False)

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Scoped session: commit on success, roll back on error, always close."""
        session = self.Session()
        try:
            yield session
            await session.commit()
        except Exception as e:
            try:
                await session.rollback()
            except STORE_ERRORS as rollback_error:
                # The original failure is the one reported
                logger.warning("session_rollback_failed", error=str(rollback_error))
            if isinstance(e, STORE_ERRORS):
                raise StoreError(f"store access failed: {e}") from e
            raise
        finally:
            await session.close()

    async def ping(self) -> None:
        """Check the store is reachable."""
        async with self.session() as session:
            await session.execute(text("SELECT 1"))
        logger.info("store_connected", dialect=self.dialect)

    async def create_schema(self) -> None:
        try:
            await init_db(self.engine)
        except STORE_ERRORS as e:
            raise StoreError(f"schema bootstrap failed: {e}") from e
        logger.info("store_schema_ready")

    async def dispose(self) -> None:
        await self.engine.dispose()
