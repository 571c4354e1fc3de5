"""Pytest configuration and shared fixtures."""

import os
import socket
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Dict, List, Union

import pytest
import pytest_asyncio

# Add project root to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from feedmonitor.errors import FetchError


@pytest.fixture
def temp_db():
    """Provide a temporary database file."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name
    yield f"sqlite:///{db_path}"
    # Cleanup, including WAL side files
    for suffix in ("", "-wal", "-shm"):
        try:
            os.unlink(db_path + suffix)
        except FileNotFoundError:
            pass


@pytest_asyncio.fixture
async def database(temp_db):
    """A Database with the schema created."""
    from feedmonitor.storage.database import Database

    db = Database(temp_db)
    await db.create_schema()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def registry(database):
    from feedmonitor.storage.registry import FeedRegistry
    return FeedRegistry(database)


@pytest_asyncio.fixture
async def entry_store(database):
    from feedmonitor.storage.entries import EntryStore
    return EntryStore(database)


@pytest.fixture
def sample_entry():
    """Provide a sample FeedEntry."""
    from datetime import datetime
    from feedmonitor.ingestion.interfaces import FeedEntry
    return FeedEntry(
        guid="urn:uuid:1225c695-cfb8-4ebb-aaaa-80da344efa6a",
        feed_url="https://example.com/feed.xml",
        title="Example entry",
        link="https://example.com/posts/1",
        summary="Something happened",
        published_at=datetime(2024, 1, 1, 12, 0, 0),
    )


def build_rss(items: List[Dict[str, str]], title: str = "Test Feed") -> bytes:
    """Render a minimal RSS 2.0 document; each item may carry guid/title/link."""
    parts = []
    for item in items:
        fields = []
        if "title" in item:
            fields.append(f"<title>{item['title']}</title>")
        if "link" in item:
            fields.append(f"<link>{item['link']}</link>")
        if "guid" in item:
            fields.append(f'<guid isPermaLink="false">{item["guid"]}</guid>')
        if "pubDate" in item:
            fields.append(f"<pubDate>{item['pubDate']}</pubDate>")
        parts.append("<item>" + "".join(fields) + "</item>")

    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0"><channel>'
        f"<title>{title}</title><link>https://example.com/</link>"
        "<description>test</description>"
        + "".join(parts)
        + "</channel></rss>"
    ).encode("utf-8")


@pytest.fixture
def rss():
    return build_rss


class FakeFetcher:
    """In-memory FetcherInterface.

    ``responses`` maps a URL to the body bytes, an int HTTP status (treated
    as a failed fetch), or an exception instance to raise.
    """

    def __init__(self, responses: Dict[str, Union[bytes, int, Exception]] = None, chunk_size: int = 64):
        self.responses = dict(responses or {})
        self.chunk_size = chunk_size
        self.calls: List[str] = []
        self.closed = False

    @asynccontextmanager
    async def open(self, url: str):
        self.calls.append(url)
        response = self.responses.get(url, 404)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, int):
            raise FetchError(url, f"bad status code: {response}", status=response)

        async def chunks():
            for i in range(0, len(response), self.chunk_size):
                yield response[i:i + self.chunk_size]

        yield chunks()

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_fetcher():
    return FakeFetcher()


class EventRecorder:
    """Subscribes to every event type and keeps what it saw, in order."""

    def __init__(self, bus):
        from feedmonitor.events import types

        self.events = []
        for event_type in (
            types.FeedDue, types.EntryObserved, types.EntryNew,
            types.FeedParsed, types.FeedRefreshed, types.ErrorEvent,
        ):
            bus.subscribe(event_type, self._record)

    async def _record(self, event) -> None:
        self.events.append(event)

    def of(self, event_type) -> list:
        return [e for e in self.events if isinstance(e, event_type)]


@pytest.fixture
def closed_port():
    """A local TCP port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def bus():
    from feedmonitor.events.bus import EventBus
    return EventBus()


@pytest.fixture
def recorder(bus):
    return EventRecorder(bus)
