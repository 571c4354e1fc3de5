"""Feed transport over aiohttp, streaming response bodies."""

import asyncio
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import aiohttp
import structlog

from .interfaces import FetcherInterface
from ..config.settings import settings
from ..errors import FetchError

logger = structlog.get_logger()

TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError)


class FeedFetcher(FetcherInterface):
    """Async feed fetcher sharing one client session across feeds."""

    def __init__(
        self,
        timeout_seconds: Optional[float] = None,
        user_agent: Optional[str] = None,
        chunk_size: Optional[int] = None,
    ):
        self.session: Optional[aiohttp.ClientSession] = None
        self.timeout_seconds = timeout_seconds or settings.fetch_timeout_seconds
        self.user_agent = user_agent or settings.user_agent
        self.chunk_size = chunk_size or settings.fetch_chunk_size

    async def __aenter__(self):
        self._ensure_session()
        return self

    async def __aexit__(self, *args):
        await self.close()

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
                headers={
                    "User-Agent": self.user_agent,
                    "Accept": "application/rss+xml, application/atom+xml, application/xml;q=0.9, */*;q=0.8",
                },
            )
        return self.session

    @asynccontextmanager
    async def open(self, url: str) -> AsyncIterator[AsyncIterator[bytes]]:
        """Open a feed; the yielded iterator streams the body in chunks."""
        session = self._ensure_session()
        start_time = time.time()

        try:
            async with session.get(url) as response:
                elapsed_ms = int((time.time() - start_time) * 1000)
                if response.status != 200:
                    logger.warning(
                        "feed_bad_status",
                        feed=url,
                        status=response.status,
                        time_ms=elapsed_ms
                    )
                    raise FetchError(url, f"bad status code: {response.status}", status=response.status)

                logger.debug("feed_opened", feed=url, status=response.status, time_ms=elapsed_ms)
                yield self._iter_body(url, response)
        except TRANSPORT_ERRORS as e:
            logger.warning("feed_transport_failed", feed=url, error=str(e))
            raise FetchError(url, f"transport error: {e!r}") from e

    async def _iter_body(self, url: str, response: aiohttp.ClientResponse) -> AsyncIterator[bytes]:
        try:
            async for chunk in response.content.iter_chunked(self.chunk_size):
                yield chunk
        except TRANSPORT_ERRORS as e:
            raise FetchError(url, f"transport error while reading body: {e!r}") from e

    async def close(self) -> None:
        if self.session and not self.session.closed:
            await self.session.close()
        self.session = None
