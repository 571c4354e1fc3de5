"""Feed ingestion - fetching and parsing feeds."""

from .interfaces import FeedEntry, FetcherInterface, ParserInterface
from .fetcher import FeedFetcher
from .parser import FeedParser

__all__ = [
    "FeedEntry", "FetcherInterface", "ParserInterface",
    "FeedFetcher", "FeedParser"
]
