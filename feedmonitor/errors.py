"""Exception types raised by the feed monitor."""

from typing import Optional


class FeedMonitorError(Exception):
    """Base class for feed monitor errors."""


class StoreError(FeedMonitorError):
    """Feed registry or entry store could not be reached or queried."""


class StartupError(FeedMonitorError):
    """The monitor could not be brought up against the store."""


class FetchError(FeedMonitorError):
    """Transport failure or non-success response for a feed."""

    def __init__(self, url: str, message: str, status: Optional[int] = None):
        super().__init__(f"{message} ({url})")
        self.url = url
        self.status = status


class ParseError(FeedMonitorError):
    """Feed body could not be turned into entries."""

    def __init__(self, url: str, message: str):
        super().__init__(f"{message} ({url})")
        self.url = url
