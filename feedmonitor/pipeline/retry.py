"""Retry policy for opening a feed within one cycle."""

from dataclasses import dataclass

from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..config.settings import settings
from ..errors import FetchError


@dataclass(frozen=True)
class RetryPolicy:
    """How often a failed fetch is retried before the cycle gives up.

    The default of one attempt leaves retrying to the next scan, which
    picks the feed up again because its timestamp was not advanced.
    """
    max_attempts: int = 1
    backoff_min_seconds: float = 1.0
    backoff_max_seconds: float = 10.0

    @classmethod
    def from_settings(cls, s=None) -> "RetryPolicy":
        s = s or settings
        return cls(
            max_attempts=s.fetch_max_attempts,
            backoff_min_seconds=s.fetch_backoff_min_seconds,
            backoff_max_seconds=s.fetch_backoff_max_seconds,
        )

    def retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(max(self.max_attempts, 1)),
            wait=wait_exponential(
                multiplier=1,
                min=self.backoff_min_seconds,
                max=self.backoff_max_seconds,
            ),
            retry=retry_if_exception_type(FetchError),
            reraise=True,
        )


NEXT_SCAN = RetryPolicy()
