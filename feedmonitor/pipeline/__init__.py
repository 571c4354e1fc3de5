"""Ingestion pipeline components."""

from .coordinator import IngestionCoordinator
from .persister import EntryPersister
from .retry import NEXT_SCAN, RetryPolicy
from .scanner import StalenessScanner
from .scheduler import ScanScheduler
from .updater import TimestampUpdater

__all__ = [
    "IngestionCoordinator", "EntryPersister", "RetryPolicy", "NEXT_SCAN",
    "StalenessScanner", "ScanScheduler", "TimestampUpdater",
]
