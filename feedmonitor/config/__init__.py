"""Settings and feed list loading."""

from .settings import Settings, settings
from .feeds import load_feeds

__all__ = ["Settings", "settings", "load_feeds"]
