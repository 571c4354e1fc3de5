"""Feed configuration loader."""

import json
from pathlib import Path
from typing import List, Union


def load_feeds(config_path: Union[str, Path] = None) -> List[str]:
    """Load enabled feed URLs from a JSON file.

    Accepts ``{"feeds": [{"url": ..., "enabled": true}, ...]}``; bare URL
    strings are allowed in the list as well. Duplicates are dropped, first
    occurrence wins.
    """
    if config_path is None:
        from .settings import settings
        config_path = settings.feeds_path

    with open(config_path) as f:
        data = json.load(f)

    urls = []
    for feed_data in data.get("feeds", []):
        if isinstance(feed_data, str):
            url = feed_data
        else:
            if not feed_data.get("enabled", True):
                continue
            url = feed_data["url"]
        if url not in urls:
            urls.append(url)

    return urls
