#!/usr/bin/env python3
"""Run the feed monitor as a long-lived worker.

Usage:
    python scripts/run_monitor.py            # poll until SIGINT/SIGTERM
    python scripts/run_monitor.py --once     # one scan, then exit

Environment Variables:
    FM_DATABASE_URL: full connection string (or FM_DB_USER, FM_DB_PASSWORD,
                     FM_DB_HOST, FM_DB_PORT, FM_DB_NAME)
    FM_POLL_RATE_SECONDS, FM_STALENESS_THRESHOLD_SECONDS
    FM_FEEDS_PATH: JSON feed list
"""

import argparse
import asyncio
import os
import signal
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import structlog

from feedmonitor.config import load_feeds, settings
from feedmonitor.errors import StartupError
from feedmonitor.events import EntryNew
from feedmonitor.logging_conf import configure_logging
from feedmonitor.monitor import FeedMonitor

logger = structlog.get_logger()


async def log_new_entry(event: EntryNew) -> None:
    logger.info("new_entry", feed=event.feed_url, title=event.entry.title[:80], link=event.entry.link)


async def main(once: bool = False) -> int:
    """Main entry point."""
    feeds = load_feeds(settings.feeds_path)
    monitor = FeedMonitor.from_settings(feeds)
    monitor.bus.subscribe(EntryNew, log_new_entry)

    if once:
        try:
            due = await monitor.run_once()
        except StartupError as e:
            logger.error("monitor_startup_failed", error=str(e))
            return 1
        finally:
            await monitor.stop()
        logger.info("single_scan_done", due=due)
        return 0

    stopping = asyncio.Event()

    # Handle graceful shutdown
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signum, stopping.set)

    try:
        await monitor.start()
    except StartupError as e:
        logger.error("monitor_startup_failed", error=str(e))
        await monitor.stop()
        return 1

    logger.info("worker_started", feeds=len(feeds), rate_seconds=settings.poll_rate_seconds)
    await stopping.wait()
    logger.info("shutdown_signal_received")
    await monitor.stop()
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Poll feeds and record new entries")
    parser.add_argument("--once", action="store_true", help="run a single scan and exit")
    args = parser.parse_args()

    configure_logging(settings.log_level, json=settings.log_json)
    sys.exit(asyncio.run(main(once=args.once)))
