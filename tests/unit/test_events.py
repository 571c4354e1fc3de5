"""Unit tests for the event bus."""

import pytest
from structlog.testing import capture_logs

from feedmonitor.events.bus import EventBus
from feedmonitor.events.types import EntryNew, ErrorEvent, FeedDue, FeedParsed
from feedmonitor.ingestion.interfaces import FeedEntry


def test_signal_names():
    """Event names are the observable contract for subscribers."""
    assert FeedDue.name == "feed-due"
    assert EntryNew.name == "entry-new"
    assert FeedParsed.name == "feed-parsed"
    assert ErrorEvent.name == "error"


@pytest.mark.asyncio
class TestEventBus:
    """Tests for EventBus."""

    async def test_handlers_run_in_subscription_order(self):
        bus = EventBus()
        calls = []

        async def first(event):
            calls.append(("first", event.url))

        async def second(event):
            calls.append(("second", event.url))

        bus.subscribe(FeedDue, first)
        bus.subscribe(FeedDue, second)
        await bus.publish(FeedDue(url="https://a.example"))

        assert calls == [("first", "https://a.example"), ("second", "https://a.example")]

    async def test_only_matching_type_delivered(self):
        bus = EventBus()
        seen = []

        async def on_new(event):
            seen.append(event)

        bus.subscribe(EntryNew, on_new)
        await bus.publish(FeedDue(url="https://a.example"))
        await bus.publish(EntryNew(entry=FeedEntry(guid="g1"), feed_url="https://a.example"))

        assert len(seen) == 1
        assert seen[0].entry.guid == "g1"

    async def test_publish_without_subscribers(self):
        await EventBus().publish(FeedDue(url="https://a.example"))

    async def test_unsubscribe(self):
        bus = EventBus()
        seen = []

        async def handler(event):
            seen.append(event)

        bus.subscribe(FeedDue, handler)
        bus.unsubscribe(FeedDue, handler)
        bus.unsubscribe(FeedDue, handler)
        await bus.publish(FeedDue(url="https://a.example"))

        assert seen == []

    async def test_failing_handler_becomes_error_event(self):
        """A raising handler is reported on the error channel; others still run."""
        bus = EventBus()
        errors, later = [], []

        async def broken(event):
            raise RuntimeError("handler exploded")

        async def after(event):
            later.append(event)

        async def on_error(event):
            errors.append(event)

        bus.subscribe(FeedDue, broken)
        bus.subscribe(FeedDue, after)
        bus.subscribe(ErrorEvent, on_error)
        await bus.publish(FeedDue(url="https://a.example"))

        assert len(later) == 1
        assert len(errors) == 1
        assert isinstance(errors[0].cause, RuntimeError)
        assert errors[0].feed_url == "https://a.example"

    async def test_failing_error_handler_does_not_recurse(self):
        bus = EventBus()
        calls = []

        async def broken_error_handler(event):
            calls.append(event)
            raise RuntimeError("still broken")

        bus.subscribe(ErrorEvent, broken_error_handler)
        await bus.publish(ErrorEvent(cause=ValueError("x")))

        assert len(calls) == 1

    async def test_subscribe_and_failure_are_logged(self):
        """Log records carry the bus event under its own key, not the log message."""
        bus = EventBus()

        async def broken(event):
            raise RuntimeError("handler exploded")

        with capture_logs() as logs:
            bus.subscribe(FeedDue, broken)
            await bus.publish(FeedDue(url="https://a.example"))

        subscribed = [r for r in logs if r["event"] == "bus_subscribed"]
        failed = [r for r in logs if r["event"] == "bus_handler_failed"]
        assert subscribed[0]["event_name"] == "feed-due"
        assert failed[0]["event_name"] == "feed-due"
        assert failed[0]["error"] == "handler exploded"
