"""In-process typed publish/subscribe bus."""

from collections import defaultdict
from typing import Awaitable, Callable, Dict, List, Type, TypeVar

import structlog

from .types import ErrorEvent, Event

logger = structlog.get_logger()

E = TypeVar("E", bound=Event)
Handler = Callable[[E], Awaitable[None]]


class EventBus:
    """Route events to the handlers subscribed to their type.

    ``publish`` awaits each handler in subscription order. Nothing is
    persisted; events published before a crash are not redelivered.
    A handler that raises is reported as an ``ErrorEvent`` so other
    handlers and the publisher keep going.
    """

    def __init__(self):
        self._handlers: Dict[Type[Event], List[Handler]] = defaultdict(list)

    def subscribe(self, event_type: Type[E], handler: Handler) -> None:
        self._handlers[event_type].append(handler)
        logger.debug("bus_subscribed", event_name=event_type.name, handler=_name(handler))

    def unsubscribe(self, event_type: Type[E], handler: Handler) -> None:
        try:
            self._handlers[event_type].remove(handler)
        except ValueError:
            pass

    def handlers(self, event_type: Type[Event]) -> List[Handler]:
        return list(self._handlers.get(event_type, ()))

    async def publish(self, event: Event) -> None:
        for handler in self.handlers(type(event)):
            try:
                await handler(event)
            except Exception as e:
                logger.error(
                    "bus_handler_failed",
                    event_name=event.name,
                    handler=_name(handler),
                    error=str(e),
                    exc_info=True,
                )
                if not isinstance(event, ErrorEvent):
                    feed_url = getattr(event, "url", None) or getattr(event, "feed_url", None)
                    await self.publish(ErrorEvent(cause=e, feed_url=feed_url))


def _name(handler) -> str:
    return getattr(handler, "__qualname__", repr(handler))
