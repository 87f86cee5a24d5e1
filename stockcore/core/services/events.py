"""
In-process domain event bus.

Handlers run inside the publisher's unit of work, so anything they write
commits or rolls back with the operation that raised the event.
"""

from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Any

from stockcore.config import get_logger
from stockcore.core.interfaces import IUnitOfWork

logger = get_logger(__name__)

EventHandler = Callable[[Any, IUnitOfWork], Awaitable[None]]


class EventBus:
    """Dispatches events to handlers subscribed by event type."""

    def __init__(self) -> None:
        self._handlers: dict[type, list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: type, handler: EventHandler) -> None:
        if handler not in self._handlers[event_type]:
            self._handlers[event_type].append(handler)

    def handlers_for(self, event: Any) -> list[EventHandler]:
        """Handlers for the event's type and its base classes."""
        handlers: list[EventHandler] = []
        for cls in type(event).__mro__:
            handlers.extend(self._handlers.get(cls, []))
        return handlers

    async def publish(self, event: Any, uow: IUnitOfWork) -> None:
        handlers = self.handlers_for(event)
        logger.debug("domain_event_published", event=type(event).__name__, handlers=len(handlers))
        for handler in handlers:
            await handler(event, uow)
