"""AutoParts ERP: in-process typed message bus.

Usage:
    bus = EventBus()
    bus.subscribe(MaterialAvailable, on_material_available)
    await bus.publish(db, MaterialAvailable(sku_id=3, quantity_added=20, item_code="AF-001", item_name="Air Filter"))

Handlers are awaited in subscription order, each inside a savepoint of the
publisher's session. A failing handler is rolled back to its savepoint and
logged; the publisher and the remaining handlers carry on.
"""
import logging
from collections import defaultdict, deque
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from autoparts.events.types import BaseEvent

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=BaseEvent)
Handler = Callable[[AsyncSession, E], Awaitable[None]]


class EventBus:
    def __init__(self, max_recent: int = 500):
        self._handlers: dict[type[BaseEvent], list[Handler]] = defaultdict(list)
        self._recent: dict[str, deque[BaseEvent]] = defaultdict(lambda: deque(maxlen=max_recent))

    def subscribe(self, event_type: type[E], handler: Handler) -> None:
        """Register a handler for one event type."""
        self._handlers[event_type].append(handler)
        logger.debug("Subscribed %s to %s", getattr(handler, "__qualname__", handler), event_type.__name__)

    def unsubscribe(self, event_type: type[E], handler: Handler) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def subscribers(self, event_type: type[BaseEvent]) -> list[Handler]:
        return list(self._handlers.get(event_type, []))

    async def publish(self, db: AsyncSession, event: BaseEvent) -> None:
        """Dispatch an event to every handler subscribed to its type."""
        self._recent[event.kind].append(event)
        for handler in self.subscribers(type(event)):
            name = getattr(handler, "__qualname__", repr(handler))
            try:
                async with db.begin_nested():
                    await handler(db, event)
            except Exception as exc:
                logger.error("Event handler %s failed for %s: %s", name, event.kind, exc, exc_info=True)

    def get_recent(self, kind: str, count: int = 10) -> list[BaseEvent]:
        return list(self._recent.get(kind, ()))[-count:]

    def clear_recent(self) -> None:
        self._recent.clear()
