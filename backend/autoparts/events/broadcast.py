"""AutoParts ERP: forward UI-facing events to the dashboard over Redis pub/sub."""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from autoparts.core.redis import get_redis
from autoparts.events.types import (
    BaseEvent,
    DashboardRefresh,
    InventoryRefresh,
    MaterialAvailable,
    NotificationRaised,
    OrdersRefresh,
)

logger = logging.getLogger(__name__)

BROADCAST_EVENTS: tuple[type[BaseEvent], ...] = (
    MaterialAvailable,
    DashboardRefresh,
    InventoryRefresh,
    OrdersRefresh,
    NotificationRaised,
)


class RedisBroadcaster:
    """Bus handler that publishes each event as JSON on one Redis channel."""

    def __init__(self, channel: str):
        self.channel = channel

    async def __call__(self, db: AsyncSession, event: BaseEvent) -> None:
        r = await get_redis()
        receivers = await r.publish(self.channel, event.model_dump_json())
        logger.debug("Broadcast %s to %s (%s receivers)", event.kind, self.channel, receivers)
