"""AutoParts ERP: build the application message bus and its standing subscriptions."""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from autoparts.config import Settings, get_settings
from autoparts.events.broadcast import BROADCAST_EVENTS, RedisBroadcaster
from autoparts.events.bus import EventBus
from autoparts.events.types import LowStockDetected, MaterialAvailable
from autoparts.services.production_plan_service import ProductionPlanService
from autoparts.services.reorder_service import ReorderService

logger = logging.getLogger(__name__)


def build_event_bus(settings: Settings | None = None) -> EventBus:
    """
    Subscriptions:
    - material-available re-verifies plans awaiting materials.
    - low-stock opens a reorder request (AUTO_REORDER_ENABLED).
    - UI-facing events go to Redis pub/sub (EVENT_BROADCAST_ENABLED).
    """
    settings = settings or get_settings()
    bus = EventBus()

    async def recheck_plans_on_material(db: AsyncSession, event: MaterialAvailable) -> None:
        logger.info("Material available: %s x %s, rechecking plans", event.quantity_added, event.item_code)
        await ProductionPlanService.recheck_awaiting_materials_plans(db, bus)

    async def reorder_on_low_stock(db: AsyncSession, event: LowStockDetected) -> None:
        await ReorderService.auto_reorder(db, bus, event)

    bus.subscribe(MaterialAvailable, recheck_plans_on_material)
    if settings.AUTO_REORDER_ENABLED:
        bus.subscribe(LowStockDetected, reorder_on_low_stock)
    if settings.EVENT_BROADCAST_ENABLED:
        broadcaster = RedisBroadcaster(settings.EVENT_CHANNEL)
        for event_type in BROADCAST_EVENTS:
            bus.subscribe(event_type, broadcaster)
    return bus
