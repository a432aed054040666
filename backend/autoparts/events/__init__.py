"""AutoParts ERP: message bus and typed events."""
from autoparts.events.bus import EventBus
from autoparts.events.types import (
    DashboardRefresh,
    Event,
    InventoryRefresh,
    InventoryUpdated,
    LowStockDetected,
    MaterialAvailable,
    NotificationRaised,
    OrdersRefresh,
    parse_event,
)

__all__ = [
    "EventBus",
    "Event",
    "MaterialAvailable",
    "InventoryUpdated",
    "LowStockDetected",
    "DashboardRefresh",
    "InventoryRefresh",
    "OrdersRefresh",
    "NotificationRaised",
    "parse_event",
]
