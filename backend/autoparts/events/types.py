"""AutoParts ERP: typed events carried by the message bus.

One model per signal, discriminated by ``kind``.
"""
from datetime import datetime, timezone
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter


def _now() -> datetime:
    return datetime.now(timezone.utc)


class BaseEvent(BaseModel):
    occurred_at: datetime = Field(default_factory=_now)


class MaterialAvailable(BaseEvent):
    """Goods were received; plans awaiting materials should be re-verified."""

    kind: Literal["material-available"] = "material-available"
    sku_id: int
    quantity_added: int
    item_code: str
    item_name: str


class InventoryUpdated(BaseEvent):
    kind: Literal["inventory-updated"] = "inventory-updated"
    sku_id: int
    warehouse_id: int
    old_quantity: int
    new_quantity: int
    transaction_type: str


class LowStockDetected(BaseEvent):
    kind: Literal["low-stock"] = "low-stock"
    sku_id: int
    warehouse_id: int
    quantity_available: int
    reorder_point: int
    is_out_of_stock: bool


class DashboardRefresh(BaseEvent):
    kind: Literal["dashboard-refresh"] = "dashboard-refresh"


class InventoryRefresh(BaseEvent):
    kind: Literal["inventory-refresh"] = "inventory-refresh"


class OrdersRefresh(BaseEvent):
    kind: Literal["orders-refresh"] = "orders-refresh"


class NotificationRaised(BaseEvent):
    """User-facing notice (the dashboard renders these as toasts)."""

    kind: Literal["notification"] = "notification"
    title: str
    message: str
    severity: Literal["info", "success", "warning", "error"] = "info"
    entity_type: str | None = None
    entity_id: int | None = None


Event = Annotated[
    Union[
        MaterialAvailable,
        InventoryUpdated,
        LowStockDetected,
        DashboardRefresh,
        InventoryRefresh,
        OrdersRefresh,
        NotificationRaised,
    ],
    Field(discriminator="kind"),
]

event_adapter: TypeAdapter[Event] = TypeAdapter(Event)


def parse_event(payload: dict | str) -> BaseEvent:
    """Rebuild a typed event from its JSON form (e.g. a broadcast message)."""
    if isinstance(payload, str):
        return event_adapter.validate_json(payload)
    return event_adapter.validate_python(payload)
