"""AutoParts ERP: vendor assignment alert schemas."""
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel

Priority = Literal["high", "medium", "low"]


class VendorSuggestion(BaseModel):
    id: int
    name: str
    code: str

    class Config:
        from_attributes = True


class VendorAlert(BaseModel):
    """A paused supplier order that needs a vendor decision."""

    supplier_order_id: int
    order_number: str | None
    sku_id: int
    sku_code: str
    sku_name: str
    quantity: int
    estimated_value: Decimal
    priority: Priority
    pause_reason: str
    current_vendor_id: int | None
    suggested_vendors: list[VendorSuggestion]
    paused_since: datetime | None = None


class VendorNotification(BaseModel):
    type: Literal["vendor_assignment_needed", "urgent_reorder"]
    title: str
    message: str
    priority: Priority
    supplier_order_id: int
    action_required: bool = True


class NotificationCount(BaseModel):
    total: int
    urgent: int


class VendorAssignment(BaseModel):
    vendor_id: int
