"""AutoParts ERP: supplier order schemas."""
from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from autoparts.models.supplier_order import SupplierOrderStatus


class SupplierOrderStatusUpdate(BaseModel):
    status: SupplierOrderStatus
    tracking_number: str | None = None


class WorkflowPause(BaseModel):
    reason: str = Field(..., min_length=1)


class WorkflowResume(BaseModel):
    reason: str | None = None


class SupplierOrderResponse(BaseModel):
    id: int
    order_number: str | None
    purchase_order_item_id: int
    sku_id: int
    supplier_id: int
    status: str
    is_regular_supplier: bool
    order_date: date
    expected_delivery_date: date | None
    actual_delivery_date: date | None
    quantity_ordered: int
    unit_cost: Decimal
    total_cost: Decimal
    tracking_number: str | None
    workflow_status: str
    pause_reason: str | None
    resume_reason: str | None
    notes: str | None

    class Config:
        from_attributes = True
