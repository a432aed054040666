"""AutoParts ERP: purchase order and warehouse check schemas."""
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from autoparts.models.purchase_order import WarehouseStatus


class POItemCreate(BaseModel):
    sku_id: int
    quantity_ordered: int = Field(..., gt=0)
    unit_cost: Decimal | None = Field(None, ge=0)
    notes: str | None = None


class POCreate(BaseModel):
    warehouse_id: int
    vendor_id: int | None = None
    notes: str | None = None
    expected_delivery_date: date | None = None
    items: list[POItemCreate] = Field(..., min_length=1)


class POItemReceive(BaseModel):
    quantity: int = Field(..., gt=0)
    notes: str | None = None


class WarehouseCheckRequest(BaseModel):
    status: WarehouseStatus
    quantity_found: int = Field(0, ge=0)
    location: str | None = None
    notes: str | None = None
    checker_id: int | None = None


class POItemResponse(BaseModel):
    id: int
    purchase_order_id: int
    sku_id: int
    quantity_ordered: int
    quantity_received: int
    unit_cost: Decimal
    line_total: Decimal
    warehouse_status: str
    notes: str | None

    class Config:
        from_attributes = True


class POResponse(BaseModel):
    id: int
    order_number: str | None
    vendor_id: int | None
    warehouse_id: int
    reorder_request_id: int | None
    production_plan_id: int | None
    status: str
    order_date: date
    expected_delivery_date: date | None
    total_amount: Decimal
    notes: str | None
    items: list[POItemResponse]
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class WarehouseCheckResponse(BaseModel):
    id: int
    purchase_order_item_id: int
    checker_id: int | None
    status: str
    quantity_found: int
    location: str | None
    check_date: datetime | None
    notes: str | None

    class Config:
        from_attributes = True
