"""AutoParts ERP: reorder request schemas."""
from datetime import datetime

from pydantic import BaseModel, Field

from autoparts.models.reorder import ReorderPriority, ReorderReason, ReorderStatus


class ReorderRequestCreate(BaseModel):
    sku_id: int
    warehouse_id: int
    reason: ReorderReason = ReorderReason.MANUAL
    quantity: int | None = Field(None, gt=0, description="Defaults to max stock level minus on hand")
    priority: ReorderPriority | None = None
    notes: str | None = None
    requested_by: int | None = None


class ReorderStatusUpdate(BaseModel):
    status: ReorderStatus
    approved_by: int | None = None


class ReorderRequestResponse(BaseModel):
    id: int
    sku_id: int
    warehouse_id: int
    quantity_requested: int
    reason: str
    status: str
    priority: str
    requested_by: int | None
    approved_by: int | None
    notes: str | None
    created_at: datetime | None = None

    class Config:
        from_attributes = True
