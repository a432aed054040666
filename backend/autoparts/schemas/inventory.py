"""AutoParts ERP: inventory ledger and alert schemas."""
from datetime import datetime

from pydantic import BaseModel, Field

from autoparts.models.warehouse import TransactionType


class InventoryAdjust(BaseModel):
    sku_id: int
    warehouse_id: int
    delta: int = Field(..., description="Signed change to quantity on hand")
    reason: TransactionType = TransactionType.ADJUSTMENT
    reference_id: int | None = None
    notes: str | None = None


class StockLevelsUpdate(BaseModel):
    reorder_point: int | None = Field(None, ge=0)
    safety_stock_level: int | None = Field(None, ge=0)
    max_stock_level: int | None = Field(None, ge=0)
    quantity_reserved: int | None = Field(None, ge=0)


class InventoryRecordResponse(BaseModel):
    id: int
    sku_id: int
    warehouse_id: int
    quantity_on_hand: int
    quantity_reserved: int
    quantity_available: int
    safety_stock_level: int
    reorder_point: int
    max_stock_level: int | None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class InventoryTransactionResponse(BaseModel):
    id: int
    sku_id: int
    warehouse_id: int
    transaction_type: str
    quantity: int
    reference_id: int | None
    notes: str | None
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class AlertResponse(BaseModel):
    id: int
    alert_type: str
    title: str
    message: str
    severity: str
    entity_type: str | None
    entity_id: int | None
    is_read: bool
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class AlertsMarkRead(BaseModel):
    alert_ids: list[int] = Field(..., min_length=1)
