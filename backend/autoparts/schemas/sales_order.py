"""AutoParts ERP: sales order schemas."""
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class SalesOrderCreate(BaseModel):
    customer_name: str = Field(..., min_length=1, max_length=255)
    bom_template_id: int | None = None
    quantity: int = Field(1, gt=0)
    unit_price: Decimal | None = Field(None, ge=0)
    production_required: bool | None = None
    priority: str = "medium"


class SalesOrderResponse(BaseModel):
    id: int
    order_number: str | None
    customer_name: str
    bom_template_id: int | None
    quantity: int
    unit_price: Decimal | None
    production_required: bool
    priority: str
    status: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True
