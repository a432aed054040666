"""AutoParts ERP: BOM template schemas."""
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class BOMComponentCreate(BaseModel):
    component_sku_id: int
    quantity_required: int = Field(..., gt=0)
    unit_cost: Decimal | None = Field(None, ge=0)
    is_critical: bool = False
    notes: str | None = None


class BOMTemplateCreate(BaseModel):
    kit_sku_id: int
    name: str = Field(..., min_length=1, max_length=255)
    version: str | None = Field(None, max_length=20)
    description: str | None = None
    labor_cost: Decimal = Field(Decimal("0"), ge=0)
    overhead_cost: Decimal = Field(Decimal("0"), ge=0)
    components: list[BOMComponentCreate] = Field(..., min_length=1)


class BOMComponentResponse(BaseModel):
    id: int
    component_sku_id: int
    quantity_required: int
    unit_cost: Decimal
    line_cost: Decimal
    is_critical: bool
    notes: str | None

    class Config:
        from_attributes = True


class BOMTemplateResponse(BaseModel):
    id: int
    kit_sku_id: int
    version: str
    name: str
    description: str | None
    is_active: bool
    labor_cost: Decimal
    overhead_cost: Decimal
    total_cost: Decimal
    components: list[BOMComponentResponse]
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class BOMExplodeRequest(BaseModel):
    quantity: int = Field(..., gt=0)
