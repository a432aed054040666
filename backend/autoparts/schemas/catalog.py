"""AutoParts ERP: SKU, vendor and warehouse schemas."""
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from autoparts.models.sku import SKUStatus, SKUType


class VendorCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    code: str = Field(..., min_length=1, max_length=50)
    contact_email: str | None = None
    is_active: bool = True


class VendorResponse(BaseModel):
    id: int
    name: str
    code: str
    contact_email: str | None
    is_active: bool

    class Config:
        from_attributes = True


class SKUCreate(BaseModel):
    sku_code: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=255)
    sku_type: SKUType = SKUType.SINGLE
    status: SKUStatus = SKUStatus.ACTIVE
    category: str | None = None
    unit_cost: Decimal | None = Field(None, ge=0)
    unit_price: Decimal | None = Field(None, ge=0)
    vendor_id: int | None = None


class SKUResponse(BaseModel):
    id: int
    sku_code: str
    name: str
    sku_type: str
    status: str
    category: str | None
    unit_cost: Decimal | None
    unit_price: Decimal | None
    vendor_id: int | None
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class WarehouseCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    code: str = Field(..., min_length=1, max_length=50)
    address: str | None = None


class WarehouseResponse(BaseModel):
    id: int
    name: str
    code: str
    address: str | None
    is_active: bool

    class Config:
        from_attributes = True
