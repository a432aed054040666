"""AutoParts ERP: production plan, verification and kit production schemas."""
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class ComponentCheck(BaseModel):
    """One BOM line measured against stock for a verification pass."""

    component_sku_id: int
    sku_code: str
    sku_name: str
    quantity_required: int
    required: int
    available: int
    sufficient: bool
    shortage: int
    unit_cost: Decimal


class VerificationResult(BaseModel):
    plan_id: int
    plan_number: str
    previous_status: str
    status: str
    order_quantity: int
    all_sufficient: bool
    components: list[ComponentCheck]
    purchase_order_ids: list[int] = Field(default_factory=list)
    existing_purchase_order_ids: list[int] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class ProductionPlanResponse(BaseModel):
    id: int
    plan_number: str
    sales_order_id: int
    bom_template_id: int
    status: str
    inventory_check: list[dict]
    production_order_id: int | None
    purchase_orders_generated: bool
    purchase_orders_count: int
    purchase_orders_created_at: datetime | None
    last_verified_at: datetime | None
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class PlanStats(BaseModel):
    total: int
    active: int
    pending_verification: int
    production_ready: int
    awaiting_materials: int
    in_production: int
    completed: int


class KitProductionCreate(BaseModel):
    bom_template_id: int
    quantity_planned: int = Field(..., gt=0)
    warehouse_id: int | None = None
    planned_start_date: date | None = None
    planned_completion_date: date | None = None
    supervisor_id: int | None = None
    notes: str | None = None


class KitProductionComplete(BaseModel):
    quantity_completed: int | None = Field(None, gt=0)


class KitProductionResponse(BaseModel):
    id: int
    order_number: str | None
    kit_sku_id: int
    bom_template_id: int
    warehouse_id: int
    quantity_planned: int
    quantity_completed: int
    status: str
    planned_start_date: date | None
    actual_start_date: date | None
    planned_completion_date: date | None
    actual_completion_date: date | None
    total_material_cost: Decimal
    labor_cost: Decimal
    overhead_cost: Decimal
    total_cost: Decimal
    notes: str | None

    class Config:
        from_attributes = True
