"""AutoParts ERP: workflow summary schema."""
from pydantic import BaseModel


class ReorderCounts(BaseModel):
    pending: int = 0
    approved: int = 0
    total: int = 0


class PurchaseOrderCounts(BaseModel):
    pending: int = 0
    in_progress: int = 0
    total: int = 0


class SupplierOrderCounts(BaseModel):
    active: int = 0
    paused: int = 0
    received: int = 0
    total: int = 0


class KitProductionCounts(BaseModel):
    planned: int = 0
    in_progress: int = 0
    completed: int = 0
    total: int = 0


class WorkflowSummary(BaseModel):
    reorder_requests: ReorderCounts
    purchase_orders: PurchaseOrderCounts
    warehouse_checks: int
    supplier_orders: SupplierOrderCounts
    kit_production: KitProductionCounts
