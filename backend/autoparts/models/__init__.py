"""AutoParts ERP: SQLAlchemy models."""
from autoparts.models.bom import BOMComponent, BOMTemplate
from autoparts.models.production import KitProductionOrder, KitProductionStatus, PlanStatus, ProductionPlan
from autoparts.models.purchase_order import POStatus, PurchaseOrder, PurchaseOrderItem, WarehouseCheck, WarehouseStatus
from autoparts.models.reorder import ReorderPriority, ReorderReason, ReorderRequest, ReorderStatus
from autoparts.models.sales_order import SalesOrder
from autoparts.models.sku import SKU, SKUStatus, SKUType, Vendor
from autoparts.models.supplier_order import SupplierOrder, SupplierOrderStatus, WorkflowStatus
from autoparts.models.warehouse import Alert, AlertSeverity, InventoryRecord, InventoryTransaction, TransactionType, Warehouse

__all__ = [
    "SKU", "SKUType", "SKUStatus", "Vendor",
    "Warehouse", "InventoryRecord", "InventoryTransaction", "TransactionType", "Alert", "AlertSeverity",
    "ReorderRequest", "ReorderReason", "ReorderStatus", "ReorderPriority",
    "PurchaseOrder", "PurchaseOrderItem", "WarehouseCheck", "POStatus", "WarehouseStatus",
    "SupplierOrder", "SupplierOrderStatus", "WorkflowStatus",
    "BOMTemplate", "BOMComponent",
    "KitProductionOrder", "KitProductionStatus", "ProductionPlan", "PlanStatus",
    "SalesOrder",
]
