"""AutoParts ERP: API v1 router aggregation."""
from fastapi import APIRouter

from autoparts.api.v1.endpoints import (
    boms,
    catalog,
    inventory,
    kit_production_orders,
    production_plans,
    purchase_orders,
    reorder_requests,
    sales_orders,
    supplier_orders,
    vendor_alerts,
    workflow,
)

api_router = APIRouter()

api_router.include_router(catalog.router, tags=["catalog"])
api_router.include_router(inventory.router, prefix="/inventory", tags=["inventory"])
api_router.include_router(reorder_requests.router, prefix="/reorder-requests", tags=["reorder-requests"])
api_router.include_router(purchase_orders.router, prefix="/purchase-orders", tags=["purchase-orders"])
api_router.include_router(supplier_orders.router, prefix="/supplier-orders", tags=["supplier-orders"])
api_router.include_router(boms.router, prefix="/boms", tags=["boms"])
api_router.include_router(sales_orders.router, prefix="/sales-orders", tags=["sales-orders"])
api_router.include_router(production_plans.router, prefix="/production-plans", tags=["production-plans"])
api_router.include_router(
    kit_production_orders.router, prefix="/kit-production-orders", tags=["kit-production-orders"]
)
api_router.include_router(vendor_alerts.router, prefix="/vendor-alerts", tags=["vendor-alerts"])
api_router.include_router(workflow.router, prefix="/workflow", tags=["workflow"])
