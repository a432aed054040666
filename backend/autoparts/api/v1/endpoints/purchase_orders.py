"""AutoParts ERP: purchase order and warehouse check endpoints."""
from fastapi import APIRouter, Query, status

from autoparts.api.deps import Bus, DbSession
from autoparts.schemas.common import ApiResponse, Meta
from autoparts.schemas.purchase_order import (
    POCreate,
    POItemReceive,
    POItemResponse,
    POResponse,
    WarehouseCheckRequest,
    WarehouseCheckResponse,
)
from autoparts.schemas.supplier_order import SupplierOrderResponse
from autoparts.services.purchase_order_service import PurchaseOrderService

router = APIRouter()


@router.get("", response_model=ApiResponse[list[POResponse]])
async def list_purchase_orders(
    db: DbSession,
    status_filter: str | None = Query(None, alias="status"),
    production_plan_id: int | None = Query(None),
    reorder_request_id: int | None = Query(None),
):
    pos = await PurchaseOrderService.list_purchase_orders(
        db, status=status_filter, production_plan_id=production_plan_id, reorder_request_id=reorder_request_id
    )
    return ApiResponse(data=[POResponse.model_validate(po) for po in pos], meta=Meta(total_count=len(pos)))


@router.post("", response_model=ApiResponse[POResponse], status_code=status.HTTP_201_CREATED)
async def create_purchase_order(body: POCreate, db: DbSession):
    po = await PurchaseOrderService.create_purchase_order(
        db,
        body.warehouse_id,
        [item.model_dump() for item in body.items],
        vendor_id=body.vendor_id,
        notes=body.notes,
        expected_delivery_date=body.expected_delivery_date,
    )
    await db.commit()
    return ApiResponse(data=POResponse.model_validate(po))


@router.get("/items", response_model=ApiResponse[list[POItemResponse]])
async def list_purchase_order_items(
    db: DbSession,
    warehouse_status: str | None = Query(None),
    purchase_order_id: int | None = Query(None),
):
    items = await PurchaseOrderService.list_purchase_order_items(
        db, warehouse_status=warehouse_status, purchase_order_id=purchase_order_id
    )
    return ApiResponse(data=[POItemResponse.model_validate(i) for i in items], meta=Meta(total_count=len(items)))


@router.post("/items/{item_id}/warehouse-check", response_model=ApiResponse[dict])
async def check_item_in_warehouse(item_id: int, body: WarehouseCheckRequest, db: DbSession, bus: Bus):
    """Record a warehouse check; unavailable stock escalates to a supplier order."""
    item, supplier_order = await PurchaseOrderService.check_item_in_warehouse(
        db,
        bus,
        item_id,
        body.status,
        body.quantity_found,
        location=body.location,
        notes=body.notes,
        checker_id=body.checker_id,
    )
    await db.commit()
    return ApiResponse(
        data={
            "item": POItemResponse.model_validate(item),
            "supplier_order": SupplierOrderResponse.model_validate(supplier_order) if supplier_order else None,
        }
    )


@router.get("/items/{item_id}/warehouse-checks", response_model=ApiResponse[list[WarehouseCheckResponse]])
async def list_warehouse_checks(item_id: int, db: DbSession):
    checks = await PurchaseOrderService.list_warehouse_checks(db, item_id=item_id)
    return ApiResponse(data=[WarehouseCheckResponse.model_validate(c) for c in checks])


@router.post("/items/{item_id}/receive", response_model=ApiResponse[POResponse])
async def receive_purchase_order_item(item_id: int, body: POItemReceive, db: DbSession, bus: Bus):
    """Receive goods against a PO item; credits stock and re-triggers plan verification."""
    po = await PurchaseOrderService.receive_purchase_order_item(db, bus, item_id, body.quantity, notes=body.notes)
    await db.commit()
    return ApiResponse(data=POResponse.model_validate(po))


@router.get("/{po_id}", response_model=ApiResponse[POResponse])
async def get_purchase_order(po_id: int, db: DbSession):
    po = await PurchaseOrderService.get_purchase_order(db, po_id)
    return ApiResponse(data=POResponse.model_validate(po))


@router.post("/{po_id}/send", response_model=ApiResponse[POResponse])
async def send_purchase_order(po_id: int, db: DbSession, bus: Bus):
    po = await PurchaseOrderService.send_purchase_order(db, bus, po_id)
    await db.commit()
    return ApiResponse(data=POResponse.model_validate(po))


@router.post("/{po_id}/cancel", response_model=ApiResponse[POResponse])
async def cancel_purchase_order(po_id: int, db: DbSession, bus: Bus):
    """Cancel a Purchase Order (only allowed in pending or sent status)."""
    po = await PurchaseOrderService.cancel_purchase_order(db, bus, po_id)
    await db.commit()
    return ApiResponse(data=POResponse.model_validate(po))
