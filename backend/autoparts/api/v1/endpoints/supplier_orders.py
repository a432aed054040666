"""AutoParts ERP: supplier order endpoints (fulfillment status and pause/resume)."""
from fastapi import APIRouter, Query

from autoparts.api.deps import Bus, DbSession
from autoparts.schemas.common import ApiResponse, Meta
from autoparts.schemas.supplier_order import (
    SupplierOrderResponse,
    SupplierOrderStatusUpdate,
    WorkflowPause,
    WorkflowResume,
)
from autoparts.services.supplier_order_service import SupplierOrderService

router = APIRouter()


@router.get("", response_model=ApiResponse[list[SupplierOrderResponse]])
async def list_supplier_orders(
    db: DbSession,
    status_filter: str | None = Query(None, alias="status"),
    workflow_status: str | None = Query(None),
):
    orders = await SupplierOrderService.list_supplier_orders(db, status=status_filter, workflow_status=workflow_status)
    return ApiResponse(
        data=[SupplierOrderResponse.model_validate(o) for o in orders],
        meta=Meta(total_count=len(orders)),
    )


@router.get("/{order_id}", response_model=ApiResponse[SupplierOrderResponse])
async def get_supplier_order(order_id: int, db: DbSession):
    order = await SupplierOrderService.get_supplier_order(db, order_id)
    return ApiResponse(data=SupplierOrderResponse.model_validate(order))


@router.post("/{order_id}/status", response_model=ApiResponse[SupplierOrderResponse])
async def update_supplier_order_status(order_id: int, body: SupplierOrderStatusUpdate, db: DbSession, bus: Bus):
    """Advance fulfillment. Reaching received credits stock at the default warehouse."""
    order = await SupplierOrderService.update_supplier_order_status(
        db, bus, order_id, body.status, tracking_number=body.tracking_number
    )
    await db.commit()
    return ApiResponse(data=SupplierOrderResponse.model_validate(order))


@router.post("/{order_id}/pause", response_model=ApiResponse[SupplierOrderResponse])
async def pause_supplier_order(order_id: int, body: WorkflowPause, db: DbSession, bus: Bus):
    order = await SupplierOrderService.pause_supplier_order_workflow(db, bus, order_id, body.reason)
    await db.commit()
    return ApiResponse(data=SupplierOrderResponse.model_validate(order))


@router.post("/{order_id}/resume", response_model=ApiResponse[SupplierOrderResponse])
async def resume_supplier_order(order_id: int, body: WorkflowResume, db: DbSession, bus: Bus):
    order = await SupplierOrderService.resume_supplier_order_workflow(db, bus, order_id, body.reason)
    await db.commit()
    return ApiResponse(data=SupplierOrderResponse.model_validate(order))
