"""AutoParts ERP: reorder request endpoints."""
from fastapi import APIRouter, Query, status

from autoparts.api.deps import Bus, DbSession
from autoparts.schemas.common import ApiResponse, Meta
from autoparts.schemas.reorder import ReorderRequestCreate, ReorderRequestResponse, ReorderStatusUpdate
from autoparts.services.reorder_service import ReorderService

router = APIRouter()


@router.get("", response_model=ApiResponse[list[ReorderRequestResponse]])
async def list_reorder_requests(
    db: DbSession,
    status_filter: str | None = Query(None, alias="status"),
    sku_id: int | None = Query(None),
):
    requests = await ReorderService.list_reorder_requests(db, status=status_filter, sku_id=sku_id)
    return ApiResponse(
        data=[ReorderRequestResponse.model_validate(r) for r in requests],
        meta=Meta(total_count=len(requests)),
    )


@router.post("", response_model=ApiResponse[ReorderRequestResponse], status_code=status.HTTP_201_CREATED)
async def create_reorder_request(body: ReorderRequestCreate, db: DbSession, bus: Bus):
    request = await ReorderService.create_reorder_request(
        db,
        bus,
        body.sku_id,
        body.warehouse_id,
        body.reason,
        body.quantity,
        priority=body.priority,
        notes=body.notes,
        requested_by=body.requested_by,
    )
    await db.commit()
    return ApiResponse(data=ReorderRequestResponse.model_validate(request))


@router.get("/{request_id}", response_model=ApiResponse[ReorderRequestResponse])
async def get_reorder_request(request_id: int, db: DbSession):
    request = await ReorderService.get_reorder_request(db, request_id)
    return ApiResponse(data=ReorderRequestResponse.model_validate(request))


@router.post("/{request_id}/status", response_model=ApiResponse[ReorderRequestResponse])
async def update_reorder_request_status(request_id: int, body: ReorderStatusUpdate, db: DbSession, bus: Bus):
    """Approve, mark ordered or cancel. Approval creates the purchase order."""
    request = await ReorderService.update_reorder_request_status(
        db, bus, request_id, body.status, approved_by=body.approved_by
    )
    await db.commit()
    return ApiResponse(data=ReorderRequestResponse.model_validate(request))
