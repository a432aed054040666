"""AutoParts ERP: kit production order endpoints."""
from fastapi import APIRouter, Query, status

from autoparts.api.deps import Bus, DbSession
from autoparts.schemas.common import ApiResponse, Meta
from autoparts.schemas.production import KitProductionComplete, KitProductionCreate, KitProductionResponse
from autoparts.services.kit_production_service import KitProductionService

router = APIRouter()


@router.get("", response_model=ApiResponse[list[KitProductionResponse]])
async def list_kit_production_orders(db: DbSession, status_filter: str | None = Query(None, alias="status")):
    orders = await KitProductionService.list_kit_production_orders(db, status=status_filter)
    return ApiResponse(
        data=[KitProductionResponse.model_validate(o) for o in orders],
        meta=Meta(total_count=len(orders)),
    )


@router.post("", response_model=ApiResponse[KitProductionResponse], status_code=status.HTTP_201_CREATED)
async def create_kit_production_order(body: KitProductionCreate, db: DbSession):
    order = await KitProductionService.create_kit_production_order(
        db,
        body.bom_template_id,
        body.quantity_planned,
        warehouse_id=body.warehouse_id,
        planned_start_date=body.planned_start_date,
        planned_completion_date=body.planned_completion_date,
        supervisor_id=body.supervisor_id,
        notes=body.notes,
    )
    await db.commit()
    return ApiResponse(data=KitProductionResponse.model_validate(order))


@router.get("/{order_id}", response_model=ApiResponse[KitProductionResponse])
async def get_kit_production_order(order_id: int, db: DbSession):
    order = await KitProductionService.get_kit_production_order(db, order_id)
    return ApiResponse(data=KitProductionResponse.model_validate(order))


@router.post("/{order_id}/start", response_model=ApiResponse[KitProductionResponse])
async def start_kit_production(order_id: int, db: DbSession, bus: Bus):
    order = await KitProductionService.start_kit_production(db, bus, order_id)
    await db.commit()
    return ApiResponse(data=KitProductionResponse.model_validate(order))


@router.post("/{order_id}/hold", response_model=ApiResponse[KitProductionResponse])
async def hold_kit_production(order_id: int, db: DbSession, bus: Bus):
    order = await KitProductionService.hold_kit_production(db, bus, order_id)
    await db.commit()
    return ApiResponse(data=KitProductionResponse.model_validate(order))


@router.post("/{order_id}/complete", response_model=ApiResponse[KitProductionResponse])
async def complete_kit_production(order_id: int, body: KitProductionComplete, db: DbSession, bus: Bus):
    """Consume components, credit finished kits, close the linked plan."""
    order = await KitProductionService.complete_kit_production(db, bus, order_id, body.quantity_completed)
    await db.commit()
    return ApiResponse(data=KitProductionResponse.model_validate(order))


@router.post("/{order_id}/cancel", response_model=ApiResponse[KitProductionResponse])
async def cancel_kit_production(order_id: int, db: DbSession, bus: Bus):
    order = await KitProductionService.cancel_kit_production(db, bus, order_id)
    await db.commit()
    return ApiResponse(data=KitProductionResponse.model_validate(order))
