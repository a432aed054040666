"""AutoParts ERP: inventory ledger and alert endpoints."""
from fastapi import APIRouter, Query

from autoparts.api.deps import Bus, DbSession
from autoparts.schemas.common import ApiResponse, Meta
from autoparts.schemas.inventory import (
    AlertResponse,
    AlertsMarkRead,
    InventoryAdjust,
    InventoryRecordResponse,
    InventoryTransactionResponse,
    StockLevelsUpdate,
)
from autoparts.services.alert_service import AlertService
from autoparts.services.ledger_service import LedgerService

router = APIRouter()


@router.get("", response_model=ApiResponse[list[InventoryRecordResponse]])
async def list_inventory(
    db: DbSession,
    sku_id: int | None = Query(None),
    warehouse_id: int | None = Query(None),
    low_stock: bool = Query(False),
):
    records = await LedgerService.get_inventory(db, sku_id=sku_id, warehouse_id=warehouse_id, low_stock_only=low_stock)
    return ApiResponse(
        data=[InventoryRecordResponse.model_validate(r) for r in records],
        meta=Meta(total_count=len(records)),
    )


@router.get("/available/{sku_id}", response_model=ApiResponse[dict])
async def get_available_quantity(sku_id: int, db: DbSession, warehouse_id: int | None = Query(None)):
    """Available units at one warehouse, or summed across warehouses."""
    available = await LedgerService.get_available_quantity(db, sku_id, warehouse_id)
    return ApiResponse(data={"sku_id": sku_id, "warehouse_id": warehouse_id, "quantity_available": available})


@router.post("/adjust", response_model=ApiResponse[InventoryRecordResponse])
async def adjust_inventory(body: InventoryAdjust, db: DbSession, bus: Bus):
    """Apply a signed delta to a SKU's stock at one warehouse."""
    record = await LedgerService.update_inventory_level(
        db,
        bus,
        body.sku_id,
        body.warehouse_id,
        body.delta,
        body.reason,
        reference_id=body.reference_id,
        notes=body.notes,
    )
    await db.commit()
    return ApiResponse(data=InventoryRecordResponse.model_validate(record))


@router.patch("/{sku_id}/{warehouse_id}/levels", response_model=ApiResponse[InventoryRecordResponse])
async def update_stock_levels(sku_id: int, warehouse_id: int, body: StockLevelsUpdate, db: DbSession):
    record = await LedgerService.set_stock_levels(db, sku_id, warehouse_id, **body.model_dump())
    await db.commit()
    return ApiResponse(data=InventoryRecordResponse.model_validate(record))


@router.get("/transactions", response_model=ApiResponse[list[InventoryTransactionResponse]])
async def list_transactions(
    db: DbSession,
    sku_id: int | None = Query(None),
    warehouse_id: int | None = Query(None),
    limit: int = Query(100, ge=1, le=500),
):
    rows = await LedgerService.get_transaction_history(db, sku_id=sku_id, warehouse_id=warehouse_id, limit=limit)
    return ApiResponse(data=[InventoryTransactionResponse.model_validate(r) for r in rows])


@router.get("/alerts", response_model=ApiResponse[list[AlertResponse]])
async def list_alerts(
    db: DbSession,
    unread_only: bool = Query(False),
    alert_type: str | None = Query(None),
):
    alerts = await AlertService.list_alerts(db, unread_only=unread_only, alert_type=alert_type)
    return ApiResponse(data=[AlertResponse.model_validate(a) for a in alerts])


@router.post("/alerts/read", response_model=ApiResponse[dict])
async def mark_alerts_read(body: AlertsMarkRead, db: DbSession):
    updated = await AlertService.mark_read(db, body.alert_ids)
    await db.commit()
    return ApiResponse(data={"updated": updated})
