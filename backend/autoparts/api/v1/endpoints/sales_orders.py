"""AutoParts ERP: sales order endpoints."""
from fastapi import APIRouter, Query, status

from autoparts.api.deps import DbSession
from autoparts.schemas.common import ApiResponse, Meta
from autoparts.schemas.sales_order import SalesOrderCreate, SalesOrderResponse
from autoparts.services.sales_order_service import SalesOrderService

router = APIRouter()


@router.get("", response_model=ApiResponse[list[SalesOrderResponse]])
async def list_sales_orders(db: DbSession, production_required: bool | None = Query(None)):
    orders = await SalesOrderService.list_sales_orders(db, production_required=production_required)
    return ApiResponse(
        data=[SalesOrderResponse.model_validate(o) for o in orders],
        meta=Meta(total_count=len(orders)),
    )


@router.post("", response_model=ApiResponse[SalesOrderResponse], status_code=status.HTTP_201_CREATED)
async def create_sales_order(body: SalesOrderCreate, db: DbSession):
    order = await SalesOrderService.create_sales_order(
        db,
        body.customer_name,
        body.bom_template_id,
        body.quantity,
        unit_price=body.unit_price,
        production_required=body.production_required,
        priority=body.priority,
    )
    await db.commit()
    return ApiResponse(data=SalesOrderResponse.model_validate(order))


@router.get("/{order_id}", response_model=ApiResponse[SalesOrderResponse])
async def get_sales_order(order_id: int, db: DbSession):
    order = await SalesOrderService.get_sales_order(db, order_id)
    return ApiResponse(data=SalesOrderResponse.model_validate(order))
