"""AutoParts ERP: SKU, vendor and warehouse endpoints."""
from fastapi import APIRouter, Query, status

from autoparts.api.deps import DbSession
from autoparts.schemas.catalog import (
    SKUCreate,
    SKUResponse,
    VendorCreate,
    VendorResponse,
    WarehouseCreate,
    WarehouseResponse,
)
from autoparts.schemas.common import ApiResponse, Meta
from autoparts.services.catalog_service import CatalogService

router = APIRouter()


@router.get("/skus", response_model=ApiResponse[list[SKUResponse]])
async def list_skus(
    db: DbSession,
    sku_type: str | None = Query(None),
    search: str | None = Query(None),
):
    skus = await CatalogService.list_skus(db, sku_type=sku_type, search=search)
    return ApiResponse(
        data=[SKUResponse.model_validate(s) for s in skus],
        meta=Meta(total_count=len(skus)),
    )


@router.post("/skus", response_model=ApiResponse[SKUResponse], status_code=status.HTTP_201_CREATED)
async def create_sku(body: SKUCreate, db: DbSession):
    sku = await CatalogService.create_sku(db, **body.model_dump())
    await db.commit()
    return ApiResponse(data=SKUResponse.model_validate(sku))


@router.get("/skus/{sku_id}", response_model=ApiResponse[SKUResponse])
async def get_sku(sku_id: int, db: DbSession):
    sku = await CatalogService.get_sku(db, sku_id)
    return ApiResponse(data=SKUResponse.model_validate(sku))


@router.get("/vendors", response_model=ApiResponse[list[VendorResponse]])
async def list_vendors(db: DbSession, active_only: bool = Query(False)):
    vendors = await CatalogService.list_vendors(db, active_only=active_only)
    return ApiResponse(data=[VendorResponse.model_validate(v) for v in vendors])


@router.post("/vendors", response_model=ApiResponse[VendorResponse], status_code=status.HTTP_201_CREATED)
async def create_vendor(body: VendorCreate, db: DbSession):
    vendor = await CatalogService.create_vendor(db, **body.model_dump())
    await db.commit()
    return ApiResponse(data=VendorResponse.model_validate(vendor))


@router.get("/warehouses", response_model=ApiResponse[list[WarehouseResponse]])
async def list_warehouses(db: DbSession):
    warehouses = await CatalogService.list_warehouses(db)
    return ApiResponse(data=[WarehouseResponse.model_validate(w) for w in warehouses])


@router.post("/warehouses", response_model=ApiResponse[WarehouseResponse], status_code=status.HTTP_201_CREATED)
async def create_warehouse(body: WarehouseCreate, db: DbSession):
    warehouse = await CatalogService.create_warehouse(db, **body.model_dump())
    await db.commit()
    return ApiResponse(data=WarehouseResponse.model_validate(warehouse))
