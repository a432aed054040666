"""AutoParts ERP: production planning endpoints."""
from fastapi import APIRouter, Query

from autoparts.api.deps import Bus, DbSession
from autoparts.schemas.common import ApiResponse, Meta
from autoparts.schemas.production import PlanStats, ProductionPlanResponse, VerificationResult
from autoparts.services.production_plan_service import ProductionPlanService

router = APIRouter()


@router.get("", response_model=ApiResponse[list[ProductionPlanResponse]])
async def list_production_plans(db: DbSession, status_filter: str | None = Query(None, alias="status")):
    plans = await ProductionPlanService.list_production_plans(db, status=status_filter)
    return ApiResponse(
        data=[ProductionPlanResponse.model_validate(p) for p in plans],
        meta=Meta(total_count=len(plans)),
    )


@router.get("/stats", response_model=ApiResponse[PlanStats])
async def get_plan_stats(db: DbSession):
    return ApiResponse(data=await ProductionPlanService.get_plan_stats(db))


@router.post("/sync", response_model=ApiResponse[list[ProductionPlanResponse]])
async def sync_production_plans(db: DbSession):
    """Create missing plans for production-required sales orders."""
    plans = await ProductionPlanService.sync_production_plans(db)
    await db.commit()
    return ApiResponse(data=[ProductionPlanResponse.model_validate(p) for p in plans])


@router.post("/recheck", response_model=ApiResponse[list[VerificationResult]])
async def recheck_awaiting_plans(db: DbSession, bus: Bus):
    results = await ProductionPlanService.recheck_awaiting_materials_plans(db, bus)
    await db.commit()
    return ApiResponse(data=results)


@router.get("/{plan_id}", response_model=ApiResponse[ProductionPlanResponse])
async def get_production_plan(plan_id: int, db: DbSession):
    plan = await ProductionPlanService.get_production_plan(db, plan_id)
    return ApiResponse(data=ProductionPlanResponse.model_validate(plan))


@router.post("/{plan_id}/verify", response_model=ApiResponse[VerificationResult])
async def verify_inventory(plan_id: int, db: DbSession, bus: Bus):
    """Check BOM components against stock; shortages become purchase orders."""
    result = await ProductionPlanService.verify_inventory_for_production(db, bus, plan_id)
    await db.commit()
    return ApiResponse(data=result)


@router.post("/{plan_id}/start", response_model=ApiResponse[ProductionPlanResponse])
async def start_production(plan_id: int, db: DbSession, bus: Bus):
    plan = await ProductionPlanService.start_production(db, bus, plan_id)
    await db.commit()
    return ApiResponse(data=ProductionPlanResponse.model_validate(plan))
