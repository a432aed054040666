"""AutoParts ERP: BOM template endpoints."""
from fastapi import APIRouter, Query, status

from autoparts.api.deps import DbSession
from autoparts.schemas.bom import BOMExplodeRequest, BOMTemplateCreate, BOMTemplateResponse
from autoparts.schemas.common import ApiResponse, Meta
from autoparts.services.bom_service import BOMService

router = APIRouter()


@router.get("", response_model=ApiResponse[list[BOMTemplateResponse]])
async def list_bom_templates(
    db: DbSession,
    kit_sku_id: int | None = Query(None),
    include_inactive: bool = Query(False),
):
    """List BOM templates, active versions only unless include_inactive."""
    templates = await BOMService.list_bom_templates(db, kit_sku_id=kit_sku_id, include_inactive=include_inactive)
    return ApiResponse(
        data=[BOMTemplateResponse.model_validate(t) for t in templates],
        meta=Meta(total_count=len(templates)),
    )


@router.post("", response_model=ApiResponse[BOMTemplateResponse], status_code=status.HTTP_201_CREATED)
async def create_bom_template(body: BOMTemplateCreate, db: DbSession):
    """Create a BOM template. An existing active version for the kit is superseded."""
    template = await BOMService.create_bom_template(
        db,
        body.kit_sku_id,
        body.name,
        [c.model_dump() for c in body.components],
        body.version,
        description=body.description,
        labor_cost=body.labor_cost,
        overhead_cost=body.overhead_cost,
    )
    await db.commit()
    return ApiResponse(data=BOMTemplateResponse.model_validate(template))


@router.get("/{template_id}", response_model=ApiResponse[BOMTemplateResponse])
async def get_bom_template(template_id: int, db: DbSession):
    template = await BOMService.get_bom_template_with_components(db, template_id)
    return ApiResponse(data=BOMTemplateResponse.model_validate(template))


@router.post("/{template_id}/explode", response_model=ApiResponse[dict[int, int]])
async def explode_bom(template_id: int, body: BOMExplodeRequest, db: DbSession):
    """Component requirements for building `quantity` kits."""
    return ApiResponse(data=await BOMService.explode_bom(db, template_id, body.quantity))


@router.delete("/{template_id}", response_model=ApiResponse[BOMTemplateResponse])
async def archive_bom_template(template_id: int, db: DbSession):
    template = await BOMService.archive_bom_template(db, template_id)
    await db.commit()
    return ApiResponse(data=BOMTemplateResponse.model_validate(template))
