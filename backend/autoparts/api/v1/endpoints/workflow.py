"""AutoParts ERP: workflow summary endpoint."""
from fastapi import APIRouter

from autoparts.api.deps import DbSession
from autoparts.schemas.common import ApiResponse
from autoparts.schemas.workflow import WorkflowSummary
from autoparts.services.workflow_service import WorkflowService

router = APIRouter()


@router.get("/summary", response_model=ApiResponse[WorkflowSummary])
async def get_workflow_summary(db: DbSession):
    return ApiResponse(data=await WorkflowService.get_workflow_summary(db))
