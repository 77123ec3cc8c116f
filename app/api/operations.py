"""
Operations summary API endpoint.
"""
from fastapi import APIRouter, Depends

from app.core.dependencies import get_operations_summary_service
from app.schemas.operations import OperationsSummary
from app.services.operations_summary import OperationsSummaryService

router = APIRouter(prefix="/operations", tags=["operations"])


@router.get("/summary", response_model=OperationsSummary)
async def operations_summary(
    service: OperationsSummaryService = Depends(get_operations_summary_service),
):
    return await service.load_summary()
