"""
Overdue roster API endpoints for the operations view.
"""
from typing import List

from fastapi import APIRouter, Depends

from app.core.dependencies import get_overdue_service
from app.schemas.overdue import OverdueCheckResponse, OverdueStats, OverdueTenant
from app.services.overdue_service import OverdueService

router = APIRouter(prefix="/overdue", tags=["overdue"])


@router.get("", response_model=List[OverdueTenant])
async def list_overdue_tenants(service: OverdueService = Depends(get_overdue_service)):
    """Overdue tenants, most severe and longest overdue first."""
    return await service.get_overdue_roster()


@router.get("/stats", response_model=OverdueStats)
async def overdue_stats(service: OverdueService = Depends(get_overdue_service)):
    """Counts per severity tier plus outstanding total and average days overdue."""
    return await service.get_overdue_stats()


@router.post("/check", response_model=OverdueCheckResponse)
async def check_overdue(service: OverdueService = Depends(get_overdue_service)):
    """
    Trigger the provider's overdue check and return a fresh roster.

    ``result`` carries the provider's counts unchanged.
    """
    return await service.check_and_refresh()
