"""
Tenant dashboard API endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.dependencies import get_tenant_dashboard_service
from app.schemas.dashboard import DashboardRefresh, PaymentHistory, TenantDashboard
from app.services.tenant_dashboard import TenantDashboardService

router = APIRouter(tags=["dashboard"])


@router.get("/dashboard/{account_id}", response_model=TenantDashboard)
async def get_dashboard(
    account_id: str,
    service: TenantDashboardService = Depends(get_tenant_dashboard_service),
):
    """
    Load the tenant dashboard for an account.

    Fails only when the tenant itself cannot be resolved; any other
    provider failure shows up as the matching ``*Error`` flag.
    """
    return await service.load_dashboard(account_id)


@router.post("/dashboard/{account_id}/refresh", response_model=DashboardRefresh)
async def refresh_dashboard(
    account_id: str,
    limit: Optional[int] = Query(None, description="Payment history page size"),
    service: TenantDashboardService = Depends(get_tenant_dashboard_service),
):
    """Re-read the dashboard and then the payment history."""
    return await service.refresh(account_id, limit)


@router.get("/tenants/{tenant_id}/payments", response_model=PaymentHistory)
async def get_payment_history(
    tenant_id: str,
    limit: Optional[int] = Query(None, description="Number of most recent payments"),
    service: TenantDashboardService = Depends(get_tenant_dashboard_service),
):
    """Most recent payments for a tenant."""
    return await service.load_payment_history(tenant_id, limit)
