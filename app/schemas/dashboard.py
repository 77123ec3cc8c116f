"""
Pydantic schemas for the tenant dashboard API responses.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import Field, computed_field

from app.models import BillingSnapshot, MaintenanceRequest, Payment, RoomInfo, Tenant
from app.models.common import ZERO, Amount, ResponseModel


class TenantDashboard(ResponseModel):
    """
    Composite view of one tenant.

    Every slice is always present; a slice whose provider failed holds its
    default and has its error flag set.
    """
    tenant: Tenant = Field(..., description="Resolved tenant identity")
    billing: Optional[BillingSnapshot] = Field(None, description="Billing snapshot, if it loaded")
    room: Optional[RoomInfo] = Field(None, description="Occupied room, if any")
    maintenance_requests: List[MaintenanceRequest] = Field(default_factory=list)
    corrected_balance: Amount = Field(ZERO, description="Outstanding balance to display")
    billing_error: bool = Field(False, description="Billing lookup failed")
    room_error: bool = Field(False, description="Room lookup failed")
    maintenance_error: bool = Field(False, description="Maintenance lookup failed")
    poll_interval_seconds: int = Field(30, description="Suggested refresh period")
    fetched_at: datetime = Field(..., description="When the composite was assembled")

    @computed_field  # type: ignore[misc]
    @property
    def has_partial_data(self) -> bool:
        return self.billing_error or self.room_error or self.maintenance_error


class PaymentHistory(ResponseModel):
    """Most recent payments for a tenant."""
    tenant_id: Optional[str] = Field(None, description="Tenant the page belongs to")
    limit: int = Field(..., ge=1, description="Page size that was requested")
    payments: List[Payment] = Field(default_factory=list)
    error: bool = Field(False, description="Payment lookup failed")


class DashboardRefresh(ResponseModel):
    """Dashboard and payment history re-read together."""
    dashboard: TenantDashboard
    payment_history: PaymentHistory


class CorrectedBalanceResponse(ResponseModel):
    """Outcome of reconciling a billing snapshot for display."""
    corrected_balance: Amount = Field(..., description="Balance to display")
    outstanding_balance: Amount = Field(..., description="Balance as reported by the ledger")
    deposit_credit: Amount = Field(..., description="Amount taken off for display")
    source: str = Field(..., description="none, provider or local")
