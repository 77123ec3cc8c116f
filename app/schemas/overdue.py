"""
Pydantic schemas for the overdue roster API responses.
"""
from datetime import date, datetime
from typing import List, Optional

from pydantic import Field

from app.models import OverdueCheckResult, OverdueRecord, Severity
from app.models.common import ZERO, Amount, ResponseModel


class SeverityDisplay(ResponseModel):
    """Presentation metadata for a severity tier."""
    label: str = Field(..., description="Short tier label")
    color: str = Field(..., description="Hex colour used for the tier badge")
    icon: str = Field(..., description="Icon shown next to the tier")
    description: str = Field(..., description="Human readable tier description")


class OverdueStats(ResponseModel):
    """Roll-up over the overdue roster."""
    total_overdue: int = Field(0, description="Number of overdue tenants")
    critical: int = Field(0, description="Tenants more than 30 days overdue")
    high: int = Field(0, description="Tenants more than 14 days overdue")
    medium: int = Field(0, description="Tenants more than 7 days overdue")
    warning: int = Field(0, description="Tenants overdue 7 days or less")
    total_outstanding: Amount = Field(ZERO, description="Sum of outstanding balances")
    average_days_overdue: int = Field(0, description="Mean days overdue, rounded half up")


class OverdueTenant(ResponseModel):
    """Classified roster entry with its display metadata attached."""
    tenant_id: str = Field(..., description="Tenant identifier")
    tenant_name: Optional[str] = Field(None, description="Tenant display name")
    email: Optional[str] = None
    room_number: Optional[str] = None
    outstanding_balance: Amount = Field(ZERO, description="Outstanding balance")
    days_overdue: int = Field(0, ge=0, description="Days past the due date")
    next_due_date: Optional[date] = None
    last_payment_date: Optional[date] = None
    severity: Severity = Field(..., description="Assigned delinquency tier")
    display: SeverityDisplay

    @classmethod
    def from_record(cls, record: OverdueRecord, display: SeverityDisplay) -> "OverdueTenant":
        return cls(
            tenant_id=record.tenant_id,
            tenant_name=record.tenant_name,
            email=record.email,
            room_number=record.room_number,
            outstanding_balance=record.outstanding_balance,
            days_overdue=record.days_overdue or 0,
            next_due_date=record.next_due_date,
            last_payment_date=record.last_payment_date,
            severity=record.severity,
            display=display,
        )


class OverdueOverview(ResponseModel):
    """Roster and statistics computed from the same provider fetch."""
    tenants: List[OverdueTenant] = Field(default_factory=list)
    stats: OverdueStats = Field(default_factory=OverdueStats)
    generated_at: datetime = Field(..., description="When the roster was classified")


class OverdueCheckResponse(ResponseModel):
    """Outcome of a manual overdue check followed by a fresh roster."""
    result: OverdueCheckResult
    overview: Optional[OverdueOverview] = Field(
        None, description="Refreshed roster; absent if the refresh failed"
    )
    refresh_error: bool = Field(False, description="True when the post-check refresh failed")
