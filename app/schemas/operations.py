"""
Pydantic schemas for the operations summary API response.
"""
from datetime import datetime

from pydantic import Field

from app.models.common import ZERO, Amount, Count, ResponseModel


class RoomStats(ResponseModel):
    """Room occupancy counters as reported by the room provider."""
    total_rooms: Count = 0
    fully_occupied_rooms: Count = 0
    partially_occupied_rooms: Count = 0
    maintenance_rooms: Count = 0


class TenantStats(ResponseModel):
    """Tenant population counters as reported by the identity provider."""
    total_tenants: Count = 0
    active_tenants: Count = 0
    inactive_tenants: Count = 0


class PaymentStats(ResponseModel):
    """Collection totals as reported by the payment provider."""
    total_amount_collected: Amount = ZERO
    total_outstanding_amount: Amount = ZERO


class OccupancySummary(ResponseModel):
    """Headline occupancy figures."""
    total_rooms: int = Field(0, description="Rooms in the property")
    occupied_rooms: int = Field(0, description="Fully plus partially occupied rooms")
    maintenance_rooms: int = Field(0, description="Rooms out for maintenance")
    total_tenants: int = Field(0, description="Tenants on record")
    active_tenants: int = Field(0, description="Tenants currently active")


class PaymentProgress(ResponseModel):
    """Share of billed money collected so far."""
    collected: Amount = ZERO
    outstanding: Amount = ZERO
    total: Amount = ZERO
    collected_pct: int = Field(0, ge=0, le=100)
    outstanding_pct: int = Field(100, ge=0, le=100)


class OperationsSummary(ResponseModel):
    """System-wide figures for the operations view."""
    occupancy: OccupancySummary
    payments: PaymentProgress
    room_stats_error: bool = False
    tenant_stats_error: bool = False
    payment_stats_error: bool = False
    fetched_at: datetime
