"""
Typed provider payloads for the tenant ledger view service.
"""
from .billing import BillingCycle, BillingSnapshot
from .overdue import OverdueCheckResult, OverdueRecord, Severity
from .tenant import MaintenanceRequest, Payment, RoomInfo, Tenant

__all__ = [
    "BillingCycle",
    "BillingSnapshot",
    "MaintenanceRequest",
    "OverdueCheckResult",
    "OverdueRecord",
    "Payment",
    "RoomInfo",
    "Severity",
    "Tenant",
]
