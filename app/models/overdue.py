"""
Overdue roster entries and the manual overdue-check result.
"""
from enum import Enum
from typing import Annotated, Optional

from pydantic import AliasChoices, BeforeValidator, Field

from app.models.common import (
    ZERO,
    Count,
    DayCount,
    Label,
    LenientDate,
    NonNegativeAmount,
    ProviderModel,
    RequiredIdentifier,
)


class Severity(str, Enum):
    """Delinquency tiers, ordered from least to most severe."""

    WARNING = "warning"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)


_SEVERITY_ORDER = (Severity.WARNING, Severity.MEDIUM, Severity.HIGH, Severity.CRITICAL)


def _discard_provider_severity(value) -> None:
    return None


class OverdueRecord(ProviderModel):
    """
    One tenant on the overdue roster.

    ``days_overdue`` may be missing from the provider payload, in which case
    the classifier derives it from ``next_due_date``. ``severity`` is always
    assigned by the classifier; whatever the provider sent is discarded.
    """

    tenant_id: RequiredIdentifier = Field(validation_alias=AliasChoices("tenantId", "tenant_id", "id"))
    tenant_name: Label = Field(
        default=None, validation_alias=AliasChoices("tenantName", "tenant_name", "name")
    )
    email: Label = None
    room_number: Label = None
    outstanding_balance: NonNegativeAmount = ZERO
    days_overdue: DayCount = None
    next_due_date: LenientDate = None
    last_payment_date: LenientDate = None
    severity: Annotated[Optional[Severity], BeforeValidator(_discard_provider_severity)] = None


class OverdueCheckResult(ProviderModel):
    """Opaque outcome of the provider's overdue evaluation run."""

    checked: Count = 0
    overdue: Count = 0
    message: Label = None
