"""
Severity classification and roll-up statistics for the overdue roster.

Severity is a pure function of days overdue, evaluated against a fixed
table of exclusive lower bounds, most severe tier first.
"""
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import structlog

from app.models import OverdueRecord, Severity
from app.models.common import ZERO
from app.schemas.overdue import OverdueStats, SeverityDisplay

logger = structlog.get_logger(__name__)

# (exclusive lower bound on days overdue, tier), most severe first
SEVERITY_TIERS: Tuple[Tuple[int, Severity], ...] = (
    (30, Severity.CRITICAL),
    (14, Severity.HIGH),
    (7, Severity.MEDIUM),
)
DEFAULT_SEVERITY = Severity.WARNING

SEVERITY_DISPLAY: Dict[Severity, SeverityDisplay] = {
    Severity.CRITICAL: SeverityDisplay(
        label="Critical", color="#dc2626", icon="🚨",
        description="Critical - Over 30 days overdue",
    ),
    Severity.HIGH: SeverityDisplay(
        label="High", color="#ea580c", icon="⚠️",
        description="High - Over 2 weeks overdue",
    ),
    Severity.MEDIUM: SeverityDisplay(
        label="Medium", color="#d97706", icon="⚡",
        description="Medium - Over 1 week overdue",
    ),
    Severity.WARNING: SeverityDisplay(
        label="Warning", color="#ca8a04", icon="📋",
        description="Warning - Recently overdue",
    ),
}


def classify_severity(days_overdue: int) -> Severity:
    """Map a day count onto its severity tier."""
    for lower_bound, severity in SEVERITY_TIERS:
        if days_overdue > lower_bound:
            return severity
    return DEFAULT_SEVERITY


def severity_display(severity: Optional[Severity]) -> SeverityDisplay:
    """Display metadata for a tier; unknown tiers render as a warning."""
    return SEVERITY_DISPLAY.get(severity, SEVERITY_DISPLAY[DEFAULT_SEVERITY])


def days_between(due_date: Optional[date], as_of: date) -> int:
    if due_date is None:
        return 0
    return max(0, (as_of - due_date).days)


def build_overdue_record(
    raw: Union[OverdueRecord, Mapping[str, Any]],
    as_of: Optional[date] = None,
) -> OverdueRecord:
    """
    Type a roster entry and assign its severity.

    When the provider omits ``daysOverdue`` it is derived from
    ``nextDueDate`` relative to ``as_of`` (today by default).
    """
    record = raw if isinstance(raw, OverdueRecord) else OverdueRecord.model_validate(raw)

    days = record.days_overdue
    if days is None:
        days = days_between(record.next_due_date, as_of or date.today())

    return record.model_copy(update={"days_overdue": days, "severity": classify_severity(days)})


def classify_roster(
    roster: Iterable[Union[OverdueRecord, Mapping[str, Any]]],
    as_of: Optional[date] = None,
    log: Optional[structlog.stdlib.BoundLogger] = None,
) -> List[OverdueRecord]:
    """
    Classify every roster entry, most severe and longest overdue first.

    Entries that cannot be typed (no tenant id) are skipped and logged.
    """
    log = log or logger
    records = []
    skipped = 0

    for raw in roster:
        try:
            records.append(build_overdue_record(raw, as_of))
        except ValueError as e:
            skipped += 1
            log.warning("overdue_record_skipped", error=str(e))

    if skipped:
        log.warning("overdue_roster_incomplete", skipped=skipped, classified=len(records))

    records.sort(key=lambda r: (r.severity.rank, r.days_overdue), reverse=True)
    return records


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def aggregate_overdue_stats(
    records: Sequence[OverdueRecord],
    log: Optional[structlog.stdlib.BoundLogger] = None,
) -> OverdueStats:
    """Roll a classified roster up into counts per tier and totals."""
    log = log or logger

    counts = {severity: 0 for severity in Severity}
    total_outstanding = ZERO
    total_days = 0

    for record in records:
        severity = record.severity or classify_severity(record.days_overdue or 0)
        counts[severity] += 1
        total_outstanding += record.outstanding_balance
        total_days += record.days_overdue or 0

    total = len(records)
    average_days = _round_half_up(Decimal(total_days) / Decimal(total)) if total else 0

    stats = OverdueStats(
        total_overdue=total,
        critical=counts[Severity.CRITICAL],
        high=counts[Severity.HIGH],
        medium=counts[Severity.MEDIUM],
        warning=counts[Severity.WARNING],
        total_outstanding=total_outstanding,
        average_days_overdue=average_days,
    )

    log.info(
        "overdue_stats_computed",
        total_overdue=stats.total_overdue,
        critical=stats.critical,
        high=stats.high,
        medium=stats.medium,
        warning=stats.warning,
        average_days_overdue=stats.average_days_overdue,
    )
    return stats
