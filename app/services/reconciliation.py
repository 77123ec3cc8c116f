"""
Display-side reconciliation of a tenant's outstanding balance.

The backend may not yet have posted the security deposit to any billing
cycle. Until it does, the balance shown to the tenant is corrected locally
by crediting the deposit (capped at one month's cost). Nothing here writes
back to the ledger.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping, Optional, Union

import structlog
from pydantic import ValidationError

from app.models import BillingSnapshot
from app.models.common import ZERO

logger = structlog.get_logger(__name__)

SnapshotInput = Union[BillingSnapshot, Mapping[str, Any], None]


@dataclass(frozen=True)
class Reconciliation:
    """How a corrected balance was arrived at."""

    corrected_balance: Decimal
    outstanding_balance: Decimal
    deposit_credit: Decimal
    source: str  # "none", "provider" or "local"

    @property
    def deposit_credit_applied(self) -> bool:
        return self.deposit_credit > ZERO


def _as_snapshot(snapshot: SnapshotInput, log) -> Optional[BillingSnapshot]:
    if snapshot is None or isinstance(snapshot, BillingSnapshot):
        return snapshot
    if isinstance(snapshot, Mapping):
        try:
            return BillingSnapshot.model_validate(dict(snapshot))
        except ValidationError as e:
            log.warning("billing_snapshot_unusable", error_count=e.error_count())
            return None
    log.warning("billing_snapshot_unusable", received_type=type(snapshot).__name__)
    return None


def _clamp(value: Decimal, upper: Decimal) -> Decimal:
    return min(max(ZERO, value), upper)


def reconcile_balance(
    snapshot: SnapshotInput,
    log: Optional[structlog.stdlib.BoundLogger] = None,
) -> Reconciliation:
    """
    Work out the balance to display for a billing snapshot.

    A precomputed ``correctedOutstandingBalance`` from the provider wins.
    Otherwise the deposit is credited, at most one month's cost, unless any
    billing cycle already shows a deposit applied. The result always lies
    within ``[0, outstanding_balance]`` and this function never raises.
    """
    log = log or logger
    billing = _as_snapshot(snapshot, log)

    if billing is None:
        return Reconciliation(ZERO, ZERO, ZERO, source="none")

    try:
        return _reconcile(billing, log)
    except ArithmeticError as e:
        log.warning(
            "balance_reconciliation_failed",
            error=str(e) or type(e).__name__,
            error_type=type(e).__name__,
        )
        outstanding = billing.outstanding_balance
        return Reconciliation(outstanding, outstanding, ZERO, source="local")


def _reconcile(billing: BillingSnapshot, log) -> Reconciliation:
    outstanding = billing.outstanding_balance

    # An explicit null counts as absent and falls through to the local formula
    if billing.corrected_outstanding_balance is not None:
        provided = billing.corrected_outstanding_balance
        corrected = _clamp(provided, outstanding)
        if corrected != provided:
            log.warning(
                "provider_corrected_balance_out_of_range",
                provided=str(provided),
                outstanding=str(outstanding),
            )
        return Reconciliation(corrected, outstanding, outstanding - corrected, source="provider")

    deposit = billing.deposit
    total_monthly = billing.total_monthly_cost

    if not billing.any_deposit_applied and deposit > ZERO and total_monthly > ZERO:
        credit = min(deposit, total_monthly)
        corrected = max(ZERO, outstanding - credit)
        log.info(
            "deposit_credit_applied",
            outstanding=str(outstanding),
            deposit=str(deposit),
            total_monthly=str(total_monthly),
            credit=str(credit),
            corrected=str(corrected),
        )
        return Reconciliation(corrected, outstanding, outstanding - corrected, source="local")

    return Reconciliation(outstanding, outstanding, ZERO, source="local")


def corrected_balance(
    snapshot: SnapshotInput,
    log: Optional[structlog.stdlib.BoundLogger] = None,
) -> Decimal:
    """The outstanding balance the tenant should see."""
    return reconcile_balance(snapshot, log).corrected_balance
