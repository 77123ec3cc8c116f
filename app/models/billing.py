"""
Billing ledger snapshot as returned by the billing provider.
"""
from typing import Annotated, List

from pydantic import BeforeValidator, ConfigDict, Field, model_validator

from app.models.common import (
    Amount,
    Identifier,
    Label,
    NonNegativeAmount,
    OptionalAmount,
    ProviderModel,
    ZERO,
    coerce_list,
)


class BillingCycle(ProviderModel):
    """One closed billing period. Immutable at the source once closed."""

    model_config = ConfigDict(frozen=True)

    month: Label = None
    previous_balance: Amount = ZERO
    deposit_applied: NonNegativeAmount = ZERO
    charges: Amount = ZERO
    payments_made: Amount = ZERO
    final_balance: Amount = ZERO


def _coerce_cycles(value) -> list:
    return [item for item in coerce_list(value) if isinstance(item, (dict, BillingCycle))]


class BillingSnapshot(ProviderModel):
    """
    Current-state view of a tenant's ledger.

    ``total_monthly_cost`` is derived from rent plus utilities when the
    provider leaves it out (or sends zero). ``corrected_outstanding_balance``
    is only set when the provider computed it itself.
    """

    tenant_id: Identifier = None
    outstanding_balance: NonNegativeAmount = ZERO
    deposit: NonNegativeAmount = ZERO
    monthly_rent: Amount = ZERO
    utilities: Amount = ZERO
    total_monthly_cost: Amount = ZERO
    billing_cycles: Annotated[List[BillingCycle], BeforeValidator(_coerce_cycles)] = Field(
        default_factory=list
    )
    corrected_outstanding_balance: OptionalAmount = None

    @model_validator(mode="after")
    def derive_total_monthly_cost(self) -> "BillingSnapshot":
        if not self.total_monthly_cost:
            self.total_monthly_cost = self.monthly_rent + self.utilities
        return self

    @property
    def any_deposit_applied(self) -> bool:
        return any(cycle.deposit_applied > ZERO for cycle in self.billing_cycles)
