"""
Tenant dashboard orchestration.

Resolves the tenant behind an account, then fans out to the billing, room
and maintenance providers. Only the tenant lookup is fatal; every other
slice degrades to its default with an error flag.
"""
from datetime import datetime, timezone
from typing import Callable, Optional

import structlog

from app.core.config import Settings, get_settings
from app.core.degradation import SliceSpec, gather_slices, resolve_slice
from app.core.exceptions import TenantResolutionError, describe_error
from app.core.logging import correlation_context, performance_timing
from app.models import Tenant
from app.schemas.dashboard import DashboardRefresh, PaymentHistory, TenantDashboard
from app.services.external import (
    BillingProvider,
    IdentityProvider,
    MaintenanceProvider,
    PaymentProvider,
    RoomProvider,
)
from app.services.reconciliation import corrected_balance

logger = structlog.get_logger(__name__)

LoadingCallback = Callable[[bool], None]


class TenantDashboardService:
    """Builds the composite tenant dashboard from independent providers."""

    def __init__(
        self,
        identity: IdentityProvider,
        billing: BillingProvider,
        rooms: RoomProvider,
        maintenance: MaintenanceProvider,
        payments: PaymentProvider,
        settings: Optional[Settings] = None,
        log: Optional[structlog.stdlib.BoundLogger] = None,
    ):
        self.identity = identity
        self.billing = billing
        self.rooms = rooms
        self.maintenance = maintenance
        self.payments = payments
        self.settings = settings or get_settings()
        self.logger = log or logger

    async def load_dashboard(
        self,
        account_id: str,
        on_loading: Optional[LoadingCallback] = None,
    ) -> TenantDashboard:
        """
        Assemble the dashboard for an account.

        Args:
            account_id: Account the tenant is linked to
            on_loading: Called with True when loading starts and False once
                every slice has settled, including on fatal failure

        Returns:
            Fully populated composite; failed slices hold their defaults

        Raises:
            TenantResolutionError: If the tenant cannot be resolved
        """
        if on_loading:
            on_loading(True)

        try:
            with correlation_context(account_id=account_id), performance_timing(
                "load_dashboard", self.logger
            ):
                self.logger.info("dashboard_load_started", account_id=account_id)

                tenant = await self._resolve_tenant(account_id)

                with correlation_context(tenant_id=tenant.id):
                    return await self._assemble(tenant)
        finally:
            if on_loading:
                on_loading(False)

    async def _resolve_tenant(self, account_id: str) -> Tenant:
        try:
            tenant = await self.identity.get_tenant_by_account_id(account_id)
        except Exception as e:
            details = describe_error(e)
            self.logger.error(
                "tenant_resolution_failed",
                account_id=account_id,
                error=details,
                error_type=type(e).__name__,
            )
            raise TenantResolutionError(account_id, details) from e

        if tenant is None:
            details = f"No tenant found for account {account_id}"
            self.logger.error("tenant_resolution_failed", account_id=account_id, error=details)
            raise TenantResolutionError(account_id, details, not_found=True)

        return tenant

    async def _assemble(self, tenant: Tenant) -> TenantDashboard:
        room_fetch = None
        if tenant.has_room:
            room_fetch = lambda: self.rooms.get_room_by_id(tenant.room_id)  # noqa: E731

        outcome = await gather_slices(
            [
                SliceSpec(
                    "billing",
                    default_factory=lambda: None,
                    fetch=lambda: self.billing.get_billing_info(tenant.id),
                ),
                SliceSpec("room", default_factory=lambda: None, fetch=room_fetch),
                SliceSpec(
                    "maintenance",
                    default_factory=list,
                    fetch=lambda: self.maintenance.list_by_tenant(tenant.id),
                ),
            ],
            self.logger,
        )

        billing = outcome.value("billing")
        dashboard = TenantDashboard(
            tenant=tenant,
            billing=billing,
            room=outcome.value("room"),
            maintenance_requests=outcome.value("maintenance"),
            corrected_balance=corrected_balance(billing, self.logger),
            billing_error=outcome.failed("billing"),
            room_error=outcome.failed("room"),
            maintenance_error=outcome.failed("maintenance"),
            poll_interval_seconds=self.settings.dashboard_poll_interval_seconds,
            fetched_at=datetime.now(timezone.utc),
        )

        self.logger.info(
            "dashboard_load_completed",
            tenant_id=tenant.id,
            has_partial_data=dashboard.has_partial_data,
            failed_slices=outcome.failed_slices,
        )
        return dashboard

    def _page_size(self, limit: Optional[int]) -> int:
        if limit is None:
            return self.settings.payment_history_limit
        return min(max(1, limit), self.settings.payment_history_max_limit)

    async def load_payment_history(
        self,
        tenant_id: Optional[str],
        limit: Optional[int] = None,
    ) -> PaymentHistory:
        """Most recent payments for a tenant; failures yield an empty page with ``error`` set."""
        page_size = self._page_size(limit)

        if not tenant_id or not str(tenant_id).strip():
            return PaymentHistory(tenant_id=None, limit=page_size)

        with correlation_context(tenant_id=tenant_id):
            result = await resolve_slice(
                SliceSpec(
                    "payments",
                    default_factory=list,
                    fetch=lambda: self.payments.get_payments_by_tenant(tenant_id, page_size),
                ),
                self.logger,
            )

        return PaymentHistory(
            tenant_id=tenant_id,
            limit=page_size,
            payments=result.value,
            error=result.failed,
        )

    async def refresh(self, account_id: str, limit: Optional[int] = None) -> DashboardRefresh:
        """Re-read the dashboard, then the payment history of the resolved tenant."""
        dashboard = await self.load_dashboard(account_id)
        history = await self.load_payment_history(dashboard.tenant.id, limit)
        return DashboardRefresh(dashboard=dashboard, payment_history=history)
