"""
Tests for the tenant dashboard orchestrator.
"""
import asyncio
import decimal
from decimal import Decimal

import pytest
import structlog
from structlog.testing import capture_logs

from app.core.exceptions import ExternalServiceError, TenantResolutionError
from app.models import BillingSnapshot, Tenant
from app.services import reconciliation
from app.services.tenant_dashboard import TenantDashboardService


class TestLoadDashboard:
    """Test suite for TenantDashboardService.load_dashboard."""

    @pytest.mark.asyncio
    async def test_all_slices_loaded(self, dashboard_service, billing_provider, maintenance_provider):
        dashboard = await dashboard_service.load_dashboard("acct-1")

        assert dashboard.tenant.id == "tenant-1"
        assert dashboard.billing.outstanding_balance == Decimal("1000")
        assert dashboard.room.room_number == "7A"
        assert len(dashboard.maintenance_requests) == 2
        assert dashboard.corrected_balance == Decimal("700")
        assert not dashboard.has_partial_data
        billing_provider.get_billing_info.assert_awaited_once_with("tenant-1")
        maintenance_provider.list_by_tenant.assert_awaited_once_with("tenant-1")

    @pytest.mark.asyncio
    async def test_billing_failure_is_isolated(self, dashboard_service, billing_provider):
        billing_provider.get_billing_info.side_effect = ExternalServiceError("billing", "HTTP 502", 502)

        dashboard = await dashboard_service.load_dashboard("acct-1")

        assert dashboard.billing is None
        assert dashboard.billing_error is True
        assert dashboard.corrected_balance == Decimal("0")
        assert dashboard.room is not None
        assert dashboard.room_error is False
        assert len(dashboard.maintenance_requests) == 2
        assert dashboard.maintenance_error is False
        assert dashboard.has_partial_data

    @pytest.mark.asyncio
    async def test_oversized_billing_amounts(self, dashboard_service, billing_provider):
        billing_provider.get_billing_info.return_value = BillingSnapshot.model_validate(
            {"outstandingBalance": "1e1000000", "deposit": 100, "monthlyRent": 100}
        )

        dashboard = await dashboard_service.load_dashboard("acct-1")

        assert dashboard.billing_error is False
        assert dashboard.billing.outstanding_balance == Decimal("0")
        assert dashboard.corrected_balance == Decimal("0")

    @pytest.mark.asyncio
    async def test_reconciliation_arithmetic_failure(self, dashboard_service, monkeypatch):
        def overflow(billing, log):
            raise decimal.Overflow()

        monkeypatch.setattr(reconciliation, "_reconcile", overflow)

        dashboard = await dashboard_service.load_dashboard("acct-1")

        assert dashboard.billing_error is False
        assert dashboard.corrected_balance == Decimal("1000")

    @pytest.mark.asyncio
    async def test_every_slice_failing_still_returns(
        self, dashboard_service, billing_provider, room_provider, maintenance_provider
    ):
        billing_provider.get_billing_info.side_effect = RuntimeError("boom")
        room_provider.get_room_by_id.side_effect = ExternalServiceError("room", "timeout")
        maintenance_provider.list_by_tenant.side_effect = ValueError("bad payload")

        dashboard = await dashboard_service.load_dashboard("acct-1")

        assert dashboard.tenant.id == "tenant-1"
        assert (dashboard.billing_error, dashboard.room_error, dashboard.maintenance_error) == (True, True, True)
        assert dashboard.billing is None
        assert dashboard.room is None
        assert dashboard.maintenance_requests == []

    @pytest.mark.asyncio
    async def test_tenant_without_room_skips_room_lookup(
        self, dashboard_service, identity_provider, room_provider, sample_tenant
    ):
        identity_provider.get_tenant_by_account_id.return_value = Tenant.model_validate(
            {**sample_tenant, "roomId": None}
        )

        dashboard = await dashboard_service.load_dashboard("acct-1")

        assert dashboard.room is None
        assert dashboard.room_error is False
        room_provider.get_room_by_id.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_none_maintenance_becomes_empty_list(self, dashboard_service, maintenance_provider):
        maintenance_provider.list_by_tenant.return_value = None

        dashboard = await dashboard_service.load_dashboard("acct-1")

        assert dashboard.maintenance_requests == []
        assert dashboard.maintenance_error is False

    @pytest.mark.asyncio
    async def test_identity_failure_is_fatal(
        self, dashboard_service, identity_provider, billing_provider
    ):
        identity_provider.get_tenant_by_account_id.side_effect = ExternalServiceError(
            "identity", "Tenant service unavailable", 503
        )

        with pytest.raises(TenantResolutionError) as exc_info:
            await dashboard_service.load_dashboard("acct-1")

        error = exc_info.value
        assert error.status_code == 503
        assert error.title == "Failed to load your dashboard"
        assert error.message == "Please try again in a moment."
        assert error.details == "Tenant service unavailable"
        billing_provider.get_billing_info.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_account_is_not_found(self, dashboard_service, identity_provider):
        identity_provider.get_tenant_by_account_id.return_value = None

        with pytest.raises(TenantResolutionError) as exc_info:
            await dashboard_service.load_dashboard("missing")

        assert exc_info.value.status_code == 404
        assert exc_info.value.not_found is True

    @pytest.mark.asyncio
    async def test_loading_callback(self, dashboard_service):
        transitions = []

        await dashboard_service.load_dashboard("acct-1", on_loading=transitions.append)

        assert transitions == [True, False]

    @pytest.mark.asyncio
    async def test_loading_callback_on_fatal_failure(self, dashboard_service, identity_provider):
        identity_provider.get_tenant_by_account_id.side_effect = RuntimeError("down")
        transitions = []

        with pytest.raises(TenantResolutionError):
            await dashboard_service.load_dashboard("acct-1", on_loading=transitions.append)

        assert transitions == [True, False]

    @pytest.mark.asyncio
    async def test_slices_run_concurrently(
        self, dashboard_service, billing_provider, room_provider, maintenance_provider
    ):
        started = []
        release = asyncio.Event()

        def gate(name, value):
            async def fetch(*args):
                started.append(name)
                if len(started) == 3:
                    release.set()
                await asyncio.wait_for(release.wait(), timeout=1)
                return value
            return fetch

        billing_provider.get_billing_info.side_effect = gate("billing", billing_provider.get_billing_info.return_value)
        room_provider.get_room_by_id.side_effect = gate("room", room_provider.get_room_by_id.return_value)
        maintenance_provider.list_by_tenant.side_effect = gate("maintenance", [])

        dashboard = await dashboard_service.load_dashboard("acct-1")

        assert sorted(started) == ["billing", "maintenance", "room"]
        assert not dashboard.has_partial_data

    @pytest.mark.asyncio
    async def test_idempotent(self, dashboard_service):
        first = await dashboard_service.load_dashboard("acct-1")
        second = await dashboard_service.load_dashboard("acct-1")

        assert first.model_dump(exclude={"fetched_at"}) == second.model_dump(exclude={"fetched_at"})

    @pytest.mark.asyncio
    async def test_events_logged(self, dashboard_service, billing_provider):
        billing_provider.get_billing_info.side_effect = ExternalServiceError("billing", "HTTP 500", 500)
        dashboard_service.logger = structlog.get_logger("test")

        with capture_logs() as logs:
            await dashboard_service.load_dashboard("acct-1")

        events = [e["event"] for e in logs]
        assert events.index("dashboard_load_started") < events.index("dashboard_load_completed")
        failed = [e for e in logs if e["event"] == "slice_fetch_failed"]
        assert len(failed) == 1
        assert failed[0]["slice"] == "billing"
        assert failed[0]["error"] == "HTTP 500"
        completed = next(e for e in logs if e["event"] == "dashboard_load_completed")
        assert completed["failed_slices"] == ["billing"]


class TestPaymentHistory:
    """Test suite for TenantDashboardService.load_payment_history."""

    @pytest.mark.asyncio
    async def test_default_limit(self, dashboard_service, payment_provider):
        history = await dashboard_service.load_payment_history("tenant-1")

        assert history.limit == 20
        assert len(history.payments) == 2
        assert history.payments[1].amount == Decimal("150.50")
        assert history.error is False
        payment_provider.get_payments_by_tenant.assert_awaited_once_with("tenant-1", 20)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("requested,expected", [(0, 1), (-5, 1), (5, 5), (1000, 100)])
    async def test_limit_is_clamped(self, dashboard_service, payment_provider, requested, expected):
        history = await dashboard_service.load_payment_history("tenant-1", requested)

        assert history.limit == expected
        payment_provider.get_payments_by_tenant.assert_awaited_once_with("tenant-1", expected)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("tenant_id", [None, "", "   "])
    async def test_blank_tenant_skips_provider(self, dashboard_service, payment_provider, tenant_id):
        history = await dashboard_service.load_payment_history(tenant_id)

        assert history.payments == []
        assert history.error is False
        payment_provider.get_payments_by_tenant.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failure_yields_empty_page(self, dashboard_service, payment_provider):
        payment_provider.get_payments_by_tenant.side_effect = ExternalServiceError("payment", "HTTP 500", 500)

        history = await dashboard_service.load_payment_history("tenant-1")

        assert history.payments == []
        assert history.error is True


class TestRefresh:
    """Test suite for TenantDashboardService.refresh."""

    @pytest.mark.asyncio
    async def test_dashboard_then_payments(self, dashboard_service, identity_provider, payment_provider):
        calls = []
        identity_provider.get_tenant_by_account_id.side_effect = (
            lambda account_id: calls.append("dashboard") or Tenant(id="tenant-1", room_id="room-7")
        )
        payment_provider.get_payments_by_tenant.side_effect = (
            lambda tenant_id, limit: calls.append("payments") or []
        )

        refreshed = await dashboard_service.refresh("acct-1")

        assert calls == ["dashboard", "payments"]
        assert refreshed.dashboard.tenant.id == "tenant-1"
        assert refreshed.payment_history.tenant_id == "tenant-1"

    @pytest.mark.asyncio
    async def test_fatal_dashboard_failure_skips_payments(
        self, dashboard_service, identity_provider, payment_provider
    ):
        identity_provider.get_tenant_by_account_id.return_value = None

        with pytest.raises(TenantResolutionError):
            await dashboard_service.refresh("acct-1")

        payment_provider.get_payments_by_tenant.assert_not_awaited()


@pytest.mark.asyncio
async def test_service_uses_injected_settings(
    identity_provider, billing_provider, room_provider, maintenance_provider, payment_provider, settings
):
    custom = settings.model_copy(update={"dashboard_poll_interval_seconds": 15, "payment_history_limit": 5})
    service = TenantDashboardService(
        identity_provider, billing_provider, room_provider, maintenance_provider, payment_provider, custom
    )

    dashboard = await service.load_dashboard("acct-1")
    history = await service.load_payment_history("tenant-1")

    assert dashboard.poll_interval_seconds == 15
    assert history.limit == 5
