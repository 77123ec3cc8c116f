"""
Pytest configuration and fixtures for the tenant ledger view service.
"""
from typing import Generator
from unittest.mock import AsyncMock, MagicMock

import pytest
import structlog
from fastapi.testclient import TestClient

from app.core.config import Settings, get_settings
from app.core.dependencies import (
    get_operations_summary_service,
    get_overdue_service,
    get_service_clients,
    get_tenant_dashboard_service,
)
from app.main import app
from app.models import BillingSnapshot, MaintenanceRequest, OverdueCheckResult, Payment, RoomInfo, Tenant
from app.services.operations_summary import OperationsSummaryService
from app.services.overdue_service import OverdueService
from app.services.tenant_dashboard import TenantDashboardService

# Loggers must pick up capture_logs() configuration inside each test
structlog.configure(cache_logger_on_first_use=False)


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def sample_tenant() -> dict:
    """Tenant payload as the identity provider returns it."""
    return {
        "id": "tenant-1",
        "name": "Jane Tenant",
        "email": "jane@example.com",
        "accountId": "acct-1",
        "roomId": "room-7",
        "status": "active",
    }


@pytest.fixture
def sample_billing() -> dict:
    """Billing snapshot with an unapplied deposit."""
    return {
        "tenantId": "tenant-1",
        "outstandingBalance": 1000,
        "deposit": 500,
        "monthlyRent": 250,
        "utilities": 50,
        "billingCycles": [
            {"month": "2024-01", "depositApplied": 0, "charges": 300, "paymentsMade": 0},
        ],
    }


@pytest.fixture
def sample_room() -> dict:
    return {"id": "room-7", "roomNumber": "7A", "floor": 2, "monthlyRent": 250, "status": "occupied"}


@pytest.fixture
def sample_maintenance() -> list:
    return [
        {"id": "mr-1", "roomId": "room-7", "tenantId": "tenant-1", "title": "Leaky tap", "status": "open"},
        {"id": "mr-2", "roomId": "room-7", "tenantId": "tenant-1", "title": "Broken light", "status": "closed"},
    ]


@pytest.fixture
def sample_payments() -> list:
    return [
        {"id": "pay-2", "tenantId": "tenant-1", "amount": 300, "status": "completed"},
        {"id": "pay-1", "tenantId": "tenant-1", "amount": "150.50", "status": "completed"},
    ]


@pytest.fixture
def sample_roster() -> list:
    """Overdue roster with one tenant in each severity tier."""
    return [
        {"tenantId": "t-warning", "tenantName": "Wendy", "outstandingBalance": 50, "daysOverdue": 2},
        {"tenantId": "t-critical", "tenantName": "Carl", "outstandingBalance": 900, "daysOverdue": 35},
        {"tenantId": "t-medium", "tenantName": "Mia", "outstandingBalance": 150, "daysOverdue": 10},
        {"tenantId": "t-high", "tenantName": "Hank", "outstandingBalance": 400, "daysOverdue": 20},
    ]


@pytest.fixture
def identity_provider(sample_tenant):
    provider = AsyncMock()
    provider.get_tenant_by_account_id.return_value = Tenant.model_validate(sample_tenant)
    provider.get_tenant_stats.return_value = {"totalTenants": 12, "activeTenants": 10, "inactiveTenants": 2}
    return provider


@pytest.fixture
def billing_provider(sample_billing):
    provider = AsyncMock()
    provider.get_billing_info.return_value = BillingSnapshot.model_validate(sample_billing)
    return provider


@pytest.fixture
def room_provider(sample_room):
    provider = AsyncMock()
    provider.get_room_by_id.return_value = RoomInfo.model_validate(sample_room)
    provider.get_room_stats.return_value = {
        "totalRooms": 10,
        "fullyOccupiedRooms": 6,
        "partiallyOccupiedRooms": 2,
        "maintenanceRooms": 1,
    }
    return provider


@pytest.fixture
def maintenance_provider(sample_maintenance):
    provider = AsyncMock()
    provider.list_by_tenant.return_value = [MaintenanceRequest.model_validate(m) for m in sample_maintenance]
    return provider


@pytest.fixture
def payment_provider(sample_payments):
    provider = AsyncMock()
    provider.get_payments_by_tenant.return_value = [Payment.model_validate(p) for p in sample_payments]
    provider.get_payment_stats.return_value = {"totalAmountCollected": 7500, "totalOutstandingAmount": 2500}
    return provider


@pytest.fixture
def overdue_provider(sample_roster):
    provider = AsyncMock()
    provider.get_overdue_tenants.return_value = sample_roster
    provider.check_overdue_payments.return_value = OverdueCheckResult(checked=12, overdue=4)
    return provider


@pytest.fixture
def dashboard_service(
    identity_provider, billing_provider, room_provider, maintenance_provider, payment_provider, settings
) -> TenantDashboardService:
    return TenantDashboardService(
        identity=identity_provider,
        billing=billing_provider,
        rooms=room_provider,
        maintenance=maintenance_provider,
        payments=payment_provider,
        settings=settings,
    )


@pytest.fixture
def overdue_service(overdue_provider) -> OverdueService:
    return OverdueService(overdue_provider)


@pytest.fixture
def operations_service(identity_provider, room_provider, payment_provider) -> OperationsSummaryService:
    return OperationsSummaryService(identity=identity_provider, rooms=room_provider, payments=payment_provider)


@pytest.fixture
def service_clients() -> MagicMock:
    """Stand-in for the provider client container."""
    clients = MagicMock()
    clients.health_check = AsyncMock(
        return_value={"identity": True, "billing": True, "room": True,
                      "maintenance": True, "payment": True, "overdue": True}
    )
    clients.close = AsyncMock()
    return clients


@pytest.fixture
def client(
    dashboard_service, overdue_service, operations_service, service_clients
) -> Generator[TestClient, None, None]:
    """
    Create a test client for the FastAPI application.

    Every service dependency is overridden with one built on mocked providers.
    """
    app.dependency_overrides[get_service_clients] = lambda: service_clients
    app.dependency_overrides[get_tenant_dashboard_service] = lambda: dashboard_service
    app.dependency_overrides[get_overdue_service] = lambda: overdue_service
    app.dependency_overrides[get_operations_summary_service] = lambda: operations_service

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def sample_headers() -> dict:
    """Sample request headers with correlation ID."""
    return {
        "X-Correlation-ID": "test-correlation-123",
        "Content-Type": "application/json",
    }


@pytest.fixture
def api_prefix() -> str:
    """Get the API prefix from settings."""
    return get_settings().api_prefix
