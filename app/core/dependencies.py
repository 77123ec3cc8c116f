"""
Dependency injection for FastAPI application.

Provides factory functions for creating service instances with proper
dependency injection and configuration.
"""

from functools import lru_cache

from fastapi import Depends

from app.core.config import get_settings
from app.services.external import ServiceClients
from app.services.operations_summary import OperationsSummaryService
from app.services.overdue_service import OverdueService
from app.services.tenant_dashboard import TenantDashboardService


@lru_cache()
def get_service_clients() -> ServiceClients:
    """Get the shared provider clients, one HTTP pool per provider."""
    return ServiceClients(get_settings())


def get_tenant_dashboard_service(
    clients: ServiceClients = Depends(get_service_clients),
) -> TenantDashboardService:
    """Get a tenant dashboard service bound to the provider clients."""
    return TenantDashboardService(
        identity=clients.identity,
        billing=clients.billing,
        rooms=clients.rooms,
        maintenance=clients.maintenance,
        payments=clients.payments,
        settings=get_settings(),
    )


def get_overdue_service(
    clients: ServiceClients = Depends(get_service_clients),
) -> OverdueService:
    """Get an overdue roster service."""
    return OverdueService(clients.overdue)


def get_operations_summary_service(
    clients: ServiceClients = Depends(get_service_clients),
) -> OperationsSummaryService:
    """Get an operations summary service."""
    return OperationsSummaryService(
        identity=clients.identity,
        rooms=clients.rooms,
        payments=clients.payments,
    )
