"""Data provider integration clients."""

import asyncio
from typing import Any, Dict, List, Optional, Protocol
from urllib.parse import quote

import httpx

from app.core.config import Settings, get_settings
from app.core.exceptions import ExternalServiceError, ExternalServiceTimeoutError
from app.core.logging import get_logger
from app.models import (
    BillingSnapshot,
    MaintenanceRequest,
    OverdueCheckResult,
    Payment,
    RoomInfo,
    Tenant,
)

logger = get_logger(__name__)


# Provider contracts consumed by the core services
class IdentityProvider(Protocol):
    async def get_tenant_by_account_id(self, account_id: str) -> Optional[Tenant]: ...

    async def get_tenant_stats(self) -> Dict[str, Any]: ...


class BillingProvider(Protocol):
    async def get_billing_info(self, tenant_id: str) -> BillingSnapshot: ...


class RoomProvider(Protocol):
    async def get_room_by_id(self, room_id: str) -> RoomInfo: ...

    async def get_room_stats(self) -> Dict[str, Any]: ...


class MaintenanceProvider(Protocol):
    async def list_by_tenant(self, tenant_id: str) -> List[MaintenanceRequest]: ...


class PaymentProvider(Protocol):
    async def get_payments_by_tenant(self, tenant_id: str, limit: int) -> List[Payment]: ...

    async def get_payment_stats(self) -> Dict[str, Any]: ...


class OverdueProvider(Protocol):
    async def get_overdue_tenants(self) -> List[Dict[str, Any]]: ...

    async def check_overdue_payments(self) -> OverdueCheckResult: ...


def _as_list(payload: Any) -> List[Any]:
    """Collections come back either bare or wrapped in ``{"data": [...]}``."""
    if isinstance(payload, dict):
        payload = payload.get("data", payload.get("items"))
    if isinstance(payload, list):
        return payload
    return []


def _as_object(payload: Any) -> Dict[str, Any]:
    if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
        return payload["data"]
    if isinstance(payload, dict):
        return payload
    return {}


def _parse_each(model: Any, payload: Any, service_name: str) -> List[Any]:
    """Validate list items one by one; a malformed record is logged and dropped."""
    records = []
    for item in _as_list(payload):
        try:
            records.append(model.model_validate(item))
        except ValueError as e:
            logger.warning(
                "provider_record_skipped",
                service_name=service_name,
                model=model.__name__,
                error=str(e),
            )
    return records


class ProviderClient:
    """
    HTTP transport for one data provider.

    Wraps a single httpx client and maps every transport failure, timeout
    and non-2xx response to ExternalServiceError. No retries: callers
    re-invoke the whole read path instead.
    """

    def __init__(
        self,
        service_name: str,
        base_url: str,
        timeout_seconds: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.service_name = service_name
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.client = client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout_seconds,
            headers={"Content-Type": "application/json"},
        )

        logger.info(
            "provider_client_initialized",
            service_name=service_name,
            base_url=self.base_url,
            timeout_seconds=timeout_seconds,
        )

    async def get(self, endpoint: str, **kwargs) -> Any:
        """Make GET request and return the decoded JSON body."""
        return await self._make_request("GET", endpoint, **kwargs)

    async def post(self, endpoint: str, **kwargs) -> Any:
        """Make POST request and return the decoded JSON body."""
        return await self._make_request("POST", endpoint, **kwargs)

    async def _make_request(self, method: str, endpoint: str, **kwargs) -> Any:
        url = f"{self.base_url}/{endpoint.lstrip('/')}"

        try:
            response = await self.client.request(method, url, **kwargs)
            response.raise_for_status()

        except httpx.TimeoutException as e:
            logger.error(
                "provider_request_timeout",
                service_name=self.service_name,
                method=method,
                endpoint=endpoint,
                timeout=self.timeout_seconds,
                error=str(e),
            )
            raise ExternalServiceTimeoutError(self.service_name, self.timeout_seconds)

        except httpx.HTTPStatusError as e:
            logger.error(
                "provider_http_error",
                service_name=self.service_name,
                method=method,
                endpoint=endpoint,
                status_code=e.response.status_code,
            )
            raise ExternalServiceError(
                service_name=self.service_name,
                message=self._error_message(e.response),
                status_code=e.response.status_code,
            )

        except httpx.RequestError as e:
            logger.error(
                "provider_request_error",
                service_name=self.service_name,
                method=method,
                endpoint=endpoint,
                error=str(e),
            )
            raise ExternalServiceError(
                service_name=self.service_name,
                message=f"Request failed: {str(e)}",
            )

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError:
            raise ExternalServiceError(
                service_name=self.service_name,
                message="Response body is not valid JSON",
                status_code=response.status_code,
            )

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Prefer the provider's own ``message`` field, as the backend reports it."""
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return f"HTTP {response.status_code}"

    async def health_check(self, timeout_seconds: float = 5.0) -> bool:
        """Check provider health."""
        try:
            response = await self.client.get(f"{self.base_url}/health", timeout=timeout_seconds)
            return response.status_code == 200
        except Exception as e:
            logger.warning(
                "provider_health_check_failed",
                service_name=self.service_name,
                error=str(e),
            )
            return False

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()


class IdentityClient:
    """Client for the tenant identity provider."""

    def __init__(self, transport: ProviderClient):
        self.transport = transport

    async def get_tenant_by_account_id(self, account_id: str) -> Optional[Tenant]:
        """Resolve the tenant linked to an account; None when there is none."""
        logger.info("tenant_lookup_requested", account_id=account_id)

        payload = await self.transport.get(f"/tenants/search/account/{quote(str(account_id), safe='')}")
        matches = _as_list(payload)
        if not matches:
            return None
        return Tenant.model_validate(matches[0])

    async def get_tenant_stats(self) -> Dict[str, Any]:
        """Get tenant population statistics."""
        return _as_object(await self.transport.get("/tenants/stats"))


class BillingClient:
    """Client for the billing/ledger provider."""

    def __init__(self, transport: ProviderClient):
        self.transport = transport

    async def get_billing_info(self, tenant_id: str) -> BillingSnapshot:
        """Get the tenant's billing snapshot, including closed cycles."""
        logger.info("billing_info_requested", tenant_id=tenant_id)

        payload = await self.transport.get(f"/tenants/{quote(str(tenant_id), safe='')}/billing-info")
        return BillingSnapshot.model_validate(_as_object(payload))


class RoomClient:
    """Client for the room provider."""

    def __init__(self, transport: ProviderClient):
        self.transport = transport

    async def get_room_by_id(self, room_id: str) -> RoomInfo:
        """Get a single room."""
        logger.info("room_requested", room_id=room_id)

        payload = await self.transport.get(f"/rooms/{quote(str(room_id), safe='')}")
        return RoomInfo.model_validate(_as_object(payload))

    async def get_room_stats(self) -> Dict[str, Any]:
        """Get room occupancy statistics."""
        return _as_object(await self.transport.get("/rooms/stats"))


class MaintenanceClient:
    """Client for the maintenance provider."""

    def __init__(self, transport: ProviderClient):
        self.transport = transport

    async def list_by_tenant(self, tenant_id: str) -> List[MaintenanceRequest]:
        """List the tenant's maintenance requests."""
        logger.info("maintenance_requested", tenant_id=tenant_id)

        payload = await self.transport.get("/maintenance", params={"tenantId": tenant_id})
        return _parse_each(MaintenanceRequest, payload, self.transport.service_name)


class PaymentClient:
    """Client for the payment history provider."""

    def __init__(self, transport: ProviderClient):
        self.transport = transport

    async def get_payments_by_tenant(self, tenant_id: str, limit: int) -> List[Payment]:
        """Get the most recent ``limit`` payments for a tenant."""
        logger.info("payments_requested", tenant_id=tenant_id, limit=limit)

        payload = await self.transport.get(
            f"/payments/{quote(str(tenant_id), safe='')}", params={"limit": limit}
        )
        return _parse_each(Payment, payload, self.transport.service_name)

    async def get_payment_stats(self) -> Dict[str, Any]:
        """Get collection statistics across all tenants."""
        return _as_object(await self.transport.get("/payments/stats"))


class OverdueClient:
    """Client for the overdue roster provider."""

    def __init__(self, transport: ProviderClient):
        self.transport = transport

    async def get_overdue_tenants(self) -> List[Dict[str, Any]]:
        """Get the raw overdue roster; records are typed by the classifier."""
        logger.info("overdue_roster_requested")
        return _as_list(await self.transport.get("/payments/overdue"))

    async def check_overdue_payments(self) -> OverdueCheckResult:
        """Ask the provider to re-evaluate overdue status and notify tenants."""
        logger.info("overdue_check_requested")
        payload = await self.transport.post("/payments/check-overdue", json={})
        return OverdueCheckResult.model_validate(_as_object(payload))


class ServiceClients:
    """Container for all data provider clients."""

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        timeout = settings.provider_timeout_seconds
        self.health_check_timeout = settings.health_check_timeout_seconds

        self.transports: Dict[str, ProviderClient] = {}
        self.identity = IdentityClient(self._transport("identity", settings.identity_service_url, timeout))
        self.billing = BillingClient(self._transport("billing", settings.billing_service_url, timeout))
        self.rooms = RoomClient(self._transport("room", settings.room_service_url, timeout))
        self.maintenance = MaintenanceClient(
            self._transport("maintenance", settings.maintenance_service_url, timeout)
        )
        self.payments = PaymentClient(self._transport("payment", settings.payment_service_url, timeout))
        self.overdue = OverdueClient(self._transport("overdue", settings.overdue_service_url, timeout))

    def _transport(self, name: str, base_url: str, timeout: float) -> ProviderClient:
        transport = ProviderClient(service_name=name, base_url=base_url, timeout_seconds=timeout)
        self.transports[name] = transport
        return transport

    async def health_check(self) -> Dict[str, bool]:
        """Check health of all providers concurrently."""
        names = list(self.transports)
        results = await asyncio.gather(
            *(self.transports[name].health_check(self.health_check_timeout) for name in names)
        )
        return dict(zip(names, results))

    async def close(self) -> None:
        """Close every provider transport."""
        await asyncio.gather(*(transport.close() for transport in self.transports.values()))
