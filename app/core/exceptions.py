"""
Custom exception classes for the tenant ledger view service.
"""
from typing import Any, Dict, Optional

from fastapi import HTTPException, status

from app.core.logging import get_correlation_id, new_correlation_id


class BaseAPIException(HTTPException):
    """Base exception for API errors."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[dict[str, Any]] = None,
        correlation_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code
        self.correlation_id = correlation_id or get_correlation_id() or new_correlation_id()
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API response."""
        return {
            "error": True,
            "error_code": self.error_code,
            "message": self.detail,
            "details": getattr(self, "details", None),
            "correlation_id": self.correlation_id,
            "context": self.context,
        }


class TenantResolutionError(BaseAPIException):
    """
    Fatal failure to resolve the tenant behind an account.

    Without a tenant there is nothing to aggregate around, so this aborts the
    whole dashboard load. Carries a user-facing title/message plus the raw
    diagnostic detail from the identity provider.
    """

    title = "Failed to load your dashboard"
    message = "Please try again in a moment."

    def __init__(
        self,
        account_id: str,
        details: str,
        not_found: bool = False,
        **context
    ):
        self.account_id = account_id
        self.details = details
        self.not_found = not_found

        context_dict = {"account_id": account_id, **context}

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND if not_found else status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=self.message,
            error_code="TLV_001_NOT_FOUND" if not_found else "TLV_001",
            context=context_dict,
        )

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["title"] = self.title
        return payload


class OverdueServiceError(BaseAPIException):
    """Exception for failures of the overdue roster provider."""

    def __init__(self, operation: str, details: str, **context):
        self.operation = operation
        self.details = details

        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Failed to {operation}",
            error_code="TLV_002",
            context={"operation": operation, **context},
        )

# External Service Exceptions
class ExternalServiceError(Exception):
    """Exception for data provider call errors."""

    def __init__(
        self,
        service_name: str,
        message: str,
        status_code: Optional[int] = None,
        **context
    ):
        self.service_name = service_name
        self.message = message
        self.status_code = status_code
        self.context = context
        super().__init__(f"[{service_name}] {message}")


class ExternalServiceTimeoutError(ExternalServiceError):
    """Exception for data provider timeout errors."""

    def __init__(self, service_name: str, timeout_seconds: float, **context):
        super().__init__(
            service_name=service_name,
            message=f"Service timed out after {timeout_seconds} seconds",
            **context
        )
        self.timeout_seconds = timeout_seconds


def describe_error(error: BaseException) -> str:
    """Raw diagnostic text for an exception, preferring the provider's own message."""
    if isinstance(error, ExternalServiceError):
        return error.message
    return str(error) or type(error).__name__
