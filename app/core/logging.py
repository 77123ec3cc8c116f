"""
Structured logging configuration with correlation IDs and performance timing.
"""
import logging
import sys
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Optional

import structlog

from app.core.config import get_settings

# Context variables for request-scoped data
correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)
account_id_var: ContextVar[Optional[str]] = ContextVar("account_id", default=None)
tenant_id_var: ContextVar[Optional[str]] = ContextVar("tenant_id", default=None)


def add_correlation_id(
    logger, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """Add correlation ID to log events."""
    correlation_id = correlation_id_var.get()
    if correlation_id:
        event_dict.setdefault("correlation_id", correlation_id)
    return event_dict


def add_request_context(
    logger, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """Add request context information to log events."""
    account_id = account_id_var.get()
    if account_id:
        event_dict.setdefault("account_id", account_id)

    tenant_id = tenant_id_var.get()
    if tenant_id:
        event_dict.setdefault("tenant_id", tenant_id)

    return event_dict


def add_service_context(
    logger, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """Add service context to log events."""
    settings = get_settings()
    event_dict["service"] = settings.service_name
    event_dict["version"] = settings.service_version
    event_dict["environment"] = settings.environment
    return event_dict


def setup_logging(log_level: Optional[str] = None) -> None:
    """
    Configure structured logging.

    Args:
        log_level: Minimum level to emit; defaults to the configured level
    """
    level = (log_level or get_settings().log_level).upper()

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    logging.getLogger().setLevel(level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            add_service_context,
            add_request_context,
            add_correlation_id,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def get_performance_logger() -> structlog.stdlib.BoundLogger:
    """Get a performance logger instance."""
    return structlog.get_logger("performance")


def new_correlation_id() -> str:
    """Generate a short correlation ID."""
    return str(uuid.uuid4())[:8]


def get_correlation_id() -> Optional[str]:
    """Get correlation ID from current context."""
    return correlation_id_var.get()


@contextmanager
def correlation_context(
    correlation_id: Optional[str] = None,
    account_id: Optional[str] = None,
    tenant_id: Optional[str] = None,
):
    """
    Bind request-scoped identifiers for the duration of the block.

    Args:
        correlation_id: Correlation ID for the request
        account_id: Account the request is made for
        tenant_id: Tenant resolved for the request
    """
    tokens = []
    if correlation_id:
        tokens.append((correlation_id_var, correlation_id_var.set(correlation_id)))
    if account_id:
        tokens.append((account_id_var, account_id_var.set(account_id)))
    if tenant_id:
        tokens.append((tenant_id_var, tenant_id_var.set(tenant_id)))

    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


@contextmanager
def performance_timing(operation_name: str, logger: Optional[structlog.stdlib.BoundLogger] = None):
    """
    Log the wall-clock duration of an operation.

    Args:
        operation_name: Name of the operation being timed
        logger: Logger to emit on; defaults to the performance logger
    """
    logger = logger or get_performance_logger()
    start_time = time.perf_counter()

    try:
        yield
    finally:
        duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
        logger.info(
            "operation_timed",
            operation=operation_name,
            duration_ms=duration_ms,
        )
