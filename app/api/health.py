"""
Health check endpoints for the tenant ledger view service.
"""
import time
from datetime import datetime, timezone
from typing import Dict

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from app.core.config import get_settings
from app.core.dependencies import get_service_clients
from app.core.logging import get_logger
from app.services.external import ServiceClients

router = APIRouter()
logger = get_logger(__name__)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    uptime_seconds: float
    timestamp: datetime
    service_name: str


class DependenciesHealthResponse(BaseModel):
    """Dependencies health check response model."""

    providers: Dict[str, bool]
    overall_status: str
    timestamp: datetime


def overall_status(results: Dict[str, bool]) -> str:
    """healthy when every provider answers, critical when none do, degraded otherwise."""
    healthy = sum(1 for ok in results.values() if ok)
    if healthy == len(results):
        return "healthy"
    if healthy == 0:
        return "critical"
    return "degraded"


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """
    Basic health check endpoint.

    Returns service status, version, and uptime.
    """
    settings = get_settings()
    start_time = getattr(request.app.state, "start_time", time.time())

    response = HealthResponse(
        status="healthy",
        version=settings.service_version,
        uptime_seconds=time.time() - start_time,
        timestamp=datetime.now(timezone.utc),
        service_name=settings.service_name,
    )

    logger.info("health_check_completed", uptime_seconds=response.uptime_seconds)
    return response


@router.get("/health/dependencies", response_model=DependenciesHealthResponse)
async def dependencies_health_check(clients: ServiceClients = Depends(get_service_clients)):
    """
    Health check endpoint for the data providers.

    Every provider is probed concurrently; an unreachable provider only
    degrades the reported status.
    """
    results = await clients.health_check()
    status = overall_status(results)

    logger.info("dependencies_health_check_completed", providers=results, overall_status=status)

    return DependenciesHealthResponse(
        providers=results,
        overall_status=status,
        timestamp=datetime.now(timezone.utc),
    )
