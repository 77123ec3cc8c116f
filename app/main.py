"""Main FastAPI application for the tenant ledger view service."""

import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.billing import router as billing_router
from app.api.dashboard import router as dashboard_router
from app.api.health import router as health_router
from app.api.operations import router as operations_router
from app.api.overdue import router as overdue_router
from app.core.config import get_settings
from app.core.dependencies import get_service_clients
from app.core.exceptions import BaseAPIException
from app.core.logging import get_logger, setup_logging
from app.core.middleware import CORRELATION_HEADER, CorrelationIDMiddleware

# Initialize logging
setup_logging()
logger = get_logger(__name__)

# Get settings
settings = get_settings()

# Initialize FastAPI app
app = FastAPI(
    title="Tenant Ledger View",
    description="Read-only tenant dashboard and overdue roster over the property backend",
    version=settings.service_version,
    docs_url="/docs",
    redoc_url="/redoc",
)
app.state.start_time = time.time()

app.add_middleware(CorrelationIDMiddleware)

# CORS middleware
if settings.enable_cors:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Include API routers
app.include_router(health_router, prefix=settings.api_prefix, tags=["health"])
app.include_router(dashboard_router, prefix=settings.api_prefix)
app.include_router(billing_router, prefix=settings.api_prefix)
app.include_router(overdue_router, prefix=settings.api_prefix)
app.include_router(operations_router, prefix=settings.api_prefix)


@app.exception_handler(BaseAPIException)
async def api_exception_handler(request: Request, exc: BaseAPIException):
    """Render service errors as structured JSON."""
    logger.warning(
        "api_error",
        path=request.url.path,
        status_code=exc.status_code,
        error_code=exc.error_code,
    )
    headers = dict(exc.headers or {})
    headers[CORRELATION_HEADER] = exc.correlation_id
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


@app.on_event("startup")
async def startup_event():
    """Initialize application on startup."""
    app.state.start_time = time.time()
    logger.info(
        "service_starting",
        version=settings.service_version,
        environment=settings.environment,
    )


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    logger.info("service_stopping")
    await get_service_clients().close()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
