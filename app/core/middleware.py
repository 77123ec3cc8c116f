"""
FastAPI middleware for correlation ID propagation and request timing.
"""
import time
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.logging import correlation_context, get_logger, new_correlation_id

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """Middleware to add correlation ID to requests and responses."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and add correlation ID."""
        correlation_id = request.headers.get(CORRELATION_HEADER) or new_correlation_id()

        with correlation_context(correlation_id=correlation_id):
            logger.info(
                "request_started",
                method=request.method,
                path=request.url.path,
            )

            start_time = time.perf_counter()

            try:
                response = await call_next(request)
            except Exception as e:
                processing_time_ms = round((time.perf_counter() - start_time) * 1000, 2)
                logger.error(
                    "request_failed",
                    method=request.method,
                    path=request.url.path,
                    error=str(e),
                    processing_time_ms=processing_time_ms,
                    exc_info=True,
                )
                return JSONResponse(
                    status_code=500,
                    content={
                        "error": True,
                        "error_code": "TLV_500",
                        "message": "Internal server error",
                        "correlation_id": correlation_id,
                    },
                    headers={CORRELATION_HEADER: correlation_id},
                )

            processing_time_ms = round((time.perf_counter() - start_time) * 1000, 2)
            logger.info(
                "request_completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                processing_time_ms=processing_time_ms,
            )

            response.headers[CORRELATION_HEADER] = correlation_id
            response.headers["X-Processing-Time-MS"] = str(processing_time_ms)
            return response
