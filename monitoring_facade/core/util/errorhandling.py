"""
Error handling utilities for the Monitoring Service.
Provides centralized exception handlers for FastAPI application.
"""

from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..ports.exceptions import (
    MonitoringServiceError,
    InvalidQueryError,
    BackendError,
    ExternalServiceError
)


def _error_body(error: str, exc: MonitoringServiceError) -> dict:
    return {
        "error": error,
        "message": exc.message,
        "details": exc.details,
        "timestamp": datetime.now().isoformat()
    }


async def invalid_query_handler(request: Request, exc: InvalidQueryError):
    """Handle malformed query parameters."""
    return JSONResponse(status_code=400, content=_error_body("Invalid query", exc))


async def external_service_handler(request: Request, exc: ExternalServiceError):
    """Handle external service errors."""
    content = _error_body("External service error", exc)
    content["service"] = exc.service_name
    content["status_code"] = exc.status_code
    return JSONResponse(status_code=502, content=content)


async def backend_error_handler(request: Request, exc: BackendError):
    """Handle query engine errors."""
    return JSONResponse(status_code=500, content=_error_body("Monitoring backend error", exc))


async def monitoring_service_error_handler(request: Request, exc: MonitoringServiceError):
    """Handle general monitoring service errors."""
    return JSONResponse(status_code=500, content=_error_body("Monitoring service error", exc))


def register_error_handlers(app: FastAPI):
    """
    Register all exception handlers for the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(InvalidQueryError, invalid_query_handler)
    app.add_exception_handler(ExternalServiceError, external_service_handler)
    app.add_exception_handler(BackendError, backend_error_handler)
    app.add_exception_handler(MonitoringServiceError, monitoring_service_error_handler)
