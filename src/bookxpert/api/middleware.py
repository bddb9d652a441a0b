"""API middleware: request ids, access logs and catalogue error responses."""

import time
import uuid
from collections.abc import Callable

import structlog
from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from bookxpert.domain.base import (
    CatalogueError,
    InvalidInput,
    ItemNotFound,
    PersistenceFailure,
    TransportFailure,
)

logger = structlog.get_logger()

# Paths polled often enough to drown the access log
QUIET_PATHS = frozenset({"/api/v1/health", "/metrics"})


def catalogue_error_status(exc: CatalogueError) -> int:
    """HTTP status for a domain failure."""
    if isinstance(exc, InvalidInput):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, ItemNotFound):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, TransportFailure):
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def catalogue_error_response(exc: CatalogueError, request_id: str) -> JSONResponse:
    """Render a domain failure; validation failures list every message."""
    detail = exc.messages if isinstance(exc, InvalidInput) else str(exc)
    return JSONResponse(
        status_code=catalogue_error_status(exc),
        content={"detail": detail, "request_id": request_id},
    )


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tag each request, its log lines and its response with one id."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            structlog.contextvars.clear_contextvars()


class LoggingMiddleware(BaseHTTPMiddleware):
    """One access log line per request, with its duration."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)

        logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turn exceptions escaping a route into JSON error responses.

    Catalogue errors keep their meaning (bad edit, unknown item, remote
    down, cache write failed); anything else is an opaque 500.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except CatalogueError as exc:
            request_id = getattr(request.state, "request_id", "unknown")
            status_code = catalogue_error_status(exc)
            log = logger.error if isinstance(exc, PersistenceFailure) else logger.warning
            log(
                "catalogue_request_failed",
                path=request.url.path,
                status_code=status_code,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return catalogue_error_response(exc, request_id)
        except Exception as exc:
            request_id = getattr(request.state, "request_id", "unknown")
            logger.exception(
                "unhandled_exception",
                exc_type=type(exc).__name__,
                exc_message=str(exc),
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": "An internal error occurred",
                    "request_id": request_id,
                },
            )
