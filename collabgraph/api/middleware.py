"""API middleware: CORS, request logging, and error handling.

Middleware is a stack, last added runs first.  ``main.create_app`` adds
``ErrorHandlingMiddleware`` before ``RequestLoggingMiddleware`` so the
logger sees the final status code, including the 404s and 500s rendered
from ``CollabGraphError``.
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from collabgraph.api.schemas import ErrorResponse
from collabgraph.utils.errors import CollabGraphError, SubjectNotFoundError
from collabgraph.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware to the FastAPI application.

    Parameters
    ----------
    app:
        The FastAPI application instance.
    allowed_origins:
        Explicit list of allowed origins.  Defaults to ``["*"]``.
    """
    origins = allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code, and duration."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = response.status_code if response else 500
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=status_code,
                duration_ms=duration_ms,
            )


# Errors a caller can act on.  Anything else reaching the middleware is a
# server fault and becomes a 500.
_CLIENT_ERROR_STATUS: dict[type[CollabGraphError], int] = {
    SubjectNotFoundError: 404,
}


def status_for(exc: CollabGraphError) -> int:
    """HTTP status for an uncaught application error, walking its MRO."""
    for cls in type(exc).__mro__:
        if cls in _CLIENT_ERROR_STATUS:
            return _CLIENT_ERROR_STATUS[cls]
    return 500


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Render uncaught ``CollabGraphError`` subclasses as ``ErrorResponse`` JSON.

    An unregistered subject is a 404 the client can fix by registering it;
    registry, source and invariant failures are 500s.  Client errors are
    logged at info, server faults at error with the provider that failed.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except CollabGraphError as exc:
            status_code = status_for(exc)
            log = _logger.info if status_code < 500 else _logger.error
            log(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                provider=exc.provider_name,
                status=status_code,
                path=str(request.url.path),
            )
            body = ErrorResponse(error=type(exc).__name__, detail=exc.message)
            return JSONResponse(status_code=status_code, content=body.model_dump())
