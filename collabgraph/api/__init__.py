"""collabGraph API layer: routes, schemas, and middleware."""

from collabgraph.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from collabgraph.api.routes import router
from collabgraph.api.schemas import (
    CollaborationDetailsResponse,
    ErrorResponse,
    HealthResponse,
)

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "router",
    "CollaborationDetailsResponse",
    "ErrorResponse",
    "HealthResponse",
]
