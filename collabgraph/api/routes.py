"""FastAPI route definitions for the collabGraph API.

Endpoint                                 Method  Description
-----------------------------------------------------------------------
/api/v1/network/{subject}                GET     Synthesize (or read cached) graph
/api/v1/network-by-id/{subject_id}       GET     Same, addressed by registry id
/api/v1/search?q=&limit=                 GET     Registered subjects matching a query
/api/v1/collaboration?first=&second=     GET     What two people worked on together
/api/v1/health                           GET     Health check + provider status

Services are read from ``app.state`` (populated by ``main._build_all``)
through ``Annotated`` dependency aliases.  An unregistered subject raises
``SubjectNotFoundError``, which ``ErrorHandlingMiddleware`` renders as 404.
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from collabgraph import __version__
from collabgraph.api.schemas import (
    CollaborationDetailsResponse,
    HealthResponse,
    SearchResponse,
    SubjectCandidate,
)
from collabgraph.interfaces.subject_registry import ISubjectRegistry
from collabgraph.pipeline.orchestrator import CollaborationGraphSynthesizer
from collabgraph.services.collaboration_details import CollaborationDetailsService
from collabgraph.utils.errors import SubjectNotFoundError
from collabgraph.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1")


def _get_synthesizer(request: Request) -> CollaborationGraphSynthesizer:
    return request.app.state.synthesizer


def _get_details_service(request: Request) -> CollaborationDetailsService:
    return request.app.state.details_service


def _get_registry(request: Request) -> ISubjectRegistry:
    return request.app.state.registry


SynthesizerDep = Annotated[CollaborationGraphSynthesizer, Depends(_get_synthesizer)]
DetailsDep = Annotated[CollaborationDetailsService, Depends(_get_details_service)]
RegistryDep = Annotated[ISubjectRegistry, Depends(_get_registry)]
CachedQuery = Annotated[bool, Query(description="Serve the stored graph when one exists")]


@router.get(
    "/network/{subject}",
    summary="Collaboration graph for a registered subject",
)
async def get_network(
    subject: str,
    synthesizer: SynthesizerDep,
    cached: CachedQuery = False,
) -> dict[str, Any]:
    """Return ``{nodes, links}`` in wire form for *subject*."""
    graph = await synthesizer.synthesize(subject, use_cache=cached)
    return graph.to_wire()


@router.get(
    "/network-by-id/{subject_id}",
    summary="Collaboration graph for a registry id",
)
async def get_network_by_id(
    subject_id: str,
    registry: RegistryDep,
    synthesizer: SynthesizerDep,
    cached: CachedQuery = False,
) -> dict[str, Any]:
    identity = await registry.find_by_id(subject_id)
    if identity is None:
        raise SubjectNotFoundError(
            message=f"No registered subject with id '{subject_id}'",
            provider_name=registry.get_provider_name(),
        )
    graph = await synthesizer.synthesize(identity.canonical_name, use_cache=cached)
    return graph.to_wire()


@router.get(
    "/search",
    response_model=SearchResponse,
    summary="Registered subjects whose names match a query",
)
async def search_subjects(
    registry: RegistryDep,
    q: Annotated[str, Query(min_length=1)],
    limit: Annotated[int, Query(ge=1, le=50)] = 10,
) -> SearchResponse:
    if not q.strip():
        raise HTTPException(status_code=422, detail="Query must not be blank")
    hits = await registry.search(q, limit=limit)
    _logger.debug("subject_search", query=q, hits=len(hits))
    return SearchResponse(
        query=q,
        results=[SubjectCandidate(id=h.canonical_id, name=h.canonical_name) for h in hits],
    )


@router.get(
    "/collaboration",
    response_model=CollaborationDetailsResponse,
    response_model_by_alias=True,
    summary="Details of the collaboration between two people",
)
async def get_collaboration(
    details_service: DetailsDep,
    first: Annotated[str, Query(min_length=1)],
    second: Annotated[str, Query(min_length=1)],
) -> CollaborationDetailsResponse:
    try:
        details = await details_service.describe(first, second)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return CollaborationDetailsResponse.from_details(details)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Application health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Return application health, version, and provider availability.

    ``healthy`` needs the registry plus at least one available
    collaborator source; ``degraded`` means the registry is up but every
    source is unavailable.
    """
    providers: dict[str, Any] = dict(getattr(request.app.state, "provider_registry", {}))

    registry_ok = bool(providers.get("registry", False))
    sources = providers.get("sources", {})
    any_source = any(sources.values()) if isinstance(sources, dict) else False

    if registry_ok and any_source:
        status = "healthy"
    elif registry_ok:
        status = "degraded"
    else:
        status = "unhealthy"

    return HealthResponse(status=status, version=__version__, providers=providers)
