"""collabGraph FastAPI application entry point.

Wires providers, services and routes together.  Loads configuration from
``.env`` and ``config/config.yaml`` and configures structured logging.

Also exposes ``run_synthesis`` / ``register_subjects`` for the CLI, which
builds the same components without starting a server.
"""

from __future__ import annotations

import sys
from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from collabgraph import __version__
from collabgraph.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from collabgraph.api.routes import router as api_router
from collabgraph.config.loader import load_config
from collabgraph.config.settings import Settings
from collabgraph.interfaces.collaborator_source import ICollaboratorSource
from collabgraph.interfaces.llm_provider import ILLMProvider
from collabgraph.models.graph import Graph
from collabgraph.models.pipeline import SynthesisTrace
from collabgraph.models.subject import SubjectIdentity
from collabgraph.pipeline.orchestrator import CollaborationGraphSynthesizer
from collabgraph.providers.catalog.spotify_provider import SpotifyCatalogProvider
from collabgraph.providers.llm.anthropic_provider import AnthropicLLMProvider
from collabgraph.providers.llm.openai_provider import OpenAILLMProvider
from collabgraph.providers.registry.sqlite_registry import SQLiteSubjectRegistry
from collabgraph.providers.sources.generative_source import GenerativeCollaboratorSource
from collabgraph.providers.sources.musicbrainz_source import MusicBrainzCollaboratorSource
from collabgraph.providers.sources.static_source import StaticCollaboratorSource
from collabgraph.providers.sources.wikipedia_source import WikipediaCollaboratorSource
from collabgraph.services.cache_writer import CacheWriter
from collabgraph.services.collaboration_details import CollaborationDetailsService
from collabgraph.services.enrichment_service import EnrichmentService
from collabgraph.services.graph_assembler import GraphAssembler
from collabgraph.services.identity_resolver import IdentityResolver
from collabgraph.services.role_classifier import RoleClassifier
from collabgraph.utils.errors import ConfigurationError
from collabgraph.utils.logging import configure_logging, get_logger

_DEFAULT_SOURCE_PRIORITY = ["generative", "musicbrainz", "wikipedia", "static"]
_USER_AGENT = f"collabGraph/{__version__}"

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(settings=settings)

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
    stream=sys.stderr if settings.log_to_stderr else None,
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Provider selection
# ---------------------------------------------------------------------------


def _build_llm_provider(app_settings: Settings) -> ILLMProvider | None:
    """Select the first available LLM provider based on configured API keys.

    Priority order: Anthropic -> OpenAI.  ``None`` disables the generative
    source, role classification and collaboration details.
    """
    if app_settings.anthropic_api_key:
        return AnthropicLLMProvider(settings=app_settings)
    if app_settings.openai_api_key:
        return OpenAILLMProvider(settings=app_settings)
    return None


def _build_sources(
    app_settings: Settings,
    llm: ILLMProvider | None,
    http_client: httpx.AsyncClient,
    priority: list[str] | None = None,
) -> list[ICollaboratorSource]:
    """Instantiate the collaborator sources in fallback order.

    Raises
    ------
    ConfigurationError
        If *priority* names an unknown source or repeats one.
    """
    priority = list(priority or _DEFAULT_SOURCE_PRIORITY)
    if len(set(priority)) != len(priority):
        raise ConfigurationError(message=f"Duplicate entry in source_priority: {priority}")

    factories = {
        "generative": lambda: GenerativeCollaboratorSource(
            llm, timeout=app_settings.llm_timeout_seconds
        ),
        "musicbrainz": lambda: MusicBrainzCollaboratorSource(settings=app_settings),
        "wikipedia": lambda: WikipediaCollaboratorSource(
            http_client=http_client, settings=app_settings
        ),
        "static": StaticCollaboratorSource,
    }

    sources: list[ICollaboratorSource] = []
    for name in priority:
        factory = factories.get(name)
        if factory is None:
            raise ConfigurationError(
                message=f"Unknown collaborator source '{name}' in source_priority"
            )
        sources.append(factory())
    return sources


# ---------------------------------------------------------------------------
# Full DI assembly
# ---------------------------------------------------------------------------


def _build_all(app_settings: Settings, app_config: dict | None = None) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    app_config = app_config if app_config is not None else config
    synthesis_config = app_config.get("synthesis", {})

    # -- Shared resources --
    http_client = httpx.AsyncClient(
        timeout=app_settings.http_timeout_seconds,
        headers={"User-Agent": _USER_AGENT},
    )

    llm = _build_llm_provider(app_settings)
    registry = SQLiteSubjectRegistry(db_path=app_settings.registry_db_path)

    catalog = None
    if app_settings.spotify_configured():
        catalog = SpotifyCatalogProvider(http_client=http_client, settings=app_settings)

    sources = _build_sources(
        app_settings,
        llm,
        http_client,
        priority=synthesis_config.get("source_priority"),
    )

    # -- Services --
    resolver = IdentityResolver(registry=registry)
    classifier = RoleClassifier(llm=llm, timeout=app_settings.llm_timeout_seconds)
    assembler = GraphAssembler(branch_limit=app_settings.branch_limit)
    enrichment = EnrichmentService(
        registry=registry,
        catalog=catalog,
        concurrency=app_settings.enrichment_concurrency,
        timeout=app_settings.enrichment_timeout_seconds,
    )
    cache_writer = CacheWriter(registry=registry)

    synthesizer = CollaborationGraphSynthesizer(
        resolver=resolver,
        sources=sources,
        classifier=classifier,
        assembler=assembler,
        enrichment=enrichment,
        cache_writer=cache_writer,
    )
    details_service = CollaborationDetailsService(
        llm=llm, timeout=app_settings.llm_timeout_seconds
    )

    provider_registry: dict[str, Any] = {
        "llm": llm.get_provider_name() if llm is not None else None,
        "registry": True,
        "catalog": catalog.get_provider_name() if catalog is not None else None,
        "sources": {source.get_provider_name(): source.is_available() for source in sources},
    }

    return {
        "http_client": http_client,
        "registry": registry,
        "synthesizer": synthesizer,
        "details_service": details_service,
        "provider_registry": provider_registry,
    }


async def run_synthesis(
    subject: str,
    use_cache: bool = False,
    custom_settings: Settings | None = None,
) -> tuple[Graph, SynthesisTrace]:
    """Run one synthesis outside the web server (CLI/scripting)."""
    components = _build_all(custom_settings or settings)
    try:
        await components["registry"].initialize()
        synthesizer: CollaborationGraphSynthesizer = components["synthesizer"]
        return await synthesizer.synthesize_with_trace(subject, use_cache=use_cache)
    finally:
        await components["http_client"].aclose()


async def register_subjects(
    names: list[str],
    custom_settings: Settings | None = None,
) -> list[SubjectIdentity]:
    """Add *names* to the subject registry, returning their identities."""
    app_settings = custom_settings or settings
    registry = SQLiteSubjectRegistry(db_path=app_settings.registry_db_path)
    await registry.initialize()
    return [await registry.add_subject(name) for name in names]


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise all providers and services on startup, clean up on shutdown."""
    components = _build_all(settings)

    for key, value in components.items():
        setattr(application.state, key, value)

    await application.state.registry.initialize()

    _logger.info(
        "app_startup",
        version=__version__,
        environment=settings.app_env,
        llm=components["provider_registry"]["llm"],
        sources=list(components["provider_registry"]["sources"]),
    )

    yield

    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="collabGraph API",
        version=__version__,
        description=(
            "Synthesize the collaboration network of a registered music artist: "
            "producers, songwriters and featured artists, with second-degree "
            "branches and streaming-catalog references."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=config.get("api", {}).get("cors_origins"))

    application.include_router(api_router)
    return application


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "collabgraph.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
