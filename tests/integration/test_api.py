"""Integration tests for FastAPI API endpoints using TestClient."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient

from collabgraph.api.middleware import ErrorHandlingMiddleware, RequestLoggingMiddleware
from collabgraph.api.routes import router as api_router
from collabgraph.models.graph import Role
from collabgraph.models.subject import CollaboratorRecord
from collabgraph.pipeline.orchestrator import CollaborationGraphSynthesizer
from collabgraph.services.cache_writer import CacheWriter
from collabgraph.services.collaboration_details import CollaborationDetailsService
from collabgraph.services.enrichment_service import EnrichmentService
from collabgraph.services.graph_assembler import GraphAssembler
from collabgraph.services.identity_resolver import IdentityResolver
from collabgraph.services.role_classifier import RoleClassifier
from collabgraph.utils.errors import PersistenceError, SubjectNotFoundError

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_RECORDS = [
    CollaboratorRecord(
        name="Max Producer",
        role=Role.PRODUCER,
        top_collaborators=("Ava Example", "Other Artist"),
    )
]


def _create_test_app(registry, source, llm=None) -> FastAPI:
    """Minimal app with the real router and middleware over in-memory fakes."""
    app = FastAPI()
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.include_router(api_router)

    app.state.synthesizer = CollaborationGraphSynthesizer(
        resolver=IdentityResolver(registry),
        sources=[source],
        classifier=RoleClassifier(llm),
        assembler=GraphAssembler(),
        enrichment=EnrichmentService(registry),
        cache_writer=CacheWriter(registry),
    )
    app.state.registry = registry
    app.state.details_service = CollaborationDetailsService(llm)
    app.state.provider_registry = {
        "llm": None,
        "registry": True,
        "catalog": None,
        "sources": {source.get_provider_name(): source.is_available()},
    }
    return app


# ---------------------------------------------------------------------------
# /api/v1/network/{subject}
# ---------------------------------------------------------------------------


class TestNetworkEndpoint:
    def test_returns_wire_graph(self, registry, make_source) -> None:
        client = TestClient(_create_test_app(registry, make_source("static", records=_RECORDS)))
        resp = client.get("/api/v1/network/ava example")

        assert resp.status_code == 200
        body = resp.json()
        assert set(body) == {"nodes", "links"}
        main = body["nodes"][0]
        assert main["name"] == "Ava Example"
        assert main["size"] == 30
        assert main["artistId"] == "id-ava-example"
        producer = next(n for n in body["nodes"] if n["name"] == "Max Producer")
        assert producer["type"] == "producer"
        assert producer["types"] == ["producer"]
        assert producer["color"] == "#AE53FF"
        assert producer["collaborations"] == ["Ava Example", "Other Artist"]
        assert producer["spotifyId"] is None
        assert {"source": "Ava Example", "target": "Max Producer"} in body["links"]

    def test_unregistered_subject_is_404(self, registry, make_source) -> None:
        source = make_source("static", records=_RECORDS)
        client = TestClient(_create_test_app(registry, source))
        resp = client.get("/api/v1/network/Somebody Else")

        assert resp.status_code == 404
        assert "registered subject" in resp.json()["detail"]
        assert resp.json()["error"] == SubjectNotFoundError.__name__
        assert source.calls == []

    def test_cached_query_parameter(self, registry, make_source) -> None:
        source = make_source("static", records=_RECORDS)
        client = TestClient(_create_test_app(registry, source))
        first = client.get("/api/v1/network/Ava Example").json()
        source.records = []

        cached = client.get("/api/v1/network/Ava Example", params={"cached": "true"}).json()
        fresh = client.get("/api/v1/network/Ava Example").json()

        assert cached == first
        assert len(fresh["nodes"]) == 1

    def test_registry_outage_is_structured_500(self, registry, make_source) -> None:
        registry.fail_reads = True
        client = TestClient(_create_test_app(registry, make_source("static", records=_RECORDS)))
        resp = client.get("/api/v1/network/Ava Example")

        assert resp.status_code == 500
        assert resp.json() == {"error": PersistenceError.__name__, "detail": "registry offline"}


# ---------------------------------------------------------------------------
# /api/v1/network-by-id/{subject_id} and /api/v1/search
# ---------------------------------------------------------------------------


class TestNetworkByIdEndpoint:
    def test_resolves_id_to_subject_graph(self, registry, make_source) -> None:
        source = make_source("static", records=_RECORDS)
        client = TestClient(_create_test_app(registry, source))
        resp = client.get("/api/v1/network-by-id/id-ava-example")

        assert resp.status_code == 200
        assert resp.json()["nodes"][0]["name"] == "Ava Example"
        assert source.calls == ["Ava Example"]

    def test_unknown_id_is_404(self, registry, make_source) -> None:
        source = make_source("static", records=_RECORDS)
        client = TestClient(_create_test_app(registry, source))
        resp = client.get("/api/v1/network-by-id/id-nobody")

        assert resp.status_code == 404
        assert resp.json() == {
            "error": SubjectNotFoundError.__name__,
            "detail": "No registered subject with id 'id-nobody'",
        }
        assert source.calls == []

    def test_cached_graph_by_id(self, registry, make_source) -> None:
        source = make_source("static", records=_RECORDS)
        client = TestClient(_create_test_app(registry, source))
        first = client.get("/api/v1/network/Ava Example").json()
        source.records = []

        resp = client.get("/api/v1/network-by-id/id-ava-example", params={"cached": "true"})
        assert resp.json() == first


class TestSearchEndpoint:
    def test_returns_matching_candidates(self, registry, make_source) -> None:
        client = TestClient(_create_test_app(registry, make_source("static")))
        resp = client.get("/api/v1/search", params={"q": "taylor"})

        assert resp.status_code == 200
        assert resp.json() == {
            "query": "taylor",
            "results": [{"id": "id-taylor-swift", "name": "Taylor Swift"}],
        }

    def test_limit_and_no_hits(self, registry, make_source) -> None:
        client = TestClient(_create_test_app(registry, make_source("static")))
        many = client.get("/api/v1/search", params={"q": "a", "limit": 2}).json()
        none = client.get("/api/v1/search", params={"q": "zzz"}).json()

        assert len(many["results"]) == 2
        assert none["results"] == []

    def test_blank_or_missing_query_is_422(self, registry, make_source) -> None:
        client = TestClient(_create_test_app(registry, make_source("static")))
        assert client.get("/api/v1/search").status_code == 422
        assert client.get("/api/v1/search", params={"q": "  "}).status_code == 422

    def test_registry_outage_is_500(self, registry, make_source) -> None:
        registry.fail_reads = True
        client = TestClient(_create_test_app(registry, make_source("static")))
        resp = client.get("/api/v1/search", params={"q": "taylor"})
        assert resp.status_code == 500
        assert resp.json()["error"] == PersistenceError.__name__


# ---------------------------------------------------------------------------
# /api/v1/collaboration
# ---------------------------------------------------------------------------


class TestCollaborationEndpoint:
    def test_details_use_camel_case(self, registry, make_source, make_llm) -> None:
        llm = make_llm(
            responses=['{"songs": ["Hit"], "albums": [], "collaborationType": "songwriting", "details": []}']
        )
        client = TestClient(_create_test_app(registry, make_source("static"), llm=llm))
        resp = client.get("/api/v1/collaboration", params={"first": "Ava Example", "second": "Max"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["collaborationType"] == "songwriting"
        assert body["songs"] == ["Hit"]
        assert body["first"] == "Ava Example"

    def test_missing_parameter_is_422(self, registry, make_source) -> None:
        client = TestClient(_create_test_app(registry, make_source("static")))
        assert client.get("/api/v1/collaboration", params={"first": "A"}).status_code == 422

    def test_blank_name_is_422(self, registry, make_source) -> None:
        client = TestClient(_create_test_app(registry, make_source("static")))
        resp = client.get("/api/v1/collaboration", params={"first": "A", "second": "   "})
        assert resp.status_code == 422

    def test_without_llm_returns_empty_summary(self, registry, make_source) -> None:
        client = TestClient(_create_test_app(registry, make_source("static")))
        body = client.get("/api/v1/collaboration", params={"first": "A", "second": "B"}).json()
        assert body["collaborationType"] == "unknown"
        assert body["songs"] == []


# ---------------------------------------------------------------------------
# /api/v1/health
# ---------------------------------------------------------------------------


class TestHealthEndpoint:
    def test_healthy(self, registry, make_source) -> None:
        client = TestClient(_create_test_app(registry, make_source("static")))
        body = client.get("/api/v1/health").json()
        assert body["status"] == "healthy"
        assert body["version"] == "0.1.0"
        assert body["providers"]["sources"] == {"static": True}

    def test_degraded_without_sources(self, registry, make_source) -> None:
        app = _create_test_app(registry, make_source("generative", available=False))
        body = TestClient(app).get("/api/v1/health").json()
        assert body["status"] == "degraded"

    def test_unhealthy_without_registry(self) -> None:
        app = FastAPI()
        app.include_router(api_router)
        app.state.provider_registry = {}
        body = TestClient(app).get("/api/v1/health").json()
        assert body["status"] == "unhealthy"


# ---------------------------------------------------------------------------
# ErrorHandlingMiddleware
# ---------------------------------------------------------------------------


class TestErrorStatus:
    def test_status_for_error_classes(self) -> None:
        from collabgraph.api.middleware import status_for
        from collabgraph.utils.errors import GraphInvariantError, LLMError

        class _RenamedSubjectError(SubjectNotFoundError):
            pass

        assert status_for(SubjectNotFoundError()) == 404
        assert status_for(_RenamedSubjectError()) == 404
        assert status_for(PersistenceError()) == 500
        assert status_for(LLMError()) == 500
        assert status_for(GraphInvariantError()) == 500
