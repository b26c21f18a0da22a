"""Orchestrator for collaboration graph synthesis.

Sequences one synthesis run:

    RESOLVING        registry lookup (terminal NOT_FOUND on miss)
    SOURCE_FALLBACK  sources tried strictly in order, first non-empty wins
    ASSEMBLING       role classification + graph assembly (ERROR on a
                     broken invariant)
    ENRICHING        bounded concurrent catalog/registry lookups per node
    CACHING          overwrite the subject's stored graph
    DONE

Failure policy: only an unregistered subject (``SubjectNotFoundError``) or
a broken graph invariant (``GraphInvariantError``) reaches the caller.
Source outages, malformed answers, enrichment misses and cache write
failures are logged and absorbed into a smaller but valid graph.
"""

from __future__ import annotations

import structlog

from collabgraph.interfaces.collaborator_source import ICollaboratorSource
from collabgraph.models.graph import Graph, Role
from collabgraph.models.pipeline import SynthesisPhase, SynthesisTrace
from collabgraph.models.subject import CollaboratorRecord, SubjectIdentity
from collabgraph.services.cache_writer import CacheWriter
from collabgraph.services.enrichment_service import EnrichmentService
from collabgraph.services.graph_assembler import GraphAssembler
from collabgraph.services.identity_resolver import IdentityResolver
from collabgraph.services.role_classifier import RoleClassifier, RoleMemo
from collabgraph.utils.errors import CollabGraphError, GraphInvariantError, SubjectNotFoundError
from collabgraph.utils.logging import get_logger
from collabgraph.utils.text_normalizer import name_key


class CollaborationGraphSynthesizer:
    """Turns a subject query into a collaboration graph.

    All collaborators are injected; ``sources`` is the fallback chain in
    priority order.
    """

    def __init__(
        self,
        resolver: IdentityResolver,
        sources: list[ICollaboratorSource],
        classifier: RoleClassifier,
        assembler: GraphAssembler,
        enrichment: EnrichmentService,
        cache_writer: CacheWriter,
    ) -> None:
        self._resolver = resolver
        self._sources = list(sources)
        self._classifier = classifier
        self._assembler = assembler
        self._enrichment = enrichment
        self._cache_writer = cache_writer
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def source_names(self) -> list[str]:
        return [source.get_provider_name() for source in self._sources]

    async def synthesize(self, subject_query: str, use_cache: bool = False) -> Graph:
        """Return the collaboration graph for *subject_query*.

        Raises
        ------
        SubjectNotFoundError
            If the query does not resolve to a registered subject.
        GraphInvariantError
            If assembly produced an internally inconsistent graph.
        """
        graph, _ = await self.synthesize_with_trace(subject_query, use_cache=use_cache)
        return graph

    async def synthesize_with_trace(
        self, subject_query: str, use_cache: bool = False
    ) -> tuple[Graph, SynthesisTrace]:
        """Like :meth:`synthesize`, also returning how the run progressed."""
        trace = SynthesisTrace(subject_query=subject_query)
        with structlog.contextvars.bound_contextvars(subject=subject_query):
            graph = await self._run(subject_query, use_cache, trace)
        return graph, trace

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    async def _run(self, subject_query: str, use_cache: bool, trace: SynthesisTrace) -> Graph:
        try:
            subject = await self._resolver.resolve(subject_query)
        except SubjectNotFoundError:
            trace.advance(SynthesisPhase.NOT_FOUND)
            raise

        if use_cache:
            cached = await self._cache_writer.load(subject.canonical_name)
            if cached is not None:
                trace.served_from_cache = True
                trace.advance(SynthesisPhase.DONE)
                self._logger.info("synthesis_served_from_cache", nodes=len(cached.nodes))
                return cached

        memo = RoleMemo()
        await self._classifier.classify_subject(subject.canonical_name, memo)

        trace.advance(SynthesisPhase.SOURCE_FALLBACK)
        records = await self._collect(subject, trace)

        trace.advance(SynthesisPhase.ASSEMBLING)
        await self._classify_records(subject, records, memo)
        try:
            graph = self._assembler.assemble(subject, records, memo)
        except GraphInvariantError as exc:
            trace.advance(SynthesisPhase.ERROR)
            self._logger.error("graph_invariant_violated", error=str(exc))
            raise

        trace.advance(SynthesisPhase.ENRICHING)
        await self._enrichment.enrich(graph)

        trace.advance(SynthesisPhase.CACHING)
        await self._cache_writer.store(subject.canonical_name, graph)

        trace.advance(SynthesisPhase.DONE)
        self._logger.info(
            "synthesis_complete",
            canonical_name=subject.canonical_name,
            source=trace.source_used,
            nodes=len(graph.nodes),
            links=len(graph.links),
        )
        return graph

    async def _collect(
        self, subject: SubjectIdentity, trace: SynthesisTrace
    ) -> list[CollaboratorRecord]:
        """Try each source in order; stop at the first non-empty answer."""
        for source in self._sources:
            name = source.get_provider_name()
            if not source.is_available():
                self._logger.info("source_skipped_unavailable", source=name)
                continue

            trace.sources_tried.append(name)
            try:
                records = await source.get_collaborators(subject.canonical_name)
            except CollabGraphError as exc:
                self._logger.warning("source_fallthrough", source=name, error=str(exc))
                continue

            if records:
                trace.source_used = name
                self._logger.info("source_answered", source=name, records=len(records))
                return records
            self._logger.info("source_empty", source=name)

        self._logger.info("no_source_answered", tried=trace.sources_tried)
        return []

    async def _classify_records(
        self,
        subject: SubjectIdentity,
        records: list[CollaboratorRecord],
        memo: RoleMemo,
    ) -> None:
        """Batch-classify every collaborator and branch candidate once."""
        subject_key = name_key(subject.canonical_name)
        defaults: dict[str, Role] = {}
        names: list[str] = []
        for record in records:
            if name_key(record.name) != subject_key and record.name not in defaults:
                defaults[record.name] = record.role
                names.append(record.name)
        for record in records:
            for ref in record.top_collaborators:
                if name_key(ref) != subject_key and ref not in defaults:
                    defaults[ref] = Role.ARTIST
                    names.append(ref)
        if names:
            await self._classifier.classify_batch(names, memo, defaults=defaults)
