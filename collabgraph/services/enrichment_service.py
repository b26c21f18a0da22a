"""Best-effort enrichment of graph nodes.

For every node, concurrently: look the name up in the streaming catalog
(id + image) and in the subject registry (internal profile id).  Each node
is owned by exactly one task, so tasks never write the same fields.  A
failed or timed-out lookup leaves its fields ``None`` and is logged; it
never fails the run.  The fan-out waits for every task to settle.
"""

from __future__ import annotations

import asyncio

import structlog

from collabgraph.interfaces.streaming_catalog_provider import (
    IStreamingCatalogProvider,
    pick_image_url,
)
from collabgraph.interfaces.subject_registry import ISubjectRegistry
from collabgraph.models.graph import Graph, Node
from collabgraph.utils.concurrency import throttled_gather
from collabgraph.utils.errors import CollabGraphError

logger = structlog.get_logger(logger_name=__name__)


class EnrichmentService:
    """Fills external references on graph nodes with bounded parallelism."""

    def __init__(
        self,
        registry: ISubjectRegistry,
        catalog: IStreamingCatalogProvider | None = None,
        concurrency: int = 5,
        timeout: float = 10.0,
        image_size: str = "medium",
    ) -> None:
        self._registry = registry
        self._catalog = catalog
        self._concurrency = max(concurrency, 1)
        self._timeout = timeout
        self._image_size = image_size

    async def enrich(self, graph: Graph) -> Graph:
        """Enrich every node of *graph* in place and return it."""
        if not graph.nodes:
            return graph

        # One semaphore per run keeps concurrent runs independent.
        semaphore = asyncio.Semaphore(self._concurrency)
        results = await throttled_gather(
            [self._enrich_node(node) for node in graph.nodes],
            semaphore=semaphore,
            return_exceptions=True,
        )

        failures = 0
        for node, result in zip(graph.nodes, results):
            if isinstance(result, BaseException):
                failures += 1
                logger.warning("node_enrichment_crashed", node=node.id, error=repr(result))
        logger.info("graph_enriched", nodes=len(graph.nodes), crashed=failures)
        return graph

    async def _enrich_node(self, node: Node) -> None:
        # Both lookups settle before an unexpected error surfaces, so a
        # crashing catalog call cannot orphan the registry write.
        outcomes = await asyncio.gather(
            self._enrich_catalog(node),
            self._enrich_registry(node),
            return_exceptions=True,
        )
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome

    async def _enrich_catalog(self, node: Node) -> None:
        if self._catalog is None or not self._catalog.is_available():
            return
        try:
            artist = await asyncio.wait_for(
                self._catalog.search_artist(node.display_name), timeout=self._timeout
            )
        except (CollabGraphError, asyncio.TimeoutError) as exc:
            node.streaming_id = None
            node.streaming_image_url = None
            logger.warning(
                "catalog_enrichment_failed",
                node=node.id,
                provider=self._catalog.get_provider_name(),
                error=str(exc) or type(exc).__name__,
            )
            return
        if artist is None:
            return
        node.streaming_id = artist.id
        node.streaming_image_url = pick_image_url(artist.images, self._image_size)

    async def _enrich_registry(self, node: Node) -> None:
        try:
            identity = await asyncio.wait_for(
                self._registry.find_by_name(node.display_name), timeout=self._timeout
            )
        except (CollabGraphError, asyncio.TimeoutError) as exc:
            node.registry_id = None
            logger.warning(
                "registry_enrichment_failed",
                node=node.id,
                error=str(exc) or type(exc).__name__,
            )
            return
        node.registry_id = identity.canonical_id if identity is not None else None
