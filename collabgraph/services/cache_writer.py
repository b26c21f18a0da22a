"""Persist synthesized graphs against their subject.

Writes only ever update an existing registry row; caching never registers a
new subject.  A failed write is logged and reported as ``False``, and the
caller still returns the freshly built graph.  Last write wins.
"""

from __future__ import annotations

import structlog

from collabgraph.interfaces.subject_registry import ISubjectRegistry
from collabgraph.models.graph import Graph
from collabgraph.utils.errors import PersistenceError

logger = structlog.get_logger(logger_name=__name__)


class CacheWriter:
    """Stores graphs in the subject registry's JSON column."""

    def __init__(self, registry: ISubjectRegistry) -> None:
        self._registry = registry

    async def store(self, canonical_name: str, graph: Graph) -> bool:
        """Overwrite the cached graph for *canonical_name*; never raises."""
        try:
            if not await self._registry.exists_by_name(canonical_name):
                logger.warning("graph_cache_skipped_unregistered", subject=canonical_name)
                return False
            stored = await self._registry.update_graph(canonical_name, graph.to_wire())
        except PersistenceError as exc:
            logger.error("graph_cache_write_failed", subject=canonical_name, error=str(exc))
            return False

        logger.info(
            "graph_cached",
            subject=canonical_name,
            nodes=len(graph.nodes),
            links=len(graph.links),
            stored=stored,
        )
        return stored

    async def load(self, canonical_name: str) -> Graph | None:
        """Return the cached graph for *canonical_name*, or ``None``.

        Unreadable or malformed entries are treated as a cache miss.
        """
        try:
            payload = await self._registry.get_graph(canonical_name)
        except PersistenceError as exc:
            logger.warning("graph_cache_read_failed", subject=canonical_name, error=str(exc))
            return None
        if not payload:
            return None
        try:
            return Graph.model_validate(payload)
        except ValueError as exc:
            logger.warning("graph_cache_entry_invalid", subject=canonical_name, error=str(exc))
            return None
