"""Abstract base class for the subject registry and graph store.

The registry is the authority on which subjects exist (identity
resolution never synthesizes a graph for an unregistered subject) and also
the durable, JSON-capable store the cache writer persists graphs into.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from collabgraph.models.subject import SubjectIdentity


# Concrete implementation: SQLiteSubjectRegistry
# Located in: collabgraph/providers/registry/
class ISubjectRegistry(ABC):
    """Contract for subject lookup and per-subject graph persistence."""

    @abstractmethod
    async def find_by_name(self, name: str) -> SubjectIdentity | None:
        """Case-insensitive exact lookup.  Returns ``None`` when absent.

        Raises
        ------
        collabgraph.utils.errors.PersistenceError
            If the store cannot be read.
        """

    @abstractmethod
    async def find_by_id(self, subject_id: str) -> SubjectIdentity | None:
        """Lookup by canonical id.  Returns ``None`` for an unknown id."""

    @abstractmethod
    async def search(self, query: str, limit: int = 10) -> list[SubjectIdentity]:
        """Return registered subjects whose names loosely contain *query*."""

    @abstractmethod
    async def exists_by_name(self, name: str) -> bool:
        """Return ``True`` if a subject with this name (any case) is registered."""

    @abstractmethod
    async def get_graph(self, name: str) -> dict[str, Any] | None:
        """Return the cached graph payload for *name*, or ``None``."""

    @abstractmethod
    async def update_graph(self, name: str, graph: dict[str, Any]) -> bool:
        """Overwrite the cached graph for an existing subject.

        Never inserts a new subject.  Returns ``True`` if a row was updated.

        Raises
        ------
        collabgraph.utils.errors.PersistenceError
            If the write fails.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier such as ``"sqlite"``."""
