"""Abstract base class for collaborator sources.

Every source the orchestrator can fall back through (LLM generation,
MusicBrainz relations, Wikipedia heuristics, the static table) implements
this one contract, which lets the orchestrator treat them as a plain
ordered list.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from collabgraph.models.subject import CollaboratorRecord


# Concrete implementations: GenerativeCollaboratorSource, MusicBrainzCollaboratorSource,
# WikipediaCollaboratorSource, StaticCollaboratorSource
# Located in: collabgraph/providers/sources/
class ICollaboratorSource(ABC):
    """Contract for anything that can answer "who does X work with?"."""

    @abstractmethod
    async def get_collaborators(self, canonical_name: str) -> list[CollaboratorRecord]:
        """Return the collaborators of *canonical_name*.

        Parameters
        ----------
        canonical_name:
            The subject's registry-canonical display name.

        Returns
        -------
        list[CollaboratorRecord]
            Decoded records.  An empty list means "no data" and lets the
            orchestrator move on to the next source.

        Raises
        ------
        collabgraph.utils.errors.SourceUnavailableError
            If the backing service is unreachable, times out, or answers
            with a payload that cannot be decoded.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier such as ``"musicbrainz"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the source is configured and may be queried."""
