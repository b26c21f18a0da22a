"""Static collaborator table, the last source in the fallback chain."""

from __future__ import annotations

import structlog

from collabgraph.config.known_collaborators import static_collaborators_for
from collabgraph.interfaces.collaborator_source import ICollaboratorSource
from collabgraph.models.graph import Role
from collabgraph.models.subject import CollaboratorRecord

logger = structlog.get_logger(logger_name=__name__)


class StaticCollaboratorSource(ICollaboratorSource):
    """Serves curated collaborators from ``STATIC_COLLABORATORS``.

    A subject missing from the table is not an error; it yields no records
    and the graph is just the main node.
    """

    async def get_collaborators(self, canonical_name: str) -> list[CollaboratorRecord]:
        entries = static_collaborators_for(canonical_name)
        if not entries:
            logger.debug("static_table_miss", subject=canonical_name)
        return [
            CollaboratorRecord(name=name, role=Role(role), top_collaborators=top)
            for name, role, top in entries
        ]

    def get_provider_name(self) -> str:
        return "static"

    def is_available(self) -> bool:
        return True
