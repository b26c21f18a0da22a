"""Resolve a free-text query to a registered subject.

Resolution is exact-or-best: a case-insensitive exact registry hit wins;
otherwise the registry's loose ``search`` candidates are ranked with
rapidfuzz and the best one at or above the similarity threshold is
accepted.  No hit at all is terminal for the request.
"""

from __future__ import annotations

import structlog

from collabgraph.interfaces.subject_registry import ISubjectRegistry
from collabgraph.models.subject import SubjectIdentity
from collabgraph.utils.errors import SubjectNotFoundError
from collabgraph.utils.text_normalizer import clean_display_name, fuzzy_match

logger = structlog.get_logger(logger_name=__name__)

_CANDIDATE_LIMIT = 25


class IdentityResolver:
    """Maps queries to canonical :class:`SubjectIdentity` values."""

    def __init__(self, registry: ISubjectRegistry, fuzzy_threshold: float = 0.9) -> None:
        self._registry = registry
        self._fuzzy_threshold = fuzzy_threshold

    async def resolve(self, query: str) -> SubjectIdentity:
        """Return the canonical identity for *query*.

        Raises
        ------
        SubjectNotFoundError
            If the query is blank or no registered subject matches.
        """
        cleaned = clean_display_name(query)
        if not cleaned:
            raise SubjectNotFoundError(message="Empty subject query")

        exact = await self._registry.find_by_name(cleaned)
        if exact is not None:
            return exact

        candidates = await self._registry.search(cleaned, limit=_CANDIDATE_LIMIT)
        by_name = {c.canonical_name: c for c in candidates}
        best = fuzzy_match(cleaned, list(by_name), threshold=self._fuzzy_threshold)
        if best is not None:
            match_name, score = best
            logger.info("subject_fuzzy_resolved", query=cleaned, match=match_name, score=score)
            return by_name[match_name]

        logger.info("subject_not_found", query=cleaned, candidates=len(candidates))
        raise SubjectNotFoundError(
            message=f"'{cleaned}' is not a registered subject; please pick a registered subject"
        )
