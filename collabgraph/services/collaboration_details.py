"""Pairwise collaboration summaries.

Answers "what did A and B work on together?" with song titles, albums, a
collaboration type and short descriptions.  Backs the collaboration
endpoint the graph client calls when an edge is selected.  Any failure
degrades to an empty summary with ``collaboration_type="unknown"``.
"""

from __future__ import annotations

import asyncio
from typing import Any

import structlog

from collabgraph.interfaces.llm_provider import ILLMProvider
from collabgraph.models.pipeline import CollaborationDetails
from collabgraph.utils.errors import CollabGraphError
from collabgraph.utils.llm_json import extract_json_object
from collabgraph.utils.text_normalizer import clean_display_name

logger = structlog.get_logger(logger_name=__name__)

_COLLABORATION_TYPES = frozenset(
    {"production", "songwriting", "performance", "remix", "unknown"}
)

_SYSTEM_PROMPT = (
    "You are a music industry database expert. Provide accurate, specific "
    "information about real musical collaborations between artists. Only "
    "include verified collaborations with actual song/album titles."
)

_USER_PROMPT = """\
What did {first} and {second} collaborate on? Cite the exact song or \
project/album, and how they helped work on it.

Return a JSON object with the following structure:
{{
  "songs": ["Song Title 1", "Song Title 2"],
  "albums": ["Album Title 1", "Album Title 2"],
  "collaborationType": "production|songwriting|performance|remix|unknown",
  "details": ["Brief description of collaboration 1"]
}}

Only include verified, real collaborations with specific song/album names. \
If no collaborations exist, return empty arrays and "unknown" for collaborationType."""


def _strings(raw: Any) -> list[str]:
    if not isinstance(raw, list):
        return []
    return [s.strip() for s in raw if isinstance(s, str) and s.strip()]


class CollaborationDetailsService:
    """Describes the collaboration between two named people."""

    def __init__(self, llm: ILLMProvider | None, timeout: float = 25.0) -> None:
        self._llm = llm
        self._timeout = timeout

    async def describe(self, first: str, second: str) -> CollaborationDetails:
        first, second = clean_display_name(first), clean_display_name(second)
        if not first or not second:
            msg = "Both collaborator names are required"
            raise ValueError(msg)

        empty = CollaborationDetails(first=first, second=second)
        if self._llm is None or not self._llm.is_available():
            logger.info("collaboration_details_skipped", reason="no_llm")
            return empty

        try:
            response = await asyncio.wait_for(
                self._llm.complete(
                    system_prompt=_SYSTEM_PROMPT,
                    user_prompt=_USER_PROMPT.format(first=first, second=second),
                    temperature=0.1,
                    max_tokens=1000,
                    json_mode=True,
                ),
                timeout=self._timeout,
            )
            payload = extract_json_object(response, provider_name="collaboration_details")
        except (CollabGraphError, asyncio.TimeoutError) as exc:
            logger.warning(
                "collaboration_details_failed",
                first=first,
                second=second,
                error=str(exc) or type(exc).__name__,
            )
            return empty

        collaboration_type = str(payload.get("collaborationType") or "unknown").strip().lower()
        if collaboration_type not in _COLLABORATION_TYPES:
            collaboration_type = "unknown"

        return CollaborationDetails(
            first=first,
            second=second,
            songs=_strings(payload.get("songs")),
            albums=_strings(payload.get("albums")),
            collaboration_type=collaboration_type,
            details=_strings(payload.get("details")),
        )
