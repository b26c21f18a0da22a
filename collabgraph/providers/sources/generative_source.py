"""LLM-backed collaborator source.

Asks the configured LLM for a subject's real collaborators, with roles and
each collaborator's top three co-collaborators.  The answer crosses a strict
decode boundary here: fences and preamble are stripped, the outermost JSON
object is decoded, and every name (collaborators and their top
collaborators alike) is passed through the fabrication filter before it is
turned into a :class:`CollaboratorRecord`.

An unparseable answer is "no data", not an error, so the orchestrator falls
through to the next source.  Transport failures raise
:class:`SourceUnavailableError`.
"""

from __future__ import annotations

import asyncio
from typing import Any

import structlog

from collabgraph.interfaces.collaborator_source import ICollaboratorSource
from collabgraph.interfaces.llm_provider import ILLMProvider
from collabgraph.models.graph import Role
from collabgraph.models.subject import CollaboratorRecord
from collabgraph.services.fabrication_filter import is_fabricated
from collabgraph.utils.errors import MalformedResponseError, SourceUnavailableError
from collabgraph.utils.llm_json import extract_json_object

logger = structlog.get_logger(logger_name=__name__)

_MAX_COLLABORATORS = 10
_MAX_TOP_COLLABORATORS = 3

_SYSTEM_PROMPT = (
    "You are a music industry database expert. Provide accurate information "
    "about real producer and songwriter collaborations. Only include verified, "
    "authentic collaborations from the music industry."
)

_USER_PROMPT_TEMPLATE = """\
If {name} is a real artist with known music industry collaborations, provide \
a comprehensive list of music industry professionals who have collaborated \
with them. Include people who work as producers, songwriters, or both.

IMPORTANT: If {name} is not a well-known artist or you have no authentic \
collaboration data for them, return an empty collaborators array. Do NOT \
create fake or placeholder collaborators.

Respond with JSON in this exact format:
{{
  "collaborators": [
    {{
      "name": "Person Name",
      "roles": ["producer", "songwriter"],
      "topCollaborators": ["Artist 1", "Artist 2", "Artist 3"]
    }}
  ]
}}

Guidelines:
- Only include real, verified professionals who have actually worked with {name}
- If you don't have authentic data, return: {{"collaborators": []}}
- For each person, list ALL their roles from: ["producer", "songwriter", "artist"]
- Include their top 3 real collaborating artists
- Never use generic names like "John Doe", "Producer X", or placeholder data
- Maximum {limit} real collaborators"""


class GenerativeCollaboratorSource(ICollaboratorSource):
    """Collaborator source that synthesizes an answer with an LLM."""

    def __init__(self, llm: ILLMProvider | None, timeout: float = 25.0) -> None:
        self._llm = llm
        self._timeout = timeout

    async def get_collaborators(self, canonical_name: str) -> list[CollaboratorRecord]:
        if self._llm is None:
            raise SourceUnavailableError(
                message="No LLM provider configured",
                provider_name=self.get_provider_name(),
            )

        prompt = _USER_PROMPT_TEMPLATE.format(name=canonical_name, limit=_MAX_COLLABORATORS)
        try:
            response = await asyncio.wait_for(
                self._llm.complete(
                    system_prompt=_SYSTEM_PROMPT,
                    user_prompt=prompt,
                    temperature=0.1,
                    max_tokens=2000,
                    json_mode=True,
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as exc:
            raise SourceUnavailableError(
                message=f"LLM generation timed out after {self._timeout:g}s",
                provider_name=self.get_provider_name(),
            ) from exc

        try:
            payload = extract_json_object(response, provider_name=self.get_provider_name())
        except MalformedResponseError as exc:
            logger.warning(
                "generative_response_unparseable",
                subject=canonical_name,
                error=str(exc),
            )
            return []

        records = self.decode_records(payload)
        logger.info(
            "generative_collaborators",
            subject=canonical_name,
            record_count=len(records),
        )
        return records

    def decode_records(self, payload: dict[str, Any]) -> list[CollaboratorRecord]:
        """Turn a decoded ``{"collaborators": [...]}`` payload into records.

        Accepts either ``"roles": [...]`` or a single ``"role": "..."`` per
        entry and emits one record per valid role.  Entries without any
        valid role default to producer.
        """
        raw_entries = payload.get("collaborators")
        if not isinstance(raw_entries, list):
            return []

        records: list[CollaboratorRecord] = []
        for entry in raw_entries[:_MAX_COLLABORATORS]:
            if not isinstance(entry, dict):
                continue
            name = entry.get("name")
            if not isinstance(name, str) or not name.strip():
                continue
            if is_fabricated(name):
                logger.info("fabricated_name_dropped", name=name, field="name")
                continue

            top = self._clean_top_collaborators(entry.get("topCollaborators"))
            for role in self._entry_roles(entry):
                records.append(
                    CollaboratorRecord(name=name, role=role, top_collaborators=top)
                )
        return records

    @staticmethod
    def _entry_roles(entry: dict[str, Any]) -> list[Role]:
        raw = entry.get("roles")
        if raw is None:
            raw = entry.get("role")
        if isinstance(raw, str):
            raw = [raw]
        roles: list[Role] = []
        if isinstance(raw, list):
            for value in raw:
                role = Role.parse(value)
                if role is not None and role not in roles:
                    roles.append(role)
        return roles or [Role.PRODUCER]

    @staticmethod
    def _clean_top_collaborators(raw: Any) -> tuple[str, ...]:
        if not isinstance(raw, list):
            return ()
        kept: list[str] = []
        for value in raw:
            if not isinstance(value, str) or not value.strip():
                continue
            if is_fabricated(value):
                logger.info("fabricated_name_dropped", name=value, field="topCollaborators")
                continue
            kept.append(value.strip())
            if len(kept) == _MAX_TOP_COLLABORATORS:
                break
        return tuple(kept)

    def get_provider_name(self) -> str:
        return "generative"

    def is_available(self) -> bool:
        return self._llm is not None and self._llm.is_available()
