"""Role classification for the people in one synthesis run.

Roles come from the LLM in as few calls as possible: the subject is
classified on its own first, then every other name seen in the run goes out
in a single batch request.  Results live in a :class:`RoleMemo` that the
orchestrator creates per run and hands to the graph assembler, so a name is
classified at most once per run and concurrent runs never share state.

Classification is never fatal.  A failed or unparseable answer leaves each
name with the default role the pipeline supplied for it.
"""

from __future__ import annotations

import asyncio
from typing import Any, Iterable

import structlog

from collabgraph.interfaces.llm_provider import ILLMProvider
from collabgraph.models.graph import Role, order_roles
from collabgraph.utils.errors import CollabGraphError, LLMError
from collabgraph.utils.llm_json import extract_json_array, extract_json_object
from collabgraph.utils.text_normalizer import clean_display_name, name_key

logger = structlog.get_logger(logger_name=__name__)

_SYSTEM_PROMPT = (
    "You classify music industry professionals. Answer only with JSON and only "
    'use the roles "artist", "producer" and "songwriter".'
)

_SUBJECT_PROMPT = (
    "What roles does {name} have in the music industry? Return ONLY a JSON array "
    'of their roles from: ["artist", "producer", "songwriter"]. For example: '
    '["artist", "songwriter"] or ["producer", "songwriter"] or '
    '["artist", "producer", "songwriter"]. Return ONLY the JSON array, no other text.'
)

_BATCH_PROMPT = """\
For each of these music industry professionals: {names}

Return their roles as JSON in this exact format:
{{
  "Person Name 1": ["artist", "songwriter"],
  "Person Name 2": ["producer", "songwriter"],
  "Person Name 3": ["artist"]
}}

Each person's roles should be from: ["artist", "producer", "songwriter"]. \
Include ALL roles each person has. Return ONLY the JSON object, no other text."""


class RoleMemo:
    """Per-run map of name -> classified roles, keyed case-insensitively."""

    def __init__(self) -> None:
        self._roles: dict[str, list[Role]] = {}

    def get(self, name: str) -> list[Role] | None:
        roles = self._roles.get(name_key(name))
        return list(roles) if roles is not None else None

    def set(self, name: str, roles: list[Role]) -> None:
        self._roles[name_key(name)] = order_roles(roles)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name_key(name) in self._roles

    def __len__(self) -> int:
        return len(self._roles)


def _valid_roles(raw: Any) -> list[Role]:
    if not isinstance(raw, list):
        return []
    roles: list[Role] = []
    for value in raw:
        role = Role.parse(value)
        if role is not None and role not in roles:
            roles.append(role)
    return roles


class RoleClassifier:
    """Classifies people into {artist, producer, songwriter} via an LLM."""

    def __init__(self, llm: ILLMProvider | None, timeout: float = 25.0) -> None:
        self._llm = llm
        self._timeout = timeout

    @property
    def enabled(self) -> bool:
        return self._llm is not None and self._llm.is_available()

    async def classify_subject(
        self, name: str, memo: RoleMemo, default: Role = Role.ARTIST
    ) -> list[Role]:
        """Classify the main subject alone and seed the result into *memo*."""
        cached = memo.get(name)
        if cached is not None:
            return cached

        roles: list[Role] = []
        if self.enabled:
            try:
                response = await self._ask(
                    _SUBJECT_PROMPT.format(name=name), max_tokens=100, json_mode=False
                )
                roles = _valid_roles(extract_json_array(response, provider_name="role_classifier"))
            except (CollabGraphError, asyncio.TimeoutError) as exc:
                logger.warning("subject_classification_failed", subject=name, error=str(exc))

        memo.set(name, roles or [default])
        return memo.get(name) or [default]

    async def classify(self, name: str, memo: RoleMemo, default: Role = Role.ARTIST) -> list[Role]:
        """Single-name convenience wrapper around :meth:`classify_batch`.

        Results are keyed by the cleaned display name; a blank name gets
        ``[default]`` without a request.
        """
        display = clean_display_name(name)
        result = await self.classify_batch([display], memo, defaults={display: default})
        return result.get(display, [default])

    async def classify_batch(
        self,
        names: Iterable[str],
        memo: RoleMemo,
        defaults: dict[str, Role] | None = None,
    ) -> dict[str, list[Role]]:
        """Classify every name not yet in *memo* with one request.

        Parameters
        ----------
        names:
            People to classify.  Duplicates (any case) are sent once.
        memo:
            The run's memo; read for already-classified names and updated
            with every result, including fallbacks.
        defaults:
            Role to fall back to per name.  Missing names default to artist.

        Returns
        -------
        dict[str, list[Role]]
            Roles for every requested name, artist first when present.
        """
        defaults = {name_key(k): v for k, v in (defaults or {}).items()}
        requested = [clean_display_name(n) for n in names if clean_display_name(n)]

        pending: list[str] = []
        pending_keys: set[str] = set()
        for name in requested:
            key = name_key(name)
            if name not in memo and key not in pending_keys:
                pending.append(name)
                pending_keys.add(key)

        answered: dict[str, list[Role]] = {}
        if pending and self.enabled:
            answered = await self._classify_remote(pending)

        for name in pending:
            roles = answered.get(name_key(name)) or [defaults.get(name_key(name), Role.ARTIST)]
            memo.set(name, roles)

        return {name: memo.get(name) or [Role.ARTIST] for name in requested}

    async def _classify_remote(self, names: list[str]) -> dict[str, list[Role]]:
        """One LLM call for *names*; returns {} on any failure."""
        quoted = ", ".join(f'"{n}"' for n in names)
        try:
            response = await self._ask(
                _BATCH_PROMPT.format(names=quoted), max_tokens=1000, json_mode=True
            )
            payload = extract_json_object(response, provider_name="role_classifier")
        except (CollabGraphError, asyncio.TimeoutError) as exc:
            logger.warning("batch_classification_failed", names=len(names), error=str(exc))
            return {}

        answered: dict[str, list[Role]] = {}
        for person, raw_roles in payload.items():
            roles = _valid_roles(raw_roles)
            if roles:
                answered[name_key(str(person))] = roles
        logger.info("batch_classification", requested=len(names), classified=len(answered))
        return answered

    async def _ask(self, prompt: str, max_tokens: int, json_mode: bool) -> str:
        if self._llm is None:
            raise LLMError(message="No LLM provider configured", provider_name="role_classifier")
        return await asyncio.wait_for(
            self._llm.complete(
                system_prompt=_SYSTEM_PROMPT,
                user_prompt=prompt,
                temperature=0.1,
                max_tokens=max_tokens,
                json_mode=json_mode,
            ),
            timeout=self._timeout,
        )
