"""Shared pytest fixtures for the collabGraph test suite.

The fakes here implement the real interfaces so services and the
orchestrator can be exercised without network access or API keys.
Tests get them through factory fixtures (``make_llm``, ``make_registry``,
``make_source``) and construct as many as they need.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import pytest

from collabgraph.config.settings import Settings
from collabgraph.interfaces.collaborator_source import ICollaboratorSource
from collabgraph.interfaces.llm_provider import ILLMProvider
from collabgraph.interfaces.subject_registry import ISubjectRegistry
from collabgraph.models.graph import Role
from collabgraph.models.subject import CollaboratorRecord, SubjectIdentity
from collabgraph.utils.errors import PersistenceError
from collabgraph.utils.text_normalizer import name_key

# Imported here, outside any per-test capture: collabgraph.main configures
# logging at import time, and a first import inside a capsys test would bind
# the structlog loggers to that test's stream, which is closed afterwards.
import collabgraph.main  # noqa: E402,F401

# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeLLM(ILLMProvider):
    """Scripted LLM.

    Answers from ``responder(system_prompt, user_prompt)`` when given,
    otherwise pops ``responses`` in order.  An exception instance in either
    position is raised instead of returned.
    """

    def __init__(
        self,
        responses: list[Any] | None = None,
        responder: Callable[[str, str], Any] | None = None,
        available: bool = True,
        name: str = "fake-llm",
    ) -> None:
        self.responses = list(responses or [])
        self.responder = responder
        self.available = available
        self.name = name
        self.calls: list[dict[str, Any]] = []

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.1,
        max_tokens: int = 2000,
        json_mode: bool = False,
    ) -> str:
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "max_tokens": max_tokens,
                "json_mode": json_mode,
            }
        )
        if self.responder is not None:
            answer = self.responder(system_prompt, user_prompt)
        elif self.responses:
            answer = self.responses.pop(0)
        else:
            answer = "{}"
        if isinstance(answer, BaseException):
            raise answer
        return answer

    def get_provider_name(self) -> str:
        return self.name

    def is_available(self) -> bool:
        return self.available


class InMemoryRegistry(ISubjectRegistry):
    """Dict-backed registry.

    ``fail_reads`` / ``fail_writes`` inject outages; ``read_delay`` slows
    name lookups.
    """

    def __init__(self, names: list[str] | tuple[str, ...] = ()) -> None:
        self.subjects: dict[str, SubjectIdentity] = {}
        self.graphs: dict[str, dict[str, Any]] = {}
        self.fail_reads = False
        self.fail_writes = False
        self.read_delay = 0.0
        self.lookups: list[str] = []
        for name in names:
            self.add(name)

    def add(self, name: str) -> SubjectIdentity:
        identity = SubjectIdentity(
            canonical_id=f"id-{name_key(name).replace(' ', '-')}",
            canonical_name=name,
        )
        self.subjects[name_key(name)] = identity
        return identity

    def _check_read(self) -> None:
        if self.fail_reads:
            raise PersistenceError(message="registry offline", provider_name="memory")

    async def find_by_name(self, name: str) -> SubjectIdentity | None:
        self._check_read()
        if self.read_delay:
            await asyncio.sleep(self.read_delay)
        self.lookups.append(name)
        return self.subjects.get(name_key(name))

    async def find_by_id(self, subject_id: str) -> SubjectIdentity | None:
        self._check_read()
        for identity in self.subjects.values():
            if identity.canonical_id == subject_id:
                return identity
        return None

    async def search(self, query: str, limit: int = 10) -> list[SubjectIdentity]:
        self._check_read()
        tokens = [t for t in name_key(query).split(" ") if t]
        hits = [
            identity
            for key, identity in sorted(self.subjects.items())
            if any(t in key for t in tokens)
        ]
        return hits[:limit]

    async def exists_by_name(self, name: str) -> bool:
        self._check_read()
        return name_key(name) in self.subjects

    async def get_graph(self, name: str) -> dict[str, Any] | None:
        self._check_read()
        return self.graphs.get(name_key(name))

    async def update_graph(self, name: str, graph: dict[str, Any]) -> bool:
        if self.fail_writes:
            raise PersistenceError(message="disk full", provider_name="memory")
        if name_key(name) not in self.subjects:
            return False
        self.graphs[name_key(name)] = graph
        return True

    def get_provider_name(self) -> str:
        return "memory"


class StubSource(ICollaboratorSource):
    """Collaborator source returning fixed records or raising ``error``."""

    def __init__(
        self,
        name: str,
        records: list[CollaboratorRecord] | None = None,
        error: Exception | None = None,
        available: bool = True,
    ) -> None:
        self.name = name
        self.records = list(records or [])
        self.error = error
        self.available = available
        self.calls: list[str] = []

    async def get_collaborators(self, canonical_name: str) -> list[CollaboratorRecord]:
        self.calls.append(canonical_name)
        if self.error is not None:
            raise self.error
        return list(self.records)

    def get_provider_name(self) -> str:
        return self.name

    def is_available(self) -> bool:
        return self.available


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_llm() -> type[FakeLLM]:
    return FakeLLM


@pytest.fixture
def make_registry() -> type[InMemoryRegistry]:
    return InMemoryRegistry


@pytest.fixture
def make_source() -> type[StubSource]:
    return StubSource


@pytest.fixture
def registry() -> InMemoryRegistry:
    """Registry with a handful of subjects, including the example artist."""
    return InMemoryRegistry(["Ava Example", "Taylor Swift", "Max Martin", "Ed Sheeran"])


@pytest.fixture
def ava_records() -> list[CollaboratorRecord]:
    """Ava Example's collaborators as a generative source would report them."""
    return [
        CollaboratorRecord(name="Max Producer", role=Role.PRODUCER, top_collaborators=("Sam Singer",)),
        CollaboratorRecord(name="Max Producer", role=Role.SONGWRITER, top_collaborators=("Sam Singer",)),
        CollaboratorRecord(name="Lee Writer", role=Role.SONGWRITER),
    ]


@pytest.fixture
def settings_factory() -> Callable[..., Settings]:
    """Build Settings with every key blank unless overridden."""

    def _factory(**overrides: Any) -> Settings:
        defaults: dict[str, Any] = {
            "openai_api_key": "",
            "openai_base_url": "",
            "openai_text_model": "",
            "anthropic_api_key": "",
            "anthropic_model": "",
            "spotify_client_id": "",
            "spotify_client_secret": "",
            "musicbrainz_request_interval": 0.0,
            "app_env": "test",
        }
        defaults.update(overrides)
        return Settings(_env_file=None, **defaults)

    return _factory
