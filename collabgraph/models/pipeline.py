"""Synthesis run phases and per-run bookkeeping."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SynthesisPhase(str, Enum):  # noqa: UP042 — StrEnum requires Python 3.11+
    """States of one synthesis request.

    RESOLVING → SOURCE_FALLBACK → ASSEMBLING → ENRICHING → CACHING → DONE.
    NOT_FOUND is reachable only from RESOLVING; ERROR only from ASSEMBLING.
    """

    RESOLVING = "RESOLVING"
    SOURCE_FALLBACK = "SOURCE_FALLBACK"
    ASSEMBLING = "ASSEMBLING"
    ENRICHING = "ENRICHING"
    CACHING = "CACHING"
    DONE = "DONE"
    NOT_FOUND = "NOT_FOUND"
    ERROR = "ERROR"


_TRANSITIONS: dict[SynthesisPhase, frozenset[SynthesisPhase]] = {
    SynthesisPhase.RESOLVING: frozenset(
        {SynthesisPhase.SOURCE_FALLBACK, SynthesisPhase.NOT_FOUND, SynthesisPhase.DONE}
    ),
    SynthesisPhase.SOURCE_FALLBACK: frozenset({SynthesisPhase.ASSEMBLING}),
    SynthesisPhase.ASSEMBLING: frozenset({SynthesisPhase.ENRICHING, SynthesisPhase.ERROR}),
    SynthesisPhase.ENRICHING: frozenset({SynthesisPhase.CACHING}),
    SynthesisPhase.CACHING: frozenset({SynthesisPhase.DONE}),
    SynthesisPhase.DONE: frozenset(),
    SynthesisPhase.NOT_FOUND: frozenset(),
    SynthesisPhase.ERROR: frozenset(),
}


def can_transition(current: SynthesisPhase, target: SynthesisPhase) -> bool:
    return target in _TRANSITIONS[current]


class SynthesisTrace(BaseModel):
    """Mutable record of how one synthesis run progressed.

    RESOLVING → DONE directly only happens when a cached graph is served.
    """

    subject_query: str
    phase: SynthesisPhase = SynthesisPhase.RESOLVING
    phases_visited: list[SynthesisPhase] = Field(
        default_factory=lambda: [SynthesisPhase.RESOLVING]
    )
    sources_tried: list[str] = Field(default_factory=list)
    source_used: str | None = None
    served_from_cache: bool = False

    def advance(self, target: SynthesisPhase) -> None:
        if not can_transition(self.phase, target):
            msg = f"Invalid synthesis transition {self.phase.value} -> {target.value}"
            raise ValueError(msg)
        self.phase = target
        self.phases_visited.append(target)


class CollaborationDetails(BaseModel):
    """What two people worked on together, as described by the LLM."""

    model_config = ConfigDict(frozen=True)

    first: str
    second: str
    songs: list[str] = Field(default_factory=list)
    albums: list[str] = Field(default_factory=list)
    collaboration_type: str = "unknown"
    details: list[str] = Field(default_factory=list)
