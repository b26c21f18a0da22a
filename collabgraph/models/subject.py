"""Subject identity and raw collaborator records.

``CollaboratorRecord`` is the strict decode boundary for every source
adapter: whatever shape a source speaks, it is converted into these frozen
records before anything downstream sees it.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from collabgraph.models.graph import Role


class SubjectIdentity(BaseModel):
    """Canonical identity of a registered subject."""

    model_config = ConfigDict(frozen=True)

    canonical_id: str
    canonical_name: str


class CollaboratorRecord(BaseModel):
    """One collaborator as reported by a single source."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    role: Role = Role.ARTIST
    top_collaborators: tuple[str, ...] = ()

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = " ".join(value.split())
        if not value:
            raise ValueError("name must not be blank")
        return value

    @field_validator("top_collaborators", mode="before")
    @classmethod
    def _clean_top(cls, value: object) -> tuple[str, ...]:
        if not value:
            return ()
        if isinstance(value, str):
            value = [value]
        cleaned = [" ".join(str(v).split()) for v in value if isinstance(v, str)]
        return tuple(v for v in cleaned if v)
