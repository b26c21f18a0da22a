"""Pydantic response schemas for the collabGraph API.

The graph itself is served in its camelCase wire form (``Graph.to_wire``),
which is also what the registry caches, so it has no schema here.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from collabgraph.models.pipeline import CollaborationDetails


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, Any]


class CollaborationDetailsResponse(BaseModel):
    """What two collaborators worked on together."""

    model_config = ConfigDict(populate_by_name=True)

    first: str
    second: str
    songs: list[str] = Field(default_factory=list)
    albums: list[str] = Field(default_factory=list)
    collaboration_type: str = Field(default="unknown", alias="collaborationType")
    details: list[str] = Field(default_factory=list)

    @classmethod
    def from_details(cls, details: CollaborationDetails) -> CollaborationDetailsResponse:
        return cls(
            first=details.first,
            second=details.second,
            songs=list(details.songs),
            albums=list(details.albums),
            collaboration_type=details.collaboration_type,
            details=list(details.details),
        )


class SubjectCandidate(BaseModel):
    """A registered subject offered as a search hit."""

    id: str
    name: str


class SearchResponse(BaseModel):
    query: str
    results: list[SubjectCandidate] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
