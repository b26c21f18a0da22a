"""Collaboration graph models: roles, size tiers, nodes, edges and graphs.

A node's ``id`` is its display name; names are the natural key of the graph
and no surrogate id is introduced.  Nodes are mutable on purpose: the graph
assembler grows a node's role set and collaboration references in place as
the same person recurs across records.

Wire format (API payload and cached JSON) uses camelCase aliases::

    {"id", "name", "type", "types", "size", "color",
     "collaborations", "artistId", "spotifyId", "imageUrl"}
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator


class Role(str, Enum):  # noqa: UP042 — StrEnum requires Python 3.11+
    """Professional roles a person can hold in the graph."""

    ARTIST = "artist"
    PRODUCER = "producer"
    SONGWRITER = "songwriter"

    @classmethod
    def parse(cls, value: object) -> Role | None:
        """Return the matching role for a loose string, or ``None``."""
        if isinstance(value, Role):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class SizeTier(int, Enum):
    """Render size of a node, by its distance from the subject."""

    MAIN = 30
    COLLABORATOR = 20
    BRANCH = 16


# Priority order doubles as the color rule: the highest-priority role
# present decides the color (artist+songwriter -> artist,
# producer+songwriter -> producer).
ROLE_PRIORITY: tuple[Role, ...] = (Role.ARTIST, Role.PRODUCER, Role.SONGWRITER)

ROLE_COLORS: dict[Role, str] = {
    Role.ARTIST: "#FF0ACF",
    Role.PRODUCER: "#AE53FF",
    Role.SONGWRITER: "#67D1F8",
}

FALLBACK_COLOR = "#355367"


def order_roles(roles: list[Role]) -> list[Role]:
    """De-duplicate *roles* keeping encounter order, with artist moved first."""
    ordered: list[Role] = []
    for role in roles:
        if role not in ordered:
            ordered.append(role)
    if Role.ARTIST in ordered:
        ordered.remove(Role.ARTIST)
        ordered.insert(0, Role.ARTIST)
    return ordered


def color_for_roles(roles: list[Role]) -> str:
    for role in ROLE_PRIORITY:
        if role in roles:
            return ROLE_COLORS[role]
    return FALLBACK_COLOR


class Node(BaseModel):
    """One person in the collaboration graph."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    display_name: str = Field(alias="name")
    roles: list[Role] = Field(default_factory=lambda: [Role.ARTIST], alias="types")
    size: SizeTier = SizeTier.COLLABORATOR
    collaboration_refs: list[str] = Field(default_factory=list, alias="collaborations")
    registry_id: str | None = Field(default=None, alias="artistId")
    streaming_id: str | None = Field(default=None, alias="spotifyId")
    streaming_image_url: str | None = Field(default=None, alias="imageUrl")

    @model_validator(mode="after")
    def _normalize_roles(self) -> Node:
        self.roles = order_roles(self.roles) or [Role.ARTIST]
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def type(self) -> Role:
        """Primary role, i.e. the first entry of ``roles``."""
        return self.roles[0]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def color(self) -> str:
        return color_for_roles(self.roles)

    def add_role(self, role: Role) -> bool:
        """Add *role* if absent, keeping artist first.  Returns True if added."""
        if role in self.roles:
            return False
        self.roles = order_roles([*self.roles, role])
        return True

    def add_collaboration_refs(self, names: list[str] | tuple[str, ...]) -> None:
        """Append names not already referenced (case-insensitive)."""
        seen = {ref.casefold() for ref in self.collaboration_refs}
        for name in names:
            if name.casefold() not in seen:
                self.collaboration_refs.append(name)
                seen.add(name.casefold())


class Edge(BaseModel):
    """A link between two nodes; ``source`` discovered ``target``."""

    model_config = ConfigDict(frozen=True)

    source: str
    target: str

    def pair(self) -> frozenset[str]:
        return frozenset((self.source, self.target))


class Graph(BaseModel):
    """A synthesized collaboration graph."""

    nodes: list[Node] = Field(default_factory=list)
    links: list[Edge] = Field(default_factory=list)

    def node_ids(self) -> set[str]:
        return {node.id for node in self.nodes}

    def get_node(self, node_id: str) -> Node | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def dangling_links(self) -> list[Edge]:
        """Return links whose source or target is not a node id."""
        ids = self.node_ids()
        return [link for link in self.links if link.source not in ids or link.target not in ids]

    def to_wire(self) -> dict:
        """Serialize to the camelCase payload shared by the API and the cache."""
        return self.model_dump(mode="json", by_alias=True)
