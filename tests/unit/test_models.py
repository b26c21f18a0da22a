"""Unit tests for graph, subject and pipeline models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from collabgraph.models.graph import (
    FALLBACK_COLOR,
    ROLE_COLORS,
    Edge,
    Graph,
    Node,
    Role,
    SizeTier,
    color_for_roles,
    order_roles,
)
from collabgraph.models.pipeline import SynthesisPhase, SynthesisTrace, can_transition
from collabgraph.models.subject import CollaboratorRecord

# ======================================================================
# Roles and colors
# ======================================================================


class TestRoles:
    def test_parse_is_lenient_about_case_and_space(self) -> None:
        assert Role.parse(" Producer ") is Role.PRODUCER
        assert Role.parse("SONGWRITER") is Role.SONGWRITER

    def test_parse_rejects_unknown(self) -> None:
        assert Role.parse("drummer") is None
        assert Role.parse(None) is None
        assert Role.parse(3) is None

    def test_order_roles_moves_artist_first_and_dedupes(self) -> None:
        ordered = order_roles([Role.SONGWRITER, Role.PRODUCER, Role.ARTIST, Role.SONGWRITER])
        assert ordered == [Role.ARTIST, Role.SONGWRITER, Role.PRODUCER]

    @pytest.mark.parametrize(
        ("roles", "expected"),
        [
            ([Role.ARTIST], "#FF0ACF"),
            ([Role.PRODUCER], "#AE53FF"),
            ([Role.SONGWRITER], "#67D1F8"),
            ([Role.ARTIST, Role.SONGWRITER], "#FF0ACF"),
            ([Role.PRODUCER, Role.SONGWRITER], "#AE53FF"),
            ([Role.SONGWRITER, Role.PRODUCER], "#AE53FF"),
            ([], FALLBACK_COLOR),
        ],
    )
    def test_color_rule(self, roles: list[Role], expected: str) -> None:
        assert color_for_roles(roles) == expected


# ======================================================================
# Node
# ======================================================================


class TestNode:
    def test_defaults(self) -> None:
        node = Node(id="Lee Writer", name="Lee Writer")
        assert node.roles == [Role.ARTIST]
        assert node.size == SizeTier.COLLABORATOR
        assert node.type is Role.ARTIST
        assert node.color == ROLE_COLORS[Role.ARTIST]

    def test_empty_roles_fall_back_to_artist(self) -> None:
        node = Node(id="X Y", name="X Y", roles=[])
        assert node.roles == [Role.ARTIST]

    def test_add_role_keeps_artist_first(self) -> None:
        node = Node(id="Max Producer", name="Max Producer", roles=[Role.PRODUCER])
        assert node.add_role(Role.ARTIST) is True
        assert node.roles == [Role.ARTIST, Role.PRODUCER]
        assert node.add_role(Role.PRODUCER) is False
        assert node.type is Role.ARTIST

    def test_add_collaboration_refs_is_case_insensitive(self) -> None:
        node = Node(id="A B", name="A B", collaborations=["Sam Singer"])
        node.add_collaboration_refs(["sam singer", "Kim Keys"])
        assert node.collaboration_refs == ["Sam Singer", "Kim Keys"]

    def test_wire_aliases(self) -> None:
        node = Node(
            id="Max Producer",
            name="Max Producer",
            roles=[Role.PRODUCER, Role.SONGWRITER],
            registry_id="r1",
            streaming_id="s1",
            streaming_image_url="https://img/1",
        )
        wire = node.model_dump(mode="json", by_alias=True)
        assert wire["name"] == "Max Producer"
        assert wire["type"] == "producer"
        assert wire["types"] == ["producer", "songwriter"]
        assert wire["size"] == 20
        assert wire["color"] == "#AE53FF"
        assert wire["artistId"] == "r1"
        assert wire["spotifyId"] == "s1"
        assert wire["imageUrl"] == "https://img/1"
        assert wire["collaborations"] == []


# ======================================================================
# Graph
# ======================================================================


class TestGraph:
    def test_dangling_links(self) -> None:
        graph = Graph(
            nodes=[Node(id="A", name="A")],
            links=[Edge(source="A", target="B")],
        )
        assert graph.dangling_links() == [Edge(source="A", target="B")]

    def test_wire_round_trip_preserves_computed_fields_and_ids(self) -> None:
        graph = Graph(
            nodes=[
                Node(id="Ava Example", name="Ava Example", size=SizeTier.MAIN),
                Node(id="Lee Writer", name="Lee Writer", roles=[Role.SONGWRITER]),
            ],
            links=[Edge(source="Ava Example", target="Lee Writer")],
        )
        wire = graph.to_wire()
        restored = Graph.model_validate(wire)
        assert restored.node_ids() == {"Ava Example", "Lee Writer"}
        assert restored.get_node("Lee Writer").color == "#67D1F8"
        assert restored.get_node("Ava Example").size == SizeTier.MAIN
        assert wire["links"] == [{"source": "Ava Example", "target": "Lee Writer"}]

    def test_edge_pair_is_unordered(self) -> None:
        assert Edge(source="A", target="B").pair() == Edge(source="B", target="A").pair()


# ======================================================================
# CollaboratorRecord
# ======================================================================


class TestCollaboratorRecord:
    def test_name_whitespace_collapsed(self) -> None:
        record = CollaboratorRecord(name="  Max   Producer ", role=Role.PRODUCER)
        assert record.name == "Max Producer"

    def test_blank_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CollaboratorRecord(name="   ")

    def test_top_collaborators_cleaned(self) -> None:
        record = CollaboratorRecord(name="A B", top_collaborators=["  Sam  Singer", "", 5])
        assert record.top_collaborators == ("Sam Singer",)

    def test_frozen(self) -> None:
        record = CollaboratorRecord(name="A B")
        with pytest.raises(ValidationError):
            record.name = "C D"  # type: ignore[misc]


# ======================================================================
# Synthesis phases
# ======================================================================


class TestSynthesisTrace:
    def test_happy_path(self) -> None:
        trace = SynthesisTrace(subject_query="Ava Example")
        for phase in (
            SynthesisPhase.SOURCE_FALLBACK,
            SynthesisPhase.ASSEMBLING,
            SynthesisPhase.ENRICHING,
            SynthesisPhase.CACHING,
            SynthesisPhase.DONE,
        ):
            trace.advance(phase)
        assert trace.phase is SynthesisPhase.DONE
        assert trace.phases_visited[0] is SynthesisPhase.RESOLVING
        assert len(trace.phases_visited) == 6

    def test_not_found_only_from_resolving(self) -> None:
        assert can_transition(SynthesisPhase.RESOLVING, SynthesisPhase.NOT_FOUND)
        assert not can_transition(SynthesisPhase.SOURCE_FALLBACK, SynthesisPhase.NOT_FOUND)

    def test_error_only_from_assembling(self) -> None:
        assert can_transition(SynthesisPhase.ASSEMBLING, SynthesisPhase.ERROR)
        assert not can_transition(SynthesisPhase.ENRICHING, SynthesisPhase.ERROR)

    def test_invalid_transition_raises(self) -> None:
        trace = SynthesisTrace(subject_query="x")
        with pytest.raises(ValueError, match="Invalid synthesis transition"):
            trace.advance(SynthesisPhase.ENRICHING)

    def test_terminal_states_have_no_exits(self) -> None:
        for terminal in (SynthesisPhase.DONE, SynthesisPhase.NOT_FOUND, SynthesisPhase.ERROR):
            assert not any(can_transition(terminal, target) for target in SynthesisPhase)
