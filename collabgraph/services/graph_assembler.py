"""Graph assembler for collaborator records.

Turns the records of whichever source answered into the subject's
collaboration graph.  Names are the dedup key (case-insensitive); a name
that recurs with a different role or new top collaborators updates its
existing node rather than creating another.

Architecture:
    - Called by the orchestrator once per synthesis run, after the role
      classifier has filled the run's RoleMemo.
    - Pure and single-threaded: no I/O, no shared state between calls.

Growth is bounded by one level of branching: each collaborator may add up
to ``branch_limit`` branch nodes from its own top collaborators, and
branch nodes never branch further.
"""

from __future__ import annotations

import structlog

from collabgraph.models.graph import Edge, Graph, Node, Role, SizeTier, order_roles
from collabgraph.models.subject import CollaboratorRecord, SubjectIdentity
from collabgraph.services.role_classifier import RoleMemo
from collabgraph.utils.errors import GraphInvariantError
from collabgraph.utils.text_normalizer import name_key, same_person

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_BRANCH_LIMIT = 3


class _GraphBuilder:
    """Ordered node map plus an undirected edge set for one assembly."""

    def __init__(self) -> None:
        self.nodes: dict[str, Node] = {}
        self.links: list[Edge] = []
        self._pairs: set[frozenset[str]] = set()

    def add_node(self, node: Node) -> Node:
        self.nodes[name_key(node.id)] = node
        return node

    def find(self, name: str) -> Node | None:
        return self.nodes.get(name_key(name))

    def add_edge(self, source: str, target: str) -> bool:
        """Add source->target unless either direction already exists."""
        edge = Edge(source=source, target=target)
        if source == target or edge.pair() in self._pairs:
            return False
        self._pairs.add(edge.pair())
        self.links.append(edge)
        return True

    def build(self) -> Graph:
        return Graph(nodes=list(self.nodes.values()), links=list(self.links))


class GraphAssembler:
    """Builds a :class:`Graph` from a subject and its collaborator records."""

    def __init__(self, branch_limit: int = _DEFAULT_BRANCH_LIMIT) -> None:
        self._branch_limit = branch_limit

    def assemble(
        self,
        subject: SubjectIdentity,
        records: list[CollaboratorRecord],
        memo: RoleMemo,
    ) -> Graph:
        """Assemble the graph.

        Steps:
            1. Main node at size 30 with the subject's memo roles.
            2. One node per distinct collaborator name, roles accumulated.
            3. One main-collaborator edge per distinct name.
            4. Up to ``branch_limit`` branch nodes per collaborator.
            5. Validate that every link endpoint is a node.

        Raises
        ------
        GraphInvariantError
            If the assembled graph references a node that does not exist.
        """
        builder = _GraphBuilder()
        subject_name = subject.canonical_name
        main = builder.add_node(
            Node(
                id=subject_name,
                name=subject_name,
                roles=memo.get(subject_name) or [Role.ARTIST],
                size=SizeTier.MAIN,
            )
        )

        collaborators: list[Node] = []
        for record in records:
            existing = builder.find(record.name)
            if existing is main:
                main.add_role(record.role)
                continue
            if existing is not None:
                existing.add_role(record.role)
                existing.add_collaboration_refs(record.top_collaborators)
                continue

            roles = memo.get(record.name) or [record.role]
            if record.role not in roles:
                roles.append(record.role)
            node = builder.add_node(
                Node(
                    id=record.name,
                    name=record.name,
                    roles=order_roles(roles),
                    size=SizeTier.COLLABORATOR,
                    collaborations=list(record.top_collaborators),
                )
            )
            collaborators.append(node)
            builder.add_edge(main.id, node.id)

        branch_count = 0
        for collaborator in collaborators:
            branch_count += self._expand_branches(builder, collaborator, subject_name, memo)

        graph = builder.build()
        self._validate(graph, subject_name)
        logger.info(
            "graph_assembled",
            subject=subject_name,
            records=len(records),
            collaborators=len(collaborators),
            branches=branch_count,
            links=len(graph.links),
        )
        return graph

    def _expand_branches(
        self,
        builder: _GraphBuilder,
        collaborator: Node,
        subject_name: str,
        memo: RoleMemo,
    ) -> int:
        added = 0
        for ref in collaborator.collaboration_refs:
            if added >= self._branch_limit:
                break
            if same_person(ref, subject_name) or builder.find(ref) is not None:
                continue
            branch = builder.add_node(
                Node(
                    id=ref,
                    name=ref,
                    roles=memo.get(ref) or [Role.ARTIST],
                    size=SizeTier.BRANCH,
                )
            )
            builder.add_edge(collaborator.id, branch.id)
            added += 1
        return added

    @staticmethod
    def _validate(graph: Graph, subject_name: str) -> None:
        main = graph.get_node(subject_name)
        if main is None or main.size != SizeTier.MAIN or graph.nodes[0] is not main:
            raise GraphInvariantError(message=f"Main node for '{subject_name}' is not first")
        dangling = graph.dangling_links()
        if dangling:
            raise GraphInvariantError(
                message=f"{len(dangling)} link(s) reference missing nodes: "
                + ", ".join(f"{e.source}->{e.target}" for e in dangling[:5])
            )
        ids = [node.id for node in graph.nodes]
        if len(ids) != len({name_key(i) for i in ids}):
            raise GraphInvariantError(message="Duplicate node ids in assembled graph")
        if any(not node.roles for node in graph.nodes):
            raise GraphInvariantError(message="Node with empty role set")
