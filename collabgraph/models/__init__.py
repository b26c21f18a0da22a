"""collabGraph domain models.

    - graph.py     -- Role, SizeTier, Node, Edge, Graph
    - subject.py   -- SubjectIdentity, CollaboratorRecord
    - pipeline.py  -- SynthesisPhase, SynthesisTrace, CollaborationDetails
"""

from __future__ import annotations

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
from collabgraph.models.pipeline import (
    CollaborationDetails,
    SynthesisPhase,
    SynthesisTrace,
)
from collabgraph.models.subject import CollaboratorRecord, SubjectIdentity

__all__ = [
    "FALLBACK_COLOR",
    "ROLE_COLORS",
    "CollaborationDetails",
    "CollaboratorRecord",
    "Edge",
    "Graph",
    "Node",
    "Role",
    "SizeTier",
    "SubjectIdentity",
    "SynthesisPhase",
    "SynthesisTrace",
    "color_for_roles",
    "order_roles",
]
