"""Curated collaboration data used by the synthesis pipeline.

# ─── PURPOSE ──────────────────────────────────────────────────────────
#
# Hand-maintained lookup tables that the source adapters consult.  They
# are kept here, away from adapter logic, so each table can be reviewed,
# versioned and unit-tested on its own:
#
#   RELATION_ROLE_MAP       MusicBrainz relation type -> graph role
#   KNOWN_SONGWRITERS       people MusicBrainz routinely mis-types; any
#                           credit for them is reported as songwriter
#   STATIC_COLLABORATORS    last-resort collaborator table keyed by subject
#
# Everything is pure data plus O(1) lookup helpers.  Keys are compared
# through text_normalizer.name_key, so case and spacing do not matter.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from collabgraph.utils.text_normalizer import name_key

# ═════════════════════════════════════════════════════════════════════════
# 1. RELATION TYPE -> ROLE
# ═════════════════════════════════════════════════════════════════════════
# Relation types not listed here are ignored by the metadata adapter.

RELATION_ROLE_MAP: dict[str, str] = {
    # performer-type relations
    "member": "artist",
    "member of band": "artist",
    "collaboration": "artist",
    "supporting musician": "artist",
    "vocalist": "artist",
    "vocal": "artist",
    "performance": "artist",
    "performer": "artist",
    "featured artist": "artist",
    "guest": "artist",
    "remixer": "artist",
    # production relations
    "producer": "producer",
    "co-producer": "producer",
    "executive producer": "producer",
    "engineer": "producer",
    "recording engineer": "producer",
    "mix engineer": "producer",
    "mastering engineer": "producer",
    "mix": "producer",
    "mixing": "producer",
    "mastering": "producer",
    # writing relations
    "composer": "songwriter",
    "lyricist": "songwriter",
    "writer": "songwriter",
    "arranger": "songwriter",
    "songwriter": "songwriter",
    "co-writer": "songwriter",
    "additional songwriter": "songwriter",
    "librettist": "songwriter",
}


def role_for_relation(relation_type: str | None) -> str | None:
    """Map a MusicBrainz relation type to a role, or ``None`` if unmapped."""
    if not relation_type:
        return None
    return RELATION_ROLE_MAP.get(relation_type.strip().lower())


# ═════════════════════════════════════════════════════════════════════════
# 2. SONGWRITER OVERRIDES
# ═════════════════════════════════════════════════════════════════════════
# Upstream relation typing lists these writers as "vocal", "producer" or
# plain "collaboration" far too often.  A hit here forces "songwriter".

KNOWN_SONGWRITERS: frozenset[str] = frozenset(
    name_key(n)
    for n in (
        "Amy Wadge",
        "Bonnie McKee",
        "Diane Warren",
        "Emily Warren",
        "Ester Dean",
        "Johnny McDaid",
        "Julia Michaels",
        "Justin Tranter",
        "Linda Perry",
        "Ryan Tedder",
        "Savan Kotecha",
        "Sia",
        "Tayla Parx",
        "Teddy Geiger",
    )
)


def is_known_songwriter(name: str) -> bool:
    return name_key(name) in KNOWN_SONGWRITERS


# ═════════════════════════════════════════════════════════════════════════
# 3. STATIC FALLBACK TABLE
# ═════════════════════════════════════════════════════════════════════════
# subject -> list of (name, role, top collaborators).  Consulted only when
# every live source came back empty.

STATIC_COLLABORATORS: dict[str, list[tuple[str, str, tuple[str, ...]]]] = {
    "Taylor Swift": [
        ("Jack Antonoff", "producer", ("Lorde", "Lana Del Rey")),
        ("Aaron Dessner", "producer", ("Bon Iver",)),
        ("Max Martin", "producer", ("Ariana Grande", "The Weeknd")),
        ("Shellback", "producer", ()),
        ("Ryan Tedder", "songwriter", ()),
    ],
    "Ed Sheeran": [
        ("Johnny McDaid", "songwriter", ()),
        ("Benny Blanco", "producer", ("Justin Bieber", "Selena Gomez")),
        ("Steve Mac", "producer", ()),
        ("Fred Gibson", "producer", ()),
    ],
    "Katy Perry": [
        ("Dr. Luke", "producer", ()),
        ("Max Martin", "producer", ("Ariana Grande", "The Weeknd")),
        ("Greg Kurstin", "producer", ()),
        ("Bonnie McKee", "songwriter", ()),
    ],
    "Drake": [
        ("40", "producer", ("The Weeknd",)),
        ("Boi-1da", "producer", ()),
        ("Hit-Boy", "producer", ()),
        ("PartyNextDoor", "songwriter", ("Rihanna",)),
    ],
    "Billie Eilish": [
        ("FINNEAS", "producer", ("Ashe", "Selena Gomez")),
        ("Rob Kinelski", "producer", ()),
    ],
}

_STATIC_INDEX: dict[str, str] = {name_key(k): k for k in STATIC_COLLABORATORS}


def static_collaborators_for(subject: str) -> list[tuple[str, str, tuple[str, ...]]]:
    """Return the curated entries for *subject*, or an empty list."""
    key = _STATIC_INDEX.get(name_key(subject))
    if key is None:
        return []
    return list(STATIC_COLLABORATORS[key])
