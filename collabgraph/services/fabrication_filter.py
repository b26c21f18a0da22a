"""Fabricated-name detection for generative collaborator output.

LLMs asked for "real collaborators" still produce placeholders such as
"Producer A", "Artist 3", "John Doe" or "Unknown Artist".
:func:`is_fabricated` is the single gate every generated name passes
through before it may become a node.  It is pure and deterministic; names
from metadata sources never go through it.
"""

from __future__ import annotations

import re

from collabgraph.utils.text_normalizer import name_key

# Exact (case-insensitive) placeholder names.
PLACEHOLDER_NAMES: frozenset[str] = frozenset(
    {
        "na",
        "tba",
        "none",
        "null",
    }
)

# Words that mark a name as a placeholder wherever they appear in it:
# "Unknown Artist", "Anonymous Producer", "TBD Songwriter".
PLACEHOLDER_WORDS: frozenset[str] = frozenset(
    {
        "unknown",
        "anonymous",
        "various",
        "n/a",
        "tbd",
        "placeholder",
        "example",
        "sample",
    }
)

# Stock names matched as whole-word phrases anywhere in the name.
_STOCK_NAME_RE = re.compile(
    r"\b(?:john doe|jane doe|john smith|jane smith|producer x|songwriter y|artist a|artist b)\b"
)
# "Producer A", "Artist 3", "songwriter 12", "Collaborator B"
_ROLE_PLACEHOLDER_RE = re.compile(
    r"^(?:artist|producer|songwriter|writer|collaborator|musician|person|name)\s+(?:[a-z]|\d+)$"
)
# "Person Name 1" / "Artist Name 2", echoes of prompt templates
_TEMPLATE_ECHO_RE = re.compile(r"^(?:person|artist|producer|songwriter)\s+name(?:\s+\d+)?$")
# Bare one or two letter tokens ("X", "AB").  Digits are allowed through
# because real credits such as "40" exist.
_SHORT_TOKEN_RE = re.compile(r"^[^\W\d_]{1,2}$")
# Punctuation that may wrap a word: "(Unknown)", "Sample,".
_WORD_STRIP = "()[]{}\"',.;:!?"


def _words(key: str) -> set[str]:
    return {word.strip(_WORD_STRIP) for word in key.split(" ")}


def is_fabricated(name: str) -> bool:
    """Return ``True`` if *name* looks like a placeholder or invented entity.

    >>> is_fabricated("Producer A")
    True
    >>> is_fabricated("Unknown Artist")
    True
    >>> is_fabricated("Max Martin")
    False
    """
    key = name_key(name)
    if not key:
        return True
    if key in PLACEHOLDER_NAMES or not _words(key).isdisjoint(PLACEHOLDER_WORDS):
        return True
    if _STOCK_NAME_RE.search(key):
        return True
    if _ROLE_PLACEHOLDER_RE.match(key) or _TEMPLATE_ECHO_RE.match(key):
        return True
    return bool(_SHORT_TOKEN_RE.match(key))
