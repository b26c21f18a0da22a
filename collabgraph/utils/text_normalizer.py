"""Name normalization and fuzzy matching for collaborator identities.

Names are the natural key of the collaboration graph, so every component
that compares names goes through :func:`name_key` to get the same
case-insensitive, whitespace-collapsed form.
"""

from __future__ import annotations

import re
import unicodedata

from rapidfuzz import fuzz, process

_WHITESPACE_RE = re.compile(r"\s+")


def clean_display_name(name: str) -> str:
    """Trim and collapse internal whitespace, preserving case."""
    return _WHITESPACE_RE.sub(" ", name or "").strip()


def name_key(name: str) -> str:
    """Return the dedup key for a person name.

    NFKC-normalizes, collapses whitespace and case-folds, so
    ``"  max  PRODUCER"`` and ``"Max Producer"`` share one key.
    """
    normalized = unicodedata.normalize("NFKC", name or "")
    return clean_display_name(normalized).casefold()


def same_person(first: str, second: str) -> bool:
    return name_key(first) == name_key(second)


def fuzzy_match(
    query: str,
    candidates: list[str],
    threshold: float = 0.9,
) -> tuple[str, float] | None:
    """Find the best fuzzy match for a query among candidates.

    Uses rapidfuzz ``token_sort_ratio`` which sorts tokens alphabetically
    before comparing, so "Swift Taylor" matches "Taylor Swift".

    Args:
        query: The string to match.
        candidates: List of candidate strings to match against.
        threshold: Minimum similarity score (0.0--1.0) to accept a match.

    Returns:
        A (best_match, score) tuple if a match meets the threshold, else None.
    """
    if not candidates:
        return None

    result = process.extractOne(
        name_key(query),
        candidates,
        scorer=fuzz.token_sort_ratio,
        processor=name_key,
        score_cutoff=threshold * 100,  # rapidfuzz uses 0-100 scale internally
    )

    if result is None:
        return None

    match_str, score, _ = result
    return (match_str, score / 100.0)
