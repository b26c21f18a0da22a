"""Wikipedia collaborator source.

Finds the subject's article with a title search, fetches the plain-text
intro extract, and runs a fixed set of phrase patterns over it
("produced by X", "co-written with X", "collaborated with X",
"featuring X" ...).  Each match is typed by the verb context of the pattern
that found it, then filtered: the subject, names outside 3-30 characters,
names with digits, lowercase starts and generic stop-words are dropped.
At most six candidates are returned.
"""

from __future__ import annotations

import re

import httpx
import structlog

from collabgraph.config.settings import Settings
from collabgraph.interfaces.collaborator_source import ICollaboratorSource
from collabgraph.models.graph import Role
from collabgraph.models.subject import CollaboratorRecord
from collabgraph.utils.errors import MalformedResponseError, SourceUnavailableError
from collabgraph.utils.text_normalizer import name_key

logger = structlog.get_logger(logger_name=__name__)

_USER_AGENT = "collabGraph/0.1 (collaboration graph synthesis)"
_MAX_CANDIDATES = 6
_MIN_NAME_LEN = 3
_MAX_NAME_LEN = 30

# A run of capitalized words: "Max Martin", "Jack Antonoff", "Dr Luke".
_NAME = r"([A-Z][a-zA-Z'\-]*(?:\s+[A-Z][a-zA-Z'\-]*)*)"

_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(lead + r"\s+" + _NAME)
    for lead in (
        r"(?i:produced by)",
        r"(?i:working with producers?)",
        r"(?i:producers?)",
        r"(?i:co-written (?:with|by))",
        r"(?i:written (?:with|by))",
        r"(?i:songwriters?)",
        r"(?i:collaborated with)",
        r"(?i:featuring)",
        r"(?i:duet with)",
    )
)

_PRODUCER_CONTEXT = re.compile(r"produc|mix|engineer", re.IGNORECASE)
_SONGWRITER_CONTEXT = re.compile(r"writ|compos|lyric", re.IGNORECASE)

STOP_WORDS: frozenset[str] = frozenset(
    {
        "the", "and", "with", "by", "for", "in", "on", "at", "to", "from",
        "album", "song", "track", "single", "ep", "record", "label", "studio",
        "music", "band", "group", "artist", "singer", "musician",
    }
)


def classify_context(context: str) -> Role:
    """Type a match by the wording around it."""
    if _PRODUCER_CONTEXT.search(context):
        return Role.PRODUCER
    if _SONGWRITER_CONTEXT.search(context):
        return Role.SONGWRITER
    return Role.ARTIST


def _is_plausible(name: str, subject_key: str) -> bool:
    if name_key(name) == subject_key:
        return False
    if not (_MIN_NAME_LEN <= len(name) <= _MAX_NAME_LEN):
        return False
    if any(ch.isdigit() for ch in name) or "(" in name:
        return False
    if not name[0].isupper():
        return False
    return name.lower() not in STOP_WORDS


def extract_collaborators(subject: str, text: str) -> list[CollaboratorRecord]:
    """Apply the phrase patterns to *text* and return up to six candidates."""
    subject_key = name_key(subject)
    seen: set[str] = set()
    records: list[CollaboratorRecord] = []
    for pattern in _PATTERNS:
        for match in pattern.finditer(text):
            name = match.group(1).strip()
            if not _is_plausible(name, subject_key):
                continue
            if name_key(name) in seen:
                continue
            seen.add(name_key(name))
            records.append(CollaboratorRecord(name=name, role=classify_context(match.group(0))))
    return records[:_MAX_CANDIDATES]


class WikipediaCollaboratorSource(ICollaboratorSource):
    """Collaborator source that mines the subject's Wikipedia intro."""

    def __init__(self, http_client: httpx.AsyncClient, settings: Settings) -> None:
        self._http = http_client
        self._api_url = settings.wikipedia_api_url
        self._timeout = settings.http_timeout_seconds

    async def get_collaborators(self, canonical_name: str) -> list[CollaboratorRecord]:
        title = await self._search_title(canonical_name)
        if title is None:
            logger.info("wikipedia_page_not_found", subject=canonical_name)
            return []

        extract = await self._get_extract(title)
        if not extract:
            return []

        records = extract_collaborators(canonical_name, extract)
        logger.info(
            "wikipedia_collaborators",
            subject=canonical_name,
            title=title,
            record_count=len(records),
        )
        return records

    def get_provider_name(self) -> str:
        return "wikipedia"

    def is_available(self) -> bool:
        return bool(self._api_url)

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    async def _query(self, params: dict[str, str]) -> dict:
        try:
            response = await self._http.get(
                self._api_url,
                params={"format": "json", **params},
                headers={"User-Agent": _USER_AGENT},
                timeout=self._timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise SourceUnavailableError(
                message=f"Wikipedia request failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponseError(
                message="Wikipedia returned non-JSON body",
                provider_name=self.get_provider_name(),
            ) from exc

    async def _search_title(self, name: str) -> str | None:
        data = await self._query(
            {
                "action": "query",
                "list": "search",
                "srsearch": f"{name} musician singer",
                "srlimit": "1",
            }
        )
        hits = data.get("query", {}).get("search", [])
        if not hits:
            return None
        return hits[0].get("title")

    async def _get_extract(self, title: str) -> str | None:
        data = await self._query(
            {
                "action": "query",
                "prop": "extracts",
                "exintro": "1",
                "explaintext": "1",
                "titles": title,
            }
        )
        pages = data.get("query", {}).get("pages", {})
        for page in pages.values():
            extract = page.get("extract")
            if extract:
                return extract
        return None
