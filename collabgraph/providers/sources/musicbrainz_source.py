"""MusicBrainz collaborator source.

Reads a subject's artist relations (band membership, production and writing
credits) and the artist credits on their first recordings, and maps each
relation type to a role through ``RELATION_ROLE_MAP``.  A curated override
list forces well-known songwriters to the songwriter role because upstream
relation typing is often wrong for them.

Producer and songwriter results are capped at five each; performer-type
relations are not capped.  When branch expansion is enabled, every kept
producer and songwriter is looked up in turn so their own top three
performer collaborators can be reported as ``top_collaborators``.

musicbrainzngs is synchronous, so every call runs in a worker thread via
``asyncio.to_thread`` and is preceded by the shared throttle (MusicBrainz
allows one request per second per client).
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any

import musicbrainzngs
import structlog

from collabgraph.config.known_collaborators import is_known_songwriter, role_for_relation
from collabgraph.config.settings import Settings
from collabgraph.interfaces.collaborator_source import ICollaboratorSource
from collabgraph.models.graph import Role
from collabgraph.models.subject import CollaboratorRecord
from collabgraph.utils.errors import SourceUnavailableError
from collabgraph.utils.text_normalizer import name_key, same_person

logger = structlog.get_logger(logger_name=__name__)

_ROLE_CAPS: dict[Role, int] = {Role.PRODUCER: 5, Role.SONGWRITER: 5}
_RECORDING_LIMIT = 10
_BRANCH_LIMIT = 3
_SEARCH_LIMIT = 5
_RELATION_INCLUDES = ["artist-rels", "work-rels", "recording-rels"]


@dataclass
class _Credit:
    name: str
    role: Role
    top: list[str] = field(default_factory=list)


class MusicBrainzCollaboratorSource(ICollaboratorSource):
    """Collaborator source backed by the MusicBrainz relation graph.

    Attributes
    ----------
    _min_interval : float
        Minimum seconds between two MusicBrainz calls.
    _last_request_time : float
        Monotonic timestamp of the most recent call, used for throttling.
    """

    def __init__(self, settings: Settings, timeout: float | None = None) -> None:
        self._settings = settings
        self._min_interval = settings.musicbrainz_request_interval
        self._expand_branches = settings.musicbrainz_expand_branches
        self._timeout = timeout or settings.http_timeout_seconds
        self._last_request_time: float = 0.0
        self._lock = asyncio.Lock()

        musicbrainzngs.set_useragent(
            settings.musicbrainz_app_name,
            settings.musicbrainz_app_version,
            settings.musicbrainz_contact or None,
        )

    # ------------------------------------------------------------------
    # Rate-limiting helper
    # ------------------------------------------------------------------

    async def _throttle(self) -> None:
        """Enforce the configured delay between successive calls."""
        async with self._lock:
            elapsed = time.monotonic() - self._last_request_time
            if elapsed < self._min_interval:
                await asyncio.sleep(self._min_interval - elapsed)
            self._last_request_time = time.monotonic()

    async def _call(self, func: Any, *args: Any, **kwargs: Any) -> dict[str, Any]:
        """Throttle, then run one musicbrainzngs call in a worker thread."""
        await self._throttle()
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(func, *args, **kwargs),
                timeout=self._timeout,
            )
        except musicbrainzngs.WebServiceError as exc:
            raise SourceUnavailableError(
                message=f"MusicBrainz request failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except asyncio.TimeoutError as exc:
            raise SourceUnavailableError(
                message=f"MusicBrainz request timed out after {self._timeout:g}s",
                provider_name=self.get_provider_name(),
            ) from exc

    # ------------------------------------------------------------------
    # ICollaboratorSource implementation
    # ------------------------------------------------------------------

    async def get_collaborators(self, canonical_name: str) -> list[CollaboratorRecord]:
        artist_id = await self._find_artist_id(canonical_name)
        if artist_id is None:
            logger.info("musicbrainz_subject_not_found", subject=canonical_name)
            return []

        relations = await self._get_relations(artist_id)
        credits = self._credits_from_relations(relations, exclude={name_key(canonical_name)})

        recordings = await self._call(
            musicbrainzngs.browse_recordings,
            artist=artist_id,
            includes=["artist-credits"],
            limit=_RECORDING_LIMIT,
        )
        credits.extend(
            self._credits_from_recordings(
                recordings.get("recording-list", []),
                exclude={name_key(canonical_name)},
            )
        )

        kept = self._dedupe_and_cap(credits)
        if self._expand_branches:
            await self._expand(kept, canonical_name)

        records = [
            CollaboratorRecord(name=c.name, role=c.role, top_collaborators=tuple(c.top))
            for c in kept
        ]
        logger.info(
            "musicbrainz_collaborators",
            subject=canonical_name,
            artist_id=artist_id,
            record_count=len(records),
        )
        return records

    def get_provider_name(self) -> str:
        return "musicbrainz"

    def is_available(self) -> bool:
        # No API key required; only a user-agent.
        return True

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def _find_artist_id(self, name: str) -> str | None:
        """Prefer an exact (case-insensitive) name hit, else a score-100 top hit."""
        response = await self._call(musicbrainzngs.search_artists, artist=name, limit=_SEARCH_LIMIT)
        artists = response.get("artist-list", [])
        if not artists:
            return None
        for artist in artists:
            if same_person(artist.get("name", ""), name):
                return artist["id"]
        top = artists[0]
        if int(top.get("ext:score", 0)) >= 100:
            return top["id"]
        return None

    async def _get_relations(self, artist_id: str) -> list[dict[str, Any]]:
        response = await self._call(
            musicbrainzngs.get_artist_by_id,
            artist_id,
            includes=_RELATION_INCLUDES,
        )
        return response.get("artist", {}).get("artist-relation-list", [])

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------

    @staticmethod
    def _credits_from_relations(
        relations: list[dict[str, Any]], exclude: set[str]
    ) -> list[_Credit]:
        credits: list[_Credit] = []
        for relation in relations:
            target = relation.get("artist") or {}
            name = target.get("name")
            if not name or name_key(name) in exclude:
                continue
            mapped = role_for_relation(relation.get("type"))
            if mapped is None:
                logger.debug("musicbrainz_relation_unmapped", relation_type=relation.get("type"))
                continue
            role = Role.SONGWRITER if is_known_songwriter(name) else Role(mapped)
            credits.append(_Credit(name=name, role=role))
        return credits

    @staticmethod
    def _credits_from_recordings(
        recordings: list[dict[str, Any]], exclude: set[str]
    ) -> list[_Credit]:
        """Read artist credits; join phrases hint at production or writing."""
        credits: list[_Credit] = []
        for recording in recordings[:_RECORDING_LIMIT]:
            parts = recording.get("artist-credit", [])
            for index, part in enumerate(parts):
                if not isinstance(part, dict):
                    continue
                artist = part.get("artist") or {}
                name = artist.get("name") or part.get("name")
                if not name or name_key(name) in exclude:
                    continue
                # musicbrainzngs yields join phrases as bare strings between credits.
                join_phrase = part.get("joinphrase", "")
                if not join_phrase and index + 1 < len(parts) and isinstance(parts[index + 1], str):
                    join_phrase = parts[index + 1]
                role = _role_from_join_phrase(join_phrase)
                if is_known_songwriter(name):
                    role = Role.SONGWRITER
                credits.append(_Credit(name=name, role=role))
        return credits

    @staticmethod
    def _dedupe_and_cap(credits: list[_Credit]) -> list[_Credit]:
        """Drop repeated (name, role) pairs and cap producers/songwriters."""
        seen: set[tuple[str, Role]] = set()
        counts: dict[Role, int] = {}
        kept: list[_Credit] = []
        for credit in credits:
            key = (name_key(credit.name), credit.role)
            if key in seen:
                continue
            cap = _ROLE_CAPS.get(credit.role)
            if cap is not None and counts.get(credit.role, 0) >= cap:
                continue
            seen.add(key)
            counts[credit.role] = counts.get(credit.role, 0) + 1
            kept.append(credit)
        return kept

    async def _expand(self, credits: list[_Credit], subject: str) -> None:
        """Fill ``top`` for producers and songwriters from their own relations.

        Failures here only cost the branch; the direct credit is kept.
        """
        looked_up: dict[str, list[str]] = {}
        for credit in credits:
            if credit.role is Role.ARTIST:
                continue
            key = name_key(credit.name)
            if key not in looked_up:
                try:
                    looked_up[key] = await self._top_performers(credit.name, subject)
                except SourceUnavailableError as exc:
                    logger.warning(
                        "musicbrainz_branch_lookup_failed",
                        collaborator=credit.name,
                        error=str(exc),
                    )
                    looked_up[key] = []
            credit.top = list(looked_up[key])

    async def _top_performers(self, person: str, subject: str) -> list[str]:
        artist_id = await self._find_artist_id(person)
        if artist_id is None:
            return []
        relations = await self._get_relations(artist_id)
        exclude = {name_key(person), name_key(subject)}
        names: list[str] = []
        for credit in self._credits_from_relations(relations, exclude=exclude):
            if credit.role is Role.ARTIST and credit.name not in names:
                names.append(credit.name)
            if len(names) == _BRANCH_LIMIT:
                break
        return names


def _role_from_join_phrase(join_phrase: str) -> Role:
    phrase = (join_phrase or "").lower()
    if "produc" in phrase:
        return Role.PRODUCER
    if "wrote" in phrase or "written" in phrase:
        return Role.SONGWRITER
    return Role.ARTIST
