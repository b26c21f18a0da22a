"""SQLite-backed subject registry and graph store.

One table holds both concerns: the registered subjects (identity
resolution only ever accepts names found here) and, per subject, the last
synthesized graph as JSON text in ``webmapdata``.  Names are unique
case-insensitively.  Uses ``aiosqlite`` for async I/O.
"""

from __future__ import annotations

import json
import uuid
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from collabgraph.interfaces.subject_registry import ISubjectRegistry
from collabgraph.models.subject import SubjectIdentity
from collabgraph.utils.errors import PersistenceError
from collabgraph.utils.text_normalizer import clean_display_name

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/collabgraph.db")

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS subjects (
    id          TEXT    PRIMARY KEY,
    name        TEXT    NOT NULL UNIQUE COLLATE NOCASE,
    webmapdata  TEXT,
    created_at  TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
    updated_at  TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""

_INSERT_SQL = "INSERT OR IGNORE INTO subjects (id, name) VALUES (?, ?);"

_SELECT_BY_NAME_SQL = "SELECT id, name FROM subjects WHERE name = ? COLLATE NOCASE;"

_SELECT_BY_ID_SQL = "SELECT id, name FROM subjects WHERE id = ?;"

_UPDATE_GRAPH_SQL = """\
UPDATE subjects
SET webmapdata = ?,
    updated_at = strftime('%Y-%m-%dT%H:%M:%fZ', 'now')
WHERE name = ? COLLATE NOCASE;
"""


class SQLiteSubjectRegistry(ISubjectRegistry):
    """SQLite implementation of :class:`ISubjectRegistry`."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the subjects table if it doesn't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute(_CREATE_TABLE_SQL)
                await db.commit()
        except aiosqlite.Error as exc:
            raise PersistenceError(
                message=f"Could not initialize registry: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        logger.info("registry_db_initialized", path=str(self._db_path))

    async def add_subject(self, name: str) -> SubjectIdentity:
        """Register *name*, or return the existing identity if already present."""
        display = clean_display_name(name)
        if not display:
            msg = "Subject name must not be blank"
            raise ValueError(msg)
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                db.row_factory = aiosqlite.Row
                await db.execute(_INSERT_SQL, (uuid.uuid4().hex, display))
                await db.commit()
                cursor = await db.execute(_SELECT_BY_NAME_SQL, (display,))
                row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise PersistenceError(
                message=f"Could not register subject '{display}': {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        logger.info("subject_registered", name=row["name"], subject_id=row["id"])
        return SubjectIdentity(canonical_id=row["id"], canonical_name=row["name"])

    # ------------------------------------------------------------------
    # ISubjectRegistry implementation
    # ------------------------------------------------------------------

    async def find_by_name(self, name: str) -> SubjectIdentity | None:
        rows = await self._fetch(_SELECT_BY_NAME_SQL, (clean_display_name(name),))
        if not rows:
            return None
        return SubjectIdentity(canonical_id=rows[0]["id"], canonical_name=rows[0]["name"])

    async def find_by_id(self, subject_id: str) -> SubjectIdentity | None:
        rows = await self._fetch(_SELECT_BY_ID_SQL, (subject_id.strip(),))
        if not rows:
            return None
        return SubjectIdentity(canonical_id=rows[0]["id"], canonical_name=rows[0]["name"])

    async def search(self, query: str, limit: int = 10) -> list[SubjectIdentity]:
        """Return subjects sharing any token with *query* (substring match)."""
        tokens = [t for t in clean_display_name(query).split(" ") if t]
        if not tokens:
            return []
        clause = " OR ".join("name LIKE ? COLLATE NOCASE" for _ in tokens)
        params: list[Any] = [f"%{t}%" for t in tokens]
        params.append(limit)
        rows = await self._fetch(
            f"SELECT id, name FROM subjects WHERE {clause} ORDER BY name LIMIT ?;",  # noqa: S608
            tuple(params),
        )
        return [SubjectIdentity(canonical_id=r["id"], canonical_name=r["name"]) for r in rows]

    async def exists_by_name(self, name: str) -> bool:
        return await self.find_by_name(name) is not None

    async def get_graph(self, name: str) -> dict[str, Any] | None:
        rows = await self._fetch(
            "SELECT webmapdata FROM subjects WHERE name = ? COLLATE NOCASE;",
            (clean_display_name(name),),
        )
        if not rows or rows[0]["webmapdata"] is None:
            return None
        try:
            return json.loads(rows[0]["webmapdata"])
        except json.JSONDecodeError as exc:
            raise PersistenceError(
                message=f"Stored graph for '{name}' is not valid JSON",
                provider_name=self.get_provider_name(),
            ) from exc

    async def update_graph(self, name: str, graph: dict[str, Any]) -> bool:
        payload = json.dumps(graph, ensure_ascii=False)
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                cursor = await db.execute(_UPDATE_GRAPH_SQL, (payload, clean_display_name(name)))
                await db.commit()
                updated = cursor.rowcount > 0
        except aiosqlite.Error as exc:
            raise PersistenceError(
                message=f"Could not store graph for '{name}': {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return updated

    def get_provider_name(self) -> str:
        return "sqlite"

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _fetch(self, sql: str, params: tuple) -> list[aiosqlite.Row]:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute(sql, params)
                return list(await cursor.fetchall())
        except aiosqlite.Error as exc:
            raise PersistenceError(
                message=f"Registry query failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
