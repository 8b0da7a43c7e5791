"""Persistent store for directories, visits, query mappings, tags and workspaces."""

from __future__ import annotations

import os
import sqlite3
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import platformdirs

from gotodir.models import (
    Directory,
    ProjectType,
    QueryMapping,
    Tag,
    VisitEvent,
    Workspace,
)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS meta (
    key TEXT PRIMARY KEY,
    value INTEGER NOT NULL
);
CREATE TABLE IF NOT EXISTS directories (
    id INTEGER PRIMARY KEY,
    path TEXT NOT NULL,
    name TEXT NOT NULL,
    depth INTEGER NOT NULL,
    last_seen TEXT NOT NULL,
    project_type TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS visits (
    id INTEGER PRIMARY KEY,
    path_id INTEGER NOT NULL,
    timestamp TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS query_mappings (
    query TEXT PRIMARY KEY,
    path_id INTEGER NOT NULL,
    count INTEGER NOT NULL
);
CREATE TABLE IF NOT EXISTS tags (
    key TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    path_id INTEGER NOT NULL
);
CREATE TABLE IF NOT EXISTS workspaces (
    path TEXT PRIMARY KEY
);
"""

_TABLES = ("directories", "visits", "query_mappings", "tags", "workspaces")


@dataclass(frozen=True)
class PurgeStats:
    """Number of records removed from each collection by a purge."""

    directories: int = 0
    visits: int = 0
    query_mappings: int = 0
    tags: int = 0
    workspaces: int = 0


def default_db_path() -> Path:
    """Database location: ``$GOTO_DB_PATH`` or the user data directory."""
    override = os.environ.get("GOTO_DB_PATH")
    if override:
        return Path(override)
    return Path(platformdirs.user_data_dir("goto", "goto")) / "db"


def open_storage() -> Storage:
    """Open the storage at the default location."""
    return Storage(default_db_path())


def _tag_key(name: str, path_id: int) -> str:
    return f"{name}:{path_id}"


def _row_to_directory(row: tuple) -> Directory:
    dir_id, path, name, depth, last_seen, project_type = row
    return Directory(
        id=dir_id,
        path=Path(path),
        name=name,
        depth=depth,
        last_seen=datetime.fromisoformat(last_seen),
        project_type=ProjectType(project_type),
    )


class Storage:
    """SQLite-backed store; usable as a context manager."""

    def __init__(self, db_path: str | os.PathLike[str]) -> None:
        path = Path(db_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(path)
        with self._conn:
            self._conn.executescript(_SCHEMA)

    def close(self) -> None:
        """Close the underlying database connection."""
        self._conn.close()

    def __enter__(self) -> Storage:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    # Directories

    def add_directory(self, directory: Directory) -> None:
        """Insert or replace a directory record keyed by its id."""
        with self._conn:
            self._conn.execute(
                "INSERT OR REPLACE INTO directories "
                "(id, path, name, depth, last_seen, project_type) VALUES (?, ?, ?, ?, ?, ?)",
                (
                    directory.id,
                    str(directory.path),
                    directory.name,
                    directory.depth,
                    directory.last_seen.isoformat(),
                    directory.project_type.value,
                ),
            )

    def get_directory(self, dir_id: int) -> Directory | None:
        """Return the directory with this id, or None."""
        row = self._conn.execute(
            "SELECT id, path, name, depth, last_seen, project_type FROM directories WHERE id = ?",
            (dir_id,),
        ).fetchone()
        return _row_to_directory(row) if row else None

    def remove_directory(self, dir_id: int) -> None:
        """Delete the directory with this id, if present."""
        with self._conn:
            self._conn.execute("DELETE FROM directories WHERE id = ?", (dir_id,))

    def list_directories(self) -> list[Directory]:
        """All directories, ordered by id."""
        rows = self._conn.execute(
            "SELECT id, path, name, depth, last_seen, project_type FROM directories ORDER BY id"
        )
        return [_row_to_directory(row) for row in rows]

    def next_directory_id(self) -> int:
        """Return a fresh, strictly increasing id."""
        return self._generate_id()

    def _generate_id(self) -> int:
        with self._conn:
            row = self._conn.execute("SELECT value FROM meta WHERE key = 'next_id'").fetchone()
            current = row[0] if row else 0
            self._conn.execute(
                "INSERT OR REPLACE INTO meta (key, value) VALUES ('next_id', ?)",
                (current + 1,),
            )
        return current

    # Workspaces

    def add_workspace(self, path: str | os.PathLike[str]) -> None:
        """Register a workspace root."""
        with self._conn:
            self._conn.execute(
                "INSERT OR REPLACE INTO workspaces (path) VALUES (?)", (str(Path(path)),)
            )

    def remove_workspace(self, path: str | os.PathLike[str]) -> None:
        """Forget a workspace root."""
        with self._conn:
            self._conn.execute("DELETE FROM workspaces WHERE path = ?", (str(Path(path)),))

    def list_workspaces(self) -> list[Workspace]:
        """All workspace roots, ordered by path."""
        rows = self._conn.execute("SELECT path FROM workspaces ORDER BY path")
        return [Workspace(Path(path)) for (path,) in rows]

    # Visits

    def add_visit(self, event: VisitEvent) -> None:
        """Record a visit."""
        visit_id = self._generate_id()
        with self._conn:
            self._conn.execute(
                "INSERT INTO visits (id, path_id, timestamp) VALUES (?, ?, ?)",
                (visit_id, event.path_id, event.timestamp.isoformat()),
            )

    def list_visits(self) -> list[VisitEvent]:
        """All visits in the order they were recorded."""
        rows = self._conn.execute("SELECT path_id, timestamp FROM visits ORDER BY id")
        return [VisitEvent(path_id, datetime.fromisoformat(ts)) for path_id, ts in rows]

    # Query mappings

    def update_query_mapping(self, query: str, path_id: int) -> None:
        """Count that ``query`` led to ``path_id``; a new target resets the count."""
        with self._conn:
            row = self._conn.execute(
                "SELECT path_id, count FROM query_mappings WHERE query = ?", (query,)
            ).fetchone()
            count = row[1] + 1 if row and row[0] == path_id else 1
            self._conn.execute(
                "INSERT OR REPLACE INTO query_mappings (query, path_id, count) VALUES (?, ?, ?)",
                (query, path_id, count),
            )

    def get_query_mappings(self) -> list[QueryMapping]:
        """All query mappings, ordered by query."""
        rows = self._conn.execute(
            "SELECT query, path_id, count FROM query_mappings ORDER BY query"
        )
        return [QueryMapping(q, p, c) for q, p, c in rows]

    # Tags

    def add_tag(self, name: str, path_id: int) -> None:
        """Attach tag ``name`` to a directory."""
        with self._conn:
            self._conn.execute(
                "INSERT OR REPLACE INTO tags (key, name, path_id) VALUES (?, ?, ?)",
                (_tag_key(name, path_id), name, path_id),
            )

    def remove_tag(self, name: str, path_id: int) -> None:
        """Detach tag ``name`` from a directory."""
        with self._conn:
            self._conn.execute("DELETE FROM tags WHERE key = ?", (_tag_key(name, path_id),))

    def list_tags(self) -> list[Tag]:
        """All tags."""
        rows = self._conn.execute("SELECT name, path_id FROM tags ORDER BY key")
        return [Tag(name, path_id) for name, path_id in rows]

    def purge_all(self) -> PurgeStats:
        """Remove every record and report how many there were."""
        with self._conn:
            counts = {
                table: self._conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
                for table in _TABLES
            }
            for table in _TABLES:
                self._conn.execute(f"DELETE FROM {table}")
        return PurgeStats(**counts)