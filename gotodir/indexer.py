"""Indexing of workspace trees into storage."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from gotodir.config import IgnoreConfig, load_ignore_config
from gotodir.models import Directory, ProjectType
from gotodir.project_detect import detect_project_type
from gotodir.storage import Storage


@dataclass
class IndexStats:
    """Totals for one indexing run."""

    workspaces: int = 0
    scanned: int = 0
    added: int = 0
    updated: int = 0
    removed: int = 0


@dataclass(frozen=True)
class WorkspaceStarted:
    """Indexing of a workspace has begun."""

    index: int
    total: int
    path: Path


@dataclass(frozen=True)
class WorkspaceProgress:
    """A directory in the workspace has been indexed."""

    index: int
    total: int
    path: Path
    scanned: int
    added: int
    updated: int


@dataclass(frozen=True)
class WorkspaceCompleted:
    """Indexing of a workspace has finished."""

    index: int
    total: int
    path: Path
    scanned: int
    added: int
    updated: int


WorkspaceEvent = WorkspaceStarted | WorkspaceProgress | WorkspaceCompleted


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_directory(storage: Storage, path: Path, project_type: ProjectType) -> Directory:
    directory = Directory(
        id=storage.next_directory_id(),
        path=path,
        name=path.name or "/",
        depth=len(path.parts),
        last_seen=_now(),
        project_type=project_type,
    )
    storage.add_directory(directory)
    return directory


def _walk_directories(root: Path, config: IgnoreConfig) -> Iterator[Path]:
    """Yield ``root`` and its non-ignored subdirectories depth-first, pre-order."""
    if not root.is_dir():
        return
    stack = [root]
    while stack:
        current = stack.pop()
        yield current
        try:
            with os.scandir(current) as it:
                entries = list(it)
        except OSError:
            continue
        children: list[Path] = []
        for entry in entries:
            try:
                if not entry.is_dir(follow_symlinks=False):
                    continue
            except OSError:
                continue
            name = entry.name
            child = current / name
            if (
                name.startswith(".")
                or config.matches_name(name)
                or config.matches_path_prefix(child)
            ):
                continue
            children.append(child)
        stack.extend(reversed(children))


def index_workspaces_with_progress(
    storage: Storage,
    on_event: Callable[[WorkspaceEvent], None] | None = None,
    ignore_config: IgnoreConfig | None = None,
) -> IndexStats:
    """Index every workspace, reporting events, and drop vanished directories."""
    config = ignore_config if ignore_config is not None else load_ignore_config()

    def emit(event: WorkspaceEvent) -> None:
        if on_event is not None:
            on_event(event)

    workspaces = storage.list_workspaces()
    total = len(workspaces)
    existing = {d.path: d for d in storage.list_directories()}
    scanned_paths: set[Path] = set()
    stats = IndexStats(workspaces=total)

    for index, ws in enumerate(workspaces, start=1):
        emit(WorkspaceStarted(index, total, ws.path))
        scanned = added = updated = 0

        for path in _walk_directories(ws.path, config):
            scanned_paths.add(path)
            stats.scanned += 1
            scanned += 1
            project_type = detect_project_type(path)

            known = existing.get(path)
            if known is not None:
                known.last_seen = _now()
                known.project_type = project_type
                storage.add_directory(known)
                stats.updated += 1
                updated += 1
            else:
                existing[path] = _new_directory(storage, path, project_type)
                stats.added += 1
                added += 1

            emit(WorkspaceProgress(index, total, ws.path, scanned, added, updated))

        emit(WorkspaceCompleted(index, total, ws.path, scanned, added, updated))

    stale = [
        d.id
        for d in existing.values()
        if any(d.path.is_relative_to(ws.path) for ws in workspaces)
        and d.path not in scanned_paths
    ]
    for dir_id in stale:
        storage.remove_directory(dir_id)
    stats.removed = len(stale)
    return stats


def remove_indexed_subdirs_with_progress(
    storage: Storage,
    root: str | os.PathLike[str],
    on_progress: Callable[[int, int], None] | None = None,
) -> int:
    """Remove ``root`` and everything indexed below it; return how many went."""
    root_path = Path(root)
    doomed = [d.id for d in storage.list_directories() if d.path.is_relative_to(root_path)]
    total = len(doomed)
    for done, dir_id in enumerate(doomed, start=1):
        storage.remove_directory(dir_id)
        if on_progress is not None:
            on_progress(done, total)
    return total


def upsert_directory(storage: Storage, path: str | os.PathLike[str]) -> None:
    """Add or refresh a single directory without scanning its children."""
    raw = Path(path)
    try:
        canonical = raw.resolve(strict=True)
    except OSError:
        canonical = raw
    project_type = detect_project_type(canonical)

    known = next((d for d in storage.list_directories() if d.path == canonical), None)
    if known is not None:
        known.last_seen = _now()
        known.project_type = project_type
        storage.add_directory(known)
    else:
        _new_directory(storage, canonical, project_type)