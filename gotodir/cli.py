"""Command-line entry point: navigation queries and management subcommands."""

from __future__ import annotations

import argparse
import os
import sqlite3
import sys
from collections.abc import Sequence
from contextlib import suppress
from datetime import datetime, timezone
from pathlib import Path

from gotodir.indexer import (
    IndexStats,
    WorkspaceCompleted,
    WorkspaceProgress,
    WorkspaceStarted,
    index_workspaces_with_progress,
    remove_indexed_subdirs_with_progress,
    upsert_directory,
)
from gotodir.models import VisitEvent
from gotodir.search import search
from gotodir.storage import Storage, open_storage
from gotodir.ui.terminal import run_ui
from gotodir.workspace import (
    WorkspaceError,
    add_workspace,
    list_workspaces,
    remove_workspace,
)

_COMMANDS = frozenset({"workspace", "index", "tag", "doctor", "purge", "register"})
_PROGRESS_STEP = 500


class CommandError(RuntimeError):
    """A command could not be carried out."""


def build_parser() -> argparse.ArgumentParser:
    """Parser for the options and subcommands of the ``goto`` command."""
    parser = argparse.ArgumentParser(
        prog="goto",
        description="Intelligent Directory Navigator",
        usage="goto [-a] [QUERY ...]\n       goto COMMAND ...",
    )
    parser.add_argument("-a", "--auto", action="store_true", help="pick the best match")
    parser.set_defaults(query=[], command=None)
    commands = parser.add_subparsers(dest="command", metavar="COMMAND")

    workspace = commands.add_parser("workspace", help="Workspace management")
    ws_actions = workspace.add_subparsers(dest="action", metavar="ACTION", required=True)
    ws_add = ws_actions.add_parser("add", help="Add a workspace root")
    ws_add.add_argument(
        "-f", "--force", action="store_true", help="Force add even if path matches ignore rules"
    )
    ws_add.add_argument("path", type=Path)
    ws_remove = ws_actions.add_parser("remove", help="Remove a workspace root")
    ws_remove.add_argument("path", type=Path)
    ws_actions.add_parser("list", help="List all workspace roots")

    commands.add_parser("index", help="Index all workspaces")

    tag = commands.add_parser("tag", help="Tag management")
    tag_actions = tag.add_subparsers(dest="action", metavar="ACTION", required=True)
    tag_add = tag_actions.add_parser("add", help="Add a tag to a path")
    tag_add.add_argument("tag")
    tag_add.add_argument("path", type=Path)
    tag_remove = tag_actions.add_parser("remove", help="Remove a tag from a path")
    tag_remove.add_argument("tag")
    tag_remove.add_argument("path", type=Path)
    tag_actions.add_parser("list", help="List all tags")

    commands.add_parser("doctor", help="Check system status")

    purge = commands.add_parser(
        "purge", help="Purge all goto data (workspaces + index + history)"
    )
    purge.add_argument(
        "-f", "--force", action="store_true", help="Force purge without interactive confirmation"
    )

    register = commands.add_parser(
        "register", help="Register a directory visit (called by shell hooks)"
    )
    register.add_argument("path", type=Path)
    return parser


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    """Parse either a subcommand or a free-form query with options."""
    parser = build_parser()
    args = list(argv)
    options: list[str] = []
    query: list[str] = []
    positional_only = False
    for token in args:
        if positional_only or token == "-" or not token.startswith("-"):
            if not query and not positional_only and token in _COMMANDS:
                return parser.parse_args(args)
            query.append(token)
        elif token == "--":
            positional_only = True
        else:
            options.append(token)
    namespace = parser.parse_args(options)
    namespace.query = query
    return namespace


def is_direct_path_query(query: str) -> bool:
    """True if the query is a literal relative or absolute path."""
    return query in (".", "..") or query.startswith(("./", "../", "/"))


def resolve_direct_directory_query(query: str) -> Path | None:
    """The directory a path-like query names, or None if it names none."""
    if not is_direct_path_query(query):
        return None
    candidate = Path(query)
    abs_path = candidate if candidate.is_absolute() else Path.cwd() / candidate
    if not abs_path.is_dir():
        return None
    try:
        return abs_path.resolve(strict=True)
    except OSError:
        return abs_path


def normalize_path(path: str | os.PathLike[str]) -> Path:
    """Lexically drop ``.`` and fold ``..`` components without touching the disk."""
    source = Path(path)
    anchor = source.anchor
    parts: list[str] = []
    for part in source.parts[1:] if anchor else source.parts:
        if part == ".":
            continue
        if part == "..":
            if parts:
                parts.pop()
            elif not anchor:
                parts.append("..")
            continue
        parts.append(part)

    if not parts:
        return Path(anchor) if anchor else Path(".")
    return Path(anchor, *parts) if anchor else Path(*parts)


def resolve_input_path_from_base(
    base_dir: str | os.PathLike[str], input_path: str | os.PathLike[str]
) -> Path:
    """Absolute form of ``input_path`` taken relative to ``base_dir``."""
    given = Path(input_path)
    combined = given if given.is_absolute() else Path(base_dir) / given
    try:
        return combined.resolve(strict=True)
    except OSError:
        return normalize_path(combined)


def resolve_input_path(input_path: str | os.PathLike[str]) -> Path:
    """Absolute form of ``input_path`` taken relative to the working directory."""
    return resolve_input_path_from_base(Path.cwd(), input_path)


def is_confirmation_accepted(text: str) -> bool:
    """True for ``y`` or ``yes`` in any case, ignoring surrounding whitespace."""
    return text.strip().lower() in ("y", "yes")


def confirm_purge(force: bool) -> bool:
    """Ask on the terminal whether to purge; ``force`` skips the question."""
    if force:
        return True
    sys.stderr.write(
        "WARNING: This will permanently remove all goto data, including workspaces.\n"
    )
    sys.stderr.write("Type 'yes' to continue: ")
    sys.stderr.flush()
    return is_confirmation_accepted(sys.stdin.readline())


def _err(text: str) -> None:
    sys.stderr.write(text)


def _progress_text(event: WorkspaceProgress | WorkspaceCompleted) -> str:
    return (
        f"Indexing workspace [{event.index}/{event.total}]: {event.path} | "
        f"scanned {event.scanned}, added {event.added}, updated {event.updated}"
    )


class _IndexReporter:
    """Writes indexing progress to stderr, throttled to every few hundred directories."""

    def __init__(self) -> None:
        self.last_printed = 0
        self.line_dirty = False

    def __call__(self, event: object) -> None:
        match event:
            case WorkspaceStarted():
                if self.line_dirty:
                    _err("\n")
                    self.line_dirty = False
                self.last_printed = 0
                _err(f"Indexing workspace [{event.index}/{event.total}]: {event.path}\n")
            case WorkspaceProgress():
                scanned = event.scanned
                if (
                    scanned == 1
                    or scanned % _PROGRESS_STEP == 0
                    or max(scanned - self.last_printed, 0) >= _PROGRESS_STEP
                ):
                    _err(f"\r{_progress_text(event)}")
                    sys.stderr.flush()
                    self.last_printed = scanned
                    self.line_dirty = True
            case WorkspaceCompleted():
                _err(f"\r{_progress_text(event)}\n")
                self.line_dirty = False

    def finish(self) -> None:
        if self.line_dirty:
            _err("\n")
            self.line_dirty = False


def _index_with_report(storage: Storage) -> IndexStats:
    reporter = _IndexReporter()
    stats = index_workspaces_with_progress(storage, reporter)
    reporter.finish()
    return stats


def _remove_under(storage: Storage, root: Path) -> None:
    for directory in storage.list_directories():
        if directory.path.is_relative_to(root):
            with suppress(sqlite3.Error):
                storage.remove_directory(directory.id)


def _record_visit(storage: Storage, path_id: int) -> None:
    storage.add_visit(VisitEvent(path_id, datetime.now(timezone.utc)))


def _absolute_existing(path: Path) -> Path:
    try:
        return path.resolve(strict=True)
    except OSError:
        return path if path.is_absolute() else Path.cwd() / path


def _workspace_command(storage: Storage, args: argparse.Namespace) -> int:
    match args.action:
        case "add":
            root = resolve_input_path(args.path)
            add_workspace(storage, root, args.force)
            _err("Workspace added. Indexing...\n")
            stats = _index_with_report(storage)
            _err(
                f"Index complete: scanned {stats.scanned}, added {stats.added}, "
                f"updated {stats.updated}, removed {stats.removed} directories.\n"
            )
        case "remove":
            root = resolve_input_path(args.path)
            remove_workspace(storage, root)
            _err("Workspace removed. Cleaning up index...\n")
            last_printed = 0

            def on_progress(done: int, total: int) -> None:
                nonlocal last_printed
                if total == 0:
                    return
                if done == 1 or done == total or max(done - last_printed, 0) >= _PROGRESS_STEP:
                    _err(f"\rCleaning up index... {done}/{total}")
                    sys.stderr.flush()
                    last_printed = done

            removed = remove_indexed_subdirs_with_progress(storage, root, on_progress)
            if removed > 0:
                _err(f"\rCleanup complete: removed {removed} directories.\n")
            else:
                _err("Cleanup complete: removed 0 directories.\n")
        case "list":
            for path in list_workspaces(storage):
                print(path)
    return 0


def _tag_command(storage: Storage, args: argparse.Namespace) -> int:
    match args.action:
        case "add":
            target = _absolute_existing(args.path)
            found = next((d for d in storage.list_directories() if d.path == target), None)
            if found is None:
                raise CommandError("Path not found in index. Run 'goto index' first.")
            storage.add_tag(args.tag, found.id)
        case "remove":
            target = _absolute_existing(args.path)
            found = next((d for d in storage.list_directories() if d.path == target), None)
            if found is not None:
                storage.remove_tag(args.tag, found.id)
        case "list":
            for tag in storage.list_tags():
                directory = storage.get_directory(tag.path_id)
                if directory is not None:
                    print(f"@{tag.name} -> {directory.path}")
    return 0


def _doctor_command(storage: Storage) -> int:
    print("Goto Doctor Report:")
    workspaces = storage.list_workspaces()
    print(f"Workspaces: {len(workspaces)}")
    for ws in workspaces:
        print(f"  - {ws.path}")
    print(f"Indexed directories: {len(storage.list_directories())}")
    return 0


def _purge_command(storage: Storage, force: bool) -> int:
    if not confirm_purge(force):
        _err("Purge cancelled.\n")
        return 0
    stats = storage.purge_all()
    _err(
        f"Purge complete: removed {stats.directories} directories, {stats.visits} visits, "
        f"{stats.query_mappings} query mappings, {stats.tags} tags, "
        f"{stats.workspaces} workspaces.\n"
    )
    return 0


def _register_command(storage: Storage, path: Path) -> int:
    abs_path = path if path.is_absolute() else Path.cwd() / path
    if not abs_path.is_dir():
        return 0
    # Shell hooks call this on every cd, so only the directory itself is touched.
    upsert_directory(storage, abs_path)
    try:
        canonical = abs_path.resolve(strict=True)
    except OSError:
        canonical = abs_path
    found = next(
        (d for d in storage.list_directories() if d.path in (abs_path, canonical)), None
    )
    if found is not None:
        _record_visit(storage, found.id)
    return 0


def _auto_pick(storage: Storage, query: str) -> str | None:
    for result in search(storage, query):
        path = result.directory.path
        if path.exists():
            return str(path)
        _remove_under(storage, path)
    return None


def _navigate(storage: Storage, query_words: list[str], auto: bool) -> int:
    query = " ".join(query_words)

    direct = resolve_direct_directory_query(query)
    if direct is not None:
        selected: str | None = str(direct)
    elif auto:
        selected = _auto_pick(storage, query)
    else:
        selected = run_ui(storage, query)

    if selected is None:
        return 1 if auto else 0

    target = Path(selected)
    if not target.exists():
        _err(f"Error: Directory '{selected}' no longer exists. Cleaning up index...\n")
        _remove_under(storage, target)
        return 1

    upsert_directory(storage, target)
    found = next((d for d in storage.list_directories() if d.path == target), None)
    if found is not None:
        _record_visit(storage, found.id)
        storage.update_query_mapping(query, found.id)
    print(selected)
    return 0


def _dispatch(storage: Storage, args: argparse.Namespace) -> int:
    match args.command:
        case "workspace":
            return _workspace_command(storage, args)
        case "index":
            stats = _index_with_report(storage)
            _err(
                f"Index complete: scanned {stats.scanned}, added {stats.added}, "
                f"updated {stats.updated}, removed {stats.removed} directories across "
                f"{stats.workspaces} workspace(s).\n"
            )
            return 0
        case "tag":
            return _tag_command(storage, args)
        case "doctor":
            return _doctor_command(storage)
        case "purge":
            return _purge_command(storage, args.force)
        case "register":
            return _register_command(storage, args.path)
        case _:
            return _navigate(storage, args.query, args.auto)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the ``goto`` command and return its exit status."""
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    try:
        with open_storage() as storage:
            return _dispatch(storage, args)
    except (CommandError, WorkspaceError, ValueError, OSError, RuntimeError, sqlite3.Error) as exc:
        _err(f"Error: {exc}\n")
        return 1


if __name__ == "__main__":
    sys.exit(main())