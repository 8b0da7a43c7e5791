"""Management of workspace roots."""

from __future__ import annotations

import os
from pathlib import Path

from gotodir.config import IgnoreConfig, load_ignore_config
from gotodir.storage import Storage


class WorkspaceError(ValueError):
    """A workspace root was refused."""


def add_workspace(
    storage: Storage,
    path: str | os.PathLike[str],
    force: bool = False,
    ignore_config: IgnoreConfig | None = None,
) -> None:
    """Register ``path`` as a workspace root.

    Without ``force``, ``/`` and paths matched by the ignore rules are refused.
    """
    root = Path(path)
    if not force:
        if root == Path("/"):
            raise WorkspaceError("Refusing to add '/' as a workspace without --force.")
        config = ignore_config if ignore_config is not None else load_ignore_config()
        if config.is_ignored(root):
            raise WorkspaceError(
                f"Path '{root}' is blocked by ignore rules. "
                "Use goto workspace add -f <path> to force add."
            )
    storage.add_workspace(root)


def remove_workspace(storage: Storage, path: str | os.PathLike[str]) -> None:
    """Forget the workspace root ``path``."""
    storage.remove_workspace(Path(path))


def list_workspaces(storage: Storage) -> list[Path]:
    """Paths of all workspace roots."""
    return [ws.path for ws in storage.list_workspaces()]