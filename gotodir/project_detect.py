"""Guess a directory's project type from the files it contains."""

from __future__ import annotations

import os
from pathlib import Path

from gotodir.models import ProjectType

_MARKERS: tuple[tuple[tuple[str, ...], ProjectType], ...] = (
    ((".git",), ProjectType.GIT),
    (("Cargo.toml",), ProjectType.RUST),
    (("package.json",), ProjectType.NODE),
    (("pyproject.toml", "requirements.txt"), ProjectType.PYTHON),
    (("Dockerfile",), ProjectType.DOCKER),
)


def detect_project_type(path: str | os.PathLike[str]) -> ProjectType:
    """Return the first project type whose marker file exists in ``path``."""
    base = Path(path)
    for names, project_type in _MARKERS:
        if any((base / name).exists() for name in names):
            return project_type
    return ProjectType.UNKNOWN