"""Records kept in the navigation database."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path


class ProjectType(Enum):
    """Kind of project a directory looks like, judged by marker files."""

    GIT = "Git"
    RUST = "Rust"
    NODE = "Node"
    PYTHON = "Python"
    DOCKER = "Docker"
    UNKNOWN = "Unknown"


@dataclass
class Directory:
    """An indexed directory."""

    id: int
    path: Path
    name: str
    depth: int
    last_seen: datetime
    project_type: ProjectType


@dataclass(frozen=True)
class VisitEvent:
    """One visit to an indexed directory."""

    path_id: int
    timestamp: datetime


@dataclass
class QueryMapping:
    """How often a query string led to a particular directory."""

    query: str
    path_id: int
    count: int


@dataclass(frozen=True)
class Tag:
    """A named tag attached to an indexed directory."""

    name: str
    path_id: int


@dataclass(frozen=True)
class Workspace:
    """A root directory whose subtree gets indexed."""

    path: Path