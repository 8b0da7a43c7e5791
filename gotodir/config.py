"""Ignore rules read from the user's configuration file."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_IGNORE_NAMES: tuple[str, ...] = (
    ".git",
    "node_modules",
    "target",
    "build",
    "dist",
    ".cache",
    ".venv",
    "venv",
    "__pycache__",
)
DEFAULT_IGNORE_PATHS: tuple[str, ...] = ()


@dataclass
class IgnoreConfig:
    """Directory names and path prefixes that indexing skips."""

    names: list[str] = field(default_factory=list)
    paths: list[Path] = field(default_factory=list)

    def is_ignored(self, path: str | os.PathLike[str]) -> bool:
        """True if the path's last component or its location is ignored."""
        raw = Path(path)
        try:
            canonical = raw.resolve(strict=True)
        except OSError:
            canonical = raw
        name = canonical.name
        if name and name != ".." and self.matches_name(name):
            return True
        return self.matches_path_prefix(canonical)

    def matches_name(self, name: str) -> bool:
        """Case-insensitive match of a single directory name."""
        return name.lower() in self.names

    def matches_path_prefix(self, path: str | os.PathLike[str]) -> bool:
        """True if ``path`` lies at or below one of the ignored paths."""
        candidate = Path(path)
        return any(candidate.is_relative_to(ignored) for ignored in self.paths)


def load_ignore_config() -> IgnoreConfig:
    """Load ignore rules from ``~/.config/goto/config.toml``."""
    return load_ignore_config_from_path(Path.home() / ".config" / "goto" / "config.toml")


def _string_list(section: dict, key: str, config_path: Path) -> list[str] | None:
    value = section.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(
            f"Failed to parse TOML config at {config_path}: ignore.{key} must be a list of strings"
        )
    return value


def load_ignore_config_from_path(path: str | os.PathLike[str]) -> IgnoreConfig:
    """Load ignore rules from ``path``; defaults apply when it does not exist."""
    config_path = Path(path)
    names = [n.lower() for n in DEFAULT_IGNORE_NAMES]
    paths = [Path(p) for p in DEFAULT_IGNORE_PATHS]

    if not config_path.exists():
        return IgnoreConfig(names, paths)

    try:
        content = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise OSError(f"Failed to read config file at {config_path}: {exc}") from exc
    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Failed to parse TOML config at {config_path}: {exc}") from exc

    section = data.get("ignore", {})
    if not isinstance(section, dict):
        raise ValueError(f"Failed to parse TOML config at {config_path}: ignore must be a table")

    use_defaults = section.get("use_defaults", True)
    if not isinstance(use_defaults, bool):
        raise ValueError(
            f"Failed to parse TOML config at {config_path}: ignore.use_defaults must be a boolean"
        )
    if not use_defaults:
        names.clear()
        paths.clear()

    extra_names = _string_list(section, "names", config_path)
    if extra_names:
        names.extend(n.lower() for n in extra_names)

    extra_paths = _string_list(section, "paths", config_path)
    if extra_paths:
        paths.extend(_expand_home_path(p) for p in extra_paths)

    return IgnoreConfig(names, paths)


def _expand_home_path(value: str) -> Path:
    if value.startswith("~/"):
        try:
            return Path.home() / value[2:]
        except RuntimeError:
            pass
    return Path(value)