"""Query editing and result selection state for the interactive picker."""

from __future__ import annotations

import sqlite3
from collections.abc import Callable
from contextlib import suppress
from dataclasses import dataclass
from enum import Enum, auto

from gotodir.models import Directory, QueryMapping, Tag, VisitEvent
from gotodir.search import SearchResult, rank_directories
from gotodir.storage import Storage


class KeyCode(Enum):
    """Keys the picker distinguishes."""

    CHAR = auto()
    LEFT = auto()
    RIGHT = auto()
    UP = auto()
    DOWN = auto()
    HOME = auto()
    END = auto()
    BACKSPACE = auto()
    DELETE = auto()
    ENTER = auto()
    ESC = auto()
    TAB = auto()
    OTHER = auto()


@dataclass(frozen=True)
class Key:
    """A key press: its code, the character for ``CHAR`` keys, and modifiers."""

    code: KeyCode
    char: str = ""
    ctrl: bool = False
    alt: bool = False


def _is_space(ch: str) -> bool:
    return ch.isspace()


class App:
    """Editable query with a cursor, a yank buffer and ranked results."""

    def __init__(self, query: str, storage: Storage) -> None:
        self.cached_directories: list[Directory] = []
        for directory in storage.list_directories():
            if directory.path.exists():
                self.cached_directories.append(directory)
            else:
                with suppress(sqlite3.Error):
                    storage.remove_directory(directory.id)

        self.cached_visits: list[VisitEvent] = storage.list_visits()
        self.cached_mappings: list[QueryMapping] = storage.get_query_mappings()
        self.cached_tags: list[Tag] = storage.list_tags()

        self.query = query
        self.query_cursor = len(query)
        self.yank_buffer = ""
        self.results: list[SearchResult] = []
        self.selected_index: int | None = None
        self.selected_path: str | None = None
        self.update_search()

    def update_search(self) -> None:
        """Re-rank the cached directories for the current query and select the top one."""
        self.query_cursor = min(self.query_cursor, len(self.query))
        self.results = rank_directories(
            self.cached_directories,
            self.cached_visits,
            self.cached_mappings,
            self.cached_tags,
            self.query,
        )
        self.selected_index = 0 if self.results else None

    def query_with_cursor_marker(self) -> str:
        """The query with ``|`` inserted at the cursor position."""
        cursor = min(self.query_cursor, len(self.query))
        return f"{self.query[:cursor]}|{self.query[cursor:]}"

    # Cursor movement

    def move_left(self) -> None:
        if self.query_cursor > 0:
            self.query_cursor -= 1

    def move_right(self) -> None:
        if self.query_cursor < len(self.query):
            self.query_cursor += 1

    def move_home(self) -> None:
        self.query_cursor = 0

    def move_end(self) -> None:
        self.query_cursor = len(self.query)

    def move_word_forward(self) -> None:
        """Move past any whitespace and then past the following word."""
        q = self.query
        i = min(self.query_cursor, len(q))
        while i < len(q) and _is_space(q[i]):
            i += 1
        while i < len(q) and not _is_space(q[i]):
            i += 1
        self.query_cursor = i

    def move_word_backward(self) -> None:
        """Move back over any whitespace and then to the start of the word."""
        if self.query_cursor == 0:
            return
        self.query_cursor = self._word_start_before(min(self.query_cursor, len(self.query)))

    def _word_start_before(self, i: int) -> int:
        q = self.query
        while i > 0 and _is_space(q[i - 1]):
            i -= 1
        while i > 0 and not _is_space(q[i - 1]):
            i -= 1
        return i

    # Editing; each returns True when the query changed

    def insert_char(self, char: str) -> None:
        c = self.query_cursor
        self.query = self.query[:c] + char + self.query[c:]
        self.query_cursor += 1

    def backspace(self) -> bool:
        if self.query_cursor == 0:
            return False
        c = self.query_cursor
        self.query = self.query[: c - 1] + self.query[c:]
        self.query_cursor -= 1
        return True

    def delete_forward(self) -> bool:
        c = self.query_cursor
        if c >= len(self.query):
            return False
        self.query = self.query[:c] + self.query[c + 1 :]
        return True

    def clear_query(self) -> bool:
        if not self.query:
            return False
        self.query = ""
        self.query_cursor = 0
        return True

    def delete_word_backward(self) -> bool:
        """Cut the word before the cursor into the yank buffer."""
        if self.query_cursor == 0:
            return False
        end = min(self.query_cursor, len(self.query))
        start = self._word_start_before(end)
        self.yank_buffer = self.query[start:end]
        self.query = self.query[:start] + self.query[end:]
        self.query_cursor = start
        return True

    def kill_to_end(self) -> bool:
        """Cut from the cursor to the end of the query into the yank buffer."""
        c = self.query_cursor
        if c >= len(self.query):
            self.yank_buffer = ""
            return False
        self.yank_buffer = self.query[c:]
        self.query = self.query[:c]
        return True

    def kill_word_forward(self) -> bool:
        """Cut from the cursor through the next word into the yank buffer."""
        q = self.query
        start = min(self.query_cursor, len(q))
        if start >= len(q):
            self.yank_buffer = ""
            return False
        end = start
        while end < len(q) and _is_space(q[end]):
            end += 1
        while end < len(q) and not _is_space(q[end]):
            end += 1
        if end == start:
            return False
        self.yank_buffer = q[start:end]
        self.query = q[:start] + q[end:]
        return True

    def yank(self) -> bool:
        """Insert the yank buffer at the cursor."""
        if not self.yank_buffer:
            return False
        c = self.query_cursor
        self.query = self.query[:c] + self.yank_buffer + self.query[c:]
        self.query_cursor += len(self.yank_buffer)
        return True

    # Selection

    def next(self) -> None:
        """Select the next result, wrapping to the first."""
        if not self.results:
            return
        i = self.selected_index
        if i is None or i >= len(self.results) - 1:
            self.selected_index = 0
        else:
            self.selected_index = i + 1

    def previous(self) -> None:
        """Select the previous result, wrapping to the last."""
        if not self.results:
            return
        i = self.selected_index
        if i is None:
            self.selected_index = 0
        elif i == 0:
            self.selected_index = len(self.results) - 1
        else:
            self.selected_index = i - 1

    # Key handling

    def apply_key_editing(self, key: Key) -> None:
        """Apply an editing or cursor key; results are refreshed when the query changes."""
        action: Callable[[], bool | None] | None
        if key.code is KeyCode.CHAR:
            if key.ctrl:
                action = {
                    "a": self.move_home,
                    "e": self.move_end,
                    "b": self.move_left,
                    "f": self.move_right,
                    "u": self.clear_query,
                    "w": self.delete_word_backward,
                    "k": self.kill_to_end,
                    "d": self.delete_forward,
                    "y": self.yank,
                }.get(key.char)
            elif key.alt:
                action = {
                    "b": self.move_word_backward,
                    "f": self.move_word_forward,
                    "d": self.kill_word_forward,
                }.get(key.char)
            else:
                self.insert_char(key.char)
                self.update_search()
                return
        else:
            action = {
                KeyCode.LEFT: self.move_left,
                KeyCode.RIGHT: self.move_right,
                KeyCode.BACKSPACE: self.backspace,
                KeyCode.DELETE: self.delete_forward,
            }.get(key.code)

        if action is not None and action():
            self.update_search()