"""Text layout and styling of the inline picker popup."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from gotodir.models import ProjectType
from gotodir.search import SearchResult
from gotodir.ui.editor import App

MAX_VISIBLE_ITEMS = 8

RESET = "\x1b[0m"
SELECTED_STYLE = "\x1b[36m"
MATCH_STYLE = "\x1b[1;33m"

_PROJECT_ICONS: dict[ProjectType, str] = {
    ProjectType.GIT: "[git]",
    ProjectType.RUST: "[rs]",
    ProjectType.NODE: "[js]",
    ProjectType.PYTHON: "[py]",
    ProjectType.DOCKER: "[dk]",
    ProjectType.UNKNOWN: "[dir]",
}


class PopupMode(Enum):
    """Whether the popup is drawn below or above the anchor row."""

    BELOW = "below"
    ABOVE = "above"


@dataclass(frozen=True)
class PopupLayout:
    """Rows occupied by the popup on screen."""

    top_row: int
    height: int
    mode: PopupMode


def truncate_for_width(text: str, width: int) -> str:
    """Cut ``text`` to ``width`` characters, ending in ``...`` when shortened."""
    if width <= 0:
        return ""
    if len(text) <= width:
        return text
    if width <= 3:
        return "." * width
    return text[: width - 3] + "..."


def pad_to_width(text: str, width: int) -> str:
    """Truncate or right-pad ``text`` with spaces to exactly ``width`` characters."""
    clipped = truncate_for_width(text, width)
    if len(clipped) >= width:
        return clipped
    return clipped + " " * (width - len(clipped))


def format_input_row(left: str, right: str, width: int) -> str:
    """Place ``left`` at the start and ``right`` at the end of a ``width``-wide row."""
    if width <= 0:
        return ""
    if len(right) >= width:
        return truncate_for_width(right, width)
    max_left = max(width - (len(right) + 1), 0)
    left_part = truncate_for_width(left, max_left)
    gap = max(width - (len(left_part) + len(right)), 0)
    return f"{left_part}{' ' * gap}{right}"


def _normalized_query_tokens(query: str) -> list[str]:
    tokens = []
    for token in query.split():
        trimmed = token.lstrip("^").rstrip("$")
        if trimmed:
            tokens.append(trimmed.lower())
    return tokens


def match_marks_for_line(line: str, query: str) -> list[bool]:
    """Per character of ``line``, whether it lies inside an occurrence of a query token."""
    lower_chars = [c for ch in line for c in ch.lower()]
    marks = [False] * len(line)
    tokens = _normalized_query_tokens(query)
    if not tokens or not line:
        return marks

    for token in tokens:
        token_chars = list(token)
        size = len(token_chars)
        if size > len(lower_chars):
            continue
        for start in range(len(lower_chars) - size + 1):
            if lower_chars[start : start + size] == token_chars:
                for i in range(start, min(start + size, len(marks))):
                    marks[i] = True
    return marks


def styled_line_with_matches(line: str, query: str, selected: bool) -> str:
    """Wrap ``line`` in ANSI styles, highlighting the parts that match ``query``."""
    marks = match_marks_for_line(line, query)
    base_style = SELECTED_STYLE if selected else RESET
    parts = [base_style]
    in_match = False
    for ch, is_match in zip(line, marks):
        if is_match != in_match:
            parts.append(MATCH_STYLE if is_match else base_style)
            in_match = is_match
        parts.append(ch)
    parts.append(RESET)
    return "".join(parts)


def format_result_line(result: SearchResult, selected: bool) -> str:
    """One list row: selection marker, project icon, name and full path."""
    prefix = "> " if selected else "  "
    icon = _PROJECT_ICONS[result.directory.project_type]
    return f"{prefix}{icon} {result.directory.name}  {result.directory.path}"


def compute_layout(rows: int, anchor_row: int, desired_height: int) -> PopupLayout:
    """Place the popup below the anchor if it fits there, otherwise above it."""
    above_space = anchor_row
    below_space = max(rows - (anchor_row + 1), 0)

    if below_space >= desired_height:
        return PopupLayout(anchor_row + 1, desired_height, PopupMode.BELOW)

    height = max(1, min(above_space, desired_height))
    return PopupLayout(max(anchor_row - height, 0), height, PopupMode.ABOVE)


def popup_lines(app: App, layout: PopupLayout) -> list[str]:
    """Unstyled popup rows in screen order; the input row is first below, last above."""
    visible = max(layout.height - 1, 0)
    results = app.results
    selected = app.selected_index or 0

    if len(results) <= visible or visible == 0:
        start = 0
    else:
        start = min(max(selected - visible // 2, 0), len(results) - visible)

    if not results:
        list_lines = ["  (no matches)"]
    else:
        list_lines = [
            format_result_line(result, start + offset == app.selected_index)
            for offset, result in enumerate(results[start : start + visible])
        ]

    input_line = f">:{app.query_with_cursor_marker()}"
    if layout.mode is PopupMode.BELOW:
        return [input_line, *list_lines]
    return [*list_lines, input_line]