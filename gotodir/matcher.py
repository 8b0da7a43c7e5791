"""Ordered, case-insensitive matching of query tokens against a path."""

from __future__ import annotations


def _segments(path: str) -> list[tuple[int, int]]:
    bounds: list[tuple[int, int]] = []
    start = 0
    for i, ch in enumerate(path):
        if ch == "/":
            bounds.append((start, i))
            start = i + 1
    bounds.append((start, len(path)))
    return bounds


def match_path(path: str, query: str) -> bool:
    """Return True when every query token matches ``path`` in order.

    Plain tokens match as substrings. A token starting with ``^`` must
    begin a path segment, one ending with ``$`` must end it, and one with
    both must equal a whole segment.
    """
    path_lower = path.lower()
    tokens = query.lower().split()
    if not tokens:
        return True

    segments = _segments(path_lower)
    current_pos = 0

    for token in tokens:
        start_anchored = token.startswith("^")
        end_anchored = token.endswith("$")

        if not (start_anchored or end_anchored):
            pos = path_lower.find(token, current_pos)
            if pos < 0:
                return False
            current_pos = pos + len(token)
            continue

        inner = token
        if start_anchored:
            inner = inner[1:]
        if end_anchored:
            inner = inner[:-1]

        for seg_start, seg_end in segments:
            if seg_end < current_pos:
                continue
            segment = path_lower[seg_start:seg_end]
            if start_anchored and end_anchored:
                matched = segment == inner
            elif start_anchored:
                matched = segment.startswith(inner)
            else:
                matched = segment.endswith(inner)
            if matched:
                current_pos = seg_start + len(inner) if start_anchored else seg_end
                break
        else:
            return False

    return True