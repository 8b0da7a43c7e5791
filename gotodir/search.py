"""Ranked search over the indexed directories."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from gotodir.matcher import match_path
from gotodir.models import Directory, QueryMapping, Tag, VisitEvent
from gotodir.ranking import (
    RankingWeights,
    calculate_score,
    get_project_bonus,
    get_recency_score,
)
from gotodir.storage import Storage


@dataclass
class SearchResult:
    """A matching directory together with its ranking score."""

    directory: Directory
    score: float


def split_tag_query(query: str) -> tuple[str | None, str]:
    """Split ``@tag rest`` into the tag name and the remaining query.

    A query that does not start with ``@`` has no tag. A bare ``@`` yields
    no tag and the trimmed remainder.
    """
    if not query.startswith("@"):
        return None, query
    parts = query.split(None, 1)
    first = parts[0] if parts else ""
    rest = parts[1].strip() if len(parts) > 1 else ""
    tag = first.lstrip("@")
    return (tag or None), rest


def rank_directories(
    directories: Iterable[Directory],
    visits: Iterable[VisitEvent],
    mappings: Iterable[QueryMapping],
    tags: Iterable[Tag],
    query: str,
) -> list[SearchResult]:
    """Filter ``directories`` by ``query`` and order them by descending score."""
    mappings = list(mappings)

    frequency: Counter[int] = Counter()
    recency: dict[int, datetime] = {}
    for visit in visits:
        frequency[visit.path_id] += 1
        latest = recency.get(visit.path_id)
        if latest is None or visit.timestamp > latest:
            recency[visit.path_id] = visit.timestamp

    max_freq = float(max(frequency.values(), default=1))
    max_learned = float(max((m.count for m in mappings), default=1))

    tag_name, path_query = split_tag_query(query)
    tagged_ids = (
        {t.path_id for t in tags if t.name == tag_name} if tag_name is not None else set()
    )

    weights = RankingWeights()
    results: list[SearchResult] = []
    for directory in directories:
        path_str = str(directory.path)
        is_tag_match = directory.id in tagged_ids

        if tag_name is not None:
            if not is_tag_match:
                continue
            if path_query and not match_path(path_str, path_query):
                continue
        elif not match_path(path_str, query):
            continue

        fuzzy_score = min(1.0 + (1.0 if is_tag_match else 0.0), 1.0)
        learned_score = next(
            (
                m.count / max_learned
                for m in mappings
                if m.query == query and m.path_id == directory.id
            ),
            0.0,
        )
        score = calculate_score(
            fuzzy_score,
            get_recency_score(recency.get(directory.id)),
            frequency.get(directory.id, 0) / max_freq,
            learned_score,
            get_project_bonus(directory.project_type),
            weights,
        )
        results.append(SearchResult(directory, score))

    results.sort(key=lambda r: r.score, reverse=True)
    return results


def search(storage: Storage, query: str) -> list[SearchResult]:
    """Search everything in ``storage`` for ``query``."""
    return rank_directories(
        storage.list_directories(),
        storage.list_visits(),
        storage.get_query_mappings(),
        storage.list_tags(),
        query,
    )