"""Scoring of search candidates."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from gotodir.models import ProjectType


@dataclass(frozen=True)
class RankingWeights:
    """Relative weight of each scoring signal."""

    fuzzy: float = 0.35
    recency: float = 0.25
    frequency: float = 0.20
    learned: float = 0.15
    project: float = 0.05


def calculate_score(
    fuzzy_score: float,
    recency_score: float,
    frequency_score: float,
    learned_score: float,
    project_bonus: float,
    weights: RankingWeights,
) -> float:
    """Combine the individual signals into one weighted score."""
    return (
        weights.fuzzy * fuzzy_score
        + weights.recency * recency_score
        + weights.frequency * frequency_score
        + weights.learned * learned_score
        + weights.project * project_bonus
    )


def get_recency_score(last_visited: datetime | None) -> float:
    """Score decaying with whole hours since the last visit; 0 if never visited."""
    if last_visited is None:
        return 0.0
    elapsed = datetime.now(timezone.utc) - last_visited
    hours = float(int(elapsed / timedelta(hours=1)))
    return 1.0 / (1.0 + hours / 24.0)


def get_project_bonus(project_type: ProjectType) -> float:
    """1.0 for a recognised project directory, 0.0 otherwise."""
    return 0.0 if project_type is ProjectType.UNKNOWN else 1.0