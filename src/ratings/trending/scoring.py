"""Trending score and ranking.

    score = recent * W_recency + average * W_quality + log10(total + 1) * W_volume

Entities with no recent reviews in a window are left out of that window's
ranking entirely. Equal scores are ordered by ascending entity id so that
rank is a total order and repeated runs over the same data agree.
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class TrendingWeights:
    recency: float = 2.0
    quality: float = 10.0
    volume: float = 5.0

    @classmethod
    def from_settings(cls, settings) -> "TrendingWeights":
        return cls(
            recency=settings.weight_recency,
            quality=settings.weight_quality,
            volume=settings.weight_volume,
        )


@dataclass(frozen=True)
class Candidate:
    """One entity's inputs to a single period's ranking."""

    entity_id: str
    average_rating: float
    total_reviews: int
    recent_review_count: int


@dataclass(frozen=True)
class RankedCandidate:
    candidate: Candidate
    score: float
    rank: int


def score(recent_review_count: int, average_rating: float, total_reviews: int, weights: TrendingWeights) -> float:
    return (
        recent_review_count * weights.recency
        + average_rating * weights.quality
        + math.log10(total_reviews + 1) * weights.volume
    )


def rank(candidates, weights: TrendingWeights, cap: int) -> list[RankedCandidate]:
    scored = [
        (score(c.recent_review_count, c.average_rating, c.total_reviews, weights), c)
        for c in candidates
        if c.recent_review_count > 0
    ]
    scored.sort(key=lambda pair: (-pair[0], pair[1].entity_id))

    return [
        RankedCandidate(candidate=candidate, score=value, rank=position)
        for position, (value, candidate) in enumerate(scored[: max(cap, 0)], start=1)
    ]
