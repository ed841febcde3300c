"""Pydantic response schemas for the Ratings API.

These are separate from the Protean aggregates (anti-corruption pattern).
The API layer is the external contract; aggregates are internal.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------
class EntityStatsResponse(BaseModel):
    entity_id: str
    total_reviews: int = 0
    average_rating: float = 0.0
    rating_distribution: dict[str, int]
    most_common_rating: int | None = None
    last_updated: datetime | None = None
    has_reviews: bool = False


class DailyStatsResponse(BaseModel):
    date: str
    review_count: int
    average_rating: float
    rating_distribution: dict[str, int]


class DailyStatsListResponse(BaseModel):
    entity_id: str
    days: int
    items: list[DailyStatsResponse]


# ---------------------------------------------------------------------------
# Trending
# ---------------------------------------------------------------------------
class TrendingEntryResponse(BaseModel):
    rank: int
    entity_id: str
    title: str
    image_ref: str
    average_rating: float
    recent_review_count: int
    score: float


class TrendingResponse(BaseModel):
    period: str
    display_name: str
    computed_at: datetime | None = None
    is_stale: bool = True
    entries: list[TrendingEntryResponse]


# ---------------------------------------------------------------------------
# Owner rollup
# ---------------------------------------------------------------------------
class OwnerStatsResponse(BaseModel):
    owner_id: str
    average_rating: float
    total_reviews: int
    total_entities: int
    entities: list[EntityStatsResponse]
    daily_stats: list[DailyStatsResponse]
    top_rated_entity_id: str | None = None
    most_reviewed_entity_id: str | None = None
