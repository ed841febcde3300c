"""FastAPI routes for the Ratings bounded context.

Read-only: each route asks StatsQueryFacade for domain objects and maps
them onto Pydantic response schemas.
"""

from datetime import UTC, datetime

from fastapi import APIRouter, Query

from ratings.api.schemas import (
    DailyStatsListResponse,
    DailyStatsResponse,
    EntityStatsResponse,
    OwnerStatsResponse,
    TrendingEntryResponse,
    TrendingResponse,
)
from ratings.stats import distribution as hist
from ratings.stats.entity_stats import EntityStats
from ratings.stats.queries import StatsQueryFacade
from ratings.trending.period import TrendingPeriod

stats_router = APIRouter(prefix="/stats", tags=["stats"])
trending_router = APIRouter(prefix="/trending", tags=["trending"])
owner_router = APIRouter(prefix="/owners", tags=["owners"])


def _distribution_body(buckets: dict[int, int]) -> dict[str, int]:
    return {str(star): buckets.get(star, 0) for star in hist.STARS}


def _stats_body(entity_id: str, stats: EntityStats | None) -> EntityStatsResponse:
    if stats is None:
        return EntityStatsResponse(
            entity_id=entity_id,
            rating_distribution=_distribution_body(hist.empty_distribution()),
        )
    return EntityStatsResponse(
        entity_id=str(stats.entity_id),
        total_reviews=stats.total_reviews,
        average_rating=stats.average_rating,
        rating_distribution=_distribution_body(stats.distribution),
        most_common_rating=stats.most_common_rating() if stats.total_reviews else None,
        last_updated=stats.last_updated,
        has_reviews=stats.total_reviews > 0,
    )


def _daily_body(record) -> DailyStatsResponse:
    return DailyStatsResponse(
        date=record.date,
        review_count=record.review_count,
        average_rating=record.average_rating,
        rating_distribution=_distribution_body(record.distribution),
    )


@stats_router.get("/{entity_id}", response_model=EntityStatsResponse)
async def get_entity_stats(entity_id: str) -> EntityStatsResponse:
    """Lifetime rating stats; zeroed when the entity has no reviews yet."""
    return _stats_body(entity_id, StatsQueryFacade().get_entity_stats(entity_id))


@stats_router.get("/{entity_id}/daily", response_model=DailyStatsListResponse)
async def get_daily_stats(entity_id: str, days: int = Query(default=30, ge=1, le=365)) -> DailyStatsListResponse:
    """Most recent daily stats, oldest first."""
    records = StatsQueryFacade().get_daily_stats(entity_id, days)
    return DailyStatsListResponse(
        entity_id=entity_id,
        days=days,
        items=[_daily_body(record) for record in records],
    )


@trending_router.get("/{period}", response_model=TrendingResponse)
async def get_trending(period: str, limit: int | None = Query(default=None, ge=1)) -> TrendingResponse:
    """Published trending ranking for a period (daily, weekly or monthly)."""
    trending_period = TrendingPeriod.parse(period)
    facade = StatsQueryFacade()
    snapshot = facade.get_trending(trending_period)

    if snapshot is None:
        return TrendingResponse(
            period=trending_period.value,
            display_name=trending_period.display_name,
            entries=[],
        )

    entries = snapshot.top(limit) if limit else snapshot.entries_list()
    return TrendingResponse(
        period=trending_period.value,
        display_name=trending_period.display_name,
        computed_at=snapshot.computed_at,
        is_stale=snapshot.is_stale(datetime.now(UTC), facade.settings.stale_threshold),
        entries=[TrendingEntryResponse(**entry.to_dict()) for entry in entries],
    )


@owner_router.get("/{owner_id}/stats", response_model=OwnerStatsResponse)
async def get_owner_stats(owner_id: str, days: int = Query(default=30, ge=1, le=365)) -> OwnerStatsResponse:
    """Weighted rollup over every entity the owner publishes."""
    rollup = StatsQueryFacade().get_aggregate_for_owner(owner_id, days)
    return OwnerStatsResponse(
        owner_id=rollup.owner_id,
        average_rating=rollup.average_rating,
        total_reviews=rollup.total_reviews,
        total_entities=rollup.total_entities,
        entities=[_stats_body(str(stats.entity_id), stats) for stats in rollup.entity_stats],
        daily_stats=[_daily_body(point) for point in rollup.daily_stats],
        top_rated_entity_id=str(rollup.top_rated.entity_id) if rollup.top_rated else None,
        most_reviewed_entity_id=str(rollup.most_reviewed.entity_id) if rollup.most_reviewed else None,
    )
