"""StatsQueryFacade — read accessors for dashboards and reporting callers.

Nothing here raises for an empty state: a missing record reads as ``None``
and an owner with no reviewed entities rolls up to zeros. Callers decide how
to present "no rating yet".
"""

from dataclasses import dataclass, field

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ratings.catalog import get_catalog
from ratings.catalog.port import CatalogPort
from ratings.config import RatingsSettings
from ratings.stats import distribution as hist
from ratings.stats.daily_stats import DailyStats
from ratings.stats.entity_stats import EntityStats
from ratings.trending.period import TrendingPeriod
from ratings.trending.snapshot import TrendingEntry, TrendingSnapshot


@dataclass(frozen=True)
class DailyPoint:
    """Stats for one date, possibly merged across several entities."""

    date: str
    review_count: int
    average_rating: float
    distribution: dict[int, int]


@dataclass
class OwnerRollup:
    owner_id: str
    average_rating: float = 0.0
    total_reviews: int = 0
    total_entities: int = 0
    entity_stats: list[EntityStats] = field(default_factory=list)
    daily_stats: list[DailyPoint] = field(default_factory=list)
    top_rated: EntityStats | None = None
    most_reviewed: EntityStats | None = None


class StatsQueryFacade:
    def __init__(self, settings: RatingsSettings | None = None, catalog: CatalogPort | None = None) -> None:
        self._settings = settings
        self._catalog = catalog

    @property
    def settings(self) -> RatingsSettings:
        if self._settings is None:
            self._settings = RatingsSettings.from_domain()
        return self._settings

    @property
    def catalog(self) -> CatalogPort:
        return self._catalog or get_catalog()

    def get_entity_stats(self, entity_id) -> EntityStats | None:
        try:
            return current_domain.repository_for(EntityStats).get(str(entity_id))
        except ObjectNotFoundError:
            return None

    def get_daily_stats(self, entity_id, days: int | None = None) -> list[DailyStats]:
        """The ``days`` most recent DailyStats records for the entity, oldest first."""
        days = self.settings.daily_window_days if days is None else days
        if days <= 0:
            return []

        repo = current_domain.repository_for(DailyStats)
        latest_first = repo._dao.query.filter(entity_id=str(entity_id)).order_by("-date").limit(days).all().items
        return list(reversed(latest_first))

    def get_trending(self, period) -> TrendingSnapshot | None:
        period = TrendingPeriod.parse(period)
        try:
            return current_domain.repository_for(TrendingSnapshot).get(period.value)
        except ObjectNotFoundError:
            return None

    def get_top_trending(self, period, limit: int = 10) -> list[TrendingEntry]:
        snapshot = self.get_trending(period)
        if snapshot is None:
            return []
        return snapshot.top(limit)

    def get_aggregate_for_owner(self, owner_id, days: int | None = None) -> OwnerRollup:
        """Roll up the stats of every entity ``owner_id`` publishes.

        The average is weighted by review count; entities without stats are
        counted in ``total_entities`` but contribute nothing else.
        """
        entity_ids = self.catalog.entities_owned_by(str(owner_id))
        rollup = OwnerRollup(owner_id=str(owner_id), total_entities=len(entity_ids))

        for entity_id in entity_ids:
            stats = self.get_entity_stats(entity_id)
            if stats is not None:
                rollup.entity_stats.append(stats)

        reviewed = [s for s in rollup.entity_stats if s.total_reviews > 0]
        rollup.total_reviews = sum(s.total_reviews for s in reviewed)
        if rollup.total_reviews > 0:
            rollup.average_rating = sum(s.average_rating * s.total_reviews for s in reviewed) / rollup.total_reviews

        eligible = [s for s in reviewed if s.total_reviews >= self.settings.top_rated_min_reviews]
        if eligible:
            rollup.top_rated = max(eligible, key=lambda s: (s.average_rating, s.total_reviews))
        if reviewed:
            rollup.most_reviewed = max(reviewed, key=lambda s: s.total_reviews)

        daily = [record for entity_id in entity_ids for record in self.get_daily_stats(entity_id, days)]
        rollup.daily_stats = merge_daily(daily)
        return rollup


# ---------------------------------------------------------------------------
# Chart helpers
# ---------------------------------------------------------------------------
def merge_daily(records) -> list[DailyPoint]:
    """Merge DailyStats of several entities by date, oldest first."""
    by_date: dict[str, dict[int, int]] = {}
    for record in records:
        by_date[record.date] = hist.merge(by_date.get(record.date, hist.empty_distribution()), record.distribution)

    return [
        DailyPoint(
            date=day,
            review_count=hist.total(buckets),
            average_rating=hist.average(buckets),
            distribution=buckets,
        )
        for day, buckets in sorted(by_date.items())
    ]


def rating_evolution(records) -> list[tuple[str, float]]:
    return [(record.date, record.average_rating) for record in records]


def reviews_per_day(records) -> list[tuple[str, int]]:
    return [(record.date, record.review_count) for record in records]


def distribution_percentages(stats: EntityStats | None) -> dict[int, float]:
    if stats is None:
        return {star: 0.0 for star in hist.STARS}
    return {star: stats.rating_percentage(star) for star in hist.STARS}
