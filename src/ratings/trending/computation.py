"""TrendingComputation — rebuild every trending snapshot from stored aggregates.

A run is read-then-publish: it never touches the stats records.

1. Load every EntityStats with at least one review.
2. Count each entity's recent reviews per period from its HourlyStats. The
   per-entity work fans out over a thread pool and is bounded by a deadline;
   entities that are not done by then are omitted from this run, and the
   ones already counted are still published.
3. For each period, score and rank the entities with recent activity, add
   catalog display fields, and write the period's snapshot in its own
   UnitOfWork so one failed write does not hold back the others.

Recent counts cover rolling windows ending at the run time (the last 24
hours, 7 days or 30 days), summed from HourlyStats. An hour bucket counts
when its hour is at or after the hour the window starts in.
"""

from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import UTC, datetime

import structlog
from protean import UnitOfWork
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ratings.catalog import get_catalog
from ratings.catalog.port import CatalogEntry, CatalogPort
from ratings.config import RatingsSettings
from ratings.domain import ratings
from ratings.exceptions import PartialComputationError
from ratings.stats.entity_stats import EntityStats
from ratings.stats.hourly_stats import HourlyStats, to_utc_hour
from ratings.trending.period import TrendingPeriod
from ratings.trending.scoring import Candidate, TrendingWeights, rank
from ratings.trending.snapshot import TrendingEntry, TrendingSnapshot

logger = structlog.get_logger(__name__)


@dataclass
class TrendingRunSummary:
    computed_at: datetime
    entities_considered: int = 0
    entities_counted: int = 0
    skipped: list[PartialComputationError] = field(default_factory=list)
    timed_out: list[str] = field(default_factory=list)
    published: dict[str, int] = field(default_factory=dict)  # period -> number of entries
    failed_periods: dict[str, str] = field(default_factory=dict)  # period -> error

    @property
    def complete(self) -> bool:
        return not (self.skipped or self.timed_out or self.failed_periods)


class TrendingComputation:
    def __init__(
        self,
        settings: RatingsSettings | None = None,
        catalog: CatalogPort | None = None,
        domain=None,
    ) -> None:
        self._settings = settings
        self._catalog = catalog
        self.domain = domain or ratings

    @property
    def settings(self) -> RatingsSettings:
        if self._settings is None:
            self._settings = RatingsSettings.from_domain(self.domain)
        return self._settings

    @property
    def catalog(self) -> CatalogPort:
        return self._catalog or get_catalog()

    def run(self, as_of: datetime | None = None) -> TrendingRunSummary:
        settings = self.settings
        as_of = as_of or datetime.now(UTC)
        summary = TrendingRunSummary(computed_at=as_of)

        stats = self._load_stats()
        summary.entities_considered = len(stats)

        recent = self._collect_recent_counts([s.entity_id for s in stats], as_of, summary)
        summary.entities_counted = len(recent)

        weights = TrendingWeights.from_settings(settings)
        descriptions: dict[str, CatalogEntry] = {}

        for period in TrendingPeriod:
            candidates = [
                Candidate(
                    entity_id=s.entity_id,
                    average_rating=s.average_rating,
                    total_reviews=s.total_reviews,
                    recent_review_count=recent[s.entity_id][period],
                )
                for s in stats
                if s.entity_id in recent
            ]
            entries = []
            for ranked in rank(candidates, weights, settings.trending_cap):
                entity_id = ranked.candidate.entity_id
                if entity_id not in descriptions:
                    descriptions[entity_id] = self._describe(entity_id)
                entries.append(
                    TrendingEntry(
                        entity_id=entity_id,
                        title=descriptions[entity_id].title or "",
                        image_ref=descriptions[entity_id].image_ref or "",
                        average_rating=ranked.candidate.average_rating,
                        recent_review_count=ranked.candidate.recent_review_count,
                        score=ranked.score,
                        rank=ranked.rank,
                    )
                )

            try:
                self._publish(period, entries, as_of)
                summary.published[period.value] = len(entries)
            except Exception as exc:
                summary.failed_periods[period.value] = str(exc)
                logger.error("Trending snapshot write failed", period=period.value, error=str(exc))

        logger.info(
            "Trending computation finished",
            entities=summary.entities_considered,
            counted=summary.entities_counted,
            skipped=len(summary.skipped),
            timed_out=len(summary.timed_out),
            published=summary.published,
            failed_periods=list(summary.failed_periods),
        )
        return summary

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def _load_stats(self) -> list[EntityStats]:
        repo = current_domain.repository_for(EntityStats)
        return repo._dao.query.filter(total_reviews__gt=0).order_by("entity_id").limit(None).all().items

    def _collect_recent_counts(self, entity_ids, as_of, summary) -> dict[str, dict[TrendingPeriod, int]]:
        results: dict[str, dict[TrendingPeriod, int]] = {}
        if not entity_ids:
            return results

        executor = ThreadPoolExecutor(max_workers=self.settings.trending_workers, thread_name_prefix="trending")
        try:
            futures = {executor.submit(self._count_in_context, entity_id, as_of): entity_id for entity_id in entity_ids}
            done, not_done = wait(futures, timeout=self.settings.trending_deadline)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        for future, entity_id in futures.items():
            if future in not_done:
                summary.timed_out.append(entity_id)
                continue
            try:
                results[entity_id] = future.result()
            except Exception as exc:
                error = PartialComputationError(entity_id, exc)
                summary.skipped.append(error)
                logger.warning("Trending entity skipped", entity_id=entity_id, error=str(exc))

        if summary.timed_out:
            logger.warning(
                "Trending deadline reached, omitting unfinished entities",
                omitted=len(summary.timed_out),
                deadline=self.settings.trending_deadline,
            )
        return results

    def _count_in_context(self, entity_id: str, as_of: datetime) -> dict[TrendingPeriod, int]:
        with self.domain.domain_context():
            return self.recent_counts(entity_id, as_of)

    def recent_counts(self, entity_id: str, as_of: datetime) -> dict[TrendingPeriod, int]:
        """Reviews per trending period for ``entity_id``, summed from its HourlyStats."""
        longest = max(period.lookback for period in TrendingPeriod)

        repo = current_domain.repository_for(HourlyStats)
        records = (
            repo._dao.query.filter(
                entity_id=entity_id,
                hour__gte=to_utc_hour(as_of - longest),
                hour__lte=to_utc_hour(as_of),
            )
            .limit(None)
            .all()
            .items
        )

        counts = {}
        for period in TrendingPeriod:
            first_hour = to_utc_hour(as_of - period.lookback)
            counts[period] = sum(record.review_count or 0 for record in records if record.hour >= first_hour)
        return counts

    def _describe(self, entity_id: str) -> CatalogEntry:
        try:
            entry = self.catalog.describe(entity_id)
        except Exception as exc:
            logger.warning("Catalog lookup failed", entity_id=entity_id, error=str(exc))
            entry = None
        return entry or CatalogEntry()

    # ------------------------------------------------------------------
    # Publish
    # ------------------------------------------------------------------
    def _publish(self, period: TrendingPeriod, entries: list[TrendingEntry], computed_at: datetime) -> None:
        with UnitOfWork():
            repo = current_domain.repository_for(TrendingSnapshot)
            try:
                snapshot = repo.get(period.value)
                snapshot.replace_entries(entries, computed_at)
            except ObjectNotFoundError:
                snapshot = TrendingSnapshot.create(period, entries, computed_at)
            repo.add(snapshot)


def compute_trending() -> TrendingRunSummary:
    """Scheduler entry point: recompute every trending period now."""
    return TrendingComputation().run()
