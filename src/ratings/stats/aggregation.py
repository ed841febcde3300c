"""AggregationEngine — applies review lifecycle events to the stored stats.

Every event is one read-modify-write of the entity's EntityStats, the
DailyStats of the day the review was created and the HourlyStats of that
hour, committed together in a single UnitOfWork. Conflicting commits
(``ExpectedVersionError``) restart the whole read-compute-write cycle with
exponential backoff, up to ``max_retries`` times, after which a
``ConflictError`` is raised so the event can be redelivered.

Missing records are seeded first, under a lock per record key, so that two
concurrent "first reviews" cannot both insert a fresh record and overwrite
one another. Once a record exists every delta is a version-checked update.
Different entities never share a seeding lock or a record, so they never
contend. A seeding lock lives only while some caller holds or waits on it.

When called from inside an active UnitOfWork (an event handler), the engine
joins it: protean's ``@handle`` then owns the commit and the version retry.
"""

import random
import threading
import time
from contextlib import contextmanager
from datetime import UTC, datetime

import structlog
from protean import UnitOfWork
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError
from protean.utils.globals import current_domain, current_uow

from ratings.config import RatingsSettings
from ratings.exceptions import ConflictError
from ratings.stats import distribution as hist
from ratings.stats.daily_stats import DailyStats, daily_key, to_utc_date
from ratings.stats.entity_stats import EntityStats
from ratings.stats.hourly_stats import HourlyStats, hourly_key, to_utc_hour

logger = structlog.get_logger(__name__)

# key -> [lock, number of callers holding or waiting on it]
_seed_locks: dict[str, list] = {}
_seed_locks_guard = threading.Lock()


@contextmanager
def _seed_lock(key: str):
    with _seed_locks_guard:
        entry = _seed_locks.setdefault(key, [threading.Lock(), 0])
        entry[1] += 1
    try:
        with entry[0]:
            yield
    finally:
        with _seed_locks_guard:
            entry[1] -= 1
            if entry[1] == 0:
                del _seed_locks[key]


def _find(aggregate_cls, identifier):
    try:
        return current_domain.repository_for(aggregate_cls).get(identifier)
    except ObjectNotFoundError:
        return None


class AggregationEngine:
    def __init__(self, settings: RatingsSettings | None = None, sleep=time.sleep) -> None:
        self._settings = settings
        self._sleep = sleep

    @property
    def settings(self) -> RatingsSettings:
        if self._settings is None:
            self._settings = RatingsSettings.from_domain()
        return self._settings

    # ------------------------------------------------------------------
    # Review events
    # ------------------------------------------------------------------
    def on_review_created(self, entity_id, rating: int, occurred_at: datetime) -> EntityStats:
        """Count a new review in the entity's lifetime, daily and hourly stats."""
        hist.validate_rating(rating)
        entity_id = str(entity_id)
        day = to_utc_date(occurred_at)
        hour = to_utc_hour(occurred_at)

        self._seed(EntityStats, entity_id, lambda: EntityStats.empty(entity_id))
        self._seed(DailyStats, daily_key(entity_id, day), lambda: DailyStats.empty(entity_id, day))
        self._seed(HourlyStats, hourly_key(entity_id, hour), lambda: HourlyStats.empty(entity_id, hour))

        def apply():
            stats = _find(EntityStats, entity_id) or EntityStats.empty(entity_id)
            daily = _find(DailyStats, daily_key(entity_id, day)) or DailyStats.empty(entity_id, day)
            hourly = _find(HourlyStats, hourly_key(entity_id, hour)) or HourlyStats.empty(entity_id, hour)

            stats.record_rating(rating, datetime.now(UTC))
            daily.record_rating(rating)
            hourly.record_review()

            current_domain.repository_for(EntityStats).add(stats)
            current_domain.repository_for(DailyStats).add(daily)
            current_domain.repository_for(HourlyStats).add(hourly)
            return stats

        return self._transact(entity_id, apply)

    def on_review_updated(self, entity_id, old_rating: int, new_rating: int, occurred_at: datetime) -> EntityStats | None:
        """Move one review between rating buckets.

        A no-op when the rating did not change, and when no review is counted
        under ``old_rating`` (a replayed or out-of-order update). If the day's
        DailyStats record is gone (the review predates the retained window)
        only EntityStats changes. Review counts never change here.
        """
        hist.validate_rating(old_rating)
        hist.validate_rating(new_rating)
        entity_id = str(entity_id)
        if old_rating == new_rating:
            logger.debug("Review rating unchanged, skipping", entity_id=entity_id, rating=new_rating)
            return None
        day = to_utc_date(occurred_at)

        def apply():
            stats = _find(EntityStats, entity_id)
            if stats is None:
                logger.warning("Review update for entity without stats ignored", entity_id=entity_id)
                return None

            if not stats.replace_rating(old_rating, new_rating, datetime.now(UTC)):
                logger.warning(
                    "Review update for uncounted rating ignored",
                    entity_id=entity_id,
                    old_rating=old_rating,
                    new_rating=new_rating,
                )
                return None
            current_domain.repository_for(EntityStats).add(stats)

            daily = _find(DailyStats, daily_key(entity_id, day))
            if daily is not None and daily.replace_rating(old_rating, new_rating):
                current_domain.repository_for(DailyStats).add(daily)
            return stats

        return self._transact(entity_id, apply)

    def on_review_deleted(self, entity_id, rating: int, occurred_at: datetime) -> EntityStats | None:
        """Remove one review from the counts, floored at zero."""
        hist.validate_rating(rating)
        entity_id = str(entity_id)
        day = to_utc_date(occurred_at)
        hour = to_utc_hour(occurred_at)

        def apply():
            stats = _find(EntityStats, entity_id)
            if stats is None:
                logger.warning("Review deletion for entity without stats ignored", entity_id=entity_id)
                return None

            stats.withdraw_rating(rating, datetime.now(UTC))
            current_domain.repository_for(EntityStats).add(stats)

            daily = _find(DailyStats, daily_key(entity_id, day))
            if daily is not None:
                daily.withdraw_rating(rating)
                current_domain.repository_for(DailyStats).add(daily)

            hourly = _find(HourlyStats, hourly_key(entity_id, hour))
            if hourly is not None:
                hourly.withdraw_review()
                current_domain.repository_for(HourlyStats).add(hourly)
            return stats

        return self._transact(entity_id, apply)

    # ------------------------------------------------------------------
    # Entity deletion
    # ------------------------------------------------------------------
    def purge_entity(self, entity_id) -> int:
        """Delete every stats record kept for ``entity_id``. Returns the number removed."""
        entity_id = str(entity_id)
        removed = 0

        with UnitOfWork():
            stats_repo = current_domain.repository_for(EntityStats)
            stats = _find(EntityStats, entity_id)
            if stats is not None:
                stats_repo._dao.delete(stats)
                removed += 1

            for aggregate_cls in (DailyStats, HourlyStats):
                repo = current_domain.repository_for(aggregate_cls)
                for record in repo._dao.query.filter(entity_id=entity_id).limit(None).all().items:
                    repo._dao.delete(record)
                    removed += 1

        logger.info("Entity stats purged", entity_id=entity_id, records=removed)
        return removed

    # ------------------------------------------------------------------
    # Transaction discipline
    # ------------------------------------------------------------------
    def _seed(self, aggregate_cls, identifier: str, factory) -> None:
        """Insert an empty record for ``identifier`` if none exists yet."""
        if current_uow:
            # The enclosing unit of work creates missing records on first write
            return
        if _find(aggregate_cls, identifier) is not None:
            return

        with _seed_lock(f"{aggregate_cls.__name__}:{identifier}"):
            if _find(aggregate_cls, identifier) is None:
                with UnitOfWork():
                    current_domain.repository_for(aggregate_cls).add(factory())

    def _transact(self, entity_id: str, apply):
        settings = self.settings
        for attempt in range(settings.max_retries + 1):
            try:
                with UnitOfWork():
                    return apply()
            except ExpectedVersionError as exc:
                if attempt >= settings.max_retries:
                    logger.error(
                        "Stats update failed after conflict retries",
                        entity_id=entity_id,
                        attempts=attempt + 1,
                    )
                    raise ConflictError(entity_id, attempt + 1) from exc

                delay = random.uniform(0, settings.backoff(attempt))
                logger.debug(
                    "Stats update conflict, retrying",
                    entity_id=entity_id,
                    attempt=attempt + 1,
                    delay=round(delay, 4),
                )
                self._sleep(delay)
