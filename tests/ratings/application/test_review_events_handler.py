"""Application tests for the inbound review and catalog event handlers."""

from datetime import UTC, datetime

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from ratings.stats.daily_stats import DailyStats, daily_key
from ratings.stats.entity_stats import EntityStats
from ratings.stats.hourly_stats import HourlyStats
from ratings.stats.review_events import EntityLifecycleHandler, ReviewLifecycleHandler
from shared.events.catalog import EntityDeleted
from shared.events.reviews import ReviewCreated, ReviewDeleted, ReviewUpdated

REVIEWED_AT = datetime(2026, 3, 15, 10, 0, tzinfo=UTC)


def _created(entity_id, rating, review_id=None):
    return ReviewCreated(review_id=review_id, entity_id=entity_id, rating=rating, timestamp=REVIEWED_AT)


def _stats(entity_id):
    return current_domain.repository_for(EntityStats).get(entity_id)


class TestReviewCreatedHandler:
    def test_counts_review(self):
        ReviewLifecycleHandler().on_review_created(_created("game-h1", 5))

        stats = _stats("game-h1")
        assert stats.total_reviews == 1
        assert stats.average_rating == 5.0

        daily = current_domain.repository_for(DailyStats).get(daily_key("game-h1", REVIEWED_AT.date()))
        assert daily.review_count == 1

    def test_successive_events_accumulate(self):
        handler = ReviewLifecycleHandler()
        for rating in (5, 5, 1):
            handler.on_review_created(_created("game-h2", rating))

        stats = _stats("game-h2")
        assert stats.total_reviews == 3
        assert stats.average_rating == pytest.approx(11 / 3)

    def test_out_of_range_rating_rejected(self):
        with pytest.raises(ValidationError):
            ReviewLifecycleHandler().on_review_created(_created("game-h3", 7))


class TestReviewUpdatedHandler:
    def test_moves_rating(self):
        handler = ReviewLifecycleHandler()
        handler.on_review_created(_created("game-h4", 3))

        handler.on_review_updated(
            ReviewUpdated(entity_id="game-h4", old_rating=3, new_rating=4, timestamp=REVIEWED_AT)
        )

        stats = _stats("game-h4")
        assert stats.distribution[3] == 0
        assert stats.distribution[4] == 1


class TestReviewDeletedHandler:
    def test_removes_rating(self):
        handler = ReviewLifecycleHandler()
        handler.on_review_created(_created("game-h5", 2))
        handler.on_review_created(_created("game-h5", 4))

        handler.on_review_deleted(ReviewDeleted(entity_id="game-h5", rating=2, timestamp=REVIEWED_AT))

        stats = _stats("game-h5")
        assert stats.total_reviews == 1
        assert stats.average_rating == 4.0


class TestEntityDeletedHandler:
    def test_purges_stats(self):
        ReviewLifecycleHandler().on_review_created(_created("game-h6", 5))

        EntityLifecycleHandler().on_entity_deleted(EntityDeleted(entity_id="game-h6", deleted_at=REVIEWED_AT))

        repo = current_domain.repository_for(EntityStats)
        assert repo._dao.query.filter(entity_id="game-h6").all().items == []
        daily_repo = current_domain.repository_for(DailyStats)
        assert daily_repo._dao.query.filter(entity_id="game-h6").all().items == []
        hourly_repo = current_domain.repository_for(HourlyStats)
        assert hourly_repo._dao.query.filter(entity_id="game-h6").all().items == []
