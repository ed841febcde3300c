"""Tests for the DailyStats aggregate."""

from datetime import UTC, date, datetime, timedelta, timezone

import pytest
from ratings.stats.daily_stats import DailyStats, daily_key, to_utc_date

DAY = date(2026, 3, 15)


class TestKeys:
    def test_daily_key(self):
        assert daily_key("game-1", DAY) == "game-1:2026-03-15"
        assert daily_key("game-1", "2026-03-15") == "game-1:2026-03-15"

    def test_aware_datetime_converted_to_utc(self):
        late_evening_west = datetime(2026, 3, 15, 22, 0, tzinfo=timezone(timedelta(hours=-5)))
        assert to_utc_date(late_evening_west) == date(2026, 3, 16)

    def test_naive_datetime_taken_as_utc(self):
        assert to_utc_date(datetime(2026, 3, 15, 23, 59)) == DAY

    def test_utc_datetime(self):
        assert to_utc_date(datetime(2026, 3, 15, 0, 0, tzinfo=UTC)) == DAY


class TestDailyStats:
    def test_empty(self):
        daily = DailyStats.empty("game-1", DAY)
        assert daily.id == "game-1:2026-03-15"
        assert daily.date == "2026-03-15"
        assert daily.review_count == 0
        assert daily.rating_sum == 0
        assert daily.average_rating == 0.0

    def test_ten_fives_then_one_deleted(self):
        daily = DailyStats.empty("game-1", DAY)
        for _ in range(10):
            daily.record_rating(5)
        assert daily.review_count == 10
        assert daily.average_rating == 5.0

        daily.withdraw_rating(5)
        assert daily.review_count == 9
        assert daily.rating_sum == 45
        assert daily.average_rating == 5.0

    def test_replace_rating(self):
        daily = DailyStats.empty("game-1", DAY)
        daily.record_rating(2)
        daily.record_rating(4)
        assert daily.replace_rating(2, 5) is True
        assert daily.rating_sum == 9
        assert daily.average_rating == pytest.approx(4.5)

    def test_replace_same_rating_is_a_no_op(self):
        daily = DailyStats.empty("game-1", DAY)
        daily.record_rating(3)
        assert daily.replace_rating(3, 3) is False
        assert daily.distribution[3] == 1

    def test_replace_uncounted_rating_keeps_count(self):
        daily = DailyStats.empty("game-1", DAY)
        daily.record_rating(5)
        assert daily.replace_rating(3, 4) is False
        assert daily.review_count == 1
        assert daily.distribution == {1: 0, 2: 0, 3: 0, 4: 0, 5: 1}

    def test_withdraw_from_empty_day_stays_at_zero(self):
        daily = DailyStats.empty("game-1", DAY)
        daily.withdraw_rating(4)
        assert daily.review_count == 0
        assert daily.average_rating == 0.0
