"""Trending periods — the rolling windows a trending snapshot ranks over."""

from datetime import timedelta
from enum import Enum


class TrendingPeriod(Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @property
    def lookback(self) -> timedelta:
        return timedelta(days=self.lookback_days)

    @property
    def lookback_days(self) -> int:
        return _LOOKBACK_DAYS[self]

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @classmethod
    def parse(cls, value) -> "TrendingPeriod":
        """Strict lookup by value or name; raises ValueError for anything else."""
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        for period in cls:
            if normalized in (period.value, period.name.lower()):
                return period
        raise ValueError(f"Unknown trending period: {value!r}")

    @classmethod
    def from_string(cls, value) -> "TrendingPeriod":
        """Lenient lookup: unknown values fall back to DAILY."""
        try:
            return cls.parse(value)
        except ValueError:
            return cls.DAILY


_LOOKBACK_DAYS = {
    TrendingPeriod.DAILY: 1,
    TrendingPeriod.WEEKLY: 7,
    TrendingPeriod.MONTHLY: 30,
}

_DISPLAY_NAMES = {
    TrendingPeriod.DAILY: "Today",
    TrendingPeriod.WEEKLY: "This Week",
    TrendingPeriod.MONTHLY: "This Month",
}
