"""Runtime settings for the ratings engine.

Values come from the ``[custom]`` section of ``domain.toml`` (with the
environment overlay applied by protean); anything missing falls back to
the defaults declared on ``RatingsSettings``.
"""

from dataclasses import dataclass, fields
from datetime import timedelta

from protean.utils.globals import current_domain


@dataclass(frozen=True)
class RatingsSettings:
    max_retries: int = 5
    retry_base_delay: float = 0.01
    retry_max_delay: float = 0.5
    trending_cap: int = 50
    weight_recency: float = 2.0
    weight_quality: float = 10.0
    weight_volume: float = 5.0
    trending_interval: float = 3600.0
    trending_deadline: float = 300.0
    trending_workers: int = 8
    daily_window_days: int = 30
    stale_after: float = 7200.0
    top_rated_min_reviews: int = 5

    @classmethod
    def from_mapping(cls, values: dict) -> "RatingsSettings":
        known = {f.name: f.type for f in fields(cls)}
        kwargs = {}
        for name, value in (values or {}).items():
            if name not in known:
                continue
            kwargs[name] = int(value) if known[name] in (int, "int") else float(value)
        return cls(**kwargs)

    @classmethod
    def from_domain(cls, domain=None) -> "RatingsSettings":
        """Build settings from the active (or given) domain's configuration."""
        domain = domain or current_domain
        return cls.from_mapping(domain.config.get("custom", {}))

    @property
    def stale_threshold(self) -> timedelta:
        return timedelta(seconds=self.stale_after)

    def backoff(self, attempt: int) -> float:
        """Exponential backoff delay before retry number ``attempt`` (0-based)."""
        return min(self.retry_base_delay * (2**attempt), self.retry_max_delay)
