"""HourlyStats aggregate — review counts for one entity in one UTC hour.

Keyed by ``"{entity_id}:{YYYY-MM-DDTHH}"``. Trending windows are rolling
(the last 24 hours, 7 days or 30 days before the run), so they are summed
from these hour buckets rather than from calendar days.
"""

from datetime import UTC, datetime

from protean.fields import Identifier, Integer, String

from ratings.domain import ratings

HOUR_FORMAT = "%Y-%m-%dT%H"


def to_utc_hour(moment: datetime) -> str:
    """``YYYY-MM-DDTHH`` of ``moment`` in UTC. Naive datetimes are taken as UTC."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(UTC)
    return moment.strftime(HOUR_FORMAT)


def hourly_key(entity_id, hour: str) -> str:
    return f"{entity_id}:{hour}"


@ratings.aggregate
class HourlyStats:
    id = String(identifier=True, required=True, max_length=300)  # "{entity_id}:{YYYY-MM-DDTHH}"
    entity_id = Identifier(required=True)
    hour = String(required=True, max_length=13)  # YYYY-MM-DDTHH
    review_count = Integer(default=0, min_value=0)

    @classmethod
    def empty(cls, entity_id, hour: str) -> "HourlyStats":
        return cls(id=hourly_key(entity_id, hour), entity_id=entity_id, hour=hour, review_count=0)

    def record_review(self) -> None:
        self.review_count = (self.review_count or 0) + 1

    def withdraw_review(self) -> None:
        self.review_count = max((self.review_count or 0) - 1, 0)
