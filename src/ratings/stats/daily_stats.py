"""DailyStats aggregate — rating statistics for one entity on one calendar day.

Keyed by ``"{entity_id}:{YYYY-MM-DD}"``. The day is the UTC date of the
review's own timestamp, so later edits and deletions land in the same
bucket the review was first counted in.
"""

from datetime import UTC, date, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, Integer, String, Text

from ratings.domain import ratings
from ratings.stats import distribution as hist


def to_utc_date(moment: datetime) -> date:
    """Calendar date of ``moment`` in UTC. Naive datetimes are taken as UTC."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(UTC)
    return moment.date()


def daily_key(entity_id, day: date | str) -> str:
    date_str = day if isinstance(day, str) else day.isoformat()
    return f"{entity_id}:{date_str}"


@ratings.aggregate
class DailyStats:
    id = String(identifier=True, required=True, max_length=300)  # "{entity_id}:{YYYY-MM-DD}"
    entity_id = Identifier(required=True)
    date = String(required=True, max_length=10)  # YYYY-MM-DD
    review_count = Integer(default=0, min_value=0)
    rating_sum = Integer(default=0, min_value=0)
    average_rating = Float(default=0.0)
    rating_distribution = Text()

    @invariant.post
    def counts_match_distribution(self):
        buckets = hist.load(self.rating_distribution)
        if hist.total(buckets) != (self.review_count or 0):
            raise ValidationError({"review_count": ["Review count must equal the sum of the rating distribution"]})
        if hist.weighted_sum(buckets) != (self.rating_sum or 0):
            raise ValidationError({"rating_sum": ["Rating sum must match the rating distribution"]})

    @classmethod
    def empty(cls, entity_id, day) -> "DailyStats":
        return cls(
            id=daily_key(entity_id, day),
            entity_id=entity_id,
            date=day.isoformat(),
            review_count=0,
            rating_sum=0,
            average_rating=0.0,
            rating_distribution=hist.dump(hist.empty_distribution()),
        )

    @property
    def distribution(self) -> dict[int, int]:
        return hist.load(self.rating_distribution)

    def _apply(self, buckets: dict[int, int]) -> None:
        with atomic_change(self):
            self.rating_distribution = hist.dump(buckets)
            self.review_count = hist.total(buckets)
            self.rating_sum = hist.weighted_sum(buckets)
            self.average_rating = hist.average(buckets)

    def record_rating(self, rating: int) -> None:
        self._apply(hist.increment(self.distribution, hist.validate_rating(rating)))

    def replace_rating(self, old_rating: int, new_rating: int) -> bool:
        """Move one review between buckets; False when nothing was moved."""
        hist.validate_rating(old_rating)
        hist.validate_rating(new_rating)
        buckets = self.distribution
        if old_rating == new_rating or buckets[old_rating] == 0:
            return False
        self._apply(hist.increment(hist.decrement(buckets, old_rating), new_rating))
        return True

    def withdraw_rating(self, rating: int) -> None:
        self._apply(hist.decrement(self.distribution, hist.validate_rating(rating)))
