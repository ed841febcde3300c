"""EntityStats aggregate — lifetime rating statistics for one reviewed entity.

One record per entity, created lazily on the first review and updated on
every review event for that entity. ``total_reviews`` and ``average_rating``
are always derived from the stored distribution, never adjusted
incrementally.
"""

from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, Text

from ratings.domain import ratings
from ratings.stats import distribution as hist


@ratings.aggregate
class EntityStats:
    entity_id = Identifier(identifier=True, required=True)
    total_reviews = Integer(default=0, min_value=0)
    rating_distribution = Text()  # JSON: {"1": 0, "2": 0, "3": 0, "4": 0, "5": 0}
    average_rating = Float(default=0.0)
    last_updated = DateTime()

    @invariant.post
    def total_matches_distribution(self):
        buckets = hist.load(self.rating_distribution)
        if hist.total(buckets) != (self.total_reviews or 0):
            raise ValidationError({"total_reviews": ["Total reviews must equal the sum of the rating distribution"]})

    @invariant.post
    def average_matches_distribution(self):
        buckets = hist.load(self.rating_distribution)
        if abs(hist.average(buckets) - (self.average_rating or 0.0)) > 1e-9:
            raise ValidationError({"average_rating": ["Average rating must be derived from the rating distribution"]})

    @classmethod
    def empty(cls, entity_id) -> "EntityStats":
        return cls(
            entity_id=entity_id,
            total_reviews=0,
            rating_distribution=hist.dump(hist.empty_distribution()),
            average_rating=0.0,
        )

    @property
    def distribution(self) -> dict[int, int]:
        return hist.load(self.rating_distribution)

    def _apply(self, buckets: dict[int, int], at: datetime | None) -> None:
        with atomic_change(self):
            self.rating_distribution = hist.dump(buckets)
            self.total_reviews = hist.total(buckets)
            self.average_rating = hist.average(buckets)
            self.last_updated = at or datetime.now(UTC)

    def record_rating(self, rating: int, at: datetime | None = None) -> None:
        """Count one new review with ``rating`` stars."""
        self._apply(hist.increment(self.distribution, hist.validate_rating(rating)), at)

    def replace_rating(self, old_rating: int, new_rating: int, at: datetime | None = None) -> bool:
        """Move one review from ``old_rating`` to ``new_rating``.

        Returns False, leaving the record untouched, when the rating did not
        change or no review is counted under ``old_rating``.
        """
        hist.validate_rating(old_rating)
        hist.validate_rating(new_rating)
        buckets = self.distribution
        if old_rating == new_rating or buckets[old_rating] == 0:
            return False
        self._apply(hist.increment(hist.decrement(buckets, old_rating), new_rating), at)
        return True

    def withdraw_rating(self, rating: int, at: datetime | None = None) -> None:
        """Remove one review with ``rating`` stars, floored at zero."""
        self._apply(hist.decrement(self.distribution, hist.validate_rating(rating)), at)

    def rating_percentage(self, rating: int) -> float:
        return hist.percentage(self.distribution, rating)

    def most_common_rating(self) -> int:
        return hist.most_common(self.distribution)
