"""Rating distribution helpers.

A distribution is a five-bucket histogram of review counts keyed by star
value. Aggregates persist it as JSON text (``{"1": 0, ..., "5": 0}``) and
derive every count and average from it, so a stored total can never drift
away from its buckets.
"""

import json

from protean.exceptions import ValidationError

STARS = (1, 2, 3, 4, 5)


def validate_rating(rating) -> int:
    """Return ``rating`` if it is an integer star value, else raise ValidationError."""
    if isinstance(rating, bool) or not isinstance(rating, int) or rating not in STARS:
        raise ValidationError({"rating": ["Rating must be between 1 and 5"]})
    return rating


def empty_distribution() -> dict[int, int]:
    return {star: 0 for star in STARS}


def load(raw: str | None) -> dict[int, int]:
    distribution = empty_distribution()
    if raw:
        for key, count in json.loads(raw).items():
            distribution[int(key)] = int(count)
    return distribution


def dump(distribution: dict[int, int]) -> str:
    return json.dumps({str(star): distribution.get(star, 0) for star in STARS})


def increment(distribution: dict[int, int], rating: int) -> dict[int, int]:
    updated = dict(distribution)
    updated[rating] = updated.get(rating, 0) + 1
    return updated


def decrement(distribution: dict[int, int], rating: int) -> dict[int, int]:
    """Remove one review from ``rating``'s bucket, floored at zero.

    Replayed or out-of-order deletes must not push a bucket negative.
    """
    updated = dict(distribution)
    updated[rating] = max(0, updated.get(rating, 0) - 1)
    return updated


def total(distribution: dict[int, int]) -> int:
    return sum(distribution.values())


def weighted_sum(distribution: dict[int, int]) -> int:
    return sum(star * count for star, count in distribution.items())


def average(distribution: dict[int, int]) -> float:
    """Mean star value, or 0.0 for an empty histogram. Never rounded."""
    count = total(distribution)
    if count == 0:
        return 0.0
    return weighted_sum(distribution) / count


def merge(*distributions: dict[int, int]) -> dict[int, int]:
    merged = empty_distribution()
    for distribution in distributions:
        for star, count in distribution.items():
            merged[star] = merged.get(star, 0) + count
    return merged


def percentage(distribution: dict[int, int], rating: int) -> float:
    count = total(distribution)
    if count == 0:
        return 0.0
    return distribution.get(rating, 0) / count * 100


def most_common(distribution: dict[int, int]) -> int:
    """Star value with the most reviews; ties go to the higher star, empty means 5."""
    if total(distribution) == 0:
        return 5
    return max(STARS, key=lambda star: (distribution.get(star, 0), star))
