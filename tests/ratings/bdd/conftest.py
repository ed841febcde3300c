"""Shared BDD fixtures and step definitions for the Ratings domain."""

from datetime import UTC, datetime

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError
from pytest_bdd import given, parsers, then
from ratings.stats.aggregation import AggregationEngine
from ratings.stats.entity_stats import EntityStats

AS_OF = datetime(2026, 3, 15, 12, 0, tzinfo=UTC)


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


@pytest.fixture()
def as_of():
    return AS_OF


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('no reviews for entity "{entity_id}"'))
def no_reviews(entity_id):
    with pytest.raises(ObjectNotFoundError):
        current_domain.repository_for(EntityStats).get(entity_id)


@given(parsers.cfparse('reviews rated {ratings} exist for entity "{entity_id}"'))
def reviews_exist(ratings, entity_id, as_of):
    engine = AggregationEngine()
    for rating in (int(part) for part in ratings.split(",")):
        engine.on_review_created(entity_id, rating, as_of)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('entity "{entity_id}" has {count:d} reviews'))
def entity_has_reviews(entity_id, count):
    assert current_domain.repository_for(EntityStats).get(entity_id).total_reviews == count


@then(parsers.cfparse('entity "{entity_id}" has an average rating of {average:f}'))
def entity_has_average(entity_id, average):
    stats = current_domain.repository_for(EntityStats).get(entity_id)
    assert stats.average_rating == pytest.approx(average, abs=1e-4)
