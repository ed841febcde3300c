"""BDD tests for rating aggregation."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import parsers, scenarios, then, when
from ratings.stats.aggregation import AggregationEngine
from ratings.stats.daily_stats import DailyStats, daily_key
from ratings.stats.entity_stats import EntityStats

scenarios("features/rating_aggregation.feature")


def parse_ratings(text):
    return [int(part) for part in text.split(",") if part.strip()]


@when(parsers.cfparse('reviews rated {ratings} are created for entity "{entity_id}"'))
def create_reviews(ratings, entity_id, as_of):
    engine = AggregationEngine()
    for rating in parse_ratings(ratings):
        engine.on_review_created(entity_id, rating, as_of)


@when(parsers.cfparse('a review rated {rating:d} is created for entity "{entity_id}"'))
def create_review(rating, entity_id, as_of, error):
    try:
        AggregationEngine().on_review_created(entity_id, rating, as_of)
    except ValidationError as exc:
        error["exc"] = exc


@when(parsers.cfparse('a review of entity "{entity_id}" changes from {old:d} to {new:d}'))
def change_review(entity_id, old, new, as_of):
    AggregationEngine().on_review_updated(entity_id, old, new, as_of)


@when(parsers.cfparse('a review rated {rating:d} is deleted from entity "{entity_id}"'))
def delete_review(rating, entity_id, as_of):
    AggregationEngine().on_review_deleted(entity_id, rating, as_of)


@then(parsers.cfparse('entity "{entity_id}" has {count:d} reviews rated {rating:d}'))
def entity_bucket(entity_id, count, rating):
    assert current_domain.repository_for(EntityStats).get(entity_id).distribution[rating] == count


@then(parsers.cfparse("today's stats for entity \"{entity_id}\" show {count:d} reviews"))
def daily_count(entity_id, count, as_of):
    daily = current_domain.repository_for(DailyStats).get(daily_key(entity_id, as_of.date()))
    assert daily.review_count == count


@then(parsers.cfparse("today's stats for entity \"{entity_id}\" show an average of {average:f}"))
def daily_average(entity_id, average, as_of):
    daily = current_domain.repository_for(DailyStats).get(daily_key(entity_id, as_of.date()))
    assert daily.average_rating == pytest.approx(average)


@then("the rating is rejected")
def rating_rejected(error):
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse('entity "{entity_id}" has no stats'))
def entity_has_no_stats(entity_id):
    repo = current_domain.repository_for(EntityStats)
    assert repo._dao.query.filter(entity_id=entity_id).all().items == []
