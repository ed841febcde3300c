"""BDD tests for trending rankings."""

from datetime import timedelta

from protean import current_domain
from pytest_bdd import given, parsers, scenarios, then, when
from ratings.config import RatingsSettings
from ratings.stats.aggregation import AggregationEngine
from ratings.trending.computation import TrendingComputation
from ratings.trending.snapshot import TrendingSnapshot

scenarios("features/trending.feature")

_DAYS_AGO = {"today": 0, "yesterday": 1, "twenty days ago": 20}


def _add_reviews(entity_id, count, rating, when_text, as_of):
    engine = AggregationEngine()
    moment = as_of - timedelta(days=_DAYS_AGO[when_text])
    for _ in range(count):
        engine.on_review_created(entity_id, rating, moment)


@given(parsers.cfparse('entity "{entity_id}" titled "{title}" has {count:d} reviews rated {rating:d} {when_text}'))
@given(parsers.cfparse('entity "{entity_id}" titled "{title}" has {count:d} review rated {rating:d} {when_text}'))
def titled_entity_with_reviews(entity_id, title, count, rating, when_text, catalog, as_of):
    catalog.register(entity_id, title=title)
    _add_reviews(entity_id, count, rating, when_text, as_of)


@given(parsers.cfparse('uncatalogued entity "{entity_id}" has {count:d} reviews rated {rating:d} {when_text}'))
def entity_with_reviews(entity_id, count, rating, when_text, as_of):
    _add_reviews(entity_id, count, rating, when_text, as_of)


@when("trending is computed", target_fixture="summary")
def compute(catalog, as_of):
    return TrendingComputation(settings=RatingsSettings(), catalog=catalog).run(as_of=as_of)


def _entries(period):
    return current_domain.repository_for(TrendingSnapshot).get(period).entries_list()


@then(parsers.cfparse('the {period} ranking is "{entity_ids}"'))
def ranking_is(period, entity_ids):
    expected = [part.strip() for part in entity_ids.split(",")]
    assert [entry.entity_id for entry in _entries(period)] == expected


@then(parsers.cfparse('the entry ranked {rank:d} in the {period} ranking is titled "{title}"'))
def entry_title(rank, period, title):
    entry = _entries(period)[rank - 1]
    assert entry.rank == rank
    assert entry.title == title


@then(parsers.cfparse("the entry ranked {rank:d} in the {period} ranking has no title"))
def entry_without_title(rank, period):
    entry = _entries(period)[rank - 1]
    assert entry.title == ""
    assert entry.image_ref == ""
