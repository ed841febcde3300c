"""Inbound cross-domain event handlers — Ratings reacts to Review and Catalog events.

Handlers translate external event payloads into AggregationEngine calls.
``@handle`` runs each invocation in its own UnitOfWork and retries version
conflicts per ``[server.version_retry]``, so the engine joins that unit of
work instead of opening its own.
"""

from protean.utils.mixins import handle
from shared.events.catalog import EntityDeleted
from shared.events.reviews import ReviewCreated, ReviewDeleted, ReviewUpdated

from ratings.domain import ratings
from ratings.stats.aggregation import AggregationEngine
from ratings.stats.entity_stats import EntityStats

ratings.register_external_event(ReviewCreated, "Reviews.ReviewCreated.v1")
ratings.register_external_event(ReviewUpdated, "Reviews.ReviewUpdated.v1")
ratings.register_external_event(ReviewDeleted, "Reviews.ReviewDeleted.v1")
ratings.register_external_event(EntityDeleted, "Catalog.EntityDeleted.v1")


@ratings.event_handler(part_of=EntityStats, stream_category="reviews::review")
class ReviewLifecycleHandler:
    """Keeps rating statistics in step with the review lifecycle."""

    @handle(ReviewCreated)
    def on_review_created(self, event: ReviewCreated) -> None:
        AggregationEngine().on_review_created(str(event.entity_id), event.rating, event.timestamp)

    @handle(ReviewUpdated)
    def on_review_updated(self, event: ReviewUpdated) -> None:
        AggregationEngine().on_review_updated(
            str(event.entity_id),
            event.old_rating,
            event.new_rating,
            event.timestamp,
        )

    @handle(ReviewDeleted)
    def on_review_deleted(self, event: ReviewDeleted) -> None:
        AggregationEngine().on_review_deleted(str(event.entity_id), event.rating, event.timestamp)


@ratings.event_handler(part_of=EntityStats, stream_category="catalog::entity")
class EntityLifecycleHandler:
    """Purges statistics of entities deleted from the catalog."""

    @handle(EntityDeleted)
    def on_entity_deleted(self, event: EntityDeleted) -> None:
        AggregationEngine().purge_entity(str(event.entity_id))
