"""Cross-domain event contracts for review lifecycle events.

The review-authoring service owns reviews; the ratings domain only consumes
the ``(entity_id, rating, timestamp)`` facts each event carries. The classes
are registered as external events via domain.register_external_event() with
matching __type__ strings so Protean's stream deserialization works correctly.

``timestamp`` is always the review's own creation time, including on
updates and deletions, so consumers can find the day the review was first
counted in.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Identifier, Integer


class ReviewCreated(BaseEvent):
    """A review was published for an entity."""

    __version__ = 1

    review_id = Identifier()
    entity_id = Identifier(required=True)
    rating = Integer(required=True)
    timestamp = DateTime(required=True)


class ReviewUpdated(BaseEvent):
    """A published review changed its star rating."""

    __version__ = 1

    review_id = Identifier()
    entity_id = Identifier(required=True)
    old_rating = Integer(required=True)
    new_rating = Integer(required=True)
    timestamp = DateTime(required=True)


class ReviewDeleted(BaseEvent):
    """A published review was deleted."""

    __version__ = 1

    review_id = Identifier()
    entity_id = Identifier(required=True)
    rating = Integer(required=True)
    timestamp = DateTime(required=True)
