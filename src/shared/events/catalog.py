"""Cross-domain event contracts for catalog entity events.

Only the deletion fact is consumed downstream: the ratings domain purges the
statistics it keeps for an entity that no longer exists.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Identifier


class EntityDeleted(BaseEvent):
    """An entity was removed from the catalog."""

    __version__ = 1

    entity_id = Identifier(required=True)
    deleted_at = DateTime(required=True)
