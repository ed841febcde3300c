"""Catalog port (abstract interface).

The catalog owns entity metadata. The ratings domain only reads it to
denormalise display fields onto trending entries and to find the entities
an owner publishes. Adapters must return ``None`` for unknown entities
rather than raising.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class CatalogEntry:
    """Display metadata for one catalog entity."""

    title: str = ""
    image_ref: str = ""
    owner_id: str | None = None


class CatalogPort(ABC):
    """Abstract catalog interface."""

    @abstractmethod
    def describe(self, entity_id: str) -> CatalogEntry | None:
        """Return display metadata for ``entity_id``, or None if it is unknown."""
        ...

    @abstractmethod
    def entities_owned_by(self, owner_id: str) -> list[str]:
        """Return the ids of every entity published by ``owner_id``."""
        ...
