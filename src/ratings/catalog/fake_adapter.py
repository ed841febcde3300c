"""In-memory catalog for development and testing.

Entries are registered at runtime; lookups of unknown ids return None,
matching how a real catalog service reports missing entities.
"""

from ratings.catalog.port import CatalogEntry, CatalogPort


class FakeCatalog(CatalogPort):
    def __init__(self) -> None:
        self.entries: dict[str, CatalogEntry] = {}
        self.calls: list[dict] = []

    def register(self, entity_id: str, title: str = "", image_ref: str = "", owner_id: str | None = None) -> None:
        self.entries[str(entity_id)] = CatalogEntry(title=title, image_ref=image_ref, owner_id=owner_id)

    def describe(self, entity_id: str) -> CatalogEntry | None:
        self.calls.append({"method": "describe", "entity_id": entity_id})
        return self.entries.get(str(entity_id))

    def entities_owned_by(self, owner_id: str) -> list[str]:
        self.calls.append({"method": "entities_owned_by", "owner_id": owner_id})
        return sorted(entity_id for entity_id, entry in self.entries.items() if entry.owner_id == owner_id)
