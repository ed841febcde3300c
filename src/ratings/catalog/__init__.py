"""Catalog adapter factory.

Provides get_catalog() / set_catalog() / reset_catalog() to swap
implementations. The adapter is selected by the RATINGS_CATALOG environment
variable; ``fake`` (the in-memory FakeCatalog) is the default.
"""

import os

from ratings.catalog.port import CatalogPort

_current_catalog: CatalogPort | None = None


def get_catalog() -> CatalogPort:
    """Return the configured catalog adapter (singleton)."""
    global _current_catalog
    if _current_catalog is None:
        adapter = os.environ.get("RATINGS_CATALOG", "fake")
        if adapter == "fake":
            from ratings.catalog.fake_adapter import FakeCatalog

            _current_catalog = FakeCatalog()
        else:
            raise ValueError(f"Unknown catalog adapter: {adapter}")
    return _current_catalog


def set_catalog(catalog: CatalogPort) -> None:
    """Override the active catalog adapter (useful for tests)."""
    global _current_catalog
    _current_catalog = catalog


def reset_catalog() -> None:
    """Reset to the default catalog adapter."""
    global _current_catalog
    _current_catalog = None
