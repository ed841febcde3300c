from datetime import UTC, datetime

import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def ratings_bed():
    from ratings.domain import ratings

    bed = DomainFixture(ratings)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ratings_bed):
    with ratings_bed.domain_context():
        yield


@pytest.fixture()
def now():
    return datetime(2026, 3, 15, 12, 0, tzinfo=UTC)


@pytest.fixture()
def catalog():
    from ratings.catalog import set_catalog
    from ratings.catalog.fake_adapter import FakeCatalog

    fake = FakeCatalog()
    set_catalog(fake)
    return fake
