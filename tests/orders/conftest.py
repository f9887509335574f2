import pytest
from protean.integrations.pytest import DomainFixture

from orders.clients import fake_collaborators, reset_collaborators, set_collaborators
from orders.config import reset_settings


@pytest.fixture(scope="session")
def orders_bed():
    from orders.domain import orders

    bed = DomainFixture(orders)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture
def collaborators():
    """Fresh fake collaborators, installed as the active set for the test."""
    fakes = fake_collaborators()
    set_collaborators(fakes)
    return fakes


@pytest.fixture(autouse=True)
def _ctx(orders_bed):
    reset_settings()
    with orders_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()

    reset_collaborators()
    reset_settings()


@pytest.fixture
def lifecycle(collaborators):
    from orders.services.lifecycle import OrderLifecycle

    return OrderLifecycle(collaborators)


CART_ITEMS = [
    {"product_id": "prod-001", "product_title": "USB-C Hub", "unit_price": 250.0, "quantity": 2},
    {"product_id": "prod-002", "product_title": "Mechanical Keyboard", "unit_price": 250.0, "quantity": 1},
]


@pytest.fixture
def cart_items():
    """Two lines worth 750 before the default 100 delivery charge."""
    return [dict(item) for item in CART_ITEMS]
