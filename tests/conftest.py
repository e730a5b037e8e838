import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Fetch and activate the domain by pushing the associated domain_context. The activated domain can then be referred to elsewhere as `current_domain`
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env

    from storefront.domain import storefront

    storefront.init()
    storefront.domain_context().push()


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session", autouse=True)
def setup_db(request):
    from storefront.domain import storefront
    from storefront.utils.db import drop_db, setup_db

    setup_db(storefront)

    yield

    drop_db(storefront)


@pytest.fixture(autouse=True)
def run_around_tests():
    """Fixture to automatically cleanup infrastructure after every test"""
    yield

    from protean import current_domain

    # Clear all databases
    for _, provider in current_domain.providers.items():
        provider._data_reset()

    # Drain event stores
    current_domain.event_store.store._data_reset()


# ---------------------------------------------------------------------------
# Shared builders
# ---------------------------------------------------------------------------
SHIPPING_ADDRESS = {
    "full_name": "Ayesha Khan",
    "street": "12 Mall Road",
    "city": "Lahore",
    "province": "Punjab",
    "postal_code": "54000",
    "phone": "03001234567",
}


@pytest.fixture()
def shipping_address():
    return dict(SHIPPING_ADDRESS)


@pytest.fixture()
def make_product():
    """Persist a product through the AddProduct command and return it."""
    import json

    from protean import current_domain

    from storefront.catalogue.management import AddProduct
    from storefront.catalogue.product import Product

    def _make(name="Lawn Kurta", price=1000.0, stock_quantity=10, **kwargs):
        for key in ("sizes", "images"):
            if key in kwargs:
                kwargs[key] = json.dumps(kwargs[key])
        product_id = current_domain.process(
            AddProduct(name=name, price=price, stock_quantity=stock_quantity, **kwargs),
            asynchronous=False,
        )
        return current_domain.repository_for(Product).get(product_id)

    return _make


@pytest.fixture()
def fill_cart():
    """Add ``(product, quantity[, size])`` lines to a customer's cart."""
    from protean import current_domain

    from storefront.cart.items import AddToCart

    def _fill(customer_id, *lines):
        for line in lines:
            product, quantity, *rest = line
            current_domain.process(
                AddToCart(
                    customer_id=customer_id,
                    product_id=str(product.id),
                    quantity=quantity,
                    size=rest[0] if rest else None,
                ),
                asynchronous=False,
            )

    return _fill
