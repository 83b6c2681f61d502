import os
from pathlib import Path
from uuid import uuid4

import pytest
from protean.integrations.pytest import DomainFixture


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Select the config overlay before the domain is imported."""
    os.environ["PROTEAN_ENV"] = session.config.option.env
    os.environ.setdefault("ENVIRONMENT", "test")
    if session.config.option.env == "sqlite":
        # SQLite rejects a second writer outright instead of queueing it
        os.environ.setdefault("CONFLICT_RETRIES", "25")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)


@pytest.fixture(scope="session")
def marketplace_bed():
    from marketplace.domain import marketplace
    from marketplace.utils.db import drop_db, setup_db

    bed = DomainFixture(marketplace)
    bed.setup()
    setup_db(marketplace)
    yield bed
    drop_db(marketplace)
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(marketplace_bed):
    with marketplace_bed.domain_context():
        yield

        from protean import current_domain

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()

        for _, broker in current_domain.brokers.items():
            broker._data_reset()

        # Drain event stores
        current_domain.event_store.store._data_reset()


# ---------------------------------------------------------------------------
# Catalogue helpers
# ---------------------------------------------------------------------------
@pytest.fixture()
def seller_id():
    return str(uuid4())


@pytest.fixture()
def buyer_id():
    return str(uuid4())


@pytest.fixture()
def shop(seller_id):
    from marketplace.catalogue.management import CreateShop
    from marketplace.catalogue.shop import Shop
    from marketplace.shared.transaction import find, process

    shop_id = process(CreateShop(owner_id=seller_id, shop_name="Corner Store", address="1 Market Row"))
    return find(Shop, shop_id)


@pytest.fixture()
def make_product(shop, seller_id):
    """Factory: a product with one variant in the seller's shop, returns (product_id, variant_id)."""
    from marketplace.catalogue.management import AddVariant, CreateProduct
    from marketplace.shared.transaction import process

    def _make(
        title="Linen Shirt",
        base_price=20.0,
        quantity=5,
        discount_type=None,
        discount_amount=None,
        label="M",
    ):
        product_id = process(
            CreateProduct(
                requested_by=seller_id,
                shop_id=shop.id,
                title=title,
                slug=f"{title.lower().replace(' ', '-')}-{uuid4().hex[:8]}",
                discount_type=discount_type,
                discount_amount=discount_amount,
            )
        )
        variant_id = process(
            AddVariant(
                requested_by=seller_id,
                product_id=product_id,
                label=label,
                base_price=base_price,
                quantity=quantity,
            )
        )
        return product_id, variant_id

    return _make


@pytest.fixture()
def stock_of():
    """Current on-hand quantity of a variant."""
    from protean import current_domain

    from marketplace.catalogue.product import Product

    def _stock(product_id, variant_id):
        product = current_domain.repository_for(Product).get(product_id)
        return product.variant(variant_id).quantity

    return _stock
