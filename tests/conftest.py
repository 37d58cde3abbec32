"""
Test configuration and fixtures for the ReconShop cart engine
"""

import os
from decimal import Decimal
from unittest.mock import patch

import pytest

import reconshop_cart.config
from reconshop_cart.domain.entities.cart_item import ProductSnapshot
from reconshop_cart.infrastructure.persistence.cart_storage import KeyValueCartRepository
from reconshop_cart.infrastructure.persistence.key_value_store import InMemoryKeyValueStore
from reconshop_cart.services.cart_store import CartStore


# Mock environment variables for testing
@pytest.fixture(autouse=True)
def mock_env():
    """Mock environment variables for testing"""
    test_env = {
        'ENVIRONMENT': 'test',
        'LOG_LEVEL': 'DEBUG',
        'STORAGE_BACKEND': 'memory',
    }

    with patch.dict(os.environ, test_env, clear=True):
        reconshop_cart.config._settings_instance = None
        yield test_env
        reconshop_cart.config._settings_instance = None


@pytest.fixture
def kv_store():
    """Empty in-memory key/value store"""
    return InMemoryKeyValueStore()


@pytest.fixture
def repository(kv_store):
    """Cart repository on the in-memory store"""
    return KeyValueCartRepository(kv_store)


@pytest.fixture
def cart(repository):
    """Cart store without a per-line quantity limit"""
    return CartStore(repository)


@pytest.fixture
def plain_item():
    """Product without variant or discount"""
    return ProductSnapshot(product_id=1, title="A", unit_price=Decimal("20"), image="a.png")


@pytest.fixture
def discounted_item():
    """Product with a 25% discount"""
    return ProductSnapshot(
        product_id=1, title="A", unit_price=Decimal("20"), image="a.png", discount_percent=25
    )


@pytest.fixture
def make_item():
    """Factory for product snapshots"""

    def _make(product_id=1, size=None, color=None, unit_price="10", discount_percent=None, title=None):
        return ProductSnapshot(
            product_id=product_id,
            title=title or f"Product {product_id}",
            unit_price=Decimal(unit_price),
            image=f"/images/{product_id}.png",
            discount_percent=discount_percent,
            variant={"size": size, "color": color},
        )

    return _make
