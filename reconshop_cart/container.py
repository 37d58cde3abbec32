"""
Dependency container for the cart engine.

Unlike a process-wide singleton, each ``Container`` is constructed explicitly
and hands the same ``CartStore`` to every consumer it serves.
"""

import logging
from typing import Optional

from reconshop_cart.config import Settings, get_config
from reconshop_cart.infrastructure.persistence.cart_storage import KeyValueCartRepository
from reconshop_cart.infrastructure.persistence.key_value_store import (
    KeyValueStore,
    create_key_value_store,
)
from reconshop_cart.services.cart_store import CartStore

logger = logging.getLogger(__name__)


class Container:
    """Lazily builds the key/value store, repository and cart store"""

    def __init__(self, settings: Optional[Settings] = None, store: Optional[KeyValueStore] = None):
        self.config = settings or get_config()
        self._key_value_store = store
        self._repository: Optional[KeyValueCartRepository] = None
        self._cart_store: Optional[CartStore] = None

    def get_key_value_store(self) -> KeyValueStore:
        if self._key_value_store is None:
            self._key_value_store = create_key_value_store(self.config)
        return self._key_value_store

    def get_cart_repository(self) -> KeyValueCartRepository:
        if self._repository is None:
            self._repository = KeyValueCartRepository(
                self.get_key_value_store(), storage_key=self.config.storage_key
            )
        return self._repository

    def get_cart_store(self) -> CartStore:
        """Get the cart store, hydrating it on first use"""
        if self._cart_store is None:
            self._cart_store = CartStore(
                self.get_cart_repository(),
                max_line_quantity=self.config.max_line_quantity,
            )
            logger.info("Cart store created (backend=%s)", self.config.storage_backend)
        return self._cart_store
