"""
Key/value cart repository

Persists the cart lines as one JSON array under a single namespaced key.
Every operation is best-effort: failures are logged and never raised.
"""

import json
import logging
from typing import List, Sequence

from reconshop_cart.domain.entities.cart_item import CartItem
from reconshop_cart.domain.repositories.cart_repository import CartRepository
from reconshop_cart.infrastructure.persistence.key_value_store import KeyValueStore
from reconshop_cart.infrastructure.utilities.exceptions import PersistenceError

DEFAULT_STORAGE_KEY = "reconshop-cart"


def encode_items(items: Sequence[CartItem]) -> str:
    """Serialize cart lines to the storage JSON format"""
    return json.dumps([item.to_dict() for item in items], ensure_ascii=False)


def decode_items(payload: str) -> List[CartItem]:
    """
    Parse the storage JSON format.

    Raises:
        ValueError: If the payload is not a JSON array of valid cart items.
    """
    data = json.loads(payload)
    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON array, got {type(data).__name__}")
    return [CartItem.from_dict(entry) for entry in data]


class KeyValueCartRepository(CartRepository):
    """Cart repository backed by a ``KeyValueStore``"""

    def __init__(self, store: KeyValueStore, storage_key: str = DEFAULT_STORAGE_KEY):
        self._store = store
        self._storage_key = storage_key
        self._logger = logging.getLogger(self.__class__.__name__)

    @property
    def storage_key(self) -> str:
        return self._storage_key

    def load(self) -> List[CartItem]:
        """Return the saved lines, or [] when absent or undecodable"""
        try:
            payload = self._store.get_item(self._storage_key)
            if not payload:
                return []
            items = decode_items(payload)
            self._logger.debug("Loaded %d cart lines from %s", len(items), self._storage_key)
            return items
        except PersistenceError as e:
            self._logger.warning(
                "Cart storage unavailable, starting empty: %s", e,
                extra={"operation": "load", "storage_key": self._storage_key},
            )
        except (ValueError, TypeError) as e:
            # json.JSONDecodeError is a ValueError
            self._logger.warning(
                "Discarding unreadable cart payload: %s", e,
                extra={"operation": "load", "storage_key": self._storage_key},
            )
        except Exception as e:
            self._logger.error(
                "Unexpected error loading cart: %s", e, exc_info=True,
                extra={"operation": "load", "storage_key": self._storage_key},
            )
        return []

    def save(self, items: Sequence[CartItem]) -> None:
        """Write the full sequence, replacing the previous value"""
        try:
            self._store.set_item(self._storage_key, encode_items(items))
            self._logger.debug("Saved %d cart lines to %s", len(items), self._storage_key)
        except PersistenceError as e:
            self._logger.warning(
                "Could not save cart: %s", e,
                extra={"operation": "save", "storage_key": self._storage_key},
            )
        except Exception as e:
            self._logger.error(
                "Unexpected error saving cart: %s", e, exc_info=True,
                extra={"operation": "save", "storage_key": self._storage_key},
            )

    def clear(self) -> None:
        """Remove the saved value"""
        try:
            self._store.remove_item(self._storage_key)
            self._logger.debug("Removed saved cart %s", self._storage_key)
        except PersistenceError as e:
            self._logger.warning(
                "Could not clear saved cart: %s", e,
                extra={"operation": "clear", "storage_key": self._storage_key},
            )
        except Exception as e:
            self._logger.error(
                "Unexpected error clearing cart: %s", e, exc_info=True,
                extra={"operation": "clear", "storage_key": self._storage_key},
            )
