"""
Cart persistence: key/value storage media and the cart repository on top
"""

from .cart_storage import (
    DEFAULT_STORAGE_KEY,
    KeyValueCartRepository,
    decode_items,
    encode_items,
)
from .key_value_store import (
    FileKeyValueStore,
    InMemoryKeyValueStore,
    KeyValueStore,
    SQLAlchemyKeyValueStore,
    create_key_value_store,
)

__all__ = [
    "DEFAULT_STORAGE_KEY",
    "FileKeyValueStore",
    "InMemoryKeyValueStore",
    "KeyValueCartRepository",
    "KeyValueStore",
    "SQLAlchemyKeyValueStore",
    "create_key_value_store",
    "decode_items",
    "encode_items",
]
