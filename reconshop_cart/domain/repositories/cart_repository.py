"""
Cart repository interface

Defines the contract for saving and restoring the cart lines across sessions.
Implementations must never raise: failures degrade to "nothing saved/loaded".
"""

from abc import ABC, abstractmethod
from typing import List, Sequence

from reconshop_cart.domain.entities.cart_item import CartItem


class CartRepository(ABC):
    """Repository interface for durable cart storage"""

    @abstractmethod
    def load(self) -> List[CartItem]:
        """Return the saved lines, or an empty list"""

    @abstractmethod
    def save(self, items: Sequence[CartItem]) -> None:
        """Replace the saved lines with ``items``"""

    @abstractmethod
    def clear(self) -> None:
        """Remove the saved value entirely"""
