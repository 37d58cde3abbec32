"""
Cart store service

Holds the current cart state and exposes the only supported way to read or
change it. Every mutating action builds a new item tuple, recomputes the
totals, saves the lines through the repository and publishes the new
``CartState`` to subscribers.
"""

import logging
from collections import deque
from typing import Any, Callable, List, Optional, Sequence, Tuple

from reconshop_cart.domain.entities.cart_item import CartItem, ProductSnapshot
from reconshop_cart.domain.entities.cart_state import CartState
from reconshop_cart.domain.repositories.cart_repository import CartRepository
from reconshop_cart.domain.services.identity import find_line_index, identity_of
from reconshop_cart.domain.services.totals import compute_totals
from reconshop_cart.domain.value_objects.product_id import ProductId
from reconshop_cart.infrastructure.logging.logging_config import get_structured_logger
from reconshop_cart.infrastructure.utilities.exceptions import ValidationError, validate_and_raise

Listener = Callable[[CartState], None]
Identity = Tuple[int, Optional[str], Optional[str]]


class CartStore:
    """
    Stateful shopping cart

    Actions:
    1. add_item - merge into a matching line or append a new one
    2. remove_item - drop a whole line
    3. update_quantity - set a line's absolute quantity (<= 0 removes it)
    4. clear_cart - empty the cart and erase the saved copy
    5. get_item_quantity / is_in_cart - read-only lookups

    Invalid input raises ``ValidationError`` before any state changes.
    Storage failures are handled by the repository and never surface here.
    """

    def __init__(self, repository: CartRepository, max_line_quantity: Optional[int] = None):
        if max_line_quantity is not None and max_line_quantity < 1:
            raise ValueError("max_line_quantity must be at least 1")
        self._repository = repository
        self._max_line_quantity = max_line_quantity
        self._listeners: List[Listener] = []
        self._pending: "deque[CartState]" = deque()
        self._publishing = False
        self._logger = logging.getLogger(self.__class__.__name__)
        self._events = get_structured_logger("reconshop_cart.cart_store")
        self._state = self._hydrate()

    # ------------------------------------------------------------------ state

    @property
    def state(self) -> CartState:
        """Current immutable snapshot"""
        return self._state

    @property
    def items(self) -> Tuple[CartItem, ...]:
        return self._state.items

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register ``listener`` to receive the new state after every action.

        Returns:
            A callable that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ---------------------------------------------------------------- actions

    def add_item(self, snapshot: ProductSnapshot, quantity: int = 1) -> CartState:
        """Add ``quantity`` of a product; an existing line keeps its position"""
        if not isinstance(snapshot, ProductSnapshot):
            raise ValidationError("Item must be a ProductSnapshot", field="item")
        quantity = self._require_quantity(quantity)

        items = list(self._state.items)
        index = find_line_index(items, *snapshot.identity)
        if index != -1:
            existing = items[index]
            items[index] = existing.with_quantity(self._clamp(existing.quantity + quantity, existing.identity))
        else:
            items.append(CartItem.from_snapshot(snapshot, self._clamp(quantity, snapshot.identity)))

        self._logger.info(
            "Adding to cart: product=%s variant=%s qty=%s merged=%s",
            snapshot.product_id, snapshot.variant, quantity, index != -1,
        )
        return self._commit(items, "cart.item_added", product_id=snapshot.product_id, quantity=quantity)

    def remove_item(self, product_id: int, size: Optional[str] = None, color: Optional[str] = None) -> CartState:
        """Remove the whole matching line; absent lines are a no-op"""
        identity = self._require_identity(product_id, size, color)
        items = [item for item in self._state.items if item.identity != identity]

        if len(items) == len(self._state.items):
            self._logger.debug("Remove skipped, no line for %s", identity)
        return self._commit(items, "cart.item_removed", product_id=product_id)

    def update_quantity(
        self,
        product_id: int,
        quantity: int,
        size: Optional[str] = None,
        color: Optional[str] = None,
    ) -> CartState:
        """Set a line's absolute quantity; zero or negative removes the line"""
        identity = self._require_identity(product_id, size, color)
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValidationError("Quantity must be an integer", field="quantity")

        if quantity <= 0:
            return self.remove_item(product_id, size, color)

        items = list(self._state.items)
        index = find_line_index(items, *identity)
        if index != -1:
            items[index] = items[index].with_quantity(self._clamp(quantity, identity))
        else:
            self._logger.debug("Update skipped, no line for %s", identity)

        return self._commit(items, "cart.quantity_updated", product_id=product_id, quantity=quantity)

    def clear_cart(self) -> CartState:
        """Empty the cart and remove the saved copy"""
        self._state = CartState.empty()
        self._repository.clear()
        self._logger.info("Cart cleared")
        self._events.info("cart.cleared")
        self._publish(self._state)
        return self._state

    # ---------------------------------------------------------------- queries

    def get_item_quantity(self, product_id: int, size: Optional[str] = None, color: Optional[str] = None) -> int:
        """
        Quantity in the cart.

        With a size or color, the quantity of that exact line (0 if absent).
        Without either, the sum over every line of ``product_id``.
        """
        identity = self._lookup_identity(product_id, size, color)
        if self._has_variant(identity):
            index = find_line_index(self._state.items, *identity)
            return self._state.items[index].quantity if index != -1 else 0
        return sum(item.quantity for item in self._state.items if item.product_id == product_id)

    def is_in_cart(self, product_id: int, size: Optional[str] = None, color: Optional[str] = None) -> bool:
        """Same lookup modes as ``get_item_quantity``, as a boolean"""
        identity = self._lookup_identity(product_id, size, color)
        if self._has_variant(identity):
            return find_line_index(self._state.items, *identity) != -1
        return any(item.product_id == product_id for item in self._state.items)

    # -------------------------------------------------------------- internals

    def _hydrate(self) -> CartState:
        """Restore saved lines, repairing duplicates and over-limit quantities"""
        loaded = self._repository.load()
        items: List[CartItem] = []
        for item in loaded:
            index = find_line_index(items, *item.identity)
            if index != -1:
                merged = items[index].quantity + item.quantity
                items[index] = items[index].with_quantity(self._clamp(merged, item.identity))
            else:
                items.append(item.with_quantity(self._clamp(item.quantity, item.identity)))

        state = CartState(items=tuple(items), totals=compute_totals(items))
        if list(state.items) != list(loaded):
            self._logger.warning("Repaired saved cart: %d lines -> %d lines", len(loaded), len(items))
            self._repository.save(state.items)

        self._logger.info("Cart hydrated with %d lines", len(state.items))
        return state

    def _commit(self, items: Sequence[CartItem], event: str, **fields: Any) -> CartState:
        state = CartState(items=tuple(items), totals=compute_totals(items))
        self._state = state
        self._repository.save(state.items)
        self._events.info(event, total_items=state.total_items, lines=len(state.items), **fields)
        self._publish(state)
        return state

    def _publish(self, state: CartState) -> None:
        """
        Deliver ``state`` to every listener.

        Actions called from inside a listener queue their state; it is
        delivered once every listener has seen the current one, so all
        listeners observe states in commit order and end on the latest.
        """
        self._pending.append(state)
        if self._publishing:
            return

        self._publishing = True
        try:
            while self._pending:
                current = self._pending.popleft()
                for listener in list(self._listeners):
                    try:
                        listener(current)
                    except Exception as e:
                        self._logger.error("Cart listener %r failed: %s", listener, e, exc_info=True)
        finally:
            self._publishing = False

    def _clamp(self, quantity: int, identity: Identity) -> int:
        if self._max_line_quantity is not None and quantity > self._max_line_quantity:
            self._logger.warning(
                "Quantity %s for %s exceeds limit, clamped to %s",
                quantity, identity, self._max_line_quantity,
            )
            return self._max_line_quantity
        return quantity

    @staticmethod
    def _require_quantity(quantity: Any) -> int:
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValidationError("Quantity must be an integer", field="quantity")
        validate_and_raise(quantity >= 1, ValidationError, "Quantity must be at least 1", field="quantity")
        return quantity

    @staticmethod
    def _require_identity(product_id: Any, size: Any, color: Any) -> Identity:
        try:
            ProductId(product_id)
            return identity_of(product_id, size, color)
        except ValueError as e:
            raise ValidationError(str(e), field="identity") from e

    @staticmethod
    def _lookup_identity(product_id: Any, size: Any, color: Any) -> Identity:
        try:
            return identity_of(product_id, size, color)
        except ValueError as e:
            raise ValidationError(str(e), field="identity") from e

    @staticmethod
    def _has_variant(identity: Identity) -> bool:
        return identity[1] is not None or identity[2] is not None
