"""
Tests for the cart store action surface
"""

import json
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from reconshop_cart.domain.entities.cart_item import CartItem
from reconshop_cart.domain.entities.cart_state import CartState
from reconshop_cart.domain.services.totals import compute_totals
from reconshop_cart.domain.value_objects.variant import Variant
from reconshop_cart.infrastructure.persistence.cart_storage import (
    DEFAULT_STORAGE_KEY,
    KeyValueCartRepository,
)
from reconshop_cart.infrastructure.persistence.key_value_store import InMemoryKeyValueStore
from reconshop_cart.infrastructure.utilities.exceptions import PersistenceError, ValidationError
from reconshop_cart.services.cart_store import CartStore


def assert_consistent(cart, repository):
    """Aggregates match a fresh computation and the saved copy matches memory"""
    assert cart.state.totals == compute_totals(cart.items)
    identities = [item.identity for item in cart.items]
    assert len(identities) == len(set(identities))
    assert all(item.quantity >= 1 for item in cart.items)
    assert repository.load() == list(cart.items)


class TestAddItem:
    """Test adding items"""

    def test_add_new_item(self, cart, repository, plain_item):
        """Test scenario: 2 x 20 without discount"""
        state = cart.add_item(plain_item, 2)

        assert len(state.items) == 1
        assert state.items[0].quantity == 2
        assert state.items[0].title == "A"
        assert state.total_items == 2
        assert state.subtotal == Decimal("40")
        assert state.discount == Decimal("0")
        assert state.total == Decimal("40")
        assert state is cart.state
        assert_consistent(cart, repository)

    def test_add_discounted_item(self, cart, discounted_item):
        """Test scenario: 2 x 20 at 25% off"""
        state = cart.add_item(discounted_item, 2)
        assert state.subtotal == Decimal("30")
        assert state.discount == Decimal("10")
        assert state.total == Decimal("30")

    def test_default_quantity_is_one(self, cart, plain_item):
        """Test quantity defaults to 1"""
        assert cart.add_item(plain_item).items[0].quantity == 1

    def test_merge_same_identity(self, cart, repository, make_item):
        """Test two additions of the same variant produce one line"""
        cart.add_item(make_item(1, size="M"), 1)
        state = cart.add_item(make_item(1, size="M"), 3)

        assert len(state.items) == 1
        assert state.items[0].quantity == 4
        assert_consistent(cart, repository)

    def test_merge_keeps_position(self, cart, make_item):
        """Test merging does not move the existing line"""
        cart.add_item(make_item(1))
        cart.add_item(make_item(2))
        cart.add_item(make_item(3))
        state = cart.add_item(make_item(1), 5)
        assert [item.product_id for item in state.items] == [1, 2, 3]
        assert state.items[0].quantity == 6

    def test_merge_keeps_original_snapshot(self, cart, make_item):
        """Test the line keeps the data captured when first added"""
        cart.add_item(make_item(1, unit_price="10", title="Old"))
        state = cart.add_item(make_item(1, unit_price="12", title="New"))
        assert state.items[0].title == "Old"
        assert state.items[0].unit_price == Decimal("10")

    def test_different_variants_are_separate_lines(self, cart, make_item):
        """Test scenario: sizes M and L are distinct lines"""
        cart.add_item(make_item(1, size="M"))
        state = cart.add_item(make_item(1, size="L"), 2)

        assert len(state.items) == 2
        assert cart.get_item_quantity(1) == 3
        assert cart.get_item_quantity(1, size="M") == 1
        assert cart.get_item_quantity(1, size="L") == 2

    def test_empty_variant_representations_merge(self, cart, make_item):
        """Test "" and None variants collide into one line"""
        cart.add_item(make_item(1))
        state = cart.add_item(make_item(1, size="", color=""), 2)
        assert len(state.items) == 1
        assert state.items[0].quantity == 3

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, "2", True, None])
    def test_invalid_quantity_rejected(self, cart, kv_store, plain_item, quantity):
        """Test bad quantities are rejected before any change"""
        with pytest.raises(ValidationError):
            cart.add_item(plain_item, quantity)
        assert cart.state == CartState.empty()
        assert kv_store.get_item(DEFAULT_STORAGE_KEY) is None

    def test_invalid_item_rejected(self, cart):
        """Test only product snapshots can be added"""
        with pytest.raises(ValidationError):
            cart.add_item({"product_id": 1, "title": "A", "unit_price": 1})
        assert cart.state.is_empty

    def test_validation_error_is_value_error(self, cart, plain_item):
        """Test callers catching ValueError also catch rejections"""
        with pytest.raises(ValueError):
            cart.add_item(plain_item, 0)


class TestRemoveItem:
    """Test removing lines"""

    def test_remove_whole_line(self, cart, repository, make_item):
        """Test removal drops every unit of the line"""
        cart.add_item(make_item(1), 50)
        cart.add_item(make_item(2))
        state = cart.remove_item(1)

        assert [item.product_id for item in state.items] == [2]
        assert not cart.is_in_cart(1)
        assert cart.get_item_quantity(1) == 0
        assert_consistent(cart, repository)

    def test_remove_only_matching_variant(self, cart, make_item):
        """Test other variants of the product stay"""
        cart.add_item(make_item(1, size="M"))
        cart.add_item(make_item(1, size="L"))
        state = cart.remove_item(1, size="M")
        assert [item.variant.size for item in state.items] == ["L"]

    def test_remove_without_variant_keeps_variant_lines(self, cart, make_item):
        """Test the unvariant identity does not match a sized line"""
        cart.add_item(make_item(1, size="M"))
        state = cart.remove_item(1)
        assert len(state.items) == 1

    def test_remove_with_empty_strings(self, cart, make_item):
        """Test "" variant parts address the no-variant line"""
        cart.add_item(make_item(1))
        assert cart.remove_item(1, "", "").is_empty

    def test_remove_absent_is_noop(self, cart, repository, make_item):
        """Test removing an unknown identity changes nothing"""
        cart.add_item(make_item(1, size="M"), 2)
        before = cart.state
        state = cart.remove_item(999)
        assert state == before
        assert cart.remove_item(1, size="XL") == before
        assert_consistent(cart, repository)

    def test_malformed_identity_rejected(self, cart):
        """Test invalid product ids and variant values"""
        for args in [(0,), (-1,), ("1",), (1, 5), (1, None, ["red"])]:
            with pytest.raises(ValidationError):
                cart.remove_item(*args)


class TestUpdateQuantity:
    """Test setting absolute quantities"""

    def test_sets_absolute_value(self, cart, repository, make_item):
        """Test quantity 3 sets 3, not 3 more"""
        cart.add_item(make_item(1), 5)
        state = cart.update_quantity(1, 3)
        assert state.items[0].quantity == 3
        assert state.total_items == 3
        assert_consistent(cart, repository)

    @pytest.mark.parametrize("quantity", [0, -5])
    def test_non_positive_removes(self, cart, repository, make_item, quantity):
        """Test zero and negative targets remove the line"""
        cart.add_item(make_item(1), 2)
        assert cart.update_quantity(1, quantity).is_empty
        assert_consistent(cart, repository)

    def test_zero_removes_only_that_variant(self, cart, make_item):
        """Test scenario: dropping size M leaves size L untouched"""
        cart.add_item(make_item(1, size="M"))
        cart.add_item(make_item(1, size="L"), 2)
        state = cart.update_quantity(1, 0, size="M")
        assert len(state.items) == 1
        assert state.items[0].variant == Variant(size="L")
        assert state.items[0].quantity == 2

    def test_update_keeps_position(self, cart, make_item):
        """Test the updated line stays in place"""
        cart.add_item(make_item(1))
        cart.add_item(make_item(2))
        state = cart.update_quantity(1, 9)
        assert [item.product_id for item in state.items] == [1, 2]

    def test_update_absent_is_noop(self, cart, make_item):
        """Test updating an unknown identity changes nothing"""
        cart.add_item(make_item(1, color="red"))
        before = cart.state
        assert cart.update_quantity(1, 4) == before
        assert cart.update_quantity(1, 4, color="blue") == before
        assert cart.update_quantity(2, 0) == before

    def test_non_integer_rejected(self, cart, make_item):
        """Test fractional quantities are rejected"""
        cart.add_item(make_item(1))
        before = cart.state
        with pytest.raises(ValidationError):
            cart.update_quantity(1, 2.5)
        assert cart.state == before


class TestClearCart:
    """Test emptying the cart"""

    def test_clear(self, cart, kv_store, repository, make_item):
        """Test scenario: clear resets aggregates and erases the saved copy"""
        cart.add_item(make_item(1), 2)
        cart.add_item(make_item(2, discount_percent=50))
        state = cart.clear_cart()

        assert state.items == ()
        assert state.total_items == 0
        assert state.subtotal == 0
        assert state.discount == 0
        assert state.total == 0
        assert DEFAULT_STORAGE_KEY not in kv_store
        assert repository.load() == []

    def test_clear_empty_cart(self, cart):
        """Test clearing an empty cart is harmless"""
        assert cart.clear_cart() == CartState.empty()


class TestQueries:
    """Test get_item_quantity and is_in_cart"""

    def test_variant_equivalence(self, cart, make_item):
        """Test a no-variant line is found with empty-string variant parts"""
        cart.add_item(make_item(1), 2)
        assert cart.is_in_cart(1, "", "")
        assert cart.get_item_quantity(1, "", "") == 2

    def test_exact_line_when_variant_given(self, cart, make_item):
        """Test size or color switches to exact matching"""
        cart.add_item(make_item(1, size="M", color="red"), 2)
        assert cart.get_item_quantity(1, size="M") == 0
        assert cart.get_item_quantity(1, size="M", color="red") == 2
        assert not cart.is_in_cart(1, color="blue")
        assert cart.is_in_cart(1, "M", "red")

    def test_sum_over_variants(self, cart, make_item):
        """Test no variant sums every line of the product"""
        cart.add_item(make_item(1, size="S"), 1)
        cart.add_item(make_item(1, size="M", color="red"), 2)
        cart.add_item(make_item(1), 4)
        cart.add_item(make_item(2), 8)
        assert cart.get_item_quantity(1) == 7
        assert cart.is_in_cart(1)
        assert cart.is_in_cart(2)
        assert not cart.is_in_cart(3)
        assert cart.get_item_quantity(3) == 0

    def test_queries_do_not_change_state(self, cart, kv_store, make_item):
        """Test lookups are read-only"""
        cart.add_item(make_item(1))
        before = cart.state
        payload = kv_store.get_item(DEFAULT_STORAGE_KEY)
        cart.get_item_quantity(1)
        cart.is_in_cart(1, "M")
        assert cart.state is before
        assert kv_store.get_item(DEFAULT_STORAGE_KEY) == payload

    def test_malformed_variant_rejected(self, cart):
        """Test non-string variant values in lookups"""
        with pytest.raises(ValidationError):
            cart.get_item_quantity(1, size=42)


class TestImmutability:
    """Test states are replaced, never mutated"""

    def test_previous_state_unchanged(self, cart, make_item):
        """Test a held snapshot survives later actions"""
        first = cart.add_item(make_item(1), 1)
        cart.add_item(make_item(1), 1)
        cart.update_quantity(1, 7)
        assert first.items[0].quantity == 1
        assert first.total_items == 1
        assert cart.state.items[0].quantity == 7

    def test_items_is_tuple(self, cart, make_item):
        """Test consumers cannot append to the item sequence"""
        cart.add_item(make_item(1))
        assert isinstance(cart.items, tuple)


class TestSubscriptions:
    """Test state publication to observers"""

    def test_listener_receives_each_state(self, cart, make_item):
        """Test every action publishes the new state"""
        received = []
        cart.subscribe(received.append)

        a = cart.add_item(make_item(1))
        b = cart.update_quantity(1, 3)
        c = cart.remove_item(1)
        d = cart.clear_cart()

        assert received == [a, b, c, d]
        assert received[1].total_items == 3

    def test_unsubscribe(self, cart, make_item):
        """Test an unsubscribed listener stops receiving states"""
        listener = MagicMock()
        unsubscribe = cart.subscribe(listener)
        cart.add_item(make_item(1))
        unsubscribe()
        unsubscribe()
        cart.add_item(make_item(1))
        assert listener.call_count == 1

    def test_failing_listener_is_contained(self, cart, make_item):
        """Test a raising listener does not break the action or other listeners"""
        broken = MagicMock(side_effect=RuntimeError("render failed"))
        healthy = MagicMock()
        cart.subscribe(broken)
        cart.subscribe(healthy)

        state = cart.add_item(make_item(1))

        assert state.total_items == 1
        healthy.assert_called_once_with(state)

    def test_action_inside_listener_keeps_order(self, cart, make_item):
        """Test every listener sees states in commit order and ends on the latest"""
        first_seen, second_seen = [], []

        def top_up(state):
            first_seen.append(state)
            if state.total_items == 1:
                cart.add_item(make_item(1))

        cart.subscribe(top_up)
        cart.subscribe(second_seen.append)

        cart.add_item(make_item(1))

        assert cart.state.total_items == 2
        assert [s.total_items for s in first_seen] == [1, 2]
        assert [s.total_items for s in second_seen] == [1, 2]
        assert second_seen[-1] == cart.state

    def test_rejected_action_publishes_nothing(self, cart, make_item):
        """Test validation failures do not notify listeners"""
        listener = MagicMock()
        cart.subscribe(listener)
        with pytest.raises(ValidationError):
            cart.add_item(make_item(1), 0)
        listener.assert_not_called()


class TestHydration:
    """Test restoring the cart at construction"""

    def test_restores_saved_items(self, kv_store, repository, make_item):
        """Test a new store sees the previous session's cart"""
        first = CartStore(repository)
        first.add_item(make_item(1, size="M"), 2)
        first.add_item(make_item(2, discount_percent=10), 1)

        second = CartStore(KeyValueCartRepository(kv_store))
        assert second.items == first.items
        assert second.state == first.state

    def test_unreadable_payload_starts_empty(self, kv_store):
        """Test corrupted storage yields an empty cart"""
        kv_store.set_item(DEFAULT_STORAGE_KEY, "{not json")
        cart = CartStore(KeyValueCartRepository(kv_store))
        assert cart.state == CartState.empty()

    def test_duplicate_lines_are_merged(self, kv_store):
        """Test saved lines sharing an identity are repaired into one"""
        kv_store.set_item(DEFAULT_STORAGE_KEY, json.dumps([
            {"productId": 1, "title": "A", "unitPrice": "5", "quantity": 2},
            {"productId": 2, "title": "B", "unitPrice": "3", "quantity": 1},
            {"productId": 1, "title": "A", "unitPrice": "5", "quantity": 3, "variant": {"size": ""}},
        ]))
        repository = KeyValueCartRepository(kv_store)
        cart = CartStore(repository)

        assert [(item.product_id, item.quantity) for item in cart.items] == [(1, 5), (2, 1)]
        assert_consistent(cart, repository)

    def test_over_limit_quantity_is_clamped(self, kv_store):
        """Test saved quantities above the line limit are reduced"""
        kv_store.set_item(DEFAULT_STORAGE_KEY, json.dumps([
            {"productId": 1, "title": "A", "unitPrice": "5", "quantity": 500},
        ]))
        repository = KeyValueCartRepository(kv_store)
        cart = CartStore(repository, max_line_quantity=99)
        assert cart.items[0].quantity == 99
        assert repository.load()[0].quantity == 99

    def test_clean_payload_is_not_rewritten(self, make_item):
        """Test hydration only saves when a repair happened"""
        repository = MagicMock()
        repository.load.return_value = [CartItem.from_snapshot(make_item(1), 1)]
        CartStore(repository)
        repository.save.assert_not_called()


class TestQuantityLimit:
    """Test the per-line upper bound"""

    def test_add_clamps_to_limit(self, repository, make_item):
        """Test merged additions stop at the limit"""
        cart = CartStore(repository, max_line_quantity=5)
        cart.add_item(make_item(1), 3)
        state = cart.add_item(make_item(1), 4)
        assert state.items[0].quantity == 5

    def test_new_line_clamps_to_limit(self, repository, make_item):
        """Test a single large addition is clamped"""
        cart = CartStore(repository, max_line_quantity=5)
        assert cart.add_item(make_item(1), 12).items[0].quantity == 5

    def test_update_clamps_to_limit(self, repository, make_item):
        """Test absolute updates are clamped"""
        cart = CartStore(repository, max_line_quantity=5)
        cart.add_item(make_item(1))
        assert cart.update_quantity(1, 10).items[0].quantity == 5

    def test_invalid_limit(self, repository):
        """Test the limit must be positive"""
        with pytest.raises(ValueError):
            CartStore(repository, max_line_quantity=0)


class TestPersistenceFailures:
    """Test the cart keeps working when storage does not"""

    def test_full_storage_does_not_interrupt(self, make_item):
        """Test actions succeed in memory when nothing can be saved"""
        store = InMemoryKeyValueStore(quota_bytes=10)
        cart = CartStore(KeyValueCartRepository(store))

        state = cart.add_item(make_item(1), 2)
        cart.update_quantity(1, 4)

        assert state.total_items == 2
        assert cart.get_item_quantity(1) == 4
        assert store.get_item(DEFAULT_STORAGE_KEY) is None

    def test_unavailable_storage_does_not_interrupt(self, make_item):
        """Test every action survives a failing medium"""
        store = MagicMock()
        store.get_item.side_effect = PersistenceError("unavailable")
        store.set_item.side_effect = PersistenceError("unavailable")
        store.remove_item.side_effect = PersistenceError("unavailable")
        cart = CartStore(KeyValueCartRepository(store))

        cart.add_item(make_item(1))
        cart.add_item(make_item(2), 3)
        cart.remove_item(1)
        cart.update_quantity(2, 1)
        assert cart.state.total_items == 1
        assert cart.clear_cart().is_empty

    def test_saved_after_every_mutation(self, cart, repository, make_item):
        """Test the saved copy tracks memory across a mixed sequence"""
        cart.add_item(make_item(1, size="M"), 2)
        assert_consistent(cart, repository)
        cart.add_item(make_item(2, color="red", discount_percent=20), 1)
        assert_consistent(cart, repository)
        cart.add_item(make_item(1, size="M"), 1)
        assert_consistent(cart, repository)
        cart.update_quantity(2, 6, color="red")
        assert_consistent(cart, repository)
        cart.remove_item(1, size="M")
        assert_consistent(cart, repository)
