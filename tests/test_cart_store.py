"""Cart store: line mutations, derived totals, drawer, persistence."""

import json
from decimal import Decimal

from farmstand.cart import CartStore, MemorySlot, SlotStorage


class TestAddItem:
    def test_new_product_appends_line_and_opens_drawer(self, cart, chicken):
        cart.add_item(chicken)

        assert len(cart.items) == 1
        assert cart.items[0].product == chicken
        assert cart.items[0].quantity == 1
        assert cart.is_open is True

    def test_same_product_merges_into_one_line(self, cart, chicken):
        cart.add_item(chicken, 2)
        cart.add_item(chicken, 3)

        assert len(cart.items) == 1
        assert cart.get(chicken.id).quantity == 5

    def test_lines_keep_insertion_order(self, cart, chicken, eggs, breast):
        cart.add_item(eggs)
        cart.add_item(chicken)
        cart.add_item(breast)
        cart.add_item(eggs)

        assert [line.product_id for line in cart.items] == [eggs.id, chicken.id, breast.id]

    def test_zero_quantity_adds_one(self, cart, chicken):
        cart.add_item(chicken, 0)

        assert cart.get(chicken.id).quantity == 1
        assert cart.total_price == Decimal("12.99")

    def test_negative_quantity_on_existing_line_adds_one(self, cart, chicken):
        cart.add_item(chicken, 2)

        cart.add_item(chicken, -5)

        assert cart.get(chicken.id).quantity == 3
        assert len(cart.items) == 1

    def test_add_reopens_closed_drawer(self, cart, chicken):
        cart.add_item(chicken)
        cart.close_cart()

        cart.add_item(chicken)

        assert cart.is_open is True


class TestTotals:
    def test_empty_cart(self, cart):
        assert cart.total_items == 0
        assert cart.total_price == Decimal("0")
        assert cart.is_empty

    def test_totals_follow_every_mutation(self, cart, chicken, eggs):
        cart.add_item(chicken, 2)
        assert cart.total_items == 2
        assert cart.total_price == Decimal("25.98")

        cart.add_item(eggs)
        assert cart.total_items == 3
        assert cart.total_price == Decimal("32.97")

        cart.update_quantity(chicken.id, 1)
        assert cart.total_items == 2
        assert cart.total_price == Decimal("19.98")

        cart.remove_item(eggs.id)
        assert cart.total_items == 1
        assert cart.total_price == Decimal("12.99")

    def test_snapshot_matches_store(self, cart, chicken, eggs):
        cart.add_item(chicken, 2)
        cart.add_item(eggs, 1)

        snap = cart.snapshot()

        assert snap.total_items == cart.total_items
        assert snap.total_price == cart.total_price
        assert snap.is_open is True


class TestUpdateQuantity:
    def test_sets_exact_quantity(self, cart, chicken):
        cart.add_item(chicken, 2)

        cart.update_quantity(chicken.id, 7)

        assert cart.get(chicken.id).quantity == 7

    def test_zero_removes_line(self, cart, chicken):
        cart.add_item(chicken, 2)

        cart.update_quantity(chicken.id, 0)

        assert cart.get(chicken.id) is None
        assert cart.is_empty

    def test_negative_removes_line(self, cart, chicken, eggs):
        cart.add_item(chicken, 2)
        cart.add_item(eggs)

        cart.update_quantity(chicken.id, -3)

        assert [line.product_id for line in cart.items] == [eggs.id]

    def test_unknown_product_is_noop(self, cart, chicken):
        cart.add_item(chicken)

        cart.update_quantity("does-not-exist", 4)

        assert cart.total_items == 1

    def test_no_stock_ceiling(self, cart, chicken):
        cart.add_item(chicken)

        cart.update_quantity(chicken.id, 10_000)

        assert cart.total_items == 10_000


class TestRemoveAndClear:
    def test_remove_missing_is_noop(self, cart, chicken):
        cart.add_item(chicken)

        cart.remove_item("nope")

        assert cart.total_items == 1

    def test_clear_empties_lines_but_keeps_drawer(self, cart, chicken, eggs):
        cart.add_item(chicken)
        cart.add_item(eggs)
        assert cart.is_open

        cart.clear_cart()

        assert cart.is_empty
        assert cart.is_open is True

    def test_remove_lines_takes_only_given_quantities(self, cart, chicken, eggs, breast):
        cart.add_item(chicken, 2)
        cart.add_item(eggs, 1)
        taken = cart.items
        cart.add_item(chicken, 3)
        cart.add_item(breast)

        cart.remove_lines(taken)

        assert [(line.product_id, line.quantity) for line in cart.items] == [
            (chicken.id, 3),
            (breast.id, 1),
        ]

    def test_remove_lines_skips_products_already_gone(self, cart, slot, chicken, eggs):
        cart.add_item(chicken, 2)
        taken = cart.items
        cart.remove_item(chicken.id)
        cart.add_item(eggs)

        cart.remove_lines(taken)

        assert [line.product_id for line in cart.items] == [eggs.id]
        assert json.loads(slot.read())["lines"][0]["quantity"] == 1


class TestDrawer:
    def test_toggle_open_close(self, cart):
        assert cart.is_open is False

        cart.toggle_cart()
        assert cart.is_open is True

        cart.toggle_cart()
        assert cart.is_open is False

        cart.open_cart()
        cart.open_cart()
        assert cart.is_open is True

        cart.close_cart()
        assert cart.is_open is False

    def test_drawer_does_not_touch_lines(self, cart, chicken):
        cart.add_item(chicken, 3)

        cart.close_cart()
        cart.toggle_cart()

        assert cart.total_items == 3


class TestPersistence:
    def test_every_line_mutation_is_written(self, cart, slot, chicken):
        cart.add_item(chicken, 2)
        stored = json.loads(slot.read())
        assert stored["version"] == 1
        assert stored["lines"][0]["quantity"] == 2

        cart.update_quantity(chicken.id, 5)
        assert json.loads(slot.read())["lines"][0]["quantity"] == 5

        cart.clear_cart()
        assert json.loads(slot.read())["lines"] == []

    def test_drawer_state_is_not_persisted(self, slot, chicken):
        first = CartStore(SlotStorage(slot))
        first.add_item(chicken)
        assert first.is_open

        reloaded = CartStore(SlotStorage(MemorySlot(data=slot.data)))

        assert reloaded.is_open is False
        assert reloaded.total_items == 1

    def test_reload_restores_lines(self, slot, chicken, eggs):
        first = CartStore(SlotStorage(slot))
        first.add_item(chicken, 2)
        first.add_item(eggs, 3)

        reloaded = CartStore(SlotStorage(MemorySlot(data=slot.data)))

        assert [(line.product_id, line.quantity) for line in reloaded.items] == [
            (chicken.id, 2),
            (eggs.id, 3),
        ]
        assert reloaded.total_price == first.total_price

    def test_corrupted_slot_starts_empty(self):
        slot = MemorySlot(data={"farm-poultry-cart": "{not json"})

        store = CartStore(SlotStorage(slot))

        assert store.is_empty

    def test_write_failure_does_not_raise(self, chicken):
        class BrokenStorage:
            def load(self):
                return None

            def save(self, lines):
                raise OSError("disk full")

        store = CartStore(BrokenStorage())
        store.add_item(chicken, 2)

        assert store.total_items == 2

    def test_load_failure_starts_empty(self):
        class BrokenStorage:
            def load(self):
                raise OSError("permission denied")

            def save(self, lines):
                pass

        assert CartStore(BrokenStorage()).is_empty

    def test_no_storage_keeps_memory_only(self, chicken):
        store = CartStore()
        store.add_item(chicken)
        assert store.total_items == 1


class TestSubscribe:
    def test_listener_gets_snapshots_until_unsubscribed(self, cart, chicken):
        seen = []
        unsubscribe = cart.subscribe(seen.append)

        cart.add_item(chicken)
        cart.close_cart()
        unsubscribe()
        cart.add_item(chicken)

        assert [s.total_items for s in seen] == [1, 1]
        assert [s.is_open for s in seen] == [True, False]
