"""
Cart store — the single source of truth for what is in the cart.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from decimal import Decimal

import structlog

from farmstand._types import ProductId
from farmstand.cart._storage import CartStorage
from farmstand.cart._types import CartLine, CartSnapshot
from farmstand.catalog import Product

logger = structlog.get_logger(__name__)

type Listener = Callable[[CartSnapshot], None]


class CartStore:
    """
    Cart lines plus drawer visibility, persisted after every line change.

    Invariants, after every operation:
    - at most one line per product id, every quantity >= 1
    - totals are computed from the lines on read, never stored

    The store rehydrates once from `storage` on construction (replacing the
    empty initial state). Storage failures are logged; the in-memory cart
    stays authoritative for the session.

    Example:
        cart = CartStore(SlotStorage(FileSlot(path)))
        cart.add_item(chicken, 2)
        cart.update_quantity(chicken.id, 0)   # removes the line
    """

    def __init__(self, storage: CartStorage | None = None) -> None:
        self._storage = storage
        self._lines: list[CartLine] = []
        self._is_open = False
        self._listeners: list[Listener] = []
        self._rehydrate()

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    @property
    def items(self) -> tuple[CartLine, ...]:
        return tuple(self._lines)

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def total_items(self) -> int:
        return sum(line.quantity for line in self._lines)

    @property
    def total_price(self) -> Decimal:
        return sum((line.line_total for line in self._lines), Decimal("0"))

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def snapshot(self) -> CartSnapshot:
        return CartSnapshot(lines=tuple(self._lines), is_open=self._is_open)

    def get(self, product_id: ProductId) -> CartLine | None:
        return next((line for line in self._lines if line.product_id == product_id), None)

    # -------------------------------------------------------------------
    # Line mutations
    # -------------------------------------------------------------------
    def add_item(self, product: Product, quantity: int = 1) -> None:
        """
        Add `quantity` of `product` (merging into an existing line) and open the drawer.

        A quantity below 1 adds one unit; lowering a line goes through
        update_quantity().
        """
        quantity = max(quantity, 1)
        index = self._index(product.id)
        if index is None:
            self._lines.append(CartLine(product=product, quantity=quantity))
        else:
            existing = self._lines[index]
            self._lines[index] = CartLine(
                product=existing.product,
                quantity=existing.quantity + quantity,
            )
        self._is_open = True
        self._lines_changed()

    def remove_item(self, product_id: ProductId) -> None:
        index = self._index(product_id)
        if index is None:
            return
        del self._lines[index]
        self._lines_changed()

    def update_quantity(self, product_id: ProductId, quantity: int) -> None:
        """Set the line's quantity exactly. Zero or less removes the line."""
        if quantity <= 0:
            self.remove_item(product_id)
            return

        index = self._index(product_id)
        if index is None:
            return
        existing = self._lines[index]
        if existing.quantity == quantity:
            return
        self._lines[index] = CartLine(product=existing.product, quantity=quantity)
        self._lines_changed()

    def remove_lines(self, lines: Iterable[CartLine]) -> None:
        """
        Take `lines` out of the cart, quantity by quantity.

        Units added to a line after `lines` was captured stay in the cart;
        products not in `lines` are untouched.
        """
        changed = False
        for taken in lines:
            index = self._index(taken.product_id)
            if index is None:
                continue
            existing = self._lines[index]
            remaining = existing.quantity - taken.quantity
            if remaining <= 0:
                del self._lines[index]
            else:
                self._lines[index] = CartLine(product=existing.product, quantity=remaining)
            changed = True
        if changed:
            self._lines_changed()

    def clear_cart(self) -> None:
        """Empty the cart. Drawer visibility is left as is."""
        self._lines = []
        self._lines_changed()

    # -------------------------------------------------------------------
    # Drawer visibility (not persisted)
    # -------------------------------------------------------------------
    def toggle_cart(self) -> None:
        self._is_open = not self._is_open
        self._notify()

    def open_cart(self) -> None:
        self._is_open = True
        self._notify()

    def close_cart(self) -> None:
        self._is_open = False
        self._notify()

    # -------------------------------------------------------------------
    # Observers
    # -------------------------------------------------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener` with a snapshot after every change. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------
    def _index(self, product_id: ProductId) -> int | None:
        for i, line in enumerate(self._lines):
            if line.product_id == product_id:
                return i
        return None

    def _lines_changed(self) -> None:
        self._persist()
        self._notify()

    def _persist(self) -> None:
        if self._storage is None:
            return
        try:
            self._storage.save(list(self._lines))
        except Exception as e:
            logger.error(
                "Failed to persist cart",
                lines=len(self._lines),
                error=str(e),
                exc_info=True,
            )

    def _rehydrate(self) -> None:
        if self._storage is None:
            return
        try:
            lines = self._storage.load()
        except Exception as e:
            logger.warning("Failed to load persisted cart, starting empty", error=str(e))
            return
        if lines is None:
            return
        self._lines = list(lines)
        logger.debug("Cart rehydrated", lines=len(self._lines), items=self.total_items)

    def _notify(self) -> None:
        if not self._listeners:
            return
        snap = self.snapshot()
        for listener in list(self._listeners):
            listener(snap)


__all__ = ("CartStore", "Listener")
