"""
Cart types.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from farmstand.catalog import Product


@dataclass(frozen=True, slots=True)
class CartLine:
    """
    One product in the cart.

    The product is a snapshot taken when it was added; its price is what the
    order line will record.
    """

    product: Product
    quantity: int

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError(f"Cart line quantity must be >= 1, got {self.quantity}")

    @property
    def product_id(self) -> str:
        return self.product.id

    @property
    def line_total(self) -> Decimal:
        return self.product.price * self.quantity


@dataclass(frozen=True, slots=True)
class CartSnapshot:
    """Immutable view of the cart at one point in time."""

    lines: tuple[CartLine, ...]
    is_open: bool

    @property
    def total_items(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def total_price(self) -> Decimal:
        return sum((line.line_total for line in self.lines), Decimal("0"))

    @property
    def is_empty(self) -> bool:
        return not self.lines


__all__ = ("CartLine", "CartSnapshot")
