"""
Core types for farmstand.

Identity aliases and money coercion shared across the storefront core.
"""

from __future__ import annotations

from decimal import Decimal

# ═══════════════════════════════════════════════════════════════════════════════
# Identity & Money
# ═══════════════════════════════════════════════════════════════════════════════

type ProductId = str
type OrderId = str

CENT = Decimal("0.01")


def to_money(value: Decimal | float | int | str) -> Decimal:
    """Coerce a price-like value to a two-place Decimal."""
    if isinstance(value, float):
        value = repr(value)
    return Decimal(value).quantize(CENT)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "ProductId",
    "OrderId",
    "CENT",
    "to_money",
)
