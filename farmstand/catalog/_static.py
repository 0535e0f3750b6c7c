"""
Built-in catalog — served when the backend is unconfigured or unreachable.
"""

from __future__ import annotations

from decimal import Decimal

from kungfu import Ok, Result

from farmstand.catalog._types import CatalogError, Category, Product

STATIC_PRODUCTS: tuple[Product, ...] = (
    Product(
        id="1",
        name="Whole Chicken",
        price=Decimal("12.99"),
        unit="per kg",
        category=Category.POULTRY,
        description="Free-range, hormone-free whole chicken raised on organic feed.",
        emoji="🐔",
        badge="Best Seller",
        badge_color="bg-terracotta",
    ),
    Product(
        id="2",
        name="Chicken Breast",
        price=Decimal("18.99"),
        unit="per kg",
        category=Category.POULTRY,
        description="Premium boneless, skinless chicken breast, perfect for healthy meals.",
        emoji="🍗",
    ),
    Product(
        id="3",
        name="Farm Fresh Eggs",
        price=Decimal("6.99"),
        unit="dozen",
        category=Category.EGGS,
        description="Free-range eggs from happy hens, rich in omega-3 and nutrients.",
        emoji="🥚",
        badge="Organic",
        badge_color="bg-olive",
    ),
    Product(
        id="4",
        name="Duck Eggs",
        price=Decimal("9.99"),
        unit="half dozen",
        category=Category.EGGS,
        description="Rich and creamy duck eggs, perfect for baking and cooking.",
        emoji="🦆",
    ),
    Product(
        id="5",
        name="Whole Duck",
        price=Decimal("24.99"),
        unit="per kg",
        category=Category.POULTRY,
        description="Tender and flavorful whole duck, perfect for special occasions.",
        emoji="🦆",
        badge="Premium",
        badge_color="bg-gold",
    ),
    Product(
        id="6",
        name="Organic Corn",
        price=Decimal("4.99"),
        unit="per 6 ears",
        category=Category.PRODUCE,
        description="Sweet and tender organic corn, freshly harvested from our fields.",
        emoji="🌽",
    ),
    Product(
        id="7",
        name="Fresh Vegetables Box",
        price=Decimal("29.99"),
        unit="per box",
        category=Category.PRODUCE,
        description="Seasonal mix of farm-fresh vegetables, perfect for families.",
        emoji="🥬",
        badge="Popular",
        badge_color="bg-sage",
    ),
    Product(
        id="8",
        name="Turkey",
        price=Decimal("19.99"),
        unit="per kg",
        category=Category.POULTRY,
        description="Heritage turkey raised naturally, ideal for holidays and gatherings.",
        emoji="🦃",
    ),
)


def filter_products(
    products: tuple[Product, ...] | list[Product],
    category: Category | None,
) -> list[Product]:
    """Available products, optionally restricted to one category."""
    return [
        p for p in products
        if p.is_available and (category is None or p.category == category)
    ]


class StaticCatalog:
    """In-process catalog over a fixed product tuple. Never fails."""

    def __init__(self, products: tuple[Product, ...] = STATIC_PRODUCTS) -> None:
        self._products = products

    async def list_products(
        self, category: Category | None = None
    ) -> Result[list[Product], CatalogError]:
        return Ok(filter_products(self._products, category))


__all__ = ("STATIC_PRODUCTS", "StaticCatalog", "filter_products")
