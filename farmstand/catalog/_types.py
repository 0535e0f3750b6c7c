"""
Catalog types — products as the storefront core sees them.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Protocol

from kungfu import Result
from pydantic import BaseModel, ConfigDict, Field, field_validator

from farmstand._types import ProductId, to_money

# ═══════════════════════════════════════════════════════════════════════════════
# Category
# ═══════════════════════════════════════════════════════════════════════════════


class Category(Enum):
    POULTRY = "poultry"
    EGGS = "eggs"
    PRODUCE = "produce"

    @classmethod
    def parse(cls, value: str | Category | None) -> Category | None:
        """
        Parse a UI category label.

        None, "" and "All" mean no filter. Labels are case-insensitive
        ("Poultry" and "poultry" are the same category).
        """
        if value is None or isinstance(value, Category):
            return value
        label = value.strip().lower()
        if label in ("", "all"):
            return None
        return cls(label)


# ═══════════════════════════════════════════════════════════════════════════════
# Product
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Product:
    """
    A catalog product.

    Read-only to the core. `stock` is informational: nothing here checks or
    decrements it.
    """

    id: ProductId
    name: str
    price: Decimal
    unit: str
    category: Category
    is_available: bool = True
    description: str | None = None
    emoji: str | None = None
    badge: str | None = None
    badge_color: str | None = None
    image_url: str | None = None
    stock: int = 0

    def __post_init__(self) -> None:
        if self.price < 0:
            raise ValueError(f"Product {self.id} has a negative price")


# ═══════════════════════════════════════════════════════════════════════════════
# Wire Record — JSON shape shared by the REST catalog and cart storage
# ═══════════════════════════════════════════════════════════════════════════════


class ProductRecord(BaseModel):
    """Product row as stored by the hosted backend and in the cart slot."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    price: Decimal = Field(ge=0)
    unit: str
    category: Category
    is_available: bool = True
    description: str | None = None
    emoji: str | None = None
    badge: str | None = None
    badge_color: str | None = None
    image_url: str | None = None
    stock: int = 0

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, v: object) -> object:
        # Static catalog ids were numeric in older cart slots
        return str(v) if isinstance(v, int) else v

    @field_validator("category", mode="before")
    @classmethod
    def _lower_category(cls, v: object) -> object:
        return v.lower() if isinstance(v, str) else v

    @classmethod
    def from_product(cls, product: Product) -> ProductRecord:
        return cls(
            id=product.id,
            name=product.name,
            price=product.price,
            unit=product.unit,
            category=product.category,
            is_available=product.is_available,
            description=product.description,
            emoji=product.emoji,
            badge=product.badge,
            badge_color=product.badge_color,
            image_url=product.image_url,
            stock=product.stock,
        )

    def to_product(self) -> Product:
        return Product(
            id=self.id,
            name=self.name,
            price=to_money(self.price),
            unit=self.unit,
            category=self.category,
            is_available=self.is_available,
            description=self.description,
            emoji=self.emoji,
            badge=self.badge,
            badge_color=self.badge_color,
            image_url=self.image_url,
            stock=self.stock,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Errors & Source Protocol
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CatalogError:
    """Catalog source failure."""

    message: str
    cause: Exception | None = None


class CatalogSource(Protocol):
    """
    Where products come from.

    Implementations return Ok(products) already filtered to available
    products in `category` (None = all categories).
    """

    async def list_products(
        self, category: Category | None = None
    ) -> Result[list[Product], CatalogError]:
        ...


__all__ = (
    "Category",
    "Product",
    "ProductRecord",
    "CatalogError",
    "CatalogSource",
)
