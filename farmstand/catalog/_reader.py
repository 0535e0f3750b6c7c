"""
Catalog reader — product listing with static fallback.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog
from kungfu import Error, Ok

from farmstand import lift as L
from farmstand.catalog._static import StaticCatalog
from farmstand.catalog._types import CatalogError, CatalogSource, Category, Product

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Listing:
    """Products returned to the UI, with where they came from."""

    products: list[Product]
    from_fallback: bool
    category: Category | None


class CatalogReader:
    """
    Lists available products.

    With no source configured, or when the source fails, the built-in
    catalog is served instead. Failures are logged, never raised.

    Example:
        reader = CatalogReader(RestCatalog(client))
        listing = await reader.list_products("Poultry")
        for product in listing.products:
            ...
    """

    def __init__(
        self,
        source: CatalogSource | None = None,
        fallback: CatalogSource | None = None,
    ) -> None:
        self._source = source
        self._fallback = fallback if fallback is not None else StaticCatalog()

    async def list_products(self, category: str | Category | None = None) -> Listing:
        try:
            wanted = Category.parse(category)
        except ValueError:
            logger.warning("Unknown catalog category requested", category=category)
            return Listing(products=[], from_fallback=False, category=None)

        if self._source is not None:
            source = self._source
            result = await L.catching_async(
                lambda: source.list_products(wanted),
                on_error=lambda e: CatalogError(f"Catalog source raised: {e}", e),
            )
            # catching_async wraps the source's own Result
            match result:
                case Ok(Ok(products)):
                    return Listing(products=products, from_fallback=False, category=wanted)
                case Ok(Error(err)) | Error(err):
                    logger.warning(
                        "Catalog unavailable, serving built-in products",
                        category=wanted.value if wanted else None,
                        error=err.message,
                    )

        match await self._fallback.list_products(wanted):
            case Ok(products):
                return Listing(products=products, from_fallback=True, category=wanted)
            case Error(err):
                logger.error("Fallback catalog failed", error=err.message)
                return Listing(products=[], from_fallback=True, category=wanted)


__all__ = ("Listing", "CatalogReader")
