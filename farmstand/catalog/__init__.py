"""
Catalog — product listing with a built-in fallback.

    from farmstand import catalog

    reader = catalog.CatalogReader(catalog.RestCatalog(client))
    listing = await reader.list_products("Eggs")
"""

from farmstand.catalog._types import (
    Category,
    Product,
    ProductRecord,
    CatalogError,
    CatalogSource,
)
from farmstand.catalog._static import STATIC_PRODUCTS, StaticCatalog, filter_products
from farmstand.catalog._rest import RestCatalog
from farmstand.catalog._reader import Listing, CatalogReader

__all__ = (
    "Category",
    "Product",
    "ProductRecord",
    "CatalogError",
    "CatalogSource",
    "STATIC_PRODUCTS",
    "StaticCatalog",
    "filter_products",
    "RestCatalog",
    "Listing",
    "CatalogReader",
)
