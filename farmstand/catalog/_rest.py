"""
REST catalog source — products from the hosted backend's ``products`` table.
"""

from __future__ import annotations

import httpx
from kungfu import Error, Ok, Result
from pydantic import TypeAdapter, ValidationError

from farmstand._http import error_message
from farmstand.catalog._types import CatalogError, Category, Product, ProductRecord

_records = TypeAdapter(list[ProductRecord])


class RestCatalog:
    """
    Catalog source backed by ``GET /products``.

    Query mirrors the storefront listing: available products only, newest
    first, optionally one category.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def list_products(
        self, category: Category | None = None
    ) -> Result[list[Product], CatalogError]:
        params = {
            "select": "*",
            "is_available": "eq.true",
            "order": "created_at.desc",
        }
        if category is not None:
            params["category"] = f"eq.{category.value}"

        try:
            response = await self._client.get("/products", params=params)
        except httpx.HTTPError as e:
            return Error(CatalogError(f"Catalog request failed: {e}", e))

        if response.is_error:
            return Error(CatalogError(error_message(response)))

        try:
            records = _records.validate_json(response.content)
        except ValidationError as e:
            return Error(CatalogError("Catalog returned malformed products", e))

        return Ok([r.to_product() for r in records])


__all__ = ("RestCatalog",)
