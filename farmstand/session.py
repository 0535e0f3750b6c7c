"""
Storefront — one user session's cart, catalog, and checkout, wired together.

Usage:
    settings = Settings()
    async with await Storefront.from_settings(settings) as shop:
        listing = await shop.catalog.list_products("Eggs")
        shop.cart.add_item(listing.products[0], 2)

        flow = shop.checkout()
        flow.open()
        ...

Collaborators chosen by from_settings():
    backend URL and key set   → RestCatalog + RestOrderBackend (httpx)
    database_url set          → static catalog + SQLAlchemyBackend
    neither                   → static catalog + SimulatedBackend
"""

from __future__ import annotations

from types import TracebackType

import httpx
import structlog
from sqlalchemy.ext.asyncio import AsyncEngine

from farmstand._http import rest_client
from farmstand.cart import CartStorage, CartStore, FileSlot, SlotStorage
from farmstand.catalog import CatalogReader, RestCatalog
from farmstand.checkout import CheckoutFlow, Identity
from farmstand.config import Settings
from farmstand.orders import (
    OrderBackend,
    OrderSubmissionService,
    RestOrderBackend,
    SimulatedBackend,
    SQLAlchemyBackend,
    create_database,
)

logger = structlog.get_logger(__name__)


class Storefront:
    """Owns the per-session collaborators. Nothing here is module-global."""

    def __init__(
        self,
        cart: CartStore,
        catalog: CatalogReader,
        orders: OrderSubmissionService,
        identity: Identity | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        engine: AsyncEngine | None = None,
    ) -> None:
        self.cart = cart
        self.catalog = catalog
        self.orders = orders
        self.identity = identity
        self._client = client
        self._engine = engine

    @classmethod
    async def from_settings(
        cls,
        settings: Settings,
        identity: Identity | None = None,
        *,
        storage: CartStorage | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> Storefront:
        """
        Build a storefront from configuration.

        Args:
            settings: Loaded Settings
            identity: Signed-in user source for checkout pre-fill
            storage: Cart storage override (defaults to a file slot under cart_dir)
            transport: httpx transport override for the REST collaborators
        """
        cart = CartStore(storage if storage is not None else SlotStorage(FileSlot(settings.cart_path)))

        client: httpx.AsyncClient | None = None
        engine: AsyncEngine | None = None
        backend: OrderBackend
        simulated = False

        if settings.backend_configured:
            assert settings.backend_url is not None and settings.backend_key is not None
            client = rest_client(
                settings.backend_url,
                settings.backend_key,
                timeout=settings.request_timeout,
                transport=transport,
            )
            catalog = CatalogReader(RestCatalog(client))
            backend = RestOrderBackend(client)
            mode = "rest"
        elif settings.database_url:
            session_factory, engine = await create_database(settings.database_url)
            catalog = CatalogReader()
            backend = SQLAlchemyBackend(session_factory)
            mode = "database"
        else:
            catalog = CatalogReader()
            backend = SimulatedBackend(delay=settings.simulated_delay)
            simulated = True
            mode = "simulated"

        logger.info("Storefront ready", mode=mode, cart_items=cart.total_items)
        return cls(
            cart,
            catalog,
            OrderSubmissionService(backend, simulated=simulated),
            identity,
            client=client,
            engine=engine,
        )

    def checkout(self) -> CheckoutFlow:
        """A new checkout session over this storefront's cart."""
        return CheckoutFlow(self.cart, self.orders, self.identity)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None

    async def __aenter__(self) -> Storefront:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


__all__ = ("Storefront",)
