"""
farmstand — storefront core for a farm-products shop.

    from farmstand import catalog as Cat      # Product listing with fallback
    from farmstand import cart as C           # Persisted cart store
    from farmstand import checkout as Co      # Contact → shipping → review → success
    from farmstand import orders as O         # Order submission and backends
    from farmstand import idempotency as I    # At-most-once submission
"""

from farmstand import catalog
from farmstand import cart
from farmstand import idempotency
from farmstand import orders
from farmstand import checkout
from farmstand import lift
from farmstand.config import Settings
from farmstand.session import Storefront
from farmstand._types import ProductId, OrderId

__version__ = "0.1.0"

__all__ = (
    "catalog",
    "cart",
    "idempotency",
    "orders",
    "checkout",
    "lift",
    "Settings",
    "Storefront",
    "ProductId",
    "OrderId",
)
