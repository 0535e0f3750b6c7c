"""
Cart — persisted line store with derived totals.

    from farmstand import cart

    store = cart.CartStore(cart.SlotStorage(cart.FileSlot(path)))
    store.add_item(product, 2)
    store.total_price
"""

from farmstand.cart._types import CartLine, CartSnapshot
from farmstand.cart._storage import (
    SCHEMA_VERSION,
    CartStorage,
    StorageError,
    encode_lines,
    decode_lines,
    Slot,
    MemorySlot,
    FileSlot,
    SlotStorage,
)
from farmstand.cart._store import CartStore, Listener

__all__ = (
    "CartLine",
    "CartSnapshot",
    "SCHEMA_VERSION",
    "CartStorage",
    "StorageError",
    "encode_lines",
    "decode_lines",
    "Slot",
    "MemorySlot",
    "FileSlot",
    "SlotStorage",
    "CartStore",
    "Listener",
)
