"""
Idempotency — run an operation at most once per key.

    from farmstand import idempotency as I

    result = await I.run_once(
        f"checkout:{session_key}",
        lambda: place_order(draft),
        I.MemoryStore(),
        I.Policy().with_ttl(hours=24).with_on_pending(I.FAIL),
    )

Used by order submission so a repeated "Place order" for one checkout
session never creates a second order.
"""

from farmstand.idempotency._types import (
    RecordState,
    IdempotencyRecord,
    IdempotencyResult,
    IdempotencyError,
    IdempotencyErrorKind,
)
from farmstand.idempotency._store import Store, StoreError, MemoryStore
from farmstand.idempotency._policy import Policy, OnPending, WAIT, FAIL
from farmstand.idempotency._run import Operation, run_once

__all__ = (
    "RecordState",
    "IdempotencyRecord",
    "IdempotencyResult",
    "IdempotencyError",
    "IdempotencyErrorKind",
    "Store",
    "StoreError",
    "MemoryStore",
    "Policy",
    "OnPending",
    "WAIT",
    "FAIL",
    "Operation",
    "run_once",
)
