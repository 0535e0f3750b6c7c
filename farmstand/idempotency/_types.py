"""
Idempotency types — submission records and outcomes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto

# ═══════════════════════════════════════════════════════════════════════════════
# Record State
# ═══════════════════════════════════════════════════════════════════════════════


class RecordState(Enum):
    """
    State of a keyed submission.

    Lifecycle:
        PENDING → COMPLETED (order placed)
                → FAILED (kept only when the policy persists failures)
                → (expired/deleted)
    """

    PENDING = auto()
    COMPLETED = auto()
    FAILED = auto()


@dataclass(frozen=True, slots=True)
class IdempotencyRecord[T, E]:
    """A stored record. `value` is set only when COMPLETED, `error` only when FAILED."""

    key: str
    state: RecordState
    value: T | None
    error: E | None
    created_at: datetime
    expires_at: datetime | None

    @property
    def is_expired(self) -> bool:
        if self.expires_at is None:
            return False
        return datetime.now() > self.expires_at


# ═══════════════════════════════════════════════════════════════════════════════
# Result Types
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class IdempotencyResult[T]:
    """Successful run. `from_cache` is True when an earlier run's value was replayed."""

    value: T
    from_cache: bool
    key: str


class IdempotencyErrorKind(Enum):
    CONFLICT = auto()  # Another run with the same key is in flight
    TIMEOUT = auto()  # Waiting on the in-flight run timed out
    STORE_ERROR = auto()  # Storage backend error
    EXECUTION = auto()  # The wrapped operation failed
    REPLAYED_FAILURE = auto()  # A persisted failure was returned


@dataclass(frozen=True, slots=True)
class IdempotencyError[E]:
    """`original_error` carries the wrapped operation's error for EXECUTION/REPLAYED_FAILURE."""

    kind: IdempotencyErrorKind
    message: str
    original_error: E | None = None


__all__ = (
    "RecordState",
    "IdempotencyRecord",
    "IdempotencyResult",
    "IdempotencyError",
    "IdempotencyErrorKind",
)
