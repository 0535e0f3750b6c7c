"""
Idempotency store — Result-based storage protocol and the in-memory store.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Protocol

from kungfu import Error, Ok, Result

from farmstand.idempotency._types import IdempotencyRecord, RecordState


@dataclass(frozen=True, slots=True)
class StoreError:
    message: str
    cause: Exception | None = None


class Store[T](Protocol):
    """
    Keyed record storage.

    set_pending must be atomic (compare-and-swap): exactly one caller wins a
    fresh key.
    """

    async def get(self, key: str) -> Result[IdempotencyRecord[T, Any] | None, StoreError]:
        """Get live record. Ok(None) if absent or expired."""
        ...

    async def set_pending(self, key: str, ttl: timedelta | None) -> Result[bool, StoreError]:
        """Ok(True) if this caller claimed the key, Ok(False) if already taken."""
        ...

    async def set_completed(self, key: str, value: T, ttl: timedelta | None) -> Result[None, StoreError]:
        ...

    async def set_failed(self, key: str, error: Any, ttl: timedelta | None) -> Result[None, StoreError]:
        ...

    async def delete(self, key: str) -> Result[bool, StoreError]:
        ...


@dataclass
class _StoredRecord[T]:
    """Internal mutable record for MemoryStore."""

    key: str
    state: RecordState
    value: T | None
    error: Any
    created_at: datetime
    expires_at: datetime | None

    def to_record(self) -> IdempotencyRecord[T, Any]:
        return IdempotencyRecord(
            key=self.key,
            state=self.state,
            value=self.value,
            error=self.error,
            created_at=self.created_at,
            expires_at=self.expires_at,
        )

    def expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now > self.expires_at


class MemoryStore[T]:
    """
    In-memory store for a single storefront process.

    One lock guards every operation; records don't survive a restart.
    Every claim sweeps expired records, so keys from abandoned sessions
    don't accumulate.
    """

    def __init__(self) -> None:
        self._records: dict[str, _StoredRecord[T]] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._records)

    async def get(self, key: str) -> Result[IdempotencyRecord[T, Any] | None, StoreError]:
        async with self._lock:
            record = self._records.get(key)
            if record is None:
                return Ok(None)
            if record.expired(datetime.now()):
                del self._records[key]
                return Ok(None)
            return Ok(record.to_record())

    async def set_pending(self, key: str, ttl: timedelta | None) -> Result[bool, StoreError]:
        async with self._lock:
            now = datetime.now()
            self._sweep(now)
            if key in self._records:
                return Ok(False)

            self._records[key] = _StoredRecord(
                key=key,
                state=RecordState.PENDING,
                value=None,
                error=None,
                created_at=now,
                expires_at=now + ttl if ttl else None,
            )
            return Ok(True)

    async def set_completed(self, key: str, value: T, ttl: timedelta | None) -> Result[None, StoreError]:
        async with self._lock:
            existing = self._records.get(key)
            if existing is None:
                return Error(StoreError(f"No pending record for key: {key}"))
            existing.state = RecordState.COMPLETED
            existing.value = value
            existing.expires_at = datetime.now() + ttl if ttl else None
            return Ok(None)

    async def set_failed(self, key: str, error: Any, ttl: timedelta | None) -> Result[None, StoreError]:
        async with self._lock:
            existing = self._records.get(key)
            if existing is None:
                return Error(StoreError(f"No pending record for key: {key}"))
            existing.state = RecordState.FAILED
            existing.error = error
            existing.expires_at = datetime.now() + ttl if ttl else None
            return Ok(None)

    async def delete(self, key: str) -> Result[bool, StoreError]:
        async with self._lock:
            if key in self._records:
                del self._records[key]
                return Ok(True)
            return Ok(False)

    def _sweep(self, now: datetime) -> None:
        # Caller holds the lock
        for key in [k for k, r in self._records.items() if r.expired(now)]:
            del self._records[key]


__all__ = ("StoreError", "Store", "MemoryStore")
