"""
Idempotency policy — behavior configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import timedelta
from enum import Enum, auto


class OnPending(Enum):
    """
    What to do when a run arrives while another with the same key is in flight.

    WAIT: Poll until the in-flight run settles, then replay its outcome.
    FAIL: Return CONFLICT immediately (double-clicked "Place order").
    """

    WAIT = auto()
    FAIL = auto()


WAIT = OnPending.WAIT
FAIL = OnPending.FAIL


@dataclass(frozen=True, slots=True)
class Policy:
    """
    Immutable idempotency policy; each `with_*` returns a new Policy.

    Example:
        policy = Policy().with_ttl(hours=24).with_on_pending(FAIL)

    Failures are not persisted by default so the same key can be retried.
    """

    result_ttl: timedelta | None = None
    conflict_strategy: OnPending = OnPending.FAIL
    pending_wait_timeout: timedelta = timedelta(seconds=30)
    poll_interval: timedelta = timedelta(milliseconds=50)
    persist_failed: bool = False
    failed_result_ttl: timedelta | None = None

    def with_ttl(
        self,
        *,
        seconds: float | None = None,
        minutes: float | None = None,
        hours: float | None = None,
        delta: timedelta | None = None,
    ) -> Policy:
        """TTL for completed records; after it the key may run again."""
        if delta is not None:
            ttl_val: timedelta | None = delta
        else:
            total = (seconds or 0) + (minutes or 0) * 60 + (hours or 0) * 3600
            ttl_val = timedelta(seconds=total) if total > 0 else None
        return replace(self, result_ttl=ttl_val)

    def with_on_pending(self, strategy: OnPending) -> Policy:
        return replace(self, conflict_strategy=strategy)

    def with_wait_timeout(self, *, seconds: float | None = None, delta: timedelta | None = None) -> Policy:
        """Only applies when on_pending=WAIT."""
        timeout = delta if delta else timedelta(seconds=seconds or 30)
        return replace(self, pending_wait_timeout=timeout)

    def with_store_failed(self, store: bool = True, *, seconds: float | None = None) -> Policy:
        """Keep failed outcomes (replayed to later runs) instead of clearing the key."""
        failed_ttl = timedelta(seconds=seconds) if seconds else None
        return replace(self, persist_failed=store, failed_result_ttl=failed_ttl)


__all__ = ("OnPending", "WAIT", "FAIL", "Policy")
