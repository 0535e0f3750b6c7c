"""
run_once — execute an operation at most once per key.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from kungfu import Error, Ok, Result

from farmstand.idempotency._policy import OnPending, Policy
from farmstand.idempotency._store import Store
from farmstand.idempotency._types import (
    IdempotencyError,
    IdempotencyErrorKind,
    IdempotencyRecord,
    IdempotencyResult,
    RecordState,
)

logger = structlog.get_logger(__name__)

type Operation[T, E] = Callable[[], Awaitable[Result[T, E]]]


def _store_error[E](message: str) -> Result[IdempotencyResult[Any], IdempotencyError[E]]:
    return Error(IdempotencyError(IdempotencyErrorKind.STORE_ERROR, message))


def _replay[T, E](
    record: IdempotencyRecord[T, E],
) -> Result[IdempotencyResult[T], IdempotencyError[E]]:
    if record.state is RecordState.COMPLETED:
        return Ok(IdempotencyResult(value=record.value, from_cache=True, key=record.key))  # type: ignore[arg-type]
    return Error(IdempotencyError(
        IdempotencyErrorKind.REPLAYED_FAILURE,
        f"Earlier run for {record.key} failed",
        original_error=record.error,
    ))


async def _wait_settled[T](
    key: str,
    store: Store[T],
    policy: Policy,
) -> Result[IdempotencyRecord[T, Any] | None, IdempotencyError[Any]]:
    """Poll until the in-flight record settles or disappears."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + policy.pending_wait_timeout.total_seconds()
    while loop.time() < deadline:
        await asyncio.sleep(policy.poll_interval.total_seconds())
        match await store.get(key):
            case Ok(None):
                return Ok(None)
            case Ok(record) if record.state is not RecordState.PENDING:
                return Ok(record)
            case Ok(_):
                continue
            case Error(err):
                return Error(IdempotencyError(IdempotencyErrorKind.STORE_ERROR, err.message))
    return Error(IdempotencyError(
        IdempotencyErrorKind.TIMEOUT,
        f"Timed out waiting on in-flight run for {key}",
    ))


async def run_once[T, E](
    key: str,
    operation: Operation[T, E],
    store: Store[T],
    policy: Policy = Policy(),
) -> Result[IdempotencyResult[T], IdempotencyError[E]]:
    """
    Run `operation` unless `key` already has a live record.

    - COMPLETED record → its value is replayed (from_cache=True)
    - PENDING record → CONFLICT (FAIL) or wait and replay (WAIT)
    - no record → claim the key, run, store the outcome

    A failed run clears the key unless the policy persists failures, so the
    caller may retry with the same key.

    Example:
        result = await run_once(
            f"checkout:{session_key}",
            lambda: place(draft, lines),
            store,
            Policy().with_ttl(hours=24),
        )
    """
    match await store.get(key):
        case Error(err):
            return _store_error(err.message)
        case Ok(None):
            pass
        case Ok(record) if record.state is RecordState.PENDING:
            if policy.conflict_strategy is OnPending.FAIL:
                return Error(IdempotencyError(
                    IdempotencyErrorKind.CONFLICT,
                    f"A run for {key} is already in progress",
                ))
            match await _wait_settled(key, store, policy):
                case Ok(None):
                    pass
                case Ok(settled):
                    return _replay(settled)
                case Error(wait_err):
                    return Error(wait_err)
        case Ok(record):
            return _replay(record)

    match await store.set_pending(key, policy.result_ttl):
        case Error(err):
            return _store_error(err.message)
        case Ok(False):
            # Lost the race between get() and set_pending()
            return Error(IdempotencyError(
                IdempotencyErrorKind.CONFLICT,
                f"A run for {key} is already in progress",
            ))
        case Ok(True):
            pass

    try:
        outcome = await operation()
    except BaseException:
        await store.delete(key)
        raise

    match outcome:
        case Ok(value):
            match await store.set_completed(key, value, policy.result_ttl):
                case Error(err):
                    logger.error("Could not record completed run", key=key, error=err.message)
            return Ok(IdempotencyResult(value=value, from_cache=False, key=key))

        case Error(op_error):
            if policy.persist_failed:
                await store.set_failed(key, op_error, policy.failed_result_ttl or policy.result_ttl)
            else:
                await store.delete(key)
            return Error(IdempotencyError(
                IdempotencyErrorKind.EXECUTION,
                "Operation failed",
                original_error=op_error,
            ))


__all__ = ("Operation", "run_once")
