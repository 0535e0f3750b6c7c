"""
Compensating write chain — order row, then its line rows.

    write = step(create_order, compensate=delete_order).then(
        lambda order: step(create_lines(order))
    )
    result = await run_chain(write)

When a later step fails, compensators recorded by earlier steps run in
reverse so the backend is not left holding an order without lines.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import structlog
from kungfu import Error, LazyCoroResult, Ok, Result

logger = structlog.get_logger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Types
# ═══════════════════════════════════════════════════════════════════════════════

type Compensator[T] = Callable[[T], Awaitable[None]]
"""Undo action that receives the value its step produced."""

type RecordedCompensator[T] = tuple[T, Compensator[T]]


@dataclass(frozen=True, slots=True)
class WriteStep[T, E]:
    """
    One backend write plus how to undo it.

    The compensator is recorded only when the action succeeds.
    """

    action: LazyCoroResult[T, E]
    compensate: Compensator[T] | None

    def then[U, E2](self, f: Callable[[T], WriteStep[U, E2]]) -> Then[T, U, E, E2]:
        """Chain the next write, built from this step's value."""
        return Then(self, f)


@dataclass(frozen=True, slots=True)
class Then[T, U, E, E2]:
    inner: WriteStep[T, E]
    f: Callable[[T], WriteStep[U, E2]]


@dataclass(frozen=True, slots=True)
class WriteResult[T, U]:
    """Both writes succeeded."""

    first: T
    value: U
    steps_executed: int


@dataclass(frozen=True, slots=True)
class WriteError[E, T]:
    """
    A write failed.

    `compensated` lists the values whose compensators succeeded;
    `uncompensated` those whose compensators raised.
    """

    error: E
    step_failed: int
    compensated: tuple[T, ...]
    uncompensated: tuple[T, ...]

    @property
    def rollback_complete(self) -> bool:
        return not self.uncompensated


# ═══════════════════════════════════════════════════════════════════════════════
# Construction
# ═══════════════════════════════════════════════════════════════════════════════


def step[T, E](
    action: LazyCoroResult[T, E],
    compensate: Compensator[T] | None = None,
) -> WriteStep[T, E]:
    return WriteStep(action=action, compensate=compensate)


# ═══════════════════════════════════════════════════════════════════════════════
# Execution
# ═══════════════════════════════════════════════════════════════════════════════


async def _run_step[T, E](
    write: WriteStep[T, E],
    compensators: list[RecordedCompensator[T]],
) -> Result[T, E]:
    result = await write.action
    match result:
        case Ok(value):
            if write.compensate is not None:
                compensators.append((value, write.compensate))
            return Ok(value)
        case Error(e):
            return Error(e)


async def _run_compensators[T](
    compensators: list[RecordedCompensator[T]],
) -> tuple[tuple[T, ...], tuple[T, ...]]:
    """Run compensators in reverse. Returns (compensated, uncompensated) values."""
    done: list[T] = []
    failed: list[T] = []
    for value, comp in reversed(compensators):
        try:
            await comp(value)
            done.append(value)
        except Exception as e:
            logger.error("Compensation failed", value=repr(value), error=str(e))
            failed.append(value)
    return tuple(done), tuple(failed)


async def run_chain[T, U, E, E2](
    chain: Then[T, U, E, E2],
) -> Result[WriteResult[T, U], WriteError[E | E2, T]]:
    """
    Execute the inner write, then the write built from its value.

    On any failure, recorded compensators run in reverse and a WriteError is
    returned. Compensator exceptions are reported in `uncompensated`.
    """
    compensators: list[RecordedCompensator[T]] = []

    match await _run_step(chain.inner, compensators):
        case Error(e):
            done, failed = await _run_compensators(compensators)
            return Error(WriteError(error=e, step_failed=1, compensated=done, uncompensated=failed))
        case Ok(first):
            pass

    next_step = chain.f(first)
    match await next_step.action:
        case Ok(value):
            return Ok(WriteResult(first=first, value=value, steps_executed=2))
        case Error(e2):
            done, failed = await _run_compensators(compensators)
            return Error(WriteError(error=e2, step_failed=2, compensated=done, uncompensated=failed))


__all__ = (
    "Compensator",
    "WriteStep",
    "Then",
    "WriteResult",
    "WriteError",
    "step",
    "run_chain",
)
