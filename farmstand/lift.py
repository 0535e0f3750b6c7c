"""
Lift — turning backend calls that raise into Results.

    match await L.from_awaitable(
        lambda: backend.create_order(draft),
        on_error=BackendError.from_exception,
    ):
        case Ok(order): ...
        case Error(err): ...
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from combinators.lift import catching_async
from kungfu import LazyCoroResult


def from_awaitable[T, E](
    awaitable_fn: Callable[[], Awaitable[T]],
    on_error: Callable[[Exception], E],
) -> LazyCoroResult[T, E]:
    """
    Lazy Result of a backend coroutine: Ok(value), or Error(on_error(exc))
    when it raises.

    Nothing runs until the returned LazyCoroResult is awaited, so a
    compensating chain can hold the call before deciding to make it.
    """
    return catching_async(awaitable_fn, on_error=on_error)


__all__ = ("catching_async", "from_awaitable")
