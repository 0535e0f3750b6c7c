"""
Order submission — one order plus one line per cart line, or nothing.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

import structlog
from kungfu import Error, Ok, Result

from farmstand import idempotency as I
from farmstand import lift as L
from farmstand.cart import CartLine
from farmstand.orders._saga import run_chain, step
from farmstand.orders._types import (
    AtomicOrderBackend,
    BackendError,
    CustomerForm,
    Order,
    OrderBackend,
    OrderDraft,
    OrderLineDraft,
    OrderReceipt,
    SubmissionError,
    SubmissionErrorKind,
)

logger = structlog.get_logger(__name__)

DEFAULT_POLICY = I.Policy().with_ttl(hours=24).with_on_pending(I.FAIL)


class OrderSubmissionService:
    """
    Writes an order and its lines through an OrderBackend.

    Backends that implement `place_order` get a single atomic call. Others
    get `create_order` then `create_order_lines`, with `delete_order` as the
    compensation when the line write fails.

    Submissions carrying a `key` go through `run_once`: a completed key
    replays its receipt, an in-flight key is rejected, a failed key is
    cleared so the same checkout can retry.

    Example:
        service = OrderSubmissionService(SimulatedBackend(), simulated=True)
        match await service.submit(form, cart.items, cart.total_price, key=session_key):
            case Ok(receipt):
                print(receipt.order_id)
            case Error(err):
                print(err.message)
    """

    def __init__(
        self,
        backend: OrderBackend,
        *,
        store: I.Store[OrderReceipt] | None = None,
        policy: I.Policy | None = None,
        simulated: bool = False,
    ) -> None:
        self.backend = backend
        self.simulated = simulated
        self._store: I.Store[OrderReceipt] = store if store is not None else I.MemoryStore()
        self._policy = policy or DEFAULT_POLICY

    async def submit(
        self,
        form: CustomerForm,
        lines: Sequence[CartLine],
        total: Decimal,
        *,
        key: str | None = None,
    ) -> Result[OrderReceipt, SubmissionError]:
        if not lines:
            return Error(SubmissionError(SubmissionErrorKind.EMPTY_CART, "Your cart is empty"))

        draft = OrderDraft.from_form(form, total)
        line_drafts = [OrderLineDraft.from_cart_line(line) for line in lines]

        if key is None:
            return await self._place(draft, line_drafts)

        match await I.run_once(
            f"checkout:{key}",
            lambda: self._place(draft, line_drafts),
            self._store,
            self._policy,
        ):
            case Ok(done):
                if done.from_cache:
                    logger.info("Replayed completed submission", key=key, order_id=done.value.order_id)
                return Ok(done.value)
            case Error(err) if err.original_error is not None:
                return Error(err.original_error)
            case Error(err) if err.kind is I.IdempotencyErrorKind.CONFLICT:
                return Error(SubmissionError(SubmissionErrorKind.IN_FLIGHT, "Your order is already being placed"))
            case Error(err):
                logger.error("Submission bookkeeping failed", key=key, kind=err.kind.name, error=err.message)
                return Error(SubmissionError(SubmissionErrorKind.BACKEND, err.message))

    async def _place(
        self,
        draft: OrderDraft,
        lines: list[OrderLineDraft],
    ) -> Result[OrderReceipt, SubmissionError]:
        logger.info(
            "Submitting order",
            email=draft.customer_email,
            lines=len(lines),
            total=str(draft.total_amount),
            simulated=self.simulated,
        )

        if isinstance(self.backend, AtomicOrderBackend):
            placed = await self._place_atomic(self.backend, draft, lines)
        else:
            placed = await self._place_compensated(draft, lines)

        match placed:
            case Ok(order):
                logger.info("Order placed", order_id=order.id, lines=len(lines))
                return Ok(OrderReceipt(
                    order_id=order.id,
                    total_amount=order.total_amount,
                    line_count=len(lines),
                    simulated=self.simulated,
                ))
            case Error(err):
                return Error(err)

    async def _place_atomic(
        self,
        backend: AtomicOrderBackend,
        draft: OrderDraft,
        lines: list[OrderLineDraft],
    ) -> Result[Order, SubmissionError]:
        match await L.from_awaitable(
            lambda: backend.place_order(draft, lines),
            on_error=BackendError.from_exception,
        ):
            case Ok(order):
                return Ok(order)
            case Error(err):
                logger.warning("Order placement failed", code=err.code, error=err.message)
                return Error(SubmissionError.backend(err))

    async def _place_compensated(
        self,
        draft: OrderDraft,
        lines: list[OrderLineDraft],
    ) -> Result[Order, SubmissionError]:
        backend = self.backend

        async def _delete(order: Order) -> None:
            await backend.delete_order(order.id)

        write = step(
            L.from_awaitable(lambda: backend.create_order(draft), on_error=BackendError.from_exception),
            compensate=_delete,
        ).then(
            lambda order: step(
                L.from_awaitable(
                    lambda: backend.create_order_lines(order.id, lines),
                    on_error=BackendError.from_exception,
                )
            )
        )

        match await run_chain(write):
            case Ok(done):
                return Ok(done.first)
            case Error(failure):
                if failure.uncompensated:
                    orphan = failure.uncompensated[0].id
                    logger.error(
                        "Order left without lines",
                        order_id=orphan,
                        code=failure.error.code,
                        error=failure.error.message,
                    )
                    return Error(SubmissionError.backend(failure.error, orphaned_order_id=orphan))
                logger.warning(
                    "Order write failed",
                    step=failure.step_failed,
                    rolled_back=len(failure.compensated),
                    code=failure.error.code,
                    error=failure.error.message,
                )
                return Error(SubmissionError.backend(failure.error))


__all__ = ("DEFAULT_POLICY", "OrderSubmissionService")
