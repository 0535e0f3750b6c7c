"""
In-process order backends — recording backend and the offline simulation.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from collections.abc import Callable
from datetime import datetime

from farmstand._types import OrderId
from farmstand.orders._types import (
    BackendFailure,
    Order,
    OrderDraft,
    OrderLine,
    OrderLineDraft,
)

_BASE36 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def _base36(n: int) -> str:
    digits = []
    while True:
        n, r = divmod(n, 36)
        digits.append(_BASE36[r])
        if n == 0:
            return "".join(reversed(digits))


def demo_order_id() -> OrderId:
    """``ORD-`` followed by the current epoch milliseconds in base 36."""
    return f"ORD-{_base36(time.time_ns() // 1_000_000)}"


class MemoryBackend:
    """
    Order backend that keeps rows in dicts.

    `fail_on` names operations ("create_order", "create_order_lines",
    "delete_order") that raise BackendFailure, for exercising failure paths.

    Example:
        backend = MemoryBackend(fail_on={"create_order_lines"})
    """

    def __init__(
        self,
        *,
        delay: float = 0.0,
        id_factory: Callable[[], OrderId] | None = None,
        fail_on: set[str] | None = None,
    ) -> None:
        self.delay = delay
        self.fail_on: set[str] = set(fail_on or ())
        self.orders: dict[OrderId, Order] = {}
        self.lines: dict[OrderId, list[OrderLine]] = {}
        self.calls: list[str] = []
        self._id_factory = id_factory or (lambda: str(uuid.uuid4()))

    async def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        if self.delay:
            await asyncio.sleep(self.delay)
        if operation in self.fail_on:
            raise BackendFailure("unavailable", f"{operation} failed")

    async def create_order(self, draft: OrderDraft) -> Order:
        await self._enter("create_order")
        order = Order(
            id=self._id_factory(),
            customer_email=draft.customer_email,
            customer_name=draft.customer_name,
            customer_phone=draft.customer_phone,
            shipping_address=draft.shipping_address,
            total_amount=draft.total_amount,
            status=draft.status,
            notes=draft.notes,
            created_at=datetime.now(),
        )
        self.orders[order.id] = order
        self.lines[order.id] = []
        return order

    async def create_order_lines(self, order_id: OrderId, lines: list[OrderLineDraft]) -> None:
        await self._enter("create_order_lines")
        if order_id not in self.orders:
            raise BackendFailure("foreign_key_violation", f"Order {order_id} does not exist")
        self.lines[order_id].extend(
            OrderLine(
                order_id=order_id,
                product_id=line.product_id,
                product_name=line.product_name,
                quantity=line.quantity,
                unit_price=line.unit_price,
                total_price=line.total_price,
            )
            for line in lines
        )

    async def delete_order(self, order_id: OrderId) -> None:
        await self._enter("delete_order")
        self.orders.pop(order_id, None)
        self.lines.pop(order_id, None)


class SimulatedBackend(MemoryBackend):
    """
    Offline stand-in used when no backend is configured.

    Waits `delay` seconds per order and hands out ``ORD-…`` ids; nothing
    leaves the process.
    """

    def __init__(self, delay: float = 1.5) -> None:
        super().__init__(id_factory=demo_order_id)
        self._order_delay = delay

    async def create_order(self, draft: OrderDraft) -> Order:
        if self._order_delay:
            await asyncio.sleep(self._order_delay)
        return await super().create_order(draft)


__all__ = ("demo_order_id", "MemoryBackend", "SimulatedBackend")
