"""
REST order backend — ``orders`` and ``order_items`` on the hosted backend.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import httpx
from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from farmstand._http import error_message
from farmstand._types import OrderId
from farmstand.orders._types import (
    BackendFailure,
    Order,
    OrderDraft,
    OrderLineDraft,
    OrderStatus,
)


class OrderRow(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    customer_email: str
    customer_name: str
    customer_phone: str | None = None
    shipping_address: str
    total_amount: Decimal
    status: OrderStatus = OrderStatus.PENDING
    notes: str | None = None
    created_at: datetime

    def to_order(self) -> Order:
        return Order(
            id=self.id,
            customer_email=self.customer_email,
            customer_name=self.customer_name,
            customer_phone=self.customer_phone,
            shipping_address=self.shipping_address,
            total_amount=self.total_amount,
            status=self.status,
            notes=self.notes,
            created_at=self.created_at,
        )


_order_rows = TypeAdapter(list[OrderRow])


class RestOrderBackend:
    """
    Writes orders through the hosted backend's REST API.

    The order insert asks for the created row back (``Prefer:
    return=representation``) to learn its id. Line rows carry a product id
    only when it is a UUID of a backend product; built-in catalog products
    are stored by name alone.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def create_order(self, draft: OrderDraft) -> Order:
        payload = {
            "customer_email": draft.customer_email,
            "customer_name": draft.customer_name,
            "customer_phone": draft.customer_phone,
            "shipping_address": draft.shipping_address,
            "total_amount": str(draft.total_amount),
            "status": draft.status.value,
            "notes": draft.notes,
        }
        response = await self._client.post(
            "/orders",
            json=payload,
            headers={"Prefer": "return=representation"},
        )
        self._raise_for_status(response, "Failed to create order")

        try:
            rows = _order_rows.validate_json(response.content)
        except ValidationError as e:
            raise BackendFailure("malformed_response", f"Unexpected order response: {e.error_count()} error(s)") from e
        if len(rows) != 1:
            raise BackendFailure("malformed_response", f"Expected one order row, got {len(rows)}")
        return rows[0].to_order()

    async def create_order_lines(self, order_id: OrderId, lines: list[OrderLineDraft]) -> None:
        payload = [
            {
                "order_id": order_id,
                "product_id": line.catalog_product_id,
                "product_name": line.product_name,
                "quantity": line.quantity,
                "unit_price": str(line.unit_price),
                "total_price": str(line.total_price),
            }
            for line in lines
        ]
        response = await self._client.post("/order_items", json=payload)
        self._raise_for_status(response, "Failed to create order items")

    async def delete_order(self, order_id: OrderId) -> None:
        """
        Delete the order row, asking for the deleted rows back.

        A filtered DELETE that matches nothing (row-level security refusing
        the anon key, for one) still answers 2xx, so an empty representation
        is a failure.
        """
        response = await self._client.delete(
            "/orders",
            params={"id": f"eq.{order_id}"},
            headers={"Prefer": "return=representation"},
        )
        self._raise_for_status(response, "Failed to delete order")

        try:
            deleted = response.json() if response.content else []
        except ValueError:
            deleted = []
        if not isinstance(deleted, list) or not deleted:
            raise BackendFailure("not_deleted", f"Order {order_id} was not deleted")

    @staticmethod
    def _raise_for_status(response: httpx.Response, fallback: str) -> None:
        if response.is_error:
            message = error_message(response)
            raise BackendFailure(
                str(response.status_code),
                message if not message.startswith("HTTP ") else fallback,
            )


__all__ = ("OrderRow", "RestOrderBackend")
