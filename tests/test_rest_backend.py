"""REST order backend against a mocked hosted service."""

import json
import uuid
from dataclasses import replace
from decimal import Decimal

import httpx
import pytest

from farmstand._http import rest_client
from farmstand.cart import CartLine
from farmstand.orders import (
    BackendFailure,
    OrderDraft,
    OrderLineDraft,
    OrderStatus,
    OrderSubmissionService,
    RestOrderBackend,
    SubmissionErrorKind,
)

from tests._helpers import error_value, ok_value

ORDER_ID = "5f0c6a8e-0f7b-4a55-9d1e-2c3b4a5d6e7f"


class FakeHostedService:
    """Answers /orders and /order_items like the hosted REST API."""

    def __init__(
        self,
        *,
        fail_items: bool = False,
        fail_delete: bool = False,
        delete_blocked: bool = False,
    ) -> None:
        self.requests: list[httpx.Request] = []
        self.rows: dict[str, dict] = {}
        self.fail_items = fail_items
        self.fail_delete = fail_delete
        self.delete_blocked = delete_blocked

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.method == "POST" and path == "/rest/v1/orders":
            body = json.loads(request.content)
            row = {**body, "id": ORDER_ID, "created_at": "2026-05-01T12:00:00+00:00"}
            self.rows[ORDER_ID] = row
            return httpx.Response(201, json=[row])

        if request.method == "POST" and path == "/rest/v1/order_items":
            if self.fail_items:
                return httpx.Response(
                    409,
                    json={"code": "23503", "message": "insert or update on table \"order_items\" violates foreign key constraint"},
                )
            return httpx.Response(201)

        if request.method == "DELETE" and path == "/rest/v1/orders":
            if self.fail_delete:
                return httpx.Response(403, json={"message": "permission denied for table orders"})
            if self.delete_blocked:
                # Row-level security hides the row: nothing matches, nothing is deleted
                return httpx.Response(200, json=[])
            order_id = request.url.params["id"].removeprefix("eq.")
            deleted = [self.rows.pop(order_id)] if order_id in self.rows else []
            return httpx.Response(200, json=deleted)

        return httpx.Response(404)

    def bodies(self, method: str, path: str) -> list:
        return [
            json.loads(r.content) for r in self.requests
            if r.method == method and r.url.path == path
        ]


def _backend(hosted: FakeHostedService) -> tuple[RestOrderBackend, httpx.AsyncClient]:
    client = rest_client("https://shop.example.com", "anon-key", transport=httpx.MockTransport(hosted))
    return RestOrderBackend(client), client


class TestCreateOrder:
    async def test_posts_order_and_returns_row(self, form):
        hosted = FakeHostedService()
        backend, client = _backend(hosted)

        async with client:
            order = await backend.create_order(OrderDraft.from_form(form, Decimal("25.98")))

        assert order.id == ORDER_ID
        assert order.status is OrderStatus.PENDING
        assert order.total_amount == Decimal("25.98")

        request = hosted.requests[0]
        assert request.headers["prefer"] == "return=representation"
        body = json.loads(request.content)
        assert body["shipping_address"] == "12 Barn Lane, Springfield, IL 62701"
        assert body["total_amount"] == "25.98"
        assert body["status"] == "pending"

    async def test_unexpected_row_count_is_failure(self, form):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(201, json=[])

        client = rest_client("https://shop.example.com", "anon-key", transport=httpx.MockTransport(handler))
        async with client:
            with pytest.raises(BackendFailure) as info:
                await RestOrderBackend(client).create_order(OrderDraft.from_form(form, Decimal("1")))

        assert info.value.code == "malformed_response"

    async def test_error_status_raises_with_message(self, form):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"message": "JWT expired"})

        client = rest_client("https://shop.example.com", "anon-key", transport=httpx.MockTransport(handler))
        async with client:
            with pytest.raises(BackendFailure) as info:
                await RestOrderBackend(client).create_order(OrderDraft.from_form(form, Decimal("1")))

        assert info.value.code == "401"
        assert info.value.message == "JWT expired"


class TestOrderLines:
    async def test_static_ids_are_sent_as_null(self, chicken):
        hosted = FakeHostedService()
        backend, client = _backend(hosted)
        hosted_product = replace(chicken, id=str(uuid.uuid4()), name="Hosted Chicken")
        lines = [
            OrderLineDraft.from_cart_line(CartLine(chicken, 2)),
            OrderLineDraft.from_cart_line(CartLine(hosted_product, 1)),
        ]

        async with client:
            await backend.create_order_lines(ORDER_ID, lines)

        [payload] = hosted.bodies("POST", "/rest/v1/order_items")
        assert payload[0] == {
            "order_id": ORDER_ID,
            "product_id": None,
            "product_name": "Whole Chicken",
            "quantity": 2,
            "unit_price": "12.99",
            "total_price": "25.98",
        }
        assert payload[1]["product_id"] == hosted_product.id


class TestSubmissionOverRest:
    async def test_end_to_end(self, form, chicken):
        hosted = FakeHostedService()
        backend, client = _backend(hosted)

        async with client:
            receipt = ok_value(
                await OrderSubmissionService(backend).submit(form, [CartLine(chicken, 2)], Decimal("25.98"))
            )

        assert receipt.order_id == ORDER_ID
        assert [(r.method, r.url.path) for r in hosted.requests] == [
            ("POST", "/rest/v1/orders"),
            ("POST", "/rest/v1/order_items"),
        ]

    async def test_line_failure_deletes_order(self, form, chicken):
        hosted = FakeHostedService(fail_items=True)
        backend, client = _backend(hosted)

        async with client:
            err = error_value(
                await OrderSubmissionService(backend).submit(form, [CartLine(chicken, 2)], Decimal("25.98"))
            )

        assert err.kind is SubmissionErrorKind.BACKEND
        assert "foreign key" in err.message
        assert err.orphaned_order_id is None
        delete = hosted.requests[-1]
        assert delete.method == "DELETE"
        assert delete.url.params["id"] == f"eq.{ORDER_ID}"
        assert hosted.rows == {}

    async def test_refused_delete_reports_orphan(self, form, chicken):
        hosted = FakeHostedService(fail_items=True, fail_delete=True)
        backend, client = _backend(hosted)

        async with client:
            err = error_value(
                await OrderSubmissionService(backend).submit(form, [CartLine(chicken, 2)], Decimal("25.98"))
            )

        assert err.orphaned_order_id == ORDER_ID

    async def test_delete_matching_no_rows_reports_orphan(self, form, chicken):
        hosted = FakeHostedService(fail_items=True, delete_blocked=True)
        backend, client = _backend(hosted)

        async with client:
            err = error_value(
                await OrderSubmissionService(backend).submit(form, [CartLine(chicken, 2)], Decimal("25.98"))
            )

        assert err.kind is SubmissionErrorKind.BACKEND
        assert "foreign key" in err.message
        assert err.orphaned_order_id == ORDER_ID
        delete = hosted.requests[-1]
        assert delete.headers["prefer"] == "return=representation"

    async def test_unreachable_backend_is_failure(self, form, chicken):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = rest_client("https://shop.example.com", "anon-key", transport=httpx.MockTransport(handler))
        async with client:
            err = error_value(
                await OrderSubmissionService(RestOrderBackend(client)).submit(
                    form, [CartLine(chicken, 1)], Decimal("12.99")
                )
            )

        assert err.kind is SubmissionErrorKind.BACKEND
        assert err.message == "connection refused"
