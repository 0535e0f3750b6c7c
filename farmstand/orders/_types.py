"""
Order types — drafts sent to the backend, records it returns, and failures.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum, auto
from typing import Protocol, runtime_checkable

from farmstand._types import OrderId, ProductId, to_money
from farmstand.cart import CartLine

# Hyphenated 8-4-4-4-12, versions 1-5, RFC 4122 variant
_CANONICAL_UUID = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}",
    re.IGNORECASE,
)

# ═══════════════════════════════════════════════════════════════════════════════
# Customer Form — what submission needs from the checkout form
# ═══════════════════════════════════════════════════════════════════════════════


class CustomerForm(Protocol):
    """Contact and shipping fields of a completed checkout form."""

    email: str
    full_name: str
    phone: str
    address: str
    city: str
    state: str
    zip_code: str
    notes: str


# ═══════════════════════════════════════════════════════════════════════════════
# Drafts — written by the core
# ═══════════════════════════════════════════════════════════════════════════════


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


@dataclass(frozen=True, slots=True)
class OrderDraft:
    customer_email: str
    customer_name: str
    customer_phone: str | None
    shipping_address: str
    total_amount: Decimal
    notes: str | None
    status: OrderStatus = OrderStatus.PENDING

    @classmethod
    def from_form(cls, form: CustomerForm, total: Decimal) -> OrderDraft:
        return cls(
            customer_email=form.email.strip(),
            customer_name=form.full_name.strip(),
            customer_phone=form.phone.strip() or None,
            shipping_address=f"{form.address}, {form.city}, {form.state} {form.zip_code}",
            total_amount=to_money(total),
            notes=form.notes.strip() or None,
        )


@dataclass(frozen=True, slots=True)
class OrderLineDraft:
    """
    Historical snapshot of one cart line.

    Name and unit price are copied at submission time and never re-read from
    the catalog.
    """

    product_id: ProductId
    product_name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal

    @classmethod
    def from_cart_line(cls, line: CartLine) -> OrderLineDraft:
        return cls(
            product_id=line.product.id,
            product_name=line.product.name,
            quantity=line.quantity,
            unit_price=line.product.price,
            total_price=line.line_total,
        )

    @property
    def catalog_product_id(self) -> str | None:
        """The product id when it is a backend product row id (a canonical UUID), else None."""
        if _CANONICAL_UUID.fullmatch(self.product_id) is None:
            return None
        return self.product_id


# ═══════════════════════════════════════════════════════════════════════════════
# Records — owned by the backend
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Order:
    id: OrderId
    customer_email: str
    customer_name: str
    customer_phone: str | None
    shipping_address: str
    total_amount: Decimal
    status: OrderStatus
    notes: str | None
    created_at: datetime


@dataclass(frozen=True, slots=True)
class OrderLine:
    order_id: OrderId
    product_id: ProductId | None
    product_name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal


@dataclass(frozen=True, slots=True)
class OrderReceipt:
    """What the checkout flow gets back from a successful submission."""

    order_id: OrderId
    total_amount: Decimal
    line_count: int
    simulated: bool = False


# ═══════════════════════════════════════════════════════════════════════════════
# Backend Protocols
# ═══════════════════════════════════════════════════════════════════════════════


class BackendFailure(Exception):
    """Raised by backends on constraint violations or lost connectivity."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


class OrderBackend(Protocol):
    """
    The persistence collaborator used by order submission.

    Methods raise BackendFailure (or any exception) on failure; the
    submission service converts them into Results.
    """

    async def create_order(self, draft: OrderDraft) -> Order:
        ...

    async def create_order_lines(self, order_id: OrderId, lines: list[OrderLineDraft]) -> None:
        ...

    async def delete_order(self, order_id: OrderId) -> None:
        """Compensation: remove an order whose lines could not be written."""
        ...


@runtime_checkable
class AtomicOrderBackend(Protocol):
    """A backend that writes an order and all its lines in one transaction."""

    async def place_order(self, draft: OrderDraft, lines: list[OrderLineDraft]) -> Order:
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class BackendError:
    code: str
    message: str

    @classmethod
    def from_exception(cls, e: Exception) -> BackendError:
        if isinstance(e, BackendFailure):
            return cls(e.code, e.message)
        return cls(type(e).__name__, str(e) or type(e).__name__)


class SubmissionErrorKind(Enum):
    BACKEND = auto()  # Order or line creation failed
    EMPTY_CART = auto()  # Nothing to submit
    IN_FLIGHT = auto()  # A submission for this checkout is already running
    WRONG_STEP = auto()  # submit() outside the review step


@dataclass(frozen=True, slots=True)
class SubmissionError:
    """
    Order submission failure, shown to the user on the review step.

    orphaned_order_id is set when an order row was written, its lines
    failed, and deleting the order failed too.
    """

    kind: SubmissionErrorKind
    message: str
    orphaned_order_id: OrderId | None = None

    @classmethod
    def backend(cls, err: BackendError, orphaned_order_id: OrderId | None = None) -> SubmissionError:
        return cls(SubmissionErrorKind.BACKEND, err.message, orphaned_order_id)


__all__ = (
    "CustomerForm",
    "OrderStatus",
    "OrderDraft",
    "OrderLineDraft",
    "Order",
    "OrderLine",
    "OrderReceipt",
    "BackendFailure",
    "OrderBackend",
    "AtomicOrderBackend",
    "BackendError",
    "SubmissionErrorKind",
    "SubmissionError",
)
