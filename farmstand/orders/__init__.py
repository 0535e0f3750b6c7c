"""
Orders — submission of a checkout as one order with its lines.

    from farmstand import orders

    service = orders.OrderSubmissionService(orders.SimulatedBackend(), simulated=True)
    result = await service.submit(form, cart.items, cart.total_price, key=session_key)

Backends:
    MemoryBackend      in-process rows, failure injection
    SimulatedBackend   offline stand-in with ORD-… ids
    RestOrderBackend   hosted REST service (httpx)
    SQLAlchemyBackend  async SQLAlchemy, atomic place_order
"""

from farmstand.orders._types import (
    CustomerForm,
    OrderStatus,
    OrderDraft,
    OrderLineDraft,
    Order,
    OrderLine,
    OrderReceipt,
    BackendFailure,
    OrderBackend,
    AtomicOrderBackend,
    BackendError,
    SubmissionErrorKind,
    SubmissionError,
)
from farmstand.orders._saga import (
    Compensator,
    WriteStep,
    Then,
    WriteResult,
    WriteError,
    step,
    run_chain,
)
from farmstand.orders._memory import demo_order_id, MemoryBackend, SimulatedBackend
from farmstand.orders._rest import OrderRow, RestOrderBackend
from farmstand.orders._sqlalchemy import (
    Base,
    OrderTable,
    OrderItemTable,
    create_database,
    SQLAlchemyBackend,
)
from farmstand.orders._service import DEFAULT_POLICY, OrderSubmissionService

__all__ = (
    # Types
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
    # Compensating writes
    "Compensator",
    "WriteStep",
    "Then",
    "WriteResult",
    "WriteError",
    "step",
    "run_chain",
    # Backends
    "demo_order_id",
    "MemoryBackend",
    "SimulatedBackend",
    "OrderRow",
    "RestOrderBackend",
    "Base",
    "OrderTable",
    "OrderItemTable",
    "create_database",
    "SQLAlchemyBackend",
    # Service
    "DEFAULT_POLICY",
    "OrderSubmissionService",
)
