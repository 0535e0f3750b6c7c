"""
SQLAlchemy order backend — ``orders`` and ``order_items`` tables.

Usage:
    session_factory, engine = await create_database("sqlite+aiosqlite:///farmstand.db")
    backend = SQLAlchemyBackend(session_factory)

place_order() writes the order and all its lines in one transaction, so a
failed line insert leaves no order behind.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, Text, delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from farmstand._types import OrderId
from farmstand.orders._types import (
    BackendFailure,
    Order,
    OrderDraft,
    OrderLine,
    OrderLineDraft,
    OrderStatus,
)


# ═══════════════════════════════════════════════════════════════════════════════
# Tables
# ═══════════════════════════════════════════════════════════════════════════════

class Base(DeclarativeBase):
    pass


class OrderTable(Base):
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    customer_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    shipping_address: Mapped[str] = mapped_column(Text, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=OrderStatus.PENDING.value)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    def to_order(self) -> Order:
        return Order(
            id=self.id,
            customer_email=self.customer_email,
            customer_name=self.customer_name,
            customer_phone=self.customer_phone,
            shipping_address=self.shipping_address,
            total_amount=Decimal(self.total_amount).quantize(Decimal("0.01")),
            status=OrderStatus(self.status),
            notes=self.notes,
            created_at=self.created_at,
        )


class OrderItemTable(Base):
    __tablename__ = "order_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    order_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    def to_line(self) -> OrderLine:
        return OrderLine(
            order_id=self.order_id,
            product_id=self.product_id,
            product_name=self.product_name,
            quantity=self.quantity,
            unit_price=Decimal(self.unit_price).quantize(Decimal("0.01")),
            total_price=Decimal(self.total_price).quantize(Decimal("0.01")),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Database Setup
# ═══════════════════════════════════════════════════════════════════════════════

async def create_database(
    url: str = "sqlite+aiosqlite:///:memory:",
) -> tuple[async_sessionmaker[AsyncSession], AsyncEngine]:
    """Create tables and return (session_factory, engine)."""
    engine = create_async_engine(url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    return async_sessionmaker(engine, expire_on_commit=False), engine


# ═══════════════════════════════════════════════════════════════════════════════
# Backend
# ═══════════════════════════════════════════════════════════════════════════════

class SQLAlchemyBackend:
    """Order backend over an async SQLAlchemy session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session = session_factory

    async def place_order(self, draft: OrderDraft, lines: list[OrderLineDraft]) -> Order:
        try:
            async with self._session() as session, session.begin():
                row = _order_row(draft)
                session.add(row)
                await session.flush()
                session.add_all(_item_rows(row.id, lines))
            return row.to_order()
        except SQLAlchemyError as e:
            raise BackendFailure("database_error", f"Failed to place order: {e}") from e

    async def create_order(self, draft: OrderDraft) -> Order:
        try:
            async with self._session() as session, session.begin():
                row = _order_row(draft)
                session.add(row)
            return row.to_order()
        except SQLAlchemyError as e:
            raise BackendFailure("database_error", f"Failed to create order: {e}") from e

    async def create_order_lines(self, order_id: OrderId, lines: list[OrderLineDraft]) -> None:
        try:
            async with self._session() as session, session.begin():
                session.add_all(_item_rows(order_id, lines))
        except SQLAlchemyError as e:
            raise BackendFailure("database_error", f"Failed to create order items: {e}") from e

    async def delete_order(self, order_id: OrderId) -> None:
        try:
            async with self._session() as session, session.begin():
                await session.execute(delete(OrderItemTable).where(OrderItemTable.order_id == order_id))
                await session.execute(delete(OrderTable).where(OrderTable.id == order_id))
        except SQLAlchemyError as e:
            raise BackendFailure("database_error", f"Failed to delete order: {e}") from e

    async def get_order(self, order_id: OrderId) -> tuple[Order, list[OrderLine]] | None:
        """Order with its lines, or None."""
        async with self._session() as session:
            row = await session.get(OrderTable, order_id)
            if row is None:
                return None
            items = (
                await session.execute(
                    select(OrderItemTable)
                    .where(OrderItemTable.order_id == order_id)
                    .order_by(OrderItemTable.created_at, OrderItemTable.id)
                )
            ).scalars().all()
            return row.to_order(), [item.to_line() for item in items]

    async def count_orders(self) -> int:
        async with self._session() as session:
            return (await session.execute(select(func.count()).select_from(OrderTable))).scalar_one()


def _order_row(draft: OrderDraft) -> OrderTable:
    return OrderTable(
        id=str(uuid.uuid4()),
        customer_email=draft.customer_email,
        customer_name=draft.customer_name,
        customer_phone=draft.customer_phone,
        shipping_address=draft.shipping_address,
        total_amount=draft.total_amount,
        status=draft.status.value,
        notes=draft.notes,
        created_at=datetime.now(),
    )


def _item_rows(order_id: OrderId, lines: list[OrderLineDraft]) -> list[OrderItemTable]:
    now = datetime.now()
    return [
        OrderItemTable(
            id=str(uuid.uuid4()),
            order_id=order_id,
            product_id=line.catalog_product_id,
            product_name=line.product_name,
            quantity=line.quantity,
            unit_price=line.unit_price,
            total_price=line.total_price,
            created_at=now,
        )
        for line in lines
    ]


__all__ = (
    "Base",
    "OrderTable",
    "OrderItemTable",
    "create_database",
    "SQLAlchemyBackend",
)
