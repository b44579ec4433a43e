"""Order tables: orders, line items, audit notes and the affiliate commission record."""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Column, DateTime, ForeignKey, Index, Integer, Numeric, String, Text,
)
from sqlalchemy.orm import relationship

from ekusey.db.tables import Base


class OrderRow(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    status = Column(String(20), nullable=False, default="processing")
    currency = Column(String(3), nullable=False, default="USD")
    subtotal = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), index=True)

    items = relationship(
        "OrderItemRow", lazy="selectin", order_by="OrderItemRow.id",
        cascade="all, delete-orphan",
    )
    notes = relationship(
        "OrderNoteRow", lazy="selectin", order_by="OrderNoteRow.id",
        cascade="all, delete-orphan",
    )
    commission = relationship(
        "OrderCommissionRow", lazy="selectin", uselist=False,
        cascade="all, delete-orphan",
    )


class OrderItemRow(Base):
    """One line of an order. line_total is after line discounts, before tax, without shipping."""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, nullable=False)
    variation_id = Column(Integer, nullable=True)
    name = Column(String(500), nullable=False, default="")
    quantity = Column(Integer, nullable=False, default=1)
    line_total = Column(Numeric(12, 2), nullable=False, default=0)


class OrderNoteRow(Base):
    """Append-only order history."""
    __tablename__ = "order_notes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    body = Column(Text, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))


class OrderCommissionRow(Base):
    """Affiliate commission record, 1:1 with an order. Never deleted."""
    __tablename__ = "order_commissions"

    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), primary_key=True)
    referral_code = Column(String(200), nullable=True, index=True)
    net_profit = Column(Numeric(12, 2), nullable=True)
    commission_rate = Column(Numeric(5, 4), nullable=True)
    commission_amount = Column(Numeric(12, 2), nullable=True)
    status = Column(String(20), nullable=True)  # pending | claimed | paid
    claimed_at = Column(DateTime, nullable=True)
    paid_at = Column(DateTime, nullable=True)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("ix_order_commissions_status", "status"),
    )
