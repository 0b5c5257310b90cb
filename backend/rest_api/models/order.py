"""
Order Models: Order, OrderItem.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import OrderStatus, PaymentStatus
from .base import AuditMixin, Base, BigIntPK

if TYPE_CHECKING:
    from .menu import MenuItem
    from .table import DiningTable
    from .user import User


class Order(AuditMixin, Base):
    """
    A customer order taken by a waiter.

    Lifecycle: PENDING -> IN_PROGRESS -> READY -> COMPLETED, or CANCELLED
    from any non-terminal state. COMPLETED requires payment_status PAID.
    """

    __tablename__ = "customer_order"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    waiter_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("app_user.id"), nullable=False, index=True
    )
    table_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("dining_table.id"), index=True
    )
    status: Mapped[str] = mapped_column(Text, nullable=False, default=OrderStatus.PENDING, index=True)
    total_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    payment_status: Mapped[str] = mapped_column(
        Text, nullable=False, default=PaymentStatus.UNPAID, index=True
    )
    payment_method: Mapped[Optional[str]] = mapped_column(Text)
    payment_amount_cents: Mapped[Optional[int]] = mapped_column(Integer)
    payment_reference: Mapped[Optional[str]] = mapped_column(Text, unique=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), index=True)

    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )
    waiter: Mapped["User"] = relationship()
    table: Mapped[Optional["DiningTable"]] = relationship()

    __table_args__ = (
        CheckConstraint("total_cents >= 0", name="chk_customer_order_total_non_negative"),
        CheckConstraint(
            "status <> 'COMPLETED' OR payment_status = 'PAID'",
            name="chk_customer_order_completed_is_paid",
        ),
        Index("ix_customer_order_status_created", "status", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Order(id={self.id}, status='{self.status}', "
            f"payment='{self.payment_status}', total_cents={self.total_cents})>"
        )


class OrderItem(AuditMixin, Base):
    """
    A line of an order. Price and routing are snapshotted from the menu item
    when the order is created.
    """

    __tablename__ = "order_item"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    order_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("customer_order.id", ondelete="CASCADE"), nullable=False, index=True
    )
    menu_item_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("menu_item.id"), nullable=False, index=True
    )
    qty: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    preparation_type: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    status: Mapped[str] = mapped_column(Text, nullable=False, default=OrderStatus.PENDING, index=True)
    notes: Mapped[Optional[str]] = mapped_column(Text)

    __table_args__ = (
        CheckConstraint("qty > 0", name="chk_order_item_qty_positive"),
        CheckConstraint("unit_price_cents >= 0", name="chk_order_item_price_non_negative"),
    )

    order: Mapped["Order"] = relationship(back_populates="items")
    menu_item: Mapped["MenuItem"] = relationship()

    @property
    def subtotal_cents(self) -> int:
        return self.unit_price_cents * self.qty
