"""
Receipt Model.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import BigInteger, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import AuditMixin, Base, BigIntPK

if TYPE_CHECKING:
    from .order import Order


class Receipt(AuditMixin, Base):
    """A generated receipt for a paid order, optionally shared externally."""

    __tablename__ = "receipt"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    order_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("customer_order.id"), nullable=False, index=True
    )
    created_by_user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("app_user.id"), nullable=False, index=True
    )
    filename: Mapped[str] = mapped_column(Text, nullable=False)
    file_url: Mapped[Optional[str]] = mapped_column(Text)
    shared_url: Mapped[Optional[str]] = mapped_column(Text)
    shared_platform: Mapped[Optional[str]] = mapped_column(Text)

    order: Mapped["Order"] = relationship()
