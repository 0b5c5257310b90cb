"""
Floor Model: DiningTable.
"""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from shared.config.constants import TableStatus
from .base import AuditMixin, Base, BigIntPK


class DiningTable(AuditMixin, Base):
    """A physical table. Occupied while it has an open order."""

    __tablename__ = "dining_table"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    number: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=4)
    status: Mapped[str] = mapped_column(Text, nullable=False, default=TableStatus.AVAILABLE, index=True)

    __table_args__ = (
        CheckConstraint("capacity > 0", name="chk_dining_table_capacity_positive"),
        CheckConstraint(
            "status IN ('AVAILABLE', 'OCCUPIED', 'RESERVED')", name="chk_dining_table_status"
        ),
    )

    def __repr__(self) -> str:
        return f"<DiningTable(id={self.id}, number={self.number}, status='{self.status}')>"
