"""
User Model: staff accounts.
"""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Text
from sqlalchemy.orm import Mapped, mapped_column

from shared.config.constants import Roles
from .base import AuditMixin, Base, BigIntPK


class User(AuditMixin, Base):
    """
    A staff member. Each user has exactly one role, which decides what part
    of the order flow they see and may change.
    """

    __tablename__ = "app_user"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True, index=True)
    password: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[str] = mapped_column(Text, nullable=False, default=Roles.WAITER, index=True)

    __table_args__ = (
        CheckConstraint(
            "role IN ('WAITER', 'BARMAN', 'KITCHEN', 'ADMIN', 'ACCOUNTANT')",
            name="chk_app_user_role",
        ),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
