"""
Base class and AuditMixin for all SQLAlchemy ORM models.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import BigInteger, Boolean, DateTime, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# SQLite only autoincrements INTEGER PRIMARY KEY columns
BigIntPK = BigInteger().with_variant(Integer(), "sqlite")


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class AuditMixin:
    """
    Mixin providing soft delete and audit trail fields for all models.

    Fields added:
    - is_active: Soft delete flag (False = deleted, True = active)
    - created_at, updated_at, deleted_at: Audit timestamps
    - created_by_id/email, updated_by_id/email, deleted_by_id/email: User tracking
    """

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), onupdate=func.now(), nullable=True
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Denormalized user tracking (no FK to app_user to avoid cycles)
    created_by_id: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    created_by_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    updated_by_id: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    updated_by_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    deleted_by_id: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    deleted_by_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    def soft_delete(self, user_id: int | None, user_email: str | None) -> None:
        """Mark the row as deleted, keeping it for history."""
        self.is_active = False
        self.deleted_at = datetime.now(timezone.utc)
        self.deleted_by_id = user_id
        self.deleted_by_email = user_email

    def set_created_by(self, user_id: int | None, user_email: str | None) -> None:
        self.created_by_id = user_id
        self.created_by_email = user_email

    def set_updated_by(self, user_id: int | None, user_email: str | None) -> None:
        self.updated_by_id = user_id
        self.updated_by_email = user_email
        self.updated_at = datetime.now(timezone.utc)

    def __repr__(self) -> str:
        class_name = self.__class__.__name__
        id_val = getattr(self, "id", None)
        active = "active" if self.is_active else "deleted"
        return f"<{class_name}(id={id_val}, {active})>"
