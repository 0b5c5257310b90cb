"""
AppSetting Model: singleton row with notification and business settings.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Boolean, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import AuditMixin, Base, BigIntPK


class AppSetting(AuditMixin, Base):
    """
    Application-wide settings. A single row exists; it is created with
    defaults the first time settings are read.
    """

    __tablename__ = "app_setting"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    admin_email: Mapped[str] = mapped_column(Text, nullable=False)

    notify_logins: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    notify_transactions: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    notify_inventory: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    business_name: Mapped[str] = mapped_column(Text, nullable=False)
    business_email: Mapped[Optional[str]] = mapped_column(Text)
    business_phone: Mapped[Optional[str]] = mapped_column(Text)
    business_address: Mapped[Optional[str]] = mapped_column(Text)
