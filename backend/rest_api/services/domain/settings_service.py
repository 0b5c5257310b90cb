"""
Settings Service.

The application keeps one settings row. It is created with defaults the first
time anything reads it, so notification lookups never fail on a fresh
database.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import AppSetting
from shared.config.logging import get_logger
from shared.config.settings import settings as app_config
from shared.infrastructure.db import safe_commit
from shared.utils.schemas import AppSettingsUpdate

logger = get_logger(__name__)

DEFAULT_BUSINESS_INFO = {
    "business_email": "contact@decube.com",
    "business_phone": "+1 (555) 123-4567",
    "business_address": "123 Restaurant Street",
}

# Notification kinds -> AppSetting flag
NOTIFICATION_FLAGS = {
    "logins": "notify_logins",
    "transactions": "notify_transactions",
    "inventory": "notify_inventory",
}


class SettingsService:
    """Read and update the singleton settings row."""

    def __init__(self, db: Session):
        self._db = db

    def get(self) -> AppSetting:
        """Return the settings row, creating it with defaults if missing."""
        row = self._db.scalar(
            select(AppSetting).where(AppSetting.is_active.is_(True)).order_by(AppSetting.id).limit(1)
        )
        if row is not None:
            return row

        row = AppSetting(
            admin_email=app_config.default_admin_email,
            notify_logins=True,
            notify_transactions=True,
            notify_inventory=True,
            business_name=app_config.business_name,
            **DEFAULT_BUSINESS_INFO,
        )
        self._db.add(row)
        safe_commit(self._db)
        self._db.refresh(row)
        logger.info("Default settings created", admin_email_set=bool(row.admin_email))
        return row

    def update(self, data: AppSettingsUpdate, user_id: int, user_email: str | None) -> AppSetting:
        row = self.get()
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is None and field in ("admin_email", "business_name"):
                continue
            setattr(row, field, value)
        row.set_updated_by(user_id, user_email)
        safe_commit(self._db)
        self._db.refresh(row)
        logger.info("Settings updated", user_id=user_id, fields=sorted(data.model_dump(exclude_unset=True)))
        return row

    def notification_recipient(self, kind: str) -> str | None:
        """
        Admin email for a notification kind, or None when that kind is off.
        """
        flag = NOTIFICATION_FLAGS.get(kind)
        if flag is None:
            raise ValueError(f"Unknown notification kind: {kind}")
        row = self.get()
        if not getattr(row, flag):
            return None
        return row.admin_email or app_config.default_admin_email
