"""
Application settings endpoints.
"""

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from rest_api.routers._common import get_user_email, get_user_id
from rest_api.routers.admin._base import require_admin
from rest_api.services.domain import SettingsService
from rest_api.services.events import entity_change, publish_changes
from shared.config.constants import ChangeType, FeedTable
from shared.infrastructure.db import get_db
from shared.utils.schemas import AppSettingsOutput, AppSettingsUpdate


router = APIRouter(tags=["admin-settings"])


@router.get("/settings", response_model=AppSettingsOutput)
def get_settings(
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(require_admin),
) -> AppSettingsOutput:
    """Current settings; defaults are created on first read."""
    return SettingsService(db).get()


@router.patch("/settings", response_model=AppSettingsOutput)
async def update_settings(
    body: AppSettingsUpdate,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(require_admin),
) -> AppSettingsOutput:
    row = SettingsService(db).update(body, get_user_id(user), get_user_email(user))
    await publish_changes(entity_change(ChangeType.UPDATE, FeedTable.SETTINGS, row.id), user)
    return row
