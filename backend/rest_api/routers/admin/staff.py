"""
Staff management endpoints.
Thin router over StaffService.
"""

from typing import Any

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rest_api.routers._common import get_user_email, get_user_id
from rest_api.routers.admin._base import require_admin
from rest_api.services.domain import StaffService
from rest_api.services.events import entity_change, publish_changes
from shared.config.constants import ChangeType, FeedTable
from shared.infrastructure.db import get_db
from shared.utils.schemas import Role, StaffCreate, StaffOutput, StaffUpdate


router = APIRouter(tags=["admin-staff"])


@router.get("/staff", response_model=list[StaffOutput])
def list_staff(
    role: Role | None = None,
    include_deleted: bool = False,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(require_admin),
) -> list[StaffOutput]:
    return StaffService(db).list_all(role=role, include_inactive=include_deleted)


@router.get("/staff/{staff_id}", response_model=StaffOutput)
def get_staff(
    staff_id: int,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(require_admin),
) -> StaffOutput:
    return StaffService(db).get(staff_id)


@router.post("/staff", response_model=StaffOutput, status_code=status.HTTP_201_CREATED)
async def create_staff(
    body: StaffCreate,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(require_admin),
) -> StaffOutput:
    """Create a staff account. Emails are stored lowercased and must be unique."""
    staff = StaffService(db).create(body, get_user_id(user), get_user_email(user))
    await publish_changes(entity_change(ChangeType.INSERT, FeedTable.USERS, staff.id), user)
    return staff


@router.patch("/staff/{staff_id}", response_model=StaffOutput)
async def update_staff(
    staff_id: int,
    body: StaffUpdate,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(require_admin),
) -> StaffOutput:
    """
    Update name, email, password or role.

    The last active admin cannot be demoted.
    """
    staff = StaffService(db).update(staff_id, body, get_user_id(user), get_user_email(user))
    await publish_changes(entity_change(ChangeType.UPDATE, FeedTable.USERS, staff.id), user)
    return staff


@router.delete("/staff/{staff_id}", status_code=status.HTTP_204_NO_CONTENT)
async def deactivate_staff(
    staff_id: int,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(require_admin),
) -> None:
    StaffService(db).deactivate(staff_id, get_user_id(user), get_user_email(user))
    await publish_changes(entity_change(ChangeType.DELETE, FeedTable.USERS, staff_id), user)
