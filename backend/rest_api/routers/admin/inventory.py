"""
Inventory endpoints.
"""

from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session

from rest_api.routers._common import get_user_email, get_user_id
from rest_api.routers.admin._base import require_admin
from rest_api.services.domain import InventoryService, SettingsService
from rest_api.services.events import entity_change, publish_changes
from rest_api.services.notifications import send_low_stock_notification
from shared.config.constants import ChangeType, FeedTable
from shared.infrastructure.db import get_db
from shared.utils.schemas import InventoryItemCreate, InventoryItemOutput, InventoryItemUpdate


router = APIRouter(tags=["admin-inventory"])


@router.get("/inventory", response_model=list[InventoryItemOutput])
def list_inventory(
    category: str | None = None,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(require_admin),
) -> list[InventoryItemOutput]:
    return InventoryService(db).list_all(category=category)


@router.get("/inventory/low-stock", response_model=list[InventoryItemOutput])
def list_low_stock(
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(require_admin),
) -> list[InventoryItemOutput]:
    """Items at or below their minimum, lowest first."""
    return InventoryService(db).list_low_stock()


@router.get("/inventory/{item_id}", response_model=InventoryItemOutput)
def get_inventory_item(
    item_id: int,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(require_admin),
) -> InventoryItemOutput:
    return InventoryService(db).get(item_id)


@router.post("/inventory", response_model=InventoryItemOutput, status_code=status.HTTP_201_CREATED)
async def create_inventory_item(
    body: InventoryItemCreate,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(require_admin),
) -> InventoryItemOutput:
    item = InventoryService(db).create(body, get_user_id(user), get_user_email(user))
    await publish_changes(entity_change(ChangeType.INSERT, FeedTable.INVENTORY_ITEMS, item.id), user)
    return item


@router.patch("/inventory/{item_id}", response_model=InventoryItemOutput)
async def update_inventory_item(
    item_id: int,
    body: InventoryItemUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(require_admin),
) -> InventoryItemOutput:
    """Adjust stock. Dropping to the minimum sends a low-stock email."""
    service = InventoryService(db)
    was_low = service.get(item_id).is_low_stock
    item = service.update(item_id, body, get_user_id(user), get_user_email(user))
    output = InventoryItemOutput.model_validate(item)

    await publish_changes(entity_change(ChangeType.UPDATE, FeedTable.INVENTORY_ITEMS, item.id), user)

    if output.is_low_stock and not was_low:
        recipient = SettingsService(db).notification_recipient("inventory")
        if recipient:
            background_tasks.add_task(
                send_low_stock_notification,
                recipient,
                output.name,
                output.quantity,
                output.unit,
                output.min_stock,
            )
    return output


@router.delete("/inventory/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_inventory_item(
    item_id: int,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(require_admin),
) -> None:
    InventoryService(db).delete(item_id, get_user_id(user), get_user_email(user))
    await publish_changes(entity_change(ChangeType.DELETE, FeedTable.INVENTORY_ITEMS, item_id), user)
