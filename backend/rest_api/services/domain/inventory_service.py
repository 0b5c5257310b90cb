"""
Inventory Service.

Stock levels for goods that menu items draw from.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import InventoryItem, MenuItem
from shared.config.logging import get_logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import ConflictError, NotFoundError
from shared.utils.schemas import InventoryItemCreate, InventoryItemUpdate

logger = get_logger(__name__)


class InventoryService:
    def __init__(self, db: Session):
        self._db = db
        self._entity_name = "Inventory item"

    def list_all(self, category: str | None = None) -> list[InventoryItem]:
        stmt = select(InventoryItem).where(InventoryItem.is_active.is_(True)).order_by(InventoryItem.name)
        if category:
            stmt = stmt.where(InventoryItem.category == category)
        return list(self._db.scalars(stmt).all())

    def list_low_stock(self) -> list[InventoryItem]:
        stmt = (
            select(InventoryItem)
            .where(
                InventoryItem.is_active.is_(True),
                InventoryItem.quantity <= InventoryItem.min_stock,
            )
            .order_by(InventoryItem.quantity)
        )
        return list(self._db.scalars(stmt).all())

    def get(self, item_id: int) -> InventoryItem:
        item = self._db.scalar(
            select(InventoryItem).where(InventoryItem.id == item_id, InventoryItem.is_active.is_(True))
        )
        if item is None:
            raise NotFoundError(self._entity_name, item_id)
        return item

    def create(self, data: InventoryItemCreate, user_id: int, user_email: str | None) -> InventoryItem:
        item = InventoryItem(**data.model_dump())
        item.set_created_by(user_id, user_email)
        self._db.add(item)
        safe_commit(self._db)
        self._db.refresh(item)
        logger.info("Inventory item created", item_id=item.id, name=item.name)
        return item

    def update(
        self, item_id: int, data: InventoryItemUpdate, user_id: int, user_email: str | None
    ) -> InventoryItem:
        item = self.get(item_id)
        for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(item, field, value)
        item.set_updated_by(user_id, user_email)
        safe_commit(self._db)
        self._db.refresh(item)
        return item

    def delete(self, item_id: int, user_id: int, user_email: str | None) -> None:
        item = self.get(item_id)
        linked = self._db.scalar(
            select(MenuItem.id).where(MenuItem.inventory_item_id == item.id, MenuItem.is_active.is_(True))
        )
        if linked is not None:
            raise ConflictError(f"Inventory item '{item.name}' is linked to an active menu item")
        item.soft_delete(user_id, user_email)
        safe_commit(self._db)
        logger.info("Inventory item deleted", item_id=item_id, user_id=user_id)
