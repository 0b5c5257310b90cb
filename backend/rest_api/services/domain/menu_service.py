"""
Menu Service.

Read access to the catalog for order taking, plus admin maintenance.
Available quantity comes from the linked inventory item; items without a
link are not stock tracked.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import InventoryItem, MenuItem
from shared.config.logging import get_logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import NotFoundError
from shared.utils.schemas import MenuItemCreate, MenuItemOutput, MenuItemUpdate

logger = get_logger(__name__)


def to_menu_output(item: MenuItem) -> MenuItemOutput:
    return MenuItemOutput(
        id=item.id,
        name=item.name,
        description=item.description,
        category=item.category,
        price_cents=item.price_cents,
        preparation_type=item.preparation_type,
        image_url=item.image_url,
        inventory_item_id=item.inventory_item_id,
        available_quantity=item.available_quantity,
    )


class MenuService:
    def __init__(self, db: Session):
        self._db = db
        self._entity_name = "Menu item"

    # =========================================================================
    # Query Methods
    # =========================================================================

    def list_items(
        self,
        *,
        category: str | None = None,
        preparation_type: str | None = None,
        available_only: bool = False,
    ) -> list[MenuItemOutput]:
        """
        Active menu items ordered by category and name.

        ``available_only`` drops stock-tracked items that are sold out.
        """
        stmt = select(MenuItem).where(MenuItem.is_active.is_(True)).order_by(MenuItem.category, MenuItem.name)
        if category:
            stmt = stmt.where(MenuItem.category == category)
        if preparation_type:
            stmt = stmt.where(MenuItem.preparation_type == preparation_type)

        items = [to_menu_output(item) for item in self._db.scalars(stmt).unique().all()]
        if available_only:
            items = [item for item in items if item.available_quantity is None or item.available_quantity > 0]
        return items

    def get_model(self, item_id: int) -> MenuItem:
        item = self._db.scalar(select(MenuItem).where(MenuItem.id == item_id, MenuItem.is_active.is_(True)))
        if item is None:
            raise NotFoundError(self._entity_name, item_id)
        return item

    def get_item(self, item_id: int) -> MenuItemOutput:
        return to_menu_output(self.get_model(item_id))

    # =========================================================================
    # Admin Methods
    # =========================================================================

    def _check_inventory_link(self, inventory_item_id: int | None) -> None:
        if inventory_item_id is None:
            return
        exists = self._db.scalar(
            select(InventoryItem.id).where(
                InventoryItem.id == inventory_item_id, InventoryItem.is_active.is_(True)
            )
        )
        if exists is None:
            raise NotFoundError("Inventory item", inventory_item_id)

    def create_item(self, data: MenuItemCreate, user_id: int, user_email: str | None) -> MenuItemOutput:
        self._check_inventory_link(data.inventory_item_id)
        item = MenuItem(**data.model_dump())
        item.set_created_by(user_id, user_email)
        self._db.add(item)
        safe_commit(self._db)
        self._db.refresh(item)
        logger.info("Menu item created", item_id=item.id, name=item.name, prep=item.preparation_type)
        return to_menu_output(item)

    def update_item(
        self, item_id: int, data: MenuItemUpdate, user_id: int, user_email: str | None
    ) -> MenuItemOutput:
        item = self.get_model(item_id)
        changes = data.model_dump(exclude_unset=True)
        if "inventory_item_id" in changes:
            self._check_inventory_link(changes["inventory_item_id"])
        for field, value in changes.items():
            if value is None and field not in ("description", "image_url", "inventory_item_id"):
                continue
            setattr(item, field, value)
        item.set_updated_by(user_id, user_email)
        safe_commit(self._db)
        self._db.refresh(item)
        return to_menu_output(item)

    def delete_item(self, item_id: int, user_id: int, user_email: str | None) -> None:
        """Soft delete; existing orders keep their snapshot."""
        item = self.get_model(item_id)
        item.soft_delete(user_id, user_email)
        safe_commit(self._db)
        logger.info("Menu item deleted", item_id=item_id, user_id=user_id)
