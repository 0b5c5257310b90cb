"""
Menu router.
Catalog reads for every staff role; maintenance for ADMIN.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from rest_api.routers._common import get_user_email, get_user_id
from rest_api.services.domain import MenuService
from rest_api.services.events import entity_change, publish_changes
from shared.config.constants import ChangeType, FeedTable, Roles
from shared.infrastructure.db import get_db
from shared.security.auth import current_user_context, require_roles
from shared.utils.schemas import (
    MenuCategoryLiteral,
    MenuItemCreate,
    MenuItemOutput,
    MenuItemUpdate,
    PreparationTypeLiteral,
)


router = APIRouter(prefix="/api/menu", tags=["menu"])


@router.get("/items", response_model=list[MenuItemOutput])
def list_menu_items(
    category: MenuCategoryLiteral | None = None,
    preparation_type: PreparationTypeLiteral | None = None,
    available_only: bool = Query(default=False),
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(current_user_context),
) -> list[MenuItemOutput]:
    """Active menu items with price, routing and available quantity."""
    return MenuService(db).list_items(
        category=category,
        preparation_type=preparation_type,
        available_only=available_only,
    )


@router.get("/items/{item_id}", response_model=MenuItemOutput)
def get_menu_item(
    item_id: int,
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(current_user_context),
) -> MenuItemOutput:
    return MenuService(db).get_item(item_id)


@router.post("/items", response_model=MenuItemOutput, status_code=status.HTTP_201_CREATED)
async def create_menu_item(
    body: MenuItemCreate,
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(current_user_context),
) -> MenuItemOutput:
    require_roles(ctx, [Roles.ADMIN])
    item = MenuService(db).create_item(body, get_user_id(ctx), get_user_email(ctx))
    await publish_changes(entity_change(ChangeType.INSERT, FeedTable.MENU_ITEMS, item.id), ctx)
    return item


@router.patch("/items/{item_id}", response_model=MenuItemOutput)
async def update_menu_item(
    item_id: int,
    body: MenuItemUpdate,
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(current_user_context),
) -> MenuItemOutput:
    require_roles(ctx, [Roles.ADMIN])
    item = MenuService(db).update_item(item_id, body, get_user_id(ctx), get_user_email(ctx))
    await publish_changes(entity_change(ChangeType.UPDATE, FeedTable.MENU_ITEMS, item.id), ctx)
    return item


@router.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_menu_item(
    item_id: int,
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(current_user_context),
) -> None:
    require_roles(ctx, [Roles.ADMIN])
    MenuService(db).delete_item(item_id, get_user_id(ctx), get_user_email(ctx))
    await publish_changes(entity_change(ChangeType.DELETE, FeedTable.MENU_ITEMS, item_id), ctx)
