"""
Catalog Models: InventoryItem, MenuItem.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import BigInteger, CheckConstraint, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import PreparationType
from .base import AuditMixin, Base, BigIntPK


class InventoryItem(AuditMixin, Base):
    """
    A stocked good. Menu items linked to it draw their availability from
    ``quantity`` and decrement it when ordered.
    """

    __tablename__ = "inventory_item"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(Text, nullable=False, default="general")
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    unit: Mapped[str] = mapped_column(Text, nullable=False, default="unit")
    min_stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    price_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="chk_inventory_item_quantity_non_negative"),
        CheckConstraint("min_stock >= 0", name="chk_inventory_item_min_stock_non_negative"),
    )

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.min_stock


class MenuItem(AuditMixin, Base):
    """
    A sellable item. ``preparation_type`` routes it to the kitchen or the bar.
    """

    __tablename__ = "menu_item"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    category: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    preparation_type: Mapped[str] = mapped_column(
        Text, nullable=False, default=PreparationType.KITCHEN, index=True
    )
    image_url: Mapped[Optional[str]] = mapped_column(Text)
    inventory_item_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("inventory_item.id"), index=True
    )

    inventory_item: Mapped[Optional["InventoryItem"]] = relationship(lazy="joined")

    __table_args__ = (
        CheckConstraint("price_cents >= 0", name="chk_menu_item_price_non_negative"),
        CheckConstraint("preparation_type IN ('KITCHEN', 'BAR')", name="chk_menu_item_preparation"),
    )

    @property
    def available_quantity(self) -> int | None:
        """Linked inventory quantity, or None when stock is not tracked."""
        if self.inventory_item is None or not self.inventory_item.is_active:
            return None
        return self.inventory_item.quantity

    def __repr__(self) -> str:
        return f"<MenuItem(id={self.id}, name='{self.name}', prep='{self.preparation_type}')>"
