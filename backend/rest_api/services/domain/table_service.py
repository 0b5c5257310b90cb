"""
Table Service.

Dining tables and their occupancy. Tables become OCCUPIED when an order is
placed on them and AVAILABLE again once no active order uses them.
"""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from rest_api.models import DiningTable, Order
from shared.config.constants import OrderStatus, TableStatus
from shared.config.logging import get_logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import ConflictError, DuplicateEntityError, NotFoundError
from shared.utils.schemas import TableCreate, TableUpdate

logger = get_logger(__name__)


class TableService:
    def __init__(self, db: Session):
        self._db = db
        self._entity_name = "Table"

    def list_all(self, status: str | None = None) -> list[DiningTable]:
        stmt = select(DiningTable).where(DiningTable.is_active.is_(True)).order_by(DiningTable.number)
        if status:
            stmt = stmt.where(DiningTable.status == status)
        return list(self._db.scalars(stmt).all())

    def get(self, table_id: int) -> DiningTable:
        table = self._db.scalar(
            select(DiningTable).where(DiningTable.id == table_id, DiningTable.is_active.is_(True))
        )
        if table is None:
            raise NotFoundError(self._entity_name, table_id)
        return table

    def _ensure_number_free(self, number: int, exclude_id: int | None = None) -> None:
        stmt = select(DiningTable.id).where(DiningTable.number == number)
        if exclude_id is not None:
            stmt = stmt.where(DiningTable.id != exclude_id)
        if self._db.scalar(stmt) is not None:
            raise DuplicateEntityError(self._entity_name, str(number))

    def create(self, data: TableCreate, user_id: int, user_email: str | None) -> DiningTable:
        self._ensure_number_free(data.number)
        table = DiningTable(number=data.number, capacity=data.capacity, status=data.status)
        table.set_created_by(user_id, user_email)
        self._db.add(table)
        safe_commit(self._db)
        self._db.refresh(table)
        logger.info("Table created", table_id=table.id, number=table.number)
        return table

    def update(self, table_id: int, data: TableUpdate, user_id: int, user_email: str | None) -> DiningTable:
        table = self.get(table_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if "number" in changes and changes["number"] != table.number:
            self._ensure_number_free(changes["number"], exclude_id=table.id)
        if changes.get("status") == TableStatus.AVAILABLE and self.active_order_count(table.id) > 0:
            raise ConflictError(f"Table {table.number} still has an active order")
        for field, value in changes.items():
            setattr(table, field, value)
        table.set_updated_by(user_id, user_email)
        safe_commit(self._db)
        self._db.refresh(table)
        return table

    def delete(self, table_id: int, user_id: int, user_email: str | None) -> None:
        table = self.get(table_id)
        if self.active_order_count(table.id) > 0:
            raise ConflictError(f"Table {table.number} still has an active order")
        table.soft_delete(user_id, user_email)
        safe_commit(self._db)
        logger.info("Table deleted", table_id=table_id, user_id=user_id)

    def active_order_count(self, table_id: int, exclude_order_id: int | None = None) -> int:
        stmt = select(func.count(Order.id)).where(
            Order.table_id == table_id,
            Order.is_active.is_(True),
            Order.status.in_(OrderStatus.ACTIVE),
        )
        if exclude_order_id is not None:
            stmt = stmt.where(Order.id != exclude_order_id)
        return self._db.scalar(stmt) or 0

    def occupy(self, table: DiningTable) -> None:
        """Mark a table occupied (caller commits)."""
        table.status = TableStatus.OCCUPIED

    def release_if_idle(self, table_id: int | None, exclude_order_id: int | None = None) -> bool:
        """
        Free an occupied table when no other active order uses it.
        Caller commits. Returns True if the table was freed.
        """
        if table_id is None:
            return False
        table = self._db.get(DiningTable, table_id)
        if table is None or table.status != TableStatus.OCCUPIED:
            return False
        if self.active_order_count(table_id, exclude_order_id=exclude_order_id) > 0:
            return False
        table.status = TableStatus.AVAILABLE
        logger.info("Table released", table_id=table_id, number=table.number)
        return True
