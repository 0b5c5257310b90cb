"""
Order Domain Service.

Builds orders from menu selections and produces the order snapshot: every
order with its items, menu item names, waiter name and table number. The same
snapshot feeds the REST listing, the station queues and the WebSocket feed.
"""

from __future__ import annotations

from collections import defaultdict

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from rest_api.models import DiningTable, InventoryItem, MenuItem, Order, OrderItem, User
from rest_api.services.domain.table_service import TableService
from shared.config.constants import Limits, OrderStatus, PaymentStatus
from shared.config.logging import orders_logger as logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import (
    DatabaseError,
    InsufficientStockError,
    NotFoundError,
    OrderNotFoundError,
    ValidationError,
)
from shared.utils.schemas import OrderItemInput, OrderItemOutput, OrderOutput


def to_order_output(order: Order) -> OrderOutput:
    """Flatten an Order (with loaded relationships) into its view."""
    return OrderOutput(
        id=order.id,
        waiter_id=order.waiter_id,
        waiter_name=order.waiter.name if order.waiter else None,
        table_id=order.table_id,
        table_number=order.table.number if order.table else None,
        status=order.status,
        total_cents=order.total_cents,
        payment_status=order.payment_status,
        payment_method=order.payment_method,
        payment_amount_cents=order.payment_amount_cents,
        payment_reference=order.payment_reference,
        created_at=order.created_at,
        completed_at=order.completed_at,
        items=[
            OrderItemOutput(
                id=item.id,
                menu_item_id=item.menu_item_id,
                menu_item_name=item.menu_item.name if item.menu_item else f"Item #{item.menu_item_id}",
                qty=item.qty,
                unit_price_cents=item.unit_price_cents,
                subtotal_cents=item.subtotal_cents,
                preparation_type=item.preparation_type,
                status=item.status,
                notes=item.notes,
            )
            for item in order.items
        ],
    )


def order_query():
    """Order select with everything the view needs eagerly loaded."""
    return select(Order).options(
        selectinload(Order.items).joinedload(OrderItem.menu_item),
        joinedload(Order.waiter),
        joinedload(Order.table),
    )


class OrderService:
    """
    Domain service for order creation and retrieval.

    Status changes live in OrderStatusService and payment in PaymentService.
    """

    def __init__(self, db: Session):
        self._db = db

    # =========================================================================
    # Query Methods
    # =========================================================================

    def list_orders(
        self,
        *,
        status: str | None = None,
        waiter_id: int | None = None,
        limit: int | None = None,
    ) -> list[OrderOutput]:
        """
        Full order snapshot, newest first.
        """
        stmt = (
            order_query()
            .where(Order.is_active.is_(True))
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
        if status:
            stmt = stmt.where(Order.status == status)
        if waiter_id is not None:
            stmt = stmt.where(Order.waiter_id == waiter_id)
        if limit is not None:
            stmt = stmt.limit(limit)

        orders = self._db.execute(stmt).scalars().unique().all()
        return [to_order_output(order) for order in orders]

    def get_order_model(self, order_id: int, *, for_update: bool = False) -> Order:
        stmt = order_query().where(Order.id == order_id, Order.is_active.is_(True))
        if for_update:
            stmt = stmt.with_for_update(of=Order)
        order = self._db.execute(stmt).scalars().unique().first()
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    def get_order(self, order_id: int) -> OrderOutput:
        return to_order_output(self.get_order_model(order_id))

    # =========================================================================
    # Creation
    # =========================================================================

    def create_order(
        self,
        waiter_id: int,
        items: list[OrderItemInput],
        table_id: int | None = None,
        actor_email: str | None = None,
    ) -> tuple[OrderOutput, list[dict]]:
        """
        Create an order with its items in one transaction.

        Unit price and routing are copied from each menu item; the total is
        the sum of line subtotals. Stock-tracked items are checked and
        decremented.

        Returns (order, low_stock_alerts). Each alert is a dict with name,
        quantity, unit and min_stock for items that just fell to their minimum.

        Raises:
            ValidationError: Empty order, bad quantity, too many lines.
            NotFoundError: Unknown waiter, table or menu item.
            InsufficientStockError: Not enough stock for a tracked item.
            DatabaseError: Persisting the order failed.
        """
        if not items:
            raise ValidationError("Order must contain at least one item", waiter_id=waiter_id)
        if len(items) > Limits.MAX_ITEMS_PER_ORDER:
            raise ValidationError(
                f"Order cannot contain more than {Limits.MAX_ITEMS_PER_ORDER} lines",
                waiter_id=waiter_id,
            )
        for line in items:
            if line.qty <= 0:
                raise ValidationError(
                    "Quantity must be positive", menu_item_id=line.menu_item_id, qty=line.qty
                )

        waiter = self._db.scalar(select(User).where(User.id == waiter_id, User.is_active.is_(True)))
        if waiter is None:
            raise NotFoundError("Staff member", waiter_id)

        table = None
        if table_id is not None:
            table = self._db.scalar(
                select(DiningTable).where(DiningTable.id == table_id, DiningTable.is_active.is_(True))
            )
            if table is None:
                raise NotFoundError("Table", table_id)

        menu_ids = {line.menu_item_id for line in items}
        menu_lookup = {
            item.id: item
            for item in self._db.scalars(
                select(MenuItem).where(MenuItem.id.in_(menu_ids), MenuItem.is_active.is_(True))
            ).unique().all()
        }
        for line in items:
            if line.menu_item_id not in menu_lookup:
                raise NotFoundError("Menu item", line.menu_item_id)

        stock = self._reserve_stock(items, menu_lookup)

        total_cents = sum(menu_lookup[line.menu_item_id].price_cents * line.qty for line in items)

        try:
            order = Order(
                waiter_id=waiter.id,
                table_id=table.id if table else None,
                status=OrderStatus.PENDING,
                total_cents=total_cents,
                payment_status=PaymentStatus.UNPAID,
            )
            order.set_created_by(waiter.id, actor_email or waiter.email)
            self._db.add(order)
            self._db.flush()

            order_items = []
            for line in items:
                menu_item = menu_lookup[line.menu_item_id]
                order_item = OrderItem(
                    order_id=order.id,
                    menu_item_id=menu_item.id,
                    qty=line.qty,
                    unit_price_cents=menu_item.price_cents,
                    preparation_type=menu_item.preparation_type,
                    status=OrderStatus.PENDING,
                    notes=line.notes,
                )
                order_item.set_created_by(waiter.id, actor_email or waiter.email)
                order_items.append(order_item)
            self._db.add_all(order_items)

            alerts = []
            for inventory_item, qty in stock:
                was_low = inventory_item.is_low_stock
                inventory_item.quantity -= qty
                if inventory_item.is_low_stock and not was_low:
                    alerts.append({
                        "name": inventory_item.name,
                        "quantity": inventory_item.quantity,
                        "unit": inventory_item.unit,
                        "min_stock": inventory_item.min_stock,
                    })

            if table is not None:
                TableService(self._db).occupy(table)

            safe_commit(self._db)
        except SQLAlchemyError as e:
            self._db.rollback()
            raise DatabaseError("order creation", waiter_id=waiter_id, error=str(e))

        order_id = order.id
        # Drop cached state so the view reloads the committed rows
        self._db.expire_all()
        view = self.get_order(order_id)

        logger.info(
            "Order created",
            order_id=order_id,
            waiter_id=waiter_id,
            table_id=table_id,
            items_count=len(view.items),
            total_cents=total_cents,
            low_stock_alerts=len(alerts),
        )
        return view, alerts

    def _reserve_stock(
        self,
        items: list[OrderItemInput],
        menu_lookup: dict[int, MenuItem],
    ) -> list[tuple[InventoryItem, int]]:
        """Lock and check the inventory rows behind stock-tracked lines."""
        requested: dict[int, int] = defaultdict(int)
        names: dict[int, str] = {}
        for line in items:
            menu_item = menu_lookup[line.menu_item_id]
            if menu_item.inventory_item_id is None:
                continue
            requested[menu_item.inventory_item_id] += line.qty
            names.setdefault(menu_item.inventory_item_id, menu_item.name)

        if not requested:
            return []

        inventory = {
            inv.id: inv
            for inv in self._db.scalars(
                select(InventoryItem)
                .where(InventoryItem.id.in_(requested.keys()), InventoryItem.is_active.is_(True))
                .with_for_update()
            ).all()
        }

        reserved = []
        for inventory_id, qty in requested.items():
            inv = inventory.get(inventory_id)
            if inv is None:
                # Link to a deleted inventory row: stock no longer tracked
                continue
            if inv.quantity < qty:
                raise InsufficientStockError(names[inventory_id], qty, inv.quantity)
            reserved.append((inv, qty))
        return reserved
