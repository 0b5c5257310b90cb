"""
Order Status Service.

Moves orders and their items through the shared lifecycle:

    PENDING -> IN_PROGRESS | READY | CANCELLED
    IN_PROGRESS -> READY | CANCELLED
    READY -> COMPLETED | CANCELLED

Stations update only their own items. The order follows once every
non-cancelled item of the touched routing has the target status and items of
other routings are not behind it. Orders are never moved backwards by this
promotion, and never reach COMPLETED unpaid.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rest_api.models import Order, OrderItem
from rest_api.services.domain.order_service import OrderService
from rest_api.services.domain.table_service import TableService
from shared.config.constants import (
    STATUS_RANK,
    OrderStatus,
    PaymentStatus,
    is_valid_transition,
)
from shared.config.logging import orders_logger as logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import (
    DatabaseError,
    InvalidStateError,
    InvalidTransitionError,
    ValidationError,
)
from shared.utils.schemas import OrderOutput


@dataclass
class StatusChange:
    """Outcome of a status update, used for event publishing."""

    order: OrderOutput
    item_ids: list[int]
    order_changed: bool
    table_released: bool


def should_promote(order: Order, updated: list[OrderItem], target: str) -> bool:
    """
    Decide whether a subset update carries the parent order along.

    - every non-cancelled item of the updated routing(s) is at ``target``
    - no non-cancelled item of another routing is behind ``target``
    - CANCELLED only propagates once every item is cancelled
    - the order only moves forward, through a valid transition
    - COMPLETED requires the order to be paid
    """
    if order.status == target or not is_valid_transition(order.status, target):
        return False

    if target == OrderStatus.CANCELLED:
        return all(item.status == OrderStatus.CANCELLED for item in order.items)

    if STATUS_RANK[target] <= STATUS_RANK.get(order.status, -1):
        return False

    if target == OrderStatus.COMPLETED and order.payment_status != PaymentStatus.PAID:
        return False

    routings = {item.preparation_type for item in updated}
    live_items = [item for item in order.items if item.status != OrderStatus.CANCELLED]

    same_routing = [item for item in live_items if item.preparation_type in routings]
    if not same_routing or any(item.status != target for item in same_routing):
        return False

    other_routing = [item for item in live_items if item.preparation_type not in routings]
    return all(STATUS_RANK[item.status] >= STATUS_RANK[target] for item in other_routing)


class OrderStatusService:
    def __init__(self, db: Session):
        self._db = db

    def update_status(
        self,
        order_id: int,
        target: str,
        item_ids: list[int] | None = None,
        actor_id: int | None = None,
        actor_email: str | None = None,
    ) -> StatusChange:
        """
        Update an order, or a subset of its items, to ``target``.

        Without ``item_ids`` the order transition is validated and every item
        follows (individually cancelled items stay cancelled). With
        ``item_ids`` only those items move and the order is promoted per
        ``should_promote``.

        Raises:
            OrderNotFoundError, ValidationError, InvalidTransitionError,
            InvalidStateError, DatabaseError
        """
        if target not in OrderStatus.ALL:
            raise ValidationError(f"Unknown status '{target}'", order_id=order_id)
        if item_ids is not None and not item_ids:
            raise ValidationError("item_ids must not be empty when given", order_id=order_id)

        order = OrderService(self._db).get_order_model(order_id, for_update=True)
        previous_status = order.status

        if item_ids is None:
            touched = self._update_whole_order(order, target)
        else:
            touched = self._update_items(order, target, item_ids)

        order_changed = order.status != previous_status
        if order_changed:
            order.set_updated_by(actor_id, actor_email)

        table_released = False
        if order_changed and order.status == OrderStatus.CANCELLED:
            table_released = TableService(self._db).release_if_idle(order.table_id, exclude_order_id=order.id)

        try:
            safe_commit(self._db)
        except SQLAlchemyError as e:
            raise DatabaseError("order status update", order_id=order_id, error=str(e))

        logger.info(
            "Order status updated",
            order_id=order_id,
            target=target,
            items_updated=len(touched),
            order_status=order.status,
            previous_status=previous_status,
            actor_id=actor_id,
        )

        self._db.expire_all()
        return StatusChange(
            order=OrderService(self._db).get_order(order_id),
            item_ids=touched,
            order_changed=order_changed,
            table_released=table_released,
        )

    def _check_order_target(self, order: Order, target: str) -> None:
        if not is_valid_transition(order.status, target):
            raise InvalidTransitionError("order", order.status, target, order_id=order.id)
        if target == OrderStatus.COMPLETED and order.payment_status != PaymentStatus.PAID:
            raise InvalidStateError(
                "Order payment",
                order.payment_status,
                [PaymentStatus.PAID],
                order_id=order.id,
            )

    def _update_whole_order(self, order: Order, target: str) -> list[int]:
        self._check_order_target(order, target)
        order.status = target

        touched = []
        for item in order.items:
            if item.status == target or item.status == OrderStatus.CANCELLED:
                continue
            item.status = target
            touched.append(item.id)
        return touched

    def _update_items(self, order: Order, target: str, item_ids: list[int]) -> list[int]:
        """
        Paid orders are COMPLETED at payment while the stations may still be
        working; their items keep moving forward and the order stays put.
        """
        if order.status == OrderStatus.CANCELLED:
            raise InvalidStateError("Order", order.status, OrderStatus.ACTIVE, order_id=order.id)
        if order.status == OrderStatus.COMPLETED and target == OrderStatus.CANCELLED:
            raise ValidationError("Items of a paid order cannot be cancelled", order_id=order.id)

        items_by_id = {item.id: item for item in order.items}
        wanted = list(dict.fromkeys(item_ids))
        foreign = [item_id for item_id in wanted if item_id not in items_by_id]
        if foreign:
            raise ValidationError(
                f"Items {foreign} do not belong to order {order.id}",
                order_id=order.id,
                item_ids=foreign,
            )

        updated = [items_by_id[item_id] for item_id in wanted]
        for item in updated:
            if not is_valid_transition(item.status, target):
                raise InvalidTransitionError(
                    "order item", item.status, target, order_id=order.id, item_id=item.id
                )

        touched = []
        for item in updated:
            if item.status != target:
                item.status = target
                touched.append(item.id)

        if should_promote(order, updated, target):
            order.status = target
        elif target == OrderStatus.CANCELLED:
            self._catch_up_after_cancel(order)
        return touched

    def _catch_up_after_cancel(self, order: Order) -> None:
        """
        Cancelling the last lagging items can leave every remaining item
        ahead of the order; move the order up to the slowest of them.
        """
        live = [item for item in order.items if item.status != OrderStatus.CANCELLED]
        if not live:
            return
        slowest = min(live, key=lambda item: STATUS_RANK[item.status]).status
        if STATUS_RANK[slowest] <= STATUS_RANK[order.status]:
            return
        if slowest == OrderStatus.COMPLETED and order.payment_status != PaymentStatus.PAID:
            slowest = OrderStatus.READY
        if is_valid_transition(order.status, slowest) and slowest != order.status:
            order.status = slowest
