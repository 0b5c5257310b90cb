"""
Role-scoped views over the order snapshot.

Pure functions: they take the list produced by OrderService.list_orders and
never touch the database, so the WebSocket gateway can apply them to every
connection after a single refetch.
"""

from __future__ import annotations

from shared.config.constants import (
    ROLE_PREPARATION,
    OrderStatus,
    PaymentStatus,
    Roles,
)
from shared.utils.schemas import OrderOutput, StationQueue

DONE_ITEM_STATUSES = frozenset({OrderStatus.READY, OrderStatus.COMPLETED, OrderStatus.CANCELLED})


def filter_by_preparation(orders: list[OrderOutput], preparation_type: str) -> list[OrderOutput]:
    """Orders that contain items of this routing, keeping only those items."""
    result = []
    for order in orders:
        items = [item for item in order.items if item.preparation_type == preparation_type]
        if items:
            result.append(order.model_copy(update={"items": items}))
    return result


def group_station_queue(orders: list[OrderOutput], preparation_type: str) -> StationQueue:
    """
    Station dashboard buckets for one routing.

    An order is listed under ``pending`` / ``in_progress`` while any of its
    station items is in that state (so it can appear in both), and under
    ``done`` once every station item is ready, completed or cancelled.
    Cancelled orders are left out.
    """
    queue = StationQueue(preparation_type=preparation_type)
    for order in filter_by_preparation(orders, preparation_type):
        if order.status == OrderStatus.CANCELLED:
            continue
        statuses = {item.status for item in order.items}
        if OrderStatus.PENDING in statuses:
            queue.pending.append(order)
        if OrderStatus.IN_PROGRESS in statuses:
            queue.in_progress.append(order)
        if statuses <= DONE_ITEM_STATUSES:
            queue.done.append(order)
    return queue


def filter_by_waiter(orders: list[OrderOutput], waiter_id: int) -> list[OrderOutput]:
    return [order for order in orders if order.waiter_id == waiter_id]


def filter_by_status(orders: list[OrderOutput], status: str) -> list[OrderOutput]:
    return [order for order in orders if order.status == status]


def active_orders(orders: list[OrderOutput]) -> list[OrderOutput]:
    return [order for order in orders if order.status in OrderStatus.ACTIVE]


def completed_orders(orders: list[OrderOutput]) -> list[OrderOutput]:
    """Completed orders; these are always paid."""
    return [order for order in orders if order.status == OrderStatus.COMPLETED]


def paid_orders(orders: list[OrderOutput]) -> list[OrderOutput]:
    return [order for order in orders if order.payment_status == PaymentStatus.PAID]


def view_for_role(orders: list[OrderOutput], role: str, user_id: int) -> list[OrderOutput]:
    """
    What a user in ``role`` sees of the snapshot.

    WAITER: own orders. KITCHEN/BARMAN: orders with their routing, trimmed to
    it. ADMIN: everything. ACCOUNTANT: paid orders. Unknown roles see nothing.
    """
    if role == Roles.ADMIN:
        return list(orders)
    if role == Roles.WAITER:
        return filter_by_waiter(orders, user_id)
    if role in ROLE_PREPARATION:
        return filter_by_preparation(orders, ROLE_PREPARATION[role])
    if role == Roles.ACCOUNTANT:
        return paid_orders(orders)
    return []
