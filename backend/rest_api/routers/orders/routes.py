"""
Orders router.

Order taking, role-scoped listing, status updates and payment. Every write
publishes row-change events after commit so the WebSocket gateway refetches.
"""

from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.orm import Session

from rest_api.routers._common import get_user_email, get_user_id, get_user_name
from rest_api.services.domain import (
    OrderService,
    OrderStatusService,
    PaymentService,
    SettingsService,
)
from rest_api.services.domain.order_views import view_for_role
from rest_api.services.domain.payment_service import transaction_notice
from rest_api.services.events import (
    order_created_changes,
    order_updated_changes,
    publish_changes,
)
from rest_api.services.notifications import (
    send_low_stock_notification,
    send_transaction_notification,
)
from shared.config.constants import (
    ORDER_TAKING_ROLES,
    ROLE_PREPARATION,
    OrderStatus,
    Roles,
)
from shared.config.logging import orders_logger as logger
from shared.infrastructure.db import get_db
from shared.security.auth import current_user_context, require_roles
from shared.utils.exceptions import ForbiddenError, ValidationError
from shared.utils.schemas import (
    CreateOrderRequest,
    OrderOutput,
    OrderStatusLiteral,
    PaymentOutput,
    PaymentRequest,
    UpdateOrderStatusRequest,
)


router = APIRouter(prefix="/api/orders", tags=["orders"])

PAYMENT_ROLES = [Roles.WAITER, Roles.ADMIN, Roles.ACCOUNTANT]


def _ensure_can_see(order: OrderOutput, ctx: dict[str, Any]) -> OrderOutput:
    """Return the caller's view of one order, or 403 when it is outside it."""
    visible = view_for_role([order], ctx["role"], get_user_id(ctx))
    if not visible:
        raise ForbiddenError("access this order")
    return visible[0]


def _station_item_ids(order: OrderOutput, role: str, requested: list[int] | None) -> list[int]:
    """
    Items a station may move. Explicit ids must all belong to its routing;
    without ids it means every open item of its routing.
    """
    preparation = ROLE_PREPARATION[role]
    if requested is not None:
        by_id = {item.id: item for item in order.items}
        foreign = [
            item_id for item_id in requested
            if item_id in by_id and by_id[item_id].preparation_type != preparation
        ]
        if foreign:
            raise ForbiddenError(f"update items {foreign} outside the {preparation.lower()} station")
        return requested

    open_items = [
        item.id
        for item in order.items
        if item.preparation_type == preparation and item.status not in OrderStatus.TERMINAL
    ]
    if not open_items:
        raise ValidationError(f"Order {order.id} has no open {preparation.lower()} items", order_id=order.id)
    return open_items


@router.post("", response_model=OrderOutput, status_code=status.HTTP_201_CREATED)
async def create_order(
    body: CreateOrderRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(current_user_context),
) -> OrderOutput:
    """
    Place an order for the calling waiter.

    Prices and routing are copied from the menu. Stock-tracked items are
    decremented; items that fall to their minimum trigger a low-stock email.

    Requires WAITER or ADMIN role.
    """
    require_roles(ctx, ORDER_TAKING_ROLES)

    order, low_stock = OrderService(db).create_order(
        waiter_id=get_user_id(ctx),
        items=body.items,
        table_id=body.table_id,
        actor_email=get_user_email(ctx),
    )

    await publish_changes(order_created_changes(order), ctx)

    if low_stock:
        recipient = SettingsService(db).notification_recipient("inventory")
        if recipient:
            for alert in low_stock:
                background_tasks.add_task(
                    send_low_stock_notification,
                    recipient,
                    alert["name"],
                    alert["quantity"],
                    alert["unit"],
                    alert["min_stock"],
                )

    return order


@router.get("", response_model=list[OrderOutput])
def list_orders(
    status_filter: OrderStatusLiteral | None = Query(default=None, alias="status"),
    limit: int | None = Query(default=None, ge=1, le=1000),
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(current_user_context),
) -> list[OrderOutput]:
    """
    Orders newest first, as the caller's role sees them.

    WAITER: own orders. KITCHEN / BARMAN: orders with their routing, trimmed
    to those items. ACCOUNTANT: paid orders. ADMIN: everything.
    """
    waiter_id = get_user_id(ctx) if ctx["role"] == Roles.WAITER else None
    orders = OrderService(db).list_orders(status=status_filter, waiter_id=waiter_id, limit=limit)
    return view_for_role(orders, ctx["role"], get_user_id(ctx))


@router.get("/{order_id}", response_model=OrderOutput)
def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(current_user_context),
) -> OrderOutput:
    return _ensure_can_see(OrderService(db).get_order(order_id), ctx)


@router.patch("/{order_id}/status", response_model=OrderOutput)
async def update_order_status(
    order_id: int,
    body: UpdateOrderStatusRequest,
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(current_user_context),
) -> OrderOutput:
    """
    Move an order, or some of its items, to a new status.

    - ADMIN: any order, whole or by items
    - WAITER: own orders only
    - KITCHEN / BARMAN: only items of their routing; without ``item_ids`` all
      open items of that routing move

    The order follows its items once every item of the touched routing has
    reached the target. COMPLETED is only reachable for paid orders.
    """
    require_roles(ctx, [Roles.ADMIN, Roles.WAITER, Roles.KITCHEN, Roles.BARMAN])
    role = ctx["role"]

    item_ids = body.item_ids
    if role != Roles.ADMIN:
        current = OrderService(db).get_order(order_id)
        if role == Roles.WAITER and current.waiter_id != get_user_id(ctx):
            raise ForbiddenError("update another waiter's order")
        if role in ROLE_PREPARATION:
            item_ids = _station_item_ids(current, role, item_ids)

    change = OrderStatusService(db).update_status(
        order_id,
        body.status,
        item_ids=item_ids,
        actor_id=get_user_id(ctx),
        actor_email=get_user_email(ctx),
    )

    await publish_changes(
        order_updated_changes(change.order, change.item_ids, table_changed=change.table_released),
        ctx,
    )

    return view_for_role([change.order], role, get_user_id(ctx))[0]


@router.post("/{order_id}/payment", response_model=PaymentOutput)
async def pay_order(
    order_id: int,
    body: PaymentRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(current_user_context),
) -> PaymentOutput:
    """
    Settle an order in full.

    Marks it PAID and COMPLETED, frees its table and emails the admin a
    transaction summary. The email runs after the response and its failure
    never affects the payment.

    Requires WAITER (own orders), ACCOUNTANT or ADMIN role.
    """
    require_roles(ctx, PAYMENT_ROLES)
    if ctx["role"] == Roles.WAITER:
        current = OrderService(db).get_order(order_id)
        if current.waiter_id != get_user_id(ctx):
            raise ForbiddenError("take payment for another waiter's order")

    result = PaymentService(db).finalize(
        order_id,
        body.method,
        body.amount_cents,
        actor_id=get_user_id(ctx),
        actor_email=get_user_email(ctx),
    )
    order = result.order

    await publish_changes(order_updated_changes(order, table_changed=result.table_released), ctx)

    try:
        recipient = SettingsService(db).notification_recipient("transactions")
        if recipient:
            background_tasks.add_task(
                send_transaction_notification,
                recipient,
                **transaction_notice(order, get_user_name(ctx), ctx["role"]),
            )
    except Exception as e:
        logger.error("Failed to queue transaction email", order_id=order_id, error=str(e))

    return PaymentOutput(
        order_id=order.id,
        payment_reference=order.payment_reference,
        payment_method=order.payment_method,
        payment_amount_cents=order.payment_amount_cents,
        change_cents=result.change_cents,
        order=order,
    )
