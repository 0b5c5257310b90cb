"""
Payment Service.

Settles an order in one step: records the payment, completes the order and
frees its table. There is no partial payment and no refund flow.
"""

from __future__ import annotations

import secrets
import string
import time
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rest_api.services.domain.order_service import OrderService
from rest_api.services.domain.table_service import TableService
from rest_api.services.formatting import item_line
from shared.config.constants import OrderStatus, PaymentMethod, PaymentStatus
from shared.config.logging import payments_logger as logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import (
    AlreadyPaidError,
    DatabaseError,
    InvalidStateError,
    PaymentAmountError,
    ValidationError,
)
from shared.utils.schemas import OrderOutput

REFERENCE_ALPHABET = string.digits + string.ascii_lowercase
REFERENCE_SUFFIX_LENGTH = 9


def generate_payment_reference(now_ms: int | None = None) -> str:
    """
    ``PAY-<epoch ms>-<9 base-36 chars>``, e.g. ``PAY-1718900000000-k3j9x0a1b``.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = "".join(secrets.choice(REFERENCE_ALPHABET) for _ in range(REFERENCE_SUFFIX_LENGTH))
    return f"PAY-{now_ms}-{suffix}"


@dataclass
class PaymentResult:
    order: OrderOutput
    change_cents: int
    table_released: bool


def transaction_notice(order: OrderOutput, staff_name: str, staff_role: str) -> dict:
    """Keyword arguments for send_transaction_notification (minus the recipient)."""
    return {
        "staff_name": staff_name,
        "staff_role": staff_role,
        "order_id": order.id,
        "total_cents": order.total_cents,
        "items": [
            item_line(item.qty, item.menu_item_name, item.unit_price_cents)
            for item in order.items
            if item.status != OrderStatus.CANCELLED
        ],
        "payment_method": order.payment_method or "",
        "amount_paid_cents": order.payment_amount_cents,
        "payment_reference": order.payment_reference,
    }


class PaymentService:
    def __init__(self, db: Session):
        self._db = db

    def finalize(
        self,
        order_id: int,
        method: str,
        amount_cents: int,
        actor_id: int | None = None,
        actor_email: str | None = None,
    ) -> PaymentResult:
        """
        Record a full payment and complete the order.

        Raises:
            ValidationError: Unknown payment method.
            InvalidStateError: Order is cancelled.
            AlreadyPaidError: Order was already paid.
            PaymentAmountError: Amount not positive or below the order total.
            DatabaseError: Persisting the payment failed.
        """
        if method not in PaymentMethod.ALL:
            raise ValidationError(f"Unknown payment method '{method}'", order_id=order_id)

        order = OrderService(self._db).get_order_model(order_id, for_update=True)

        if order.status == OrderStatus.CANCELLED:
            raise InvalidStateError("Order", order.status, OrderStatus.ACTIVE, order_id=order_id)
        if order.payment_status == PaymentStatus.PAID:
            raise AlreadyPaidError(order_id)
        if amount_cents <= 0:
            raise PaymentAmountError(amount_cents, "must be positive", order_id=order_id)
        if amount_cents < order.total_cents:
            raise PaymentAmountError(
                amount_cents,
                f"below order total {order.total_cents}",
                order_id=order_id,
            )

        reference = generate_payment_reference()

        order.payment_method = method
        order.payment_amount_cents = amount_cents
        order.payment_reference = reference
        order.payment_status = PaymentStatus.PAID
        order.status = OrderStatus.COMPLETED
        order.completed_at = datetime.now(timezone.utc)
        order.set_updated_by(actor_id, actor_email)

        table_released = TableService(self._db).release_if_idle(order.table_id, exclude_order_id=order.id)

        try:
            safe_commit(self._db)
        except SQLAlchemyError as e:
            raise DatabaseError("payment", order_id=order_id, error=str(e))

        change_cents = amount_cents - order.total_cents
        logger.info(
            "Payment recorded",
            order_id=order_id,
            method=method,
            amount_cents=amount_cents,
            change_cents=change_cents,
            reference=reference,
            actor_id=actor_id,
        )

        self._db.expire_all()
        return PaymentResult(
            order=OrderService(self._db).get_order(order_id),
            change_cents=change_cents,
            table_released=table_released,
        )
