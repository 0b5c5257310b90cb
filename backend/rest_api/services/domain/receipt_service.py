"""
Receipt Service.

Receipts are issued for paid orders only. Each receipt keeps the filename of
its last PDF download and, once shared, the external link and platform.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import Receipt
from rest_api.services.documents import build_receipt_pdf
from rest_api.services.domain.order_service import OrderService
from rest_api.services.domain.settings_service import SettingsService
from shared.config.constants import PaymentStatus
from shared.config.logging import get_logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import InvalidStateError, NotFoundError
from shared.utils.schemas import ReceiptOutput

logger = get_logger(__name__)

SHARE_BASE_URL = "https://decube.example.com/receipts"


def receipt_filename(receipt_id: int) -> str:
    return f"receipt-{receipt_id:08d}.pdf"


def share_url(receipt_id: int) -> str:
    """Public link handed to share targets."""
    return f"{SHARE_BASE_URL}/{receipt_id}"


class ReceiptService:
    def __init__(self, db: Session):
        self._db = db
        self._entity_name = "Receipt"

    def _to_output(self, receipt: Receipt, with_order: bool = True) -> ReceiptOutput:
        return ReceiptOutput(
            id=receipt.id,
            order_id=receipt.order_id,
            created_by_user_id=receipt.created_by_user_id,
            filename=receipt.filename,
            file_url=receipt.file_url,
            shared_url=receipt.shared_url,
            shared_platform=receipt.shared_platform,
            created_at=receipt.created_at,
            order=OrderService(self._db).get_order(receipt.order_id) if with_order else None,
        )

    def _get_model(self, receipt_id: int) -> Receipt:
        receipt = self._db.scalar(
            select(Receipt).where(Receipt.id == receipt_id, Receipt.is_active.is_(True))
        )
        if receipt is None:
            raise NotFoundError(self._entity_name, receipt_id)
        return receipt

    def list_all(self, limit: int = 100) -> list[ReceiptOutput]:
        """Receipts newest first, each with its order."""
        receipts = self._db.scalars(
            select(Receipt)
            .where(Receipt.is_active.is_(True))
            .order_by(Receipt.created_at.desc(), Receipt.id.desc())
            .limit(limit)
        ).all()
        return [self._to_output(receipt) for receipt in receipts]

    def get(self, receipt_id: int) -> ReceiptOutput:
        return self._to_output(self._get_model(receipt_id))

    def create(self, order_id: int, user_id: int, user_email: str | None) -> ReceiptOutput:
        """
        Issue a receipt for a paid order.

        Raises:
            OrderNotFoundError: Unknown order.
            InvalidStateError: Order is not paid.
        """
        order = OrderService(self._db).get_order_model(order_id)
        if order.payment_status != PaymentStatus.PAID:
            raise InvalidStateError(
                "Order payment", order.payment_status, [PaymentStatus.PAID], order_id=order_id
            )

        receipt = Receipt(order_id=order_id, created_by_user_id=user_id, filename="")
        receipt.set_created_by(user_id, user_email)
        self._db.add(receipt)
        self._db.flush()
        receipt.filename = receipt_filename(receipt.id)
        safe_commit(self._db)
        self._db.refresh(receipt)

        logger.info("Receipt created", receipt_id=receipt.id, order_id=order_id, user_id=user_id)
        return self._to_output(receipt)

    def pdf(self, receipt_id: int) -> tuple[str, bytes]:
        """Render the receipt PDF and record the downloaded filename."""
        receipt = self._get_model(receipt_id)
        order = OrderService(self._db).get_order(receipt.order_id)
        business_name = SettingsService(self._db).get().business_name

        content = build_receipt_pdf(receipt.id, receipt.created_at, order, business_name)

        filename = receipt_filename(receipt.id)
        if receipt.filename != filename:
            receipt.filename = filename
            safe_commit(self._db)
        logger.info("Receipt downloaded", receipt_id=receipt_id, size=len(content))
        return filename, content

    def share(
        self,
        receipt_id: int,
        shared_url: str,
        shared_platform: str,
        user_id: int,
        user_email: str | None,
    ) -> ReceiptOutput:
        receipt = self._get_model(receipt_id)
        receipt.shared_url = shared_url
        receipt.shared_platform = shared_platform
        receipt.set_updated_by(user_id, user_email)
        safe_commit(self._db)
        self._db.refresh(receipt)
        logger.info("Receipt shared", receipt_id=receipt_id, platform=shared_platform)
        return self._to_output(receipt)
