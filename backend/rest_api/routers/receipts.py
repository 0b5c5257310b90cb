"""
Receipts router.
Issue, list, download and share receipts for paid orders.
"""

from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from rest_api.routers._common import get_user_email, get_user_id
from rest_api.routers.admin._base import require_finance
from rest_api.services.domain import ReceiptService
from rest_api.services.domain.receipt_service import share_url
from rest_api.services.events import entity_change, publish_changes
from shared.config.constants import ChangeType, FeedTable
from shared.infrastructure.db import get_db
from shared.utils.schemas import ReceiptCreate, ReceiptOutput, ShareReceiptRequest


router = APIRouter(prefix="/api/receipts", tags=["receipts"])


@router.get("", response_model=list[ReceiptOutput])
def list_receipts(
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(require_finance),
) -> list[ReceiptOutput]:
    return ReceiptService(db).list_all()


@router.post("", response_model=ReceiptOutput, status_code=status.HTTP_201_CREATED)
async def create_receipt(
    body: ReceiptCreate,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(require_finance),
) -> ReceiptOutput:
    """Issue a receipt. The order must already be paid."""
    receipt = ReceiptService(db).create(body.order_id, get_user_id(user), get_user_email(user))
    await publish_changes(entity_change(ChangeType.INSERT, FeedTable.RECEIPTS, receipt.id), user)
    return receipt


@router.get("/{receipt_id}", response_model=ReceiptOutput)
def get_receipt(
    receipt_id: int,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(require_finance),
) -> ReceiptOutput:
    return ReceiptService(db).get(receipt_id)


@router.get("/{receipt_id}/pdf")
def download_receipt(
    receipt_id: int,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(require_finance),
) -> Response:
    filename, content = ReceiptService(db).pdf(receipt_id)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/{receipt_id}/share", response_model=ReceiptOutput)
async def share_receipt(
    receipt_id: int,
    body: ShareReceiptRequest,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(require_finance),
) -> ReceiptOutput:
    """Record where the receipt link was shared (e.g. whatsapp, email)."""
    receipt = ReceiptService(db).share(
        receipt_id,
        body.shared_url or share_url(receipt_id),
        body.shared_platform,
        get_user_id(user),
        get_user_email(user),
    )
    await publish_changes(entity_change(ChangeType.UPDATE, FeedTable.RECEIPTS, receipt.id), user)
    return receipt
