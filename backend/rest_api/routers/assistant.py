"""
Analytics assistant router.
"""

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from rest_api.routers.admin._base import require_admin
from rest_api.services.domain import AnalyticsAssistant, load_snapshot
from shared.infrastructure.db import get_db
from shared.utils.schemas import AssistantAnswer, AssistantQuery


router = APIRouter(prefix="/api/assistant", tags=["assistant"])


@router.post("/ask", response_model=AssistantAnswer)
def ask(
    body: AssistantQuery,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(require_admin),
) -> AssistantAnswer:
    """
    Answer a sales question from current data.

    Recognised topics: top sellers, sales trend, staff performance, bar vs
    kitchen, average order value. Anything else gets an overview.
    """
    return AnalyticsAssistant(load_snapshot(db)).answer(body.question)
