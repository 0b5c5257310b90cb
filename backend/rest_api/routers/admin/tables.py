"""
Table management endpoints.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from rest_api.routers._common import get_user_email, get_user_id
from rest_api.routers.admin._base import require_admin
from rest_api.services.domain import TableService
from rest_api.services.events import entity_change, publish_changes
from shared.config.constants import ChangeType, FeedTable
from shared.infrastructure.db import get_db
from shared.security.auth import current_user_context
from shared.utils.schemas import TableCreate, TableOutput, TableStatusLiteral, TableUpdate


router = APIRouter(tags=["admin-tables"])


@router.get("/tables", response_model=list[TableOutput])
def list_tables(
    status_filter: TableStatusLiteral | None = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(current_user_context),
) -> list[TableOutput]:
    """Any staff member may read tables; waiters pick one when ordering."""
    return TableService(db).list_all(status=status_filter)


@router.post("/tables", response_model=TableOutput, status_code=status.HTTP_201_CREATED)
async def create_table(
    body: TableCreate,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(require_admin),
) -> TableOutput:
    table = TableService(db).create(body, get_user_id(user), get_user_email(user))
    await publish_changes(entity_change(ChangeType.INSERT, FeedTable.TABLES, table.id), user)
    return table


@router.patch("/tables/{table_id}", response_model=TableOutput)
async def update_table(
    table_id: int,
    body: TableUpdate,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(require_admin),
) -> TableOutput:
    """A table with an active order cannot be set back to AVAILABLE."""
    table = TableService(db).update(table_id, body, get_user_id(user), get_user_email(user))
    await publish_changes(entity_change(ChangeType.UPDATE, FeedTable.TABLES, table.id), user)
    return table


@router.delete("/tables/{table_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_table(
    table_id: int,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(require_admin),
) -> None:
    TableService(db).delete(table_id, get_user_id(user), get_user_email(user))
    await publish_changes(entity_change(ChangeType.DELETE, FeedTable.TABLES, table_id), user)
