"""
Station router.
Kitchen and bar dashboards: their orders split into pending, in progress
and done.
"""

from typing import Any, Literal

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from rest_api.services.domain import OrderService
from rest_api.services.domain.order_views import group_station_queue
from shared.config.constants import PreparationType, Roles
from shared.infrastructure.db import get_db
from shared.security.auth import current_user_context, require_roles
from shared.utils.schemas import StationQueue


router = APIRouter(prefix="/api/stations", tags=["stations"])

STATIONS = {
    "kitchen": (PreparationType.KITCHEN, Roles.KITCHEN),
    "bar": (PreparationType.BAR, Roles.BARMAN),
}


@router.get("/{station}/queue", response_model=StationQueue)
def station_queue(
    station: Literal["kitchen", "bar"],
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(current_user_context),
) -> StationQueue:
    """
    Requires the station's own role (KITCHEN or BARMAN) or ADMIN.
    """
    preparation_type, station_role = STATIONS[station]
    require_roles(ctx, [station_role, Roles.ADMIN])
    return group_station_queue(OrderService(db).list_orders(), preparation_type)
