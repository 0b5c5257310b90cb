"""
Publish row-change events after a successful commit.

Routers call ``publish_changes`` once the transaction is committed. Publishing
is fire-and-log: a Redis outage is logged and never fails the request that
already changed the database.
"""

from dataclasses import dataclass
from typing import Any, Iterable

from shared.config.constants import ChangeType, FeedTable
from shared.config.logging import get_logger
from shared.infrastructure.events import ChangeEvent, channel_changes, get_redis_pool, publish_event
from shared.utils.schemas import OrderOutput

logger = get_logger(__name__)


@dataclass(frozen=True)
class RowChange:
    type: str
    table: str
    record_id: int | None = None


def actor_from_ctx(ctx: dict[str, Any] | None) -> dict[str, Any]:
    """Reduce a JWT context to the actor fields carried on events."""
    if not ctx:
        return {}
    return {"user_id": int(ctx["sub"]), "role": ctx.get("role")}


async def publish_changes(changes: Iterable[RowChange], ctx: dict[str, Any] | None = None) -> int:
    """
    Publish one event per change. Returns how many were published.
    """
    changes = list(changes)
    if not changes:
        return 0

    actor = actor_from_ctx(ctx)
    published = 0
    try:
        redis_client = await get_redis_pool()
        for change in changes:
            event = ChangeEvent(
                type=change.type,
                table=change.table,
                record_id=change.record_id,
                actor=actor,
            )
            await publish_event(redis_client, channel_changes(change.table), event)
            published += 1
    except Exception as e:
        logger.error(
            "Failed to publish change events",
            published=published,
            pending=len(changes) - published,
            error=str(e),
        )
    return published


def order_created_changes(order: OrderOutput) -> list[RowChange]:
    changes = [RowChange(ChangeType.INSERT, FeedTable.ORDERS, order.id)]
    changes.extend(RowChange(ChangeType.INSERT, FeedTable.ORDER_ITEMS, item.id) for item in order.items)
    if order.table_id is not None:
        changes.append(RowChange(ChangeType.UPDATE, FeedTable.TABLES, order.table_id))
    return changes


def order_updated_changes(
    order: OrderOutput,
    item_ids: Iterable[int] | None = None,
    table_changed: bool = False,
) -> list[RowChange]:
    """UPDATE events for the order, the given items (all when None) and its table."""
    changes = [RowChange(ChangeType.UPDATE, FeedTable.ORDERS, order.id)]
    ids = [item.id for item in order.items] if item_ids is None else list(item_ids)
    changes.extend(RowChange(ChangeType.UPDATE, FeedTable.ORDER_ITEMS, item_id) for item_id in ids)
    if table_changed and order.table_id is not None:
        changes.append(RowChange(ChangeType.UPDATE, FeedTable.TABLES, order.table_id))
    return changes


def entity_change(change_type: str, table: str, record_id: int | None) -> list[RowChange]:
    """Single-row change for admin CRUD endpoints."""
    return [RowChange(change_type, table, record_id)]
