"""
Change-feed publishing for REST mutations.
"""

from .change_events import (
    RowChange,
    actor_from_ctx,
    entity_change,
    publish_changes,
    order_created_changes,
    order_updated_changes,
)

__all__ = [
    "RowChange",
    "actor_from_ctx",
    "entity_change",
    "publish_changes",
    "order_created_changes",
    "order_updated_changes",
]
