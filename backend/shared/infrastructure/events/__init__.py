"""
Change feed over Redis pub/sub.

The REST API publishes one small event per changed row; subscribers treat the
event as a "something changed" signal and reload state from the database.

- event_schema.py: ChangeEvent dataclass with validation
- channels.py: Channel naming functions
- redis_pool.py: Connection pool management
- publisher.py: publish_event with retry and backoff
"""

from .event_schema import ChangeEvent, MAX_EVENT_SIZE
from .channels import channel_changes, channel_changes_pattern, table_from_channel
from .redis_pool import get_redis_pool, close_redis_pool
from .publisher import publish_event, calculate_retry_delay_with_jitter

__all__ = [
    # Event Schema
    "ChangeEvent",
    "MAX_EVENT_SIZE",
    # Channels
    "channel_changes",
    "channel_changes_pattern",
    "table_from_channel",
    # Redis Pool
    "get_redis_pool",
    "close_redis_pool",
    # Publishing
    "publish_event",
    "calculate_retry_delay_with_jitter",
]
