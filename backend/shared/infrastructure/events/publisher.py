"""
Event Publishing with Retry and Validation.
"""

from __future__ import annotations

import asyncio
import random

import redis.asyncio as redis

from shared.config.settings import settings
from shared.config.logging import get_logger
from .event_schema import ChangeEvent, MAX_EVENT_SIZE

logger = get_logger(__name__)


def calculate_retry_delay_with_jitter(attempt: int, base_delay: float, max_delay: float = 5.0) -> float:
    """Exponential backoff (base * 2^attempt) with up to 50% random jitter."""
    delay = min(base_delay * (2 ** attempt), max_delay)
    return delay + random.uniform(0, delay * 0.5)


def _validate_event_size(event_json: str, event_type: str) -> None:
    size = len(event_json.encode("utf-8"))
    if size > MAX_EVENT_SIZE:
        raise ValueError(f"Event {event_type} exceeds max size: {size} > {MAX_EVENT_SIZE} bytes")


async def publish_event(
    redis_client: redis.Redis,
    channel: str,
    event: ChangeEvent,
) -> int:
    """
    Publish an event to a Redis channel.

    Args:
        redis_client: Async Redis client.
        channel: Redis channel name.
        event: Event to publish.

    Returns:
        Number of subscribers that received the message.

    Raises:
        ValueError: If event is too large.
        Exception: If all retries fail.
    """
    event_json = event.to_json()
    _validate_event_size(event_json, event.type)

    max_retries = settings.redis_publish_max_retries
    last_error: Exception | None = None
    for attempt in range(max_retries):
        try:
            return await redis_client.publish(channel, event_json)
        except Exception as e:
            last_error = e
            if attempt < max_retries - 1:
                delay = calculate_retry_delay_with_jitter(attempt, settings.redis_publish_retry_delay)
                logger.warning(
                    "Redis publish failed, retrying",
                    channel=channel,
                    event_type=event.type,
                    attempt=attempt + 1,
                    max_retries=max_retries,
                    delay_seconds=round(delay, 2),
                    error=str(e),
                )
                await asyncio.sleep(delay)

    logger.error(
        "Redis publish failed after all retries",
        channel=channel,
        event_type=event.type,
        error=str(last_error),
    )
    raise last_error  # type: ignore[misc]
