"""
Redis pub/sub subscriber for the WebSocket gateway.

Listens on the change-feed channels and hands each event to a callback.
Dropped connections are retried with a capped exponential backoff.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

from shared.config.constants import ChangeType
from shared.config.logging import get_logger
from shared.config.settings import settings
from shared.infrastructure.events import ChangeEvent, get_redis_pool, table_from_channel

logger = get_logger(__name__)

POLL_TIMEOUT = 1.0
MAX_BACKOFF_SECONDS = 30.0


def parse_change_message(msg: dict[str, Any]) -> ChangeEvent | None:
    """
    Decode a pub/sub message into a ChangeEvent, or None if it is malformed.
    The channel decides the table when the payload lacks one.
    """
    data = msg.get("data")
    if not isinstance(data, (str, bytes)):
        return None
    try:
        return ChangeEvent.from_json(data)
    except (ValueError, TypeError) as e:
        logger.warning("Invalid change event", channel=msg.get("channel"), error=str(e))
        table = table_from_channel(str(msg.get("channel") or ""))
        if table is None:
            return None
        # Still a "something changed" signal for that table
        return ChangeEvent(type=ChangeType.UPDATE, table=table)


async def _listen(
    channels: list[str],
    on_message: Callable[[ChangeEvent], Awaitable[None]],
    on_connected: Callable[[], None],
) -> None:
    redis_pool = await get_redis_pool()
    pubsub = redis_pool.pubsub()
    await pubsub.subscribe(*channels)
    on_connected()
    logger.info("Redis subscriber started", channels=channels)
    try:
        while True:
            msg = await pubsub.get_message(ignore_subscribe_messages=True, timeout=POLL_TIMEOUT)
            if msg is None:
                continue
            event = parse_change_message(msg)
            if event is None:
                continue
            try:
                await on_message(event)
            except Exception as e:
                logger.error("Error handling change event", table=event.table, error=str(e), exc_info=True)
    finally:
        try:
            await pubsub.unsubscribe(*channels)
            await pubsub.aclose()
        except Exception as e:
            logger.warning("Error closing pubsub", error=str(e))


async def run_subscriber(
    channels: list[str],
    on_message: Callable[[ChangeEvent], Awaitable[None]],
    max_attempts: int | None = None,
) -> None:
    """
    Subscribe to ``channels`` and dispatch every event until cancelled.

    Gives up after ``max_attempts`` consecutive connection failures
    (defaults to ``redis_max_reconnect_attempts``).
    """
    max_attempts = settings.redis_max_reconnect_attempts if max_attempts is None else max_attempts
    attempt = 0

    def reset_attempts() -> None:
        nonlocal attempt
        attempt = 0

    while True:
        try:
            await _listen(channels, on_message, reset_attempts)
        except asyncio.CancelledError:
            logger.info("Redis subscriber cancelled")
            raise
        except Exception as e:
            attempt += 1
            if attempt >= max_attempts:
                logger.error("Redis subscriber giving up", attempts=attempt, error=str(e))
                raise
            delay = min(MAX_BACKOFF_SECONDS, 0.5 * (2 ** (attempt - 1)))
            logger.warning("Redis subscriber reconnecting", attempt=attempt, delay=delay, error=str(e))
            await asyncio.sleep(delay)
