"""
Order change-feed listener.

Any change to orders or order items means "reload". The event payload is
never merged: the listener refetches the whole order snapshot and hands it
to the broadcaster. Events that arrive while a refetch is pending or running
collapse into one more refetch.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

from rest_api.services.domain import OrderService
from shared.config.logging import ws_gateway_logger as logger
from shared.config.settings import settings
from shared.infrastructure.db import get_db_context
from shared.infrastructure.events import ChangeEvent
from shared.utils.schemas import OrderOutput

SnapshotFetcher = Callable[[], Awaitable[list[OrderOutput]]]
SnapshotBroadcaster = Callable[[list[OrderOutput]], Awaitable[int]]


def _load_orders() -> list[OrderOutput]:
    with get_db_context() as db:
        return OrderService(db).list_orders()


async def fetch_order_snapshot() -> list[OrderOutput]:
    """Full snapshot, loaded in a worker thread so the loop stays free."""
    return await asyncio.to_thread(_load_orders)


class OrderFeedListener:
    """
    Turns change events into snapshot refetches.

    Attributes:
        snapshot: Last snapshot fetched (None until the first fetch).
        refetch_count: Completed refetches, for stats and tests.
    """

    def __init__(
        self,
        fetch_snapshot: SnapshotFetcher = fetch_order_snapshot,
        broadcast: SnapshotBroadcaster | None = None,
        debounce: float | None = None,
    ):
        self._fetch = fetch_snapshot
        self._broadcast = broadcast
        self._debounce = settings.ws_refetch_debounce_seconds if debounce is None else debounce
        self._pending = False
        self._task: asyncio.Task | None = None
        self.snapshot: list[OrderOutput] | None = None
        self.refetch_count = 0
        self.events_seen = 0

    async def on_event(self, event: ChangeEvent) -> None:
        """Mark the snapshot stale; the payload itself is ignored."""
        self.events_seen += 1
        logger.debug("Order change received", table=event.table, change=event.type)
        self._pending = True
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._drain())

    async def _drain(self) -> None:
        while self._pending:
            if self._debounce > 0:
                await asyncio.sleep(self._debounce)
            self._pending = False
            await self.refresh()

    async def fetch(self) -> list[OrderOutput] | None:
        """Fetch and cache a fresh snapshot without broadcasting it. None on failure."""
        try:
            snapshot = await self._fetch()
        except Exception as e:
            logger.error("Order snapshot refetch failed", error=str(e))
            return None

        self.snapshot = snapshot
        self.refetch_count += 1
        return snapshot

    async def refresh(self) -> list[OrderOutput] | None:
        """Fetch and broadcast now. Failures are logged; the old snapshot stays."""
        snapshot = await self.fetch()
        if snapshot is None:
            return None
        if self._broadcast is not None:
            try:
                sent = await self._broadcast(snapshot)
                logger.debug("Order snapshot broadcast", orders=len(snapshot), clients=sent)
            except Exception as e:
                logger.error("Order snapshot broadcast failed", error=str(e))
        return snapshot

    async def current(self) -> list[OrderOutput]:
        """Latest snapshot, fetching once if none is cached."""
        if self.snapshot is None:
            snapshot = await self.fetch()
            return snapshot or []
        return self.snapshot

    async def wait_idle(self) -> None:
        """Wait for a pending or running refetch to finish."""
        while self._task is not None and not self._task.done():
            await self._task

    async def stop(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
