"""
WebSocket connection manager.

Tracks connected staff with their role so each snapshot push can be cut down
to what that role sees. Dict access is guarded by an asyncio.Lock; sends
happen outside it.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from rest_api.services.domain.order_views import view_for_role
from shared.config.logging import ws_gateway_logger as logger
from shared.config.settings import settings
from shared.utils.schemas import OrderOutput

SNAPSHOT_MESSAGE = "orders_snapshot"


def _is_ws_connected(ws: WebSocket) -> bool:
    return ws.client_state == WebSocketState.CONNECTED and ws.application_state == WebSocketState.CONNECTED


def snapshot_payload(orders: list[OrderOutput], role: str, user_id: int) -> dict[str, Any]:
    """Message body for one client: its role-scoped view of the snapshot."""
    visible = view_for_role(orders, role, user_id)
    return {
        "type": SNAPSHOT_MESSAGE,
        "orders": [order.model_dump(mode="json") for order in visible],
    }


@dataclass
class ClientInfo:
    user_id: int
    role: str
    last_heartbeat: float


class ConnectionManager:
    """
    Registry of live order-feed sockets.

    Connections are indexed by socket (for role lookup) and by user (for the
    per-user connection limit).
    """

    def __init__(
        self,
        max_connections_per_user: int | None = None,
        heartbeat_timeout: float | None = None,
        send_timeout: float | None = None,
    ):
        self.max_connections_per_user = (
            settings.ws_max_connections_per_user if max_connections_per_user is None else max_connections_per_user
        )
        self.heartbeat_timeout = settings.ws_heartbeat_timeout if heartbeat_timeout is None else heartbeat_timeout
        self.send_timeout = settings.ws_send_timeout if send_timeout is None else send_timeout
        self._clients: dict[WebSocket, ClientInfo] = {}
        self.by_user: dict[int, set[WebSocket]] = {}
        self._lock = asyncio.Lock()
        self._shutdown = False

    async def connect(self, websocket: WebSocket, user_id: int, role: str, timeout: float = 5.0) -> None:
        """
        Accept and register a socket.

        Raises:
            ConnectionError: Shutting down, accept timed out, or the user is
                over the connection limit (the socket is closed with 1008).
        """
        if self._shutdown:
            raise ConnectionError("Server is shutting down")

        try:
            await asyncio.wait_for(websocket.accept(), timeout=timeout)
        except asyncio.TimeoutError:
            raise ConnectionError("WebSocket accept timed out")

        async with self._lock:
            if len(self.by_user.get(user_id, ())) >= self.max_connections_per_user:
                over_limit = True
            else:
                over_limit = False
                self._clients[websocket] = ClientInfo(user_id=user_id, role=role, last_heartbeat=time.time())
                self.by_user.setdefault(user_id, set()).add(websocket)

        if over_limit:
            await websocket.close(code=1008, reason="Too many connections")
            raise ConnectionError(f"User {user_id} exceeded max connections ({self.max_connections_per_user})")

    async def disconnect(self, websocket: WebSocket) -> None:
        async with self._lock:
            info = self._clients.pop(websocket, None)
            if info is None:
                return
            sockets = self.by_user.get(info.user_id)
            if sockets is not None:
                sockets.discard(websocket)
                if not sockets:
                    del self.by_user[info.user_id]

    def client(self, websocket: WebSocket) -> ClientInfo | None:
        return self._clients.get(websocket)

    async def _send(self, websocket: WebSocket, payload: dict[str, Any]) -> bool:
        if not _is_ws_connected(websocket):
            return False
        try:
            await asyncio.wait_for(websocket.send_json(payload), timeout=self.send_timeout)
            return True
        except Exception as e:
            logger.warning("Failed to send to WebSocket", error=str(e))
            return False

    async def send_snapshot(self, websocket: WebSocket, orders: list[OrderOutput]) -> bool:
        """Send one client its view of ``orders``."""
        info = self._clients.get(websocket)
        if info is None:
            return False
        return await self._send(websocket, snapshot_payload(orders, info.role, info.user_id))

    async def broadcast_snapshot(self, orders: list[OrderOutput]) -> int:
        """
        Push the snapshot to every client, each filtered by its role.
        Returns the number of clients reached; failed sockets are dropped.
        """
        async with self._lock:
            clients = list(self._clients.items())

        sent = 0
        failed = []
        for websocket, info in clients:
            if await self._send(websocket, snapshot_payload(orders, info.role, info.user_id)):
                sent += 1
            else:
                failed.append(websocket)
        for websocket in failed:
            try:
                await websocket.close(code=1011, reason="Send failed")
            except Exception as e:
                logger.warning("Failed to close broken connection", error=str(e))
            await self.disconnect(websocket)
        return sent

    @property
    def total_connections(self) -> int:
        return len(self._clients)

    def get_stats(self) -> dict[str, Any]:
        roles: dict[str, int] = {}
        for info in self._clients.values():
            roles[info.role] = roles.get(info.role, 0) + 1
        return {
            "total_connections": self.total_connections,
            "users_connected": len(self.by_user),
            "connections_by_role": roles,
        }

    # =========================================================================
    # Heartbeats
    # =========================================================================

    def record_heartbeat(self, websocket: WebSocket) -> None:
        info = self._clients.get(websocket)
        if info is not None:
            info.last_heartbeat = time.time()

    def get_stale_connections(self) -> list[WebSocket]:
        now = time.time()
        return [
            ws for ws, info in list(self._clients.items())
            if now - info.last_heartbeat > self.heartbeat_timeout
        ]

    async def cleanup_stale_connections(self) -> int:
        stale = self.get_stale_connections()
        for ws in stale:
            try:
                await ws.close(code=1001, reason="Heartbeat timeout")
            except Exception as e:
                logger.warning("Failed to close stale connection", error=str(e))
            await self.disconnect(ws)
        return len(stale)

    async def shutdown(self) -> int:
        """Reject new sockets and close the existing ones."""
        self._shutdown = True
        async with self._lock:
            sockets = list(self._clients)

        closed = 0
        for ws in sockets:
            try:
                await ws.close(code=1001, reason="Server shutdown")
                closed += 1
            except Exception as e:
                logger.warning("Failed to close connection during shutdown", error=str(e))
            await self.disconnect(ws)
        logger.info("WebSocket shutdown complete", closed=closed)
        return closed
