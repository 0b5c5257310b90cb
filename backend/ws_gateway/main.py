"""
WebSocket Gateway main application.

Staff connect to /ws/orders?token=<jwt>, receive their view of the order
snapshot straight away, and a fresh one after every order change.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Query, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rest_api.core.cors import get_cors_origins
from shared.config.constants import FeedTable, Roles
from shared.config.logging import setup_logging, ws_gateway_logger as logger
from shared.config.settings import settings
from shared.infrastructure.events import channel_changes, close_redis_pool, get_redis_pool
from shared.security.auth import verify_jwt
from ws_gateway.connection_manager import ConnectionManager
from ws_gateway.order_feed import OrderFeedListener
from ws_gateway.redis_subscriber import run_subscriber

ORDER_CHANNELS = [channel_changes(FeedTable.ORDERS), channel_changes(FeedTable.ORDER_ITEMS)]
HEARTBEAT_CLEANUP_INTERVAL = 30

# Global connection manager and feed
manager = ConnectionManager()
feed = OrderFeedListener(broadcast=manager.broadcast_snapshot)


async def start_redis_subscriber() -> None:
    try:
        await run_subscriber(ORDER_CHANNELS, feed.on_event)
    except asyncio.CancelledError:
        pass
    except Exception as e:
        logger.error("Redis subscriber stopped", error=str(e), exc_info=True)


async def start_heartbeat_cleanup() -> None:
    """Periodically close connections that stopped sending heartbeats."""
    while True:
        try:
            await asyncio.sleep(HEARTBEAT_CLEANUP_INTERVAL)
            cleaned = await manager.cleanup_stale_connections()
            if cleaned > 0:
                logger.info("Cleaned up stale connections", count=cleaned)
        except asyncio.CancelledError:
            break
        except Exception as e:
            logger.error("Error in heartbeat cleanup", error=str(e))


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("Starting WebSocket Gateway", port=settings.ws_gateway_port, env=settings.environment)

    subscriber_task = asyncio.create_task(start_redis_subscriber())
    cleanup_task = asyncio.create_task(start_heartbeat_cleanup())

    yield

    logger.info("Shutting down WebSocket Gateway")
    for task in (subscriber_task, cleanup_task):
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
    await feed.stop()
    await manager.shutdown()
    await close_redis_pool()
    logger.info("Redis connection pool closed")


app = FastAPI(
    title="DECUBE WebSocket Gateway",
    description="Live order feed for restaurant staff",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


# =============================================================================
# Health Check
# =============================================================================


@app.get("/ws/health")
def health_check():
    return {
        "status": "healthy",
        "service": "ws-gateway",
        "environment": settings.environment,
        "refetches": feed.refetch_count,
        **manager.get_stats(),
    }


@app.get("/ws/health/detailed")
async def detailed_health_check():
    checks = {
        "service": "ws-gateway",
        "environment": settings.environment,
        "connections": manager.get_stats(),
        "dependencies": {},
    }
    all_healthy = True
    try:
        redis = await get_redis_pool()
        await redis.ping()
        checks["dependencies"]["redis"] = {"status": "healthy"}
    except Exception as e:
        checks["dependencies"]["redis"] = {"status": "unhealthy", "error": str(e)}
        all_healthy = False

    checks["status"] = "healthy" if all_healthy else "degraded"
    if not all_healthy:
        return JSONResponse(content=checks, status_code=503)
    return checks


# =============================================================================
# WebSocket Endpoint
# =============================================================================


@app.websocket("/ws/orders")
async def orders_websocket(
    websocket: WebSocket,
    token: str = Query(..., description="JWT token"),
):
    """
    Live order feed for every staff role.

    Close codes: 4001 invalid token, 4003 role not allowed. Clients may send
    "ping" (answered with "pong") and "refresh" (answered with a snapshot).
    """
    try:
        claims = verify_jwt(token)
    except HTTPException as e:
        await websocket.close(code=4001, reason=str(e.detail))
        return

    role = claims.get("role")
    if role not in Roles.ALL:
        await websocket.close(code=4003, reason="Insufficient role")
        return
    user_id = int(claims["sub"])

    try:
        await manager.connect(websocket, user_id, role)
    except ConnectionError as e:
        logger.warning("WebSocket connection rejected", user_id=user_id, reason=str(e))
        return
    logger.info("Order feed connected", user_id=user_id, role=role)

    try:
        await manager.send_snapshot(websocket, await feed.current())

        while True:
            data = await websocket.receive_text()

            if len(data) > settings.ws_max_message_size:
                logger.warning("Message size exceeded limit", user_id=user_id, size=len(data))
                await websocket.close(code=1009, reason="Message too large")
                break

            manager.record_heartbeat(websocket)
            if data == "ping" or data == '{"type":"ping"}':
                await websocket.send_text("pong")
            elif data == "refresh":
                snapshot = await feed.fetch()
                if snapshot is None:
                    snapshot = await feed.current()
                await manager.send_snapshot(websocket, snapshot)
            else:
                logger.debug("Unknown message from client", user_id=user_id, message=data[:100])

    except WebSocketDisconnect:
        logger.info("Order feed disconnected", user_id=user_id, role=role)
    finally:
        await manager.disconnect(websocket)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "ws_gateway.main:app",
        host="0.0.0.0",
        port=settings.ws_gateway_port,
        reload=True,
    )
