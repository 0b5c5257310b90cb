"""
REST API main application.
Entry point for the FastAPI REST server.
"""

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text

from rest_api.core import configure_cors, lifespan, register_middlewares
from rest_api.routers.admin import router as admin_router
from rest_api.routers.assistant import router as assistant_router
from rest_api.routers.auth import router as auth_router
from rest_api.routers.menu import router as menu_router
from rest_api.routers.orders import router as orders_router, stations_router
from rest_api.routers.receipts import router as receipts_router
from shared.config.settings import settings
from shared.infrastructure.db import SessionLocal
from shared.infrastructure.events import get_redis_pool
from shared.security.rate_limit import limiter, rate_limit_exceeded_handler


app = FastAPI(
    title="DECUBE POS API",
    description="Restaurant point-of-sale backend: orders, stations, payments and reports",
    version="0.1.0",
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

register_middlewares(app)
configure_cors(app)


# =============================================================================
# Health Check
# =============================================================================


@app.get("/api/health")
def health_check():
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "service": "rest-api",
        "environment": settings.environment,
    }


@app.get("/api/health/detailed")
async def detailed_health_check():
    """
    Verifies connectivity to the database and Redis.
    Returns 503 when either is down.
    """
    checks = {
        "service": "rest-api",
        "environment": settings.environment,
        "dependencies": {},
    }
    all_healthy = True

    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
        checks["dependencies"]["database"] = {"status": "healthy"}
    except Exception as e:
        checks["dependencies"]["database"] = {"status": "unhealthy", "error": str(e)}
        all_healthy = False

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
# Include Routers
# =============================================================================

app.include_router(auth_router)
app.include_router(menu_router)
app.include_router(orders_router)
app.include_router(stations_router)
app.include_router(receipts_router)
app.include_router(admin_router)
app.include_router(assistant_router)


# =============================================================================
# Development entry point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "rest_api.main:app",
        host="0.0.0.0",
        port=settings.rest_api_port,
        reload=True,
    )
