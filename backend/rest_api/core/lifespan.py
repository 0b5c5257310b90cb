"""
Application lifespan handler.
Manages startup and shutdown events for the FastAPI application.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from rest_api.models import Base
from rest_api.seed import seed
from shared.config.logging import rest_api_logger as logger, setup_logging
from shared.config.settings import settings
from shared.infrastructure.db import SessionLocal, engine
from shared.infrastructure.events import close_redis_pool


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Runs on startup and shutdown.
    """
    setup_logging()

    # Refuse insecure defaults in production
    secret_errors = settings.validate_production_secrets()
    if secret_errors:
        for error in secret_errors:
            logger.error("Configuration error", error=error)
        if settings.environment == "production":
            raise RuntimeError(
                f"Production configuration errors: {'; '.join(secret_errors)}. "
                "Server will not start with insecure configuration."
            )
        else:
            logger.warning("Running with insecure defaults (acceptable for development only)")

    logger.info("Starting REST API", port=settings.rest_api_port, env=settings.environment)

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")

    with SessionLocal() as db:
        seed(db)

    yield

    logger.info("Shutting down REST API")
    await close_redis_pool()
    logger.info("Redis connection pool closed")
