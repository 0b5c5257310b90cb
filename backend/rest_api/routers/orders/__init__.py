"""
Order routers - /api/orders/* and /api/stations/*
"""

from .routes import router
from .stations import router as stations_router

__all__ = ["router", "stations_router"]
