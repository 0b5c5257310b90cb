"""
Admin API router - combines all admin sub-routers.

- staff: user accounts and roles
- tables: dining tables and their status
- inventory: stock levels and low-stock listing
- settings: notification and business settings
- reports: sales summaries and PDF export

All routes are prefixed with /api/admin
"""

from fastapi import APIRouter

from .inventory import router as inventory_router
from .reports import router as reports_router
from .settings import router as settings_router
from .staff import router as staff_router
from .tables import router as tables_router


router = APIRouter(prefix="/api/admin")

router.include_router(staff_router)
router.include_router(tables_router)
router.include_router(inventory_router)
router.include_router(settings_router)
router.include_router(reports_router)


__all__ = ["router"]
