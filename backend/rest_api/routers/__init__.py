"""
REST API routers, one APIRouter per area under /api.
"""
