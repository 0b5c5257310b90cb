"""
Common utilities shared across routers.
"""

from .base import get_user_email, get_user_id, get_user_name

__all__ = [
    "get_user_id",
    "get_user_email",
    "get_user_name",
]
