"""
Authentication routers - /api/auth/*
Handles login and current user info.
"""

from .routes import router

__all__ = ["router"]
