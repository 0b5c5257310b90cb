"""
Helpers for reading the verified JWT context inside routers.
"""

from typing import Any


def get_user_id(ctx: dict[str, Any]) -> int:
    return int(ctx["sub"])


def get_user_email(ctx: dict[str, Any]) -> str | None:
    return ctx.get("email")


def get_user_name(ctx: dict[str, Any]) -> str:
    """Display name for notifications; falls back to the email."""
    return ctx.get("name") or ctx.get("email") or f"User #{ctx['sub']}"
