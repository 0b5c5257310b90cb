"""
Shared dependencies for admin routers.
"""

from typing import Any

from fastapi import Depends

from shared.config.constants import FINANCE_ROLES, Roles
from shared.security.auth import current_user_context as current_user, require_roles


def require_admin(user: dict[str, Any] = Depends(current_user)) -> dict[str, Any]:
    """Dependency that requires ADMIN role."""
    require_roles(user, [Roles.ADMIN])
    return user


def require_finance(user: dict[str, Any] = Depends(current_user)) -> dict[str, Any]:
    """Dependency that requires ADMIN or ACCOUNTANT role."""
    require_roles(user, FINANCE_ROLES)
    return user
