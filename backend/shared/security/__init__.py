"""
Security module: Authentication, password hashing, rate limiting.
"""

from shared.security.auth import (
    sign_jwt,
    verify_jwt,
    get_bearer_token,
    current_user_context,
    require_roles,
)
from shared.security.password import hash_password, verify_password
from shared.security.rate_limit import limiter, rate_limit_exceeded_handler

__all__ = [
    "sign_jwt",
    "verify_jwt",
    "get_bearer_token",
    "current_user_context",
    "require_roles",
    "hash_password",
    "verify_password",
    "limiter",
    "rate_limit_exceeded_handler",
]
