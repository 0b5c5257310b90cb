"""
Authentication and authorization utilities.

Staff authenticate with a short JWT (HS256) that carries their id and role.
REST endpoints read it from the Authorization header; the WebSocket gateway
reads it from the ``token`` query parameter.
"""

from __future__ import annotations

import time
import uuid
from typing import Any

import jwt
from fastapi import Header

from shared.config.constants import Roles
from shared.config.settings import JWT_SECRET, JWT_ISSUER, JWT_AUDIENCE, settings
from shared.config.logging import get_logger
from shared.utils.exceptions import AuthenticationError, InsufficientRoleError

logger = get_logger(__name__)


def sign_jwt(
    payload: dict[str, Any],
    ttl_seconds: int | None = None,
    token_type: str = "access",
) -> str:
    """
    Sign a JWT token with the given payload.

    Args:
        payload: Claims to include in the token (sub, role, email, name).
        ttl_seconds: Token lifetime in seconds. Defaults to access token expiry.
        token_type: Type of token.

    Returns:
        Signed JWT token string.
    """
    if ttl_seconds is None:
        ttl_seconds = settings.jwt_access_token_expire_minutes * 60

    now = int(time.time())
    data = {
        **payload,
        "iss": JWT_ISSUER,
        "aud": JWT_AUDIENCE,
        "iat": now,
        "exp": now + ttl_seconds,
        "type": token_type,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(data, JWT_SECRET, algorithm="HS256")


def verify_jwt(token: str) -> dict[str, Any]:
    """
    Verify and decode a JWT token.

    Returns:
        Decoded token claims.

    Raises:
        AuthenticationError: If the token is invalid, expired or lacks required claims.
    """
    try:
        payload = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=["HS256"],
            audience=JWT_AUDIENCE,
            issuer=JWT_ISSUER,
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except jwt.InvalidTokenError as e:
        # Keep library detail out of the response
        logger.warning("JWT validation failed", error=str(e))
        raise AuthenticationError("Invalid token")

    if "sub" not in payload:
        raise AuthenticationError("Invalid token: missing subject claim")
    try:
        int(payload["sub"])
    except (ValueError, TypeError):
        raise AuthenticationError("Invalid token: malformed subject claim")

    if payload.get("role") not in Roles.ALL:
        raise AuthenticationError("Invalid token: missing or unknown role claim")

    if payload.get("type") != "access":
        raise AuthenticationError("Invalid token: invalid type claim")

    return payload


def get_bearer_token(authorization: str | None) -> str:
    """
    Extract bearer token from Authorization header.

    Raises:
        AuthenticationError: If header is missing or malformed.
    """
    if not authorization:
        raise AuthenticationError("Missing Authorization header")
    if not authorization.startswith("Bearer "):
        raise AuthenticationError("Invalid Authorization header format. Expected: Bearer <token>")
    return authorization.split(" ", 1)[1].strip()


def current_user_context(
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> dict[str, Any]:
    """
    FastAPI dependency to get the current user context from JWT.

    Usage:
        @router.get("/orders")
        def list_orders(ctx: dict = Depends(current_user_context)):
            user_id = int(ctx["sub"])
            role = ctx["role"]

    Returns:
        Dict with: sub (user id), role, email, name
    """
    token = get_bearer_token(authorization)
    return verify_jwt(token)


def require_roles(ctx: dict[str, Any], allowed: list[str] | frozenset[str]) -> None:
    """
    Verify that the user's role is one of the allowed roles.

    Raises:
        InsufficientRoleError: If user lacks required role.
    """
    if ctx.get("role") not in allowed:
        raise InsufficientRoleError(sorted(allowed), role=ctx.get("role"))
