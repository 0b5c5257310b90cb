"""
Authentication router.
Handles staff login and the current user lookup.
"""

from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.orm import Session

from rest_api.routers._common import get_user_id
from rest_api.services.domain import SettingsService, StaffService
from rest_api.services.notifications import send_login_notification
from shared.config.logging import auth_logger as logger, mask_email
from shared.config.settings import settings
from shared.infrastructure.db import get_db
from shared.security.auth import current_user_context, sign_jwt
from shared.security.rate_limit import limiter
from shared.utils.exceptions import AuthenticationError
from shared.utils.schemas import LoginRequest, LoginResponse, UserInfo


router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.login_rate_limit)
def login(
    request: Request,
    body: LoginRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
) -> LoginResponse:
    """
    Authenticate a staff member and return an access token.

    The token carries:
    - sub: user ID
    - role: the user's single role
    - email, name: for display and audit fields

    The admin is emailed about the login when login notifications are on.
    Rate limited per client IP.
    """
    user = StaffService(db).authenticate(body.email, body.password)
    if user is None:
        raise AuthenticationError("Invalid email or password", email=mask_email(body.email))

    access_token = sign_jwt({
        "sub": str(user.id),
        "role": user.role,
        "email": user.email,
        "name": user.name,
    })

    logger.info("LOGIN_SUCCESS", email=mask_email(user.email), user_id=user.id, role=user.role)

    recipient = SettingsService(db).notification_recipient("logins")
    if recipient:
        background_tasks.add_task(send_login_notification, recipient, user.name, user.email, user.role)

    return LoginResponse(
        access_token=access_token,
        token_type="Bearer",
        expires_in=settings.jwt_access_token_expire_minutes * 60,
        user=UserInfo(id=user.id, name=user.name, email=user.email, role=user.role),
    )


@router.get("/me", response_model=UserInfo)
def me(
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(current_user_context),
) -> UserInfo:
    """Current user, read fresh so role changes show up."""
    user = StaffService(db).get(get_user_id(ctx))
    return UserInfo(id=user.id, name=user.name, email=user.email, role=user.role)
