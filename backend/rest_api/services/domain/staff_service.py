"""
Staff Service.

Staff accounts and credential checks.
"""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from rest_api.models import User
from shared.config.constants import Roles
from shared.config.logging import get_logger, mask_email
from shared.infrastructure.db import safe_commit
from shared.security.password import hash_password, verify_password
from shared.utils.exceptions import DuplicateEntityError, NotFoundError, ValidationError
from shared.utils.schemas import StaffCreate, StaffUpdate

logger = get_logger(__name__)


class StaffService:
    """
    Business rules:
    - Emails are unique (case-insensitive)
    - Passwords are stored as bcrypt hashes only
    - Deactivation is a soft delete; the last active admin cannot be removed
    """

    def __init__(self, db: Session):
        self._db = db
        self._entity_name = "Staff member"

    def list_all(self, role: str | None = None, include_inactive: bool = False) -> list[User]:
        stmt = select(User).order_by(User.name)
        if not include_inactive:
            stmt = stmt.where(User.is_active.is_(True))
        if role:
            stmt = stmt.where(User.role == role)
        return list(self._db.scalars(stmt).all())

    def get(self, user_id: int) -> User:
        user = self._db.scalar(select(User).where(User.id == user_id, User.is_active.is_(True)))
        if user is None:
            raise NotFoundError(self._entity_name, user_id)
        return user

    def find_by_email(self, email: str) -> User | None:
        return self._db.scalar(select(User).where(func.lower(User.email) == email.strip().lower()))

    def authenticate(self, email: str, password: str) -> User | None:
        """Return the active user for valid credentials, else None."""
        user = self.find_by_email(email)
        if user is None or not user.is_active:
            logger.info("Login rejected: unknown or inactive user", email=mask_email(email))
            return None
        if not verify_password(password, user.password):
            logger.info("Login rejected: bad password", user_id=user.id)
            return None
        return user

    def create(self, data: StaffCreate, actor_id: int | None, actor_email: str | None) -> User:
        email = data.email.strip().lower()
        if self.find_by_email(email) is not None:
            raise DuplicateEntityError(self._entity_name, mask_email(email))
        user = User(
            name=data.name.strip(),
            email=email,
            password=hash_password(data.password),
            role=data.role,
        )
        user.set_created_by(actor_id, actor_email)
        self._db.add(user)
        safe_commit(self._db)
        self._db.refresh(user)
        logger.info("Staff member created", user_id=user.id, role=user.role, actor_id=actor_id)
        return user

    def update(self, user_id: int, data: StaffUpdate, actor_id: int, actor_email: str | None) -> User:
        user = self.get(user_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        if "email" in changes:
            email = changes["email"].strip().lower()
            existing = self.find_by_email(email)
            if existing is not None and existing.id != user.id:
                raise DuplicateEntityError(self._entity_name, mask_email(email))
            user.email = email
        if "name" in changes:
            user.name = changes["name"].strip()
        if "password" in changes:
            user.password = hash_password(changes["password"])
        if "role" in changes and changes["role"] != user.role:
            if user.role == Roles.ADMIN:
                self._ensure_other_admin(user.id)
            user.role = changes["role"]

        user.set_updated_by(actor_id, actor_email)
        safe_commit(self._db)
        self._db.refresh(user)
        logger.info("Staff member updated", user_id=user.id, actor_id=actor_id)
        return user

    def deactivate(self, user_id: int, actor_id: int, actor_email: str | None) -> None:
        user = self.get(user_id)
        if user.id == actor_id:
            raise ValidationError("You cannot deactivate your own account")
        if user.role == Roles.ADMIN:
            self._ensure_other_admin(user.id)
        user.soft_delete(actor_id, actor_email)
        safe_commit(self._db)
        logger.info("Staff member deactivated", user_id=user_id, actor_id=actor_id)

    def _ensure_other_admin(self, user_id: int) -> None:
        others = self._db.scalar(
            select(func.count(User.id)).where(
                User.role == Roles.ADMIN, User.is_active.is_(True), User.id != user_id
            )
        )
        if not others:
            raise ValidationError("At least one active admin is required")
