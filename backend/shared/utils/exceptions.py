"""
Centralized HTTP exceptions for consistent error handling.

Usage:
    from shared.utils.exceptions import NotFoundError, ForbiddenError, ValidationError

    raise NotFoundError("Order", order_id)
    raise ForbiddenError("update kitchen items")
    raise ValidationError("Quantity must be positive")
"""

from typing import Any

from fastapi import HTTPException, status

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """
    Base exception with automatic logging.

    All custom exceptions inherit from this class so every error is logged
    once, with context, at the point it is raised.
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found error (404).

    Usage:
        raise NotFoundError("Menu item", 12)
    """

    def __init__(self, entity: str, entity_id: int | str | None = None, **log_context: Any):
        if entity_id is not None:
            detail = f"{entity} with ID {entity_id} not found"
        else:
            detail = f"{entity} not found"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            log_level="warning",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


class OrderNotFoundError(NotFoundError):
    """Order not found."""

    def __init__(self, order_id: int | None = None, **log_context: Any):
        super().__init__("Order", order_id, **log_context)


# =============================================================================
# 401 / 403 Errors
# =============================================================================


class AuthenticationError(AppException):
    """Bad credentials or missing/invalid token (401)."""

    def __init__(self, detail: str = "Invalid credentials", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            log_level="warning",
            headers={"WWW-Authenticate": "Bearer"},
            **log_context,
        )


class ForbiddenError(AppException):
    """
    Authorization/permission error (403).

    Usage:
        raise ForbiddenError("view other waiters' orders")
    """

    def __init__(self, action: str | None = None, **log_context: Any):
        if action:
            detail = f"Not allowed to {action}"
        else:
            detail = "Access denied"

        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            log_level="warning",
            action=action,
            **log_context,
        )


class InsufficientRoleError(ForbiddenError):
    """User doesn't have the required role."""

    def __init__(self, required_roles: list[str], **log_context: Any):
        roles_str = ", ".join(required_roles)
        super().__init__(
            f"perform this action (requires role: {roles_str})",
            required_roles=required_roles,
            **log_context,
        )


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class ValidationError(AppException):
    """
    Input validation error (400).

    Usage:
        raise ValidationError("Order must contain at least one item")
        raise ValidationError("Invalid quantity", field="qty", value=-1)
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class InvalidStateError(ValidationError):
    """Entity is in an invalid state for the operation."""

    def __init__(
        self,
        entity: str,
        current_state: str,
        expected_states: list[str] | None = None,
        **log_context: Any,
    ):
        if expected_states:
            states_str = ", ".join(expected_states)
            detail = f"{entity} is in state '{current_state}', expected: {states_str}"
        else:
            detail = f"{entity} cannot be in state '{current_state}' for this operation"

        super().__init__(detail, entity=entity, current_state=current_state, **log_context)


class InvalidTransitionError(ValidationError):
    """Invalid status transition."""

    def __init__(self, entity: str, from_status: str, to_status: str, **log_context: Any):
        detail = f"Invalid transition from '{from_status}' to '{to_status}' for {entity}"
        super().__init__(
            detail, entity=entity, from_status=from_status, to_status=to_status, **log_context
        )


class DuplicateEntityError(ValidationError):
    """Entity already exists."""

    def __init__(self, entity: str, identifier: str | None = None, **log_context: Any):
        if identifier:
            detail = f"{entity} with identifier '{identifier}' already exists"
        else:
            detail = f"{entity} already exists"

        super().__init__(detail, entity=entity, identifier=identifier, **log_context)


class InsufficientStockError(ValidationError):
    """Requested quantity exceeds the linked inventory."""

    def __init__(self, item_name: str, requested: int, available: int, **log_context: Any):
        detail = f"Not enough stock for '{item_name}': requested {requested}, available {available}"
        super().__init__(
            detail, item_name=item_name, requested=requested, available=available, **log_context
        )


class PaymentAmountError(ValidationError):
    """Payment amount validation error."""

    def __init__(self, amount: int, reason: str, **log_context: Any):
        detail = f"Invalid payment amount ({amount}): {reason}"
        super().__init__(detail, amount=amount, **log_context)


# =============================================================================
# 409 Conflict Errors
# =============================================================================


class ConflictError(AppException):
    """
    Resource conflict error (409).

    Usage:
        raise ConflictError("Table 4 still has an active order")
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class AlreadyPaidError(ConflictError):
    """Order is already paid."""

    def __init__(self, order_id: int, **log_context: Any):
        super().__init__(f"Order {order_id} is already paid", order_id=order_id, **log_context)


# =============================================================================
# 500 Internal Server Errors
# =============================================================================


class InternalError(AppException):
    """
    Internal server error (500).

    Usage:
        raise InternalError("Failed to render receipt", receipt_id=3)
    """

    def __init__(self, detail: str = "Internal server error", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            log_level="error",
            **log_context,
        )


class DatabaseError(InternalError):
    """Database operation failed."""

    def __init__(self, operation: str, **log_context: Any):
        detail = f"Database error during {operation}. Please try again."
        super().__init__(detail, operation=operation, **log_context)
