"""
Centralized constants for the backend application.

Usage:
    from shared.config.constants import Roles, OrderStatus, PreparationType

    if status == OrderStatus.PENDING:
        ...
"""

from typing import Final


# =============================================================================
# Staff Roles
# =============================================================================


class Roles:
    """Staff role constants."""

    WAITER: Final[str] = "WAITER"
    BARMAN: Final[str] = "BARMAN"
    KITCHEN: Final[str] = "KITCHEN"
    ADMIN: Final[str] = "ADMIN"
    ACCOUNTANT: Final[str] = "ACCOUNTANT"

    ALL: Final[list[str]] = [WAITER, BARMAN, KITCHEN, ADMIN, ACCOUNTANT]


# Role groups for common access patterns
STATION_ROLES: Final[frozenset[str]] = frozenset({Roles.KITCHEN, Roles.BARMAN})
FINANCE_ROLES: Final[frozenset[str]] = frozenset({Roles.ADMIN, Roles.ACCOUNTANT})
ORDER_TAKING_ROLES: Final[frozenset[str]] = frozenset({Roles.WAITER, Roles.ADMIN})


# =============================================================================
# Order Lifecycle
# =============================================================================


class OrderStatus:
    """Order and order item status constants (shared enum)."""

    PENDING: Final[str] = "PENDING"
    IN_PROGRESS: Final[str] = "IN_PROGRESS"
    READY: Final[str] = "READY"
    COMPLETED: Final[str] = "COMPLETED"
    CANCELLED: Final[str] = "CANCELLED"

    ALL: Final[list[str]] = [PENDING, IN_PROGRESS, READY, COMPLETED, CANCELLED]
    ACTIVE: Final[list[str]] = [PENDING, IN_PROGRESS, READY]
    TERMINAL: Final[list[str]] = [COMPLETED, CANCELLED]


# Forward progress rank; CANCELLED sits outside the progression
STATUS_RANK: Final[dict[str, int]] = {
    OrderStatus.PENDING: 0,
    OrderStatus.IN_PROGRESS: 1,
    OrderStatus.READY: 2,
    OrderStatus.COMPLETED: 3,
}

# Valid transitions for both orders and their items
VALID_STATUS_TRANSITIONS: Final[dict[str, frozenset[str]]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.IN_PROGRESS, OrderStatus.READY, OrderStatus.CANCELLED}),
    OrderStatus.IN_PROGRESS: frozenset({OrderStatus.READY, OrderStatus.CANCELLED}),
    OrderStatus.READY: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


def is_valid_transition(current: str, target: str) -> bool:
    """Return True if ``current`` may move to ``target`` (same status is a no-op)."""
    if current == target:
        return True
    return target in VALID_STATUS_TRANSITIONS.get(current, frozenset())


class PreparationType:
    """Preparation routing: which station prepares an item."""

    KITCHEN: Final[str] = "KITCHEN"
    BAR: Final[str] = "BAR"

    ALL: Final[list[str]] = [KITCHEN, BAR]


# Station role -> routing it works on
ROLE_PREPARATION: Final[dict[str, str]] = {
    Roles.KITCHEN: PreparationType.KITCHEN,
    Roles.BARMAN: PreparationType.BAR,
}


# =============================================================================
# Payments
# =============================================================================


class PaymentStatus:
    """Payment status constants."""

    UNPAID: Final[str] = "UNPAID"
    PAID: Final[str] = "PAID"


class PaymentMethod:
    """Accepted payment methods."""

    CASH: Final[str] = "CASH"
    CARD: Final[str] = "CARD"
    TRANSFER: Final[str] = "TRANSFER"

    ALL: Final[list[str]] = [CASH, CARD, TRANSFER]


# =============================================================================
# Catalog and Floor
# =============================================================================


class MenuCategory:
    """Menu item categories."""

    FOOD: Final[str] = "FOOD"
    DRINK: Final[str] = "DRINK"
    DESSERT: Final[str] = "DESSERT"

    ALL: Final[list[str]] = [FOOD, DRINK, DESSERT]


class TableStatus:
    """Dining table status constants."""

    AVAILABLE: Final[str] = "AVAILABLE"
    OCCUPIED: Final[str] = "OCCUPIED"
    RESERVED: Final[str] = "RESERVED"

    ALL: Final[list[str]] = [AVAILABLE, OCCUPIED, RESERVED]


# =============================================================================
# Change Feed
# =============================================================================


class ChangeType:
    """Row-level change notification types."""

    INSERT: Final[str] = "INSERT"
    UPDATE: Final[str] = "UPDATE"
    DELETE: Final[str] = "DELETE"

    ALL: Final[list[str]] = [INSERT, UPDATE, DELETE]


class FeedTable:
    """Tables that publish change notifications."""

    ORDERS: Final[str] = "orders"
    ORDER_ITEMS: Final[str] = "order_items"
    MENU_ITEMS: Final[str] = "menu_items"
    INVENTORY_ITEMS: Final[str] = "inventory_items"
    TABLES: Final[str] = "tables"
    RECEIPTS: Final[str] = "receipts"
    USERS: Final[str] = "users"
    SETTINGS: Final[str] = "settings"

    ALL: Final[list[str]] = [
        ORDERS,
        ORDER_ITEMS,
        MENU_ITEMS,
        INVENTORY_ITEMS,
        TABLES,
        RECEIPTS,
        USERS,
        SETTINGS,
    ]


# =============================================================================
# Reports
# =============================================================================


class ReportRange:
    """Sales report date ranges."""

    TODAY: Final[str] = "today"
    WEEK: Final[str] = "week"
    MONTH: Final[str] = "month"
    YEAR: Final[str] = "year"

    ALL: Final[list[str]] = [TODAY, WEEK, MONTH, YEAR]


class Limits:
    """Input limits."""

    MAX_ITEMS_PER_ORDER: Final[int] = 100
    MAX_QTY_PER_ITEM: Final[int] = 99
    TOP_ITEMS_IN_REPORT: Final[int] = 4
    DAILY_SALES_DAYS: Final[int] = 7
