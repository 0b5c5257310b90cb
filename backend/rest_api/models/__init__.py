"""
SQLAlchemy ORM Models Package.

- base: Base class and AuditMixin
- user: User (staff)
- menu: InventoryItem, MenuItem
- table: DiningTable
- order: Order, OrderItem
- receipt: Receipt
- setting: AppSetting
"""

from .base import Base, AuditMixin
from .user import User
from .menu import InventoryItem, MenuItem
from .table import DiningTable
from .order import Order, OrderItem
from .receipt import Receipt
from .setting import AppSetting

__all__ = [
    "Base",
    "AuditMixin",
    "User",
    "InventoryItem",
    "MenuItem",
    "DiningTable",
    "Order",
    "OrderItem",
    "Receipt",
    "AppSetting",
]
