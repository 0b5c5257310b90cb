"""
Seed data for development and testing.
Creates the admin account, demo staff, tables, stock and the demo menu on an
empty database. Each part is skipped when its table already has rows.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import DiningTable, InventoryItem, MenuItem, User
from shared.config.constants import MenuCategory, PreparationType, Roles, TableStatus
from shared.config.logging import get_logger
from shared.config.settings import settings
from shared.infrastructure.db import safe_commit
from shared.security.password import hash_password

logger = get_logger(__name__)

DEMO_TABLE_COUNT = 8
DEMO_TABLE_CAPACITY = 4

# (name, email, password, role); demo accounts only outside production
DEMO_STAFF = [
    ("Wale Waiter", "waiter@decube.com", "waiter123", Roles.WAITER),
    ("Bola Barman", "barman@decube.com", "barman123", Roles.BARMAN),
    ("Kemi Kitchen", "kitchen@decube.com", "kitchen123", Roles.KITCHEN),
    ("Ade Accountant", "accountant@decube.com", "accountant123", Roles.ACCOUNTANT),
]

# (name, category, quantity, unit, min_stock, price_cents)
DEMO_STOCK = [
    ("Bottled Beer", "drinks", 48, "bottle", 12, 250),
    ("Soft Drink", "drinks", 60, "can", 12, 100),
    ("Water", "drinks", 60, "bottle", 12, 50),
]

# (name, category, price_cents, preparation_type)
DEMO_MENU = [
    ("Classic Mojito", MenuCategory.DRINK, 999, PreparationType.BAR),
    ("Margarita", MenuCategory.DRINK, 1099, PreparationType.BAR),
    ("Old Fashioned", MenuCategory.DRINK, 1299, PreparationType.BAR),
    ("Red Wine (Glass)", MenuCategory.DRINK, 899, PreparationType.BAR),
    ("White Wine (Glass)", MenuCategory.DRINK, 899, PreparationType.BAR),
    ("Draft Beer", MenuCategory.DRINK, 699, PreparationType.BAR),
    ("Bottled Beer", MenuCategory.DRINK, 599, PreparationType.BAR),
    ("Espresso Martini", MenuCategory.DRINK, 1199, PreparationType.BAR),
    ("Soft Drink", MenuCategory.DRINK, 399, PreparationType.BAR),
    ("Water", MenuCategory.DRINK, 299, PreparationType.BAR),
    ("Steak & Fries", MenuCategory.FOOD, 2499, PreparationType.KITCHEN),
    ("Grilled Salmon", MenuCategory.FOOD, 2299, PreparationType.KITCHEN),
    ("Burger & Fries", MenuCategory.FOOD, 1699, PreparationType.KITCHEN),
    ("Caesar Salad", MenuCategory.FOOD, 1299, PreparationType.KITCHEN),
    ("Pasta Carbonara", MenuCategory.FOOD, 1899, PreparationType.KITCHEN),
    ("Margherita Pizza", MenuCategory.FOOD, 1599, PreparationType.KITCHEN),
    ("Chicken Wings", MenuCategory.FOOD, 1499, PreparationType.KITCHEN),
    ("Nachos", MenuCategory.FOOD, 1099, PreparationType.KITCHEN),
    ("Chocolate Cake", MenuCategory.DESSERT, 899, PreparationType.KITCHEN),
    ("Cheesecake", MenuCategory.DESSERT, 899, PreparationType.KITCHEN),
    ("Ice Cream", MenuCategory.DESSERT, 699, PreparationType.KITCHEN),
    ("Tiramisu", MenuCategory.DESSERT, 999, PreparationType.KITCHEN),
]


def seed_staff(db: Session) -> None:
    if db.scalar(select(User.id).limit(1)):
        logger.info("Staff already seeded, skipping")
        return

    accounts = [("Administrator", settings.seed_admin_email, settings.seed_admin_password, Roles.ADMIN)]
    if settings.environment != "production":
        accounts.extend(DEMO_STAFF)

    for name, email, password, role in accounts:
        db.add(User(name=name, email=email.lower(), password=hash_password(password), role=role))
    logger.info("Seeded staff", count=len(accounts))


def seed_tables(db: Session) -> None:
    if db.scalar(select(DiningTable.id).limit(1)):
        return
    for number in range(1, DEMO_TABLE_COUNT + 1):
        db.add(DiningTable(number=number, capacity=DEMO_TABLE_CAPACITY, status=TableStatus.AVAILABLE))
    logger.info("Seeded tables", count=DEMO_TABLE_COUNT)


def seed_menu(db: Session) -> None:
    if db.scalar(select(MenuItem.id).limit(1)):
        return

    stock = {}
    for name, category, quantity, unit, min_stock, price_cents in DEMO_STOCK:
        item = InventoryItem(
            name=name,
            category=category,
            quantity=quantity,
            unit=unit,
            min_stock=min_stock,
            price_cents=price_cents,
        )
        db.add(item)
        stock[name] = item
    db.flush()

    for name, category, price_cents, preparation_type in DEMO_MENU:
        linked = stock.get(name)
        db.add(
            MenuItem(
                name=name,
                category=category,
                price_cents=price_cents,
                preparation_type=preparation_type,
                inventory_item_id=linked.id if linked else None,
            )
        )
    logger.info("Seeded menu", items=len(DEMO_MENU), stock_items=len(DEMO_STOCK))


def seed(db: Session) -> None:
    """Seed every empty area and commit once."""
    seed_staff(db)
    seed_tables(db)
    seed_menu(db)
    safe_commit(db)
