"""
Shared Pydantic schemas used across the REST API and the WS gateway.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field


# =============================================================================
# Common Types
# =============================================================================

Role = Literal["WAITER", "BARMAN", "KITCHEN", "ADMIN", "ACCOUNTANT"]
OrderStatusLiteral = Literal["PENDING", "IN_PROGRESS", "READY", "COMPLETED", "CANCELLED"]
PreparationTypeLiteral = Literal["KITCHEN", "BAR"]
MenuCategoryLiteral = Literal["FOOD", "DRINK", "DESSERT"]
TableStatusLiteral = Literal["AVAILABLE", "OCCUPIED", "RESERVED"]
PaymentStatusLiteral = Literal["UNPAID", "PAID"]
PaymentMethodLiteral = Literal["CASH", "CARD", "TRANSFER"]
ReportRangeLiteral = Literal["today", "week", "month", "year"]


class ErrorResponse(BaseModel):
    """Error body returned by every AppException."""

    detail: str


# =============================================================================
# Authentication
# =============================================================================


class LoginRequest(BaseModel):
    """Login request body."""

    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class UserInfo(BaseModel):
    """Basic user information included in auth responses."""

    id: int
    name: str
    email: str
    role: Role


class LoginResponse(BaseModel):
    """Login response with JWT token."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int  # seconds
    user: UserInfo


# =============================================================================
# Staff
# =============================================================================


class StaffCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    role: Role


class StaffUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=6, max_length=128)
    role: Role | None = None


class StaffOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: Role
    is_active: bool
    created_at: datetime | None = None


# =============================================================================
# Inventory
# =============================================================================


class InventoryItemCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    category: str = Field(default="general", max_length=50)
    quantity: int = Field(default=0, ge=0)
    unit: str = Field(default="unit", max_length=20)
    min_stock: int = Field(default=0, ge=0)
    price_cents: int = Field(default=0, ge=0)


class InventoryItemUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    category: str | None = Field(default=None, max_length=50)
    quantity: int | None = Field(default=None, ge=0)
    unit: str | None = Field(default=None, max_length=20)
    min_stock: int | None = Field(default=None, ge=0)
    price_cents: int | None = Field(default=None, ge=0)


class InventoryItemOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    category: str
    quantity: int
    unit: str
    min_stock: int
    price_cents: int
    is_low_stock: bool


# =============================================================================
# Menu
# =============================================================================


class MenuItemCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    category: MenuCategoryLiteral
    price_cents: int = Field(ge=0)
    preparation_type: PreparationTypeLiteral
    image_url: str | None = Field(default=None, max_length=500)
    inventory_item_id: int | None = None


class MenuItemUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    category: MenuCategoryLiteral | None = None
    price_cents: int | None = Field(default=None, ge=0)
    preparation_type: PreparationTypeLiteral | None = None
    image_url: str | None = Field(default=None, max_length=500)
    inventory_item_id: int | None = None


class MenuItemOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None
    category: MenuCategoryLiteral
    price_cents: int
    preparation_type: PreparationTypeLiteral
    image_url: str | None = None
    inventory_item_id: int | None = None
    available_quantity: int | None = None  # None = not stock tracked


# =============================================================================
# Tables
# =============================================================================


class TableCreate(BaseModel):
    number: int = Field(gt=0)
    capacity: int = Field(default=4, gt=0, le=50)
    status: TableStatusLiteral = "AVAILABLE"


class TableUpdate(BaseModel):
    number: int | None = Field(default=None, gt=0)
    capacity: int | None = Field(default=None, gt=0, le=50)
    status: TableStatusLiteral | None = None


class TableOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    number: int
    capacity: int
    status: TableStatusLiteral


# =============================================================================
# Orders
# =============================================================================


class OrderItemInput(BaseModel):
    """A requested line: which menu item and how many."""

    menu_item_id: int
    qty: int = Field(gt=0, le=99)
    notes: str | None = Field(default=None, max_length=200)


class CreateOrderRequest(BaseModel):
    items: list[OrderItemInput] = Field(min_length=1, max_length=100)
    table_id: int | None = None


class OrderItemOutput(BaseModel):
    id: int
    menu_item_id: int
    menu_item_name: str
    qty: int
    unit_price_cents: int
    subtotal_cents: int
    preparation_type: PreparationTypeLiteral
    status: OrderStatusLiteral
    notes: str | None = None


class OrderOutput(BaseModel):
    """Full order view: header, joined names and items."""

    id: int
    waiter_id: int
    waiter_name: str | None = None
    table_id: int | None = None
    table_number: int | None = None
    status: OrderStatusLiteral
    total_cents: int
    payment_status: PaymentStatusLiteral
    payment_method: PaymentMethodLiteral | None = None
    payment_amount_cents: int | None = None
    payment_reference: str | None = None
    created_at: datetime | None = None
    completed_at: datetime | None = None
    items: list[OrderItemOutput] = Field(default_factory=list)


class UpdateOrderStatusRequest(BaseModel):
    """
    Target status, optionally restricted to a subset of the order's items.
    Without ``item_ids`` the whole order (and every item) moves.
    """

    status: OrderStatusLiteral
    item_ids: list[int] | None = Field(default=None, min_length=1)


class StationQueue(BaseModel):
    """Orders for one station split the way the station dashboard shows them."""

    preparation_type: PreparationTypeLiteral
    pending: list[OrderOutput] = Field(default_factory=list)
    in_progress: list[OrderOutput] = Field(default_factory=list)
    done: list[OrderOutput] = Field(default_factory=list)


# =============================================================================
# Payments
# =============================================================================


class PaymentRequest(BaseModel):
    method: PaymentMethodLiteral
    amount_cents: int


class PaymentOutput(BaseModel):
    order_id: int
    payment_reference: str
    payment_method: PaymentMethodLiteral
    payment_amount_cents: int
    change_cents: int
    order: OrderOutput


# =============================================================================
# Receipts
# =============================================================================


class ReceiptCreate(BaseModel):
    order_id: int


class ShareReceiptRequest(BaseModel):
    """Without ``shared_url`` the receipt's public link is used."""

    shared_url: str | None = Field(default=None, min_length=1, max_length=500)
    shared_platform: str = Field(min_length=1, max_length=50)


class ReceiptOutput(BaseModel):
    id: int
    order_id: int
    created_by_user_id: int
    filename: str
    file_url: str | None = None
    shared_url: str | None = None
    shared_platform: str | None = None
    created_at: datetime | None = None
    order: OrderOutput | None = None


# =============================================================================
# Settings
# =============================================================================


class AppSettingsOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    admin_email: str
    notify_logins: bool
    notify_transactions: bool
    notify_inventory: bool
    business_name: str
    business_email: str | None = None
    business_phone: str | None = None
    business_address: str | None = None


class AppSettingsUpdate(BaseModel):
    admin_email: EmailStr | None = None
    notify_logins: bool | None = None
    notify_transactions: bool | None = None
    notify_inventory: bool | None = None
    business_name: str | None = Field(default=None, min_length=1, max_length=100)
    business_email: EmailStr | None = None
    business_phone: str | None = Field(default=None, max_length=50)
    business_address: str | None = Field(default=None, max_length=200)


# =============================================================================
# Reports and Assistant
# =============================================================================


class TopItem(BaseModel):
    name: str
    quantity: int
    revenue_cents: int


class DailySales(BaseModel):
    date: str  # ISO date
    day: str  # Short weekday label, e.g. "Mon"
    sales_cents: int


class SalesReport(BaseModel):
    range: ReportRangeLiteral
    period_start: datetime
    period_end: datetime
    total_sales_cents: int
    total_orders: int
    average_order_value_cents: int
    customer_count: int
    top_items: list[TopItem]
    daily_sales: list[DailySales]
    sales_growth_percent: float


class AssistantQuery(BaseModel):
    question: str = Field(min_length=1, max_length=500)


class AssistantAnswer(BaseModel):
    topic: str
    answer: str
