"""
Domain services.

Each service wraps a Session and owns the business rules for one area.
Routers stay thin: they check roles, call a service, then publish events and
queue notifications once the service has committed.
"""

from .assistant_service import AnalyticsAssistant, AnalyticsSnapshot, load_snapshot
from .inventory_service import InventoryService
from .menu_service import MenuService
from .order_service import OrderService
from .payment_service import PaymentResult, PaymentService, generate_payment_reference
from .receipt_service import ReceiptService
from .report_service import ReportService, compute_sales_report
from .settings_service import SettingsService
from .staff_service import StaffService
from .status_service import OrderStatusService, StatusChange, should_promote
from .table_service import TableService

__all__ = [
    "AnalyticsAssistant",
    "AnalyticsSnapshot",
    "load_snapshot",
    "InventoryService",
    "MenuService",
    "OrderService",
    "PaymentResult",
    "PaymentService",
    "generate_payment_reference",
    "ReceiptService",
    "ReportService",
    "compute_sales_report",
    "SettingsService",
    "StaffService",
    "OrderStatusService",
    "StatusChange",
    "should_promote",
    "TableService",
]
