"""
Services module for business logic.

- domain/: application services (orders, status, payment, staff, stock, reports)
- events/: change-feed publishing after commits
- notifications/: Resend emails
- documents/: reportlab PDFs for receipts and reports
- formatting: money and line rendering shared by the above

Usage:
    from rest_api.services.domain import OrderService
    order = OrderService(db).create_order(user_id, items, table_id=table_id)
"""
