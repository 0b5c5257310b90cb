"""
Email notifications sent through Resend.
"""

from .email import (
    send_email,
    send_login_notification,
    send_transaction_notification,
    send_low_stock_notification,
)

__all__ = [
    "send_email",
    "send_login_notification",
    "send_transaction_notification",
    "send_low_stock_notification",
]
