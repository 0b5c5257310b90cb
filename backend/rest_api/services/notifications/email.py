"""
Staff notification emails (Resend).

Every sender here is fire-and-log: failures are logged and reported in the
returned dict, never raised, so a broken mail provider cannot fail a login,
an order or a payment. Callers schedule them with FastAPI BackgroundTasks.
"""

from datetime import datetime
from html import escape
from typing import Any

import resend

from shared.config.logging import notifications_logger as logger, mask_email
from shared.config.settings import settings
from rest_api.services.formatting import format_money


def send_email(to: str, subject: str, html: str) -> dict[str, Any]:
    """
    Send one email through Resend.

    Returns:
        dict with 'success' (bool), 'message' (str) and, on success, 'email_id'.
    """
    if not settings.resend_api_key:
        logger.debug("Email skipped: RESEND_API_KEY not configured", subject=subject)
        return {"success": False, "message": "RESEND API key not configured"}

    if not to:
        return {"success": False, "message": "Recipient not configured"}

    params = {
        "from": settings.email_from,
        "to": [to],
        "subject": subject,
        "html": html,
    }

    try:
        resend.api_key = settings.resend_api_key
        email_result = resend.Emails.send(params)
    except Exception as e:
        logger.error(
            "Email send failed",
            to=mask_email(to),
            subject=subject,
            error=str(e),
            error_type=type(e).__name__,
        )
        return {"success": False, "message": f"Failed to send email: {e}"}

    email_id = email_result.get("id") if isinstance(email_result, dict) else getattr(email_result, "id", None)
    logger.info("Email sent", to=mask_email(to), subject=subject, email_id=email_id)
    return {
        "success": True,
        "message": f"Email sent successfully (ID: {email_id or 'unknown'})",
        "email_id": email_id,
    }


def _detail_list(rows: list[tuple[str, str]]) -> str:
    return "\n".join(
        f"          <li><strong>{escape(label)}:</strong> {escape(value)}</li>" for label, value in rows
    )


def _now_label() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def build_login_email_html(user_name: str, user_email: str, role: str) -> str:
    rows = _detail_list([
        ("Name", user_name),
        ("Email", user_email),
        ("Role", role),
        ("Time", _now_label()),
    ])
    return f"""
        <h2>New Staff Login Alert</h2>
        <p>A staff member has just logged in:</p>
        <ul>
{rows}
        </ul>
    """


def build_transaction_email_html(
    staff_name: str,
    staff_role: str,
    order_id: int,
    total_cents: int,
    items: list[str],
    payment_method: str,
    amount_paid_cents: int | None = None,
    payment_reference: str | None = None,
) -> str:
    details = [
        ("Staff Name", staff_name),
        ("Role", staff_role),
        ("Order ID", str(order_id)),
        ("Payment Method", payment_method.upper()),
        ("Total Amount", format_money(total_cents)),
    ]
    if amount_paid_cents is not None:
        details.append(("Amount Paid", format_money(amount_paid_cents)))
    if payment_reference:
        details.append(("Reference", payment_reference))
    details.append(("Time", _now_label()))
    rows = _detail_list(details)
    item_rows = "".join(f"<li>{escape(item)}</li>" for item in items)
    return f"""
        <h2>New Transaction Alert</h2>
        <p>A transaction has been completed:</p>
        <ul>
{rows}
        </ul>
        <h3>Items:</h3>
        <ul>
          {item_rows}
        </ul>
    """


def build_low_stock_email_html(item_name: str, quantity: int, unit: str, min_stock: int) -> str:
    rows = _detail_list([
        ("Item", item_name),
        ("Remaining", f"{quantity} {unit}"),
        ("Minimum Stock", f"{min_stock} {unit}"),
        ("Time", _now_label()),
    ])
    return f"""
        <h2>Low Stock Alert</h2>
        <p>An inventory item has reached its minimum stock level:</p>
        <ul>
{rows}
        </ul>
    """


def send_login_notification(admin_email: str, user_name: str, user_email: str, role: str) -> dict[str, Any]:
    """Tell the admin that a staff member logged in."""
    return send_email(
        admin_email,
        "New Staff Login",
        build_login_email_html(user_name, user_email, role),
    )


def send_transaction_notification(
    admin_email: str,
    staff_name: str,
    staff_role: str,
    order_id: int,
    total_cents: int,
    items: list[str],
    payment_method: str,
    amount_paid_cents: int | None = None,
    payment_reference: str | None = None,
) -> dict[str, Any]:
    """Tell the admin that an order was paid."""
    return send_email(
        admin_email,
        "New Transaction Completed",
        build_transaction_email_html(
            staff_name,
            staff_role,
            order_id,
            total_cents,
            items,
            payment_method,
            amount_paid_cents=amount_paid_cents,
            payment_reference=payment_reference,
        ),
    )


def send_low_stock_notification(
    admin_email: str,
    item_name: str,
    quantity: int,
    unit: str,
    min_stock: int,
) -> dict[str, Any]:
    """Tell the admin that an inventory item fell to its minimum."""
    return send_email(
        admin_email,
        f"Low Stock: {item_name}",
        build_low_stock_email_html(item_name, quantity, unit, min_stock),
    )
