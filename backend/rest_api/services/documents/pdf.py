"""
Receipt and sales report PDFs.

Both builders return the document as bytes so routers can stream them.
"""

from __future__ import annotations

import io
from datetime import datetime

from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from rest_api.services.formatting import format_money
from shared.config.constants import OrderStatus
from shared.config.logging import get_logger
from shared.config.settings import settings
from shared.utils.exceptions import InternalError
from shared.utils.schemas import OrderOutput, SalesReport

logger = get_logger(__name__)

LEFT = 40
RIGHT = 560
BOTTOM_MARGIN = 80
LINE_HEIGHT = 14


def _money(cents: int) -> str:
    return format_money(cents, symbol=settings.pdf_currency_label)


def _stamp(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else "-"


class _Page:
    """Tracks the write cursor and breaks pages when it runs out of room."""

    def __init__(self, c: canvas.Canvas):
        self.c = c
        self.width, self.height = letter
        self.y = self.height - 50

    def down(self, amount: float = LINE_HEIGHT) -> None:
        self.y -= amount
        if self.y < BOTTOM_MARGIN:
            self.c.showPage()
            self.c.setFont("Helvetica", 10)
            self.y = self.height - 60

    def rule(self) -> None:
        self.c.line(LEFT, self.y, RIGHT, self.y)


def build_receipt_pdf(receipt_id: int, created_at: datetime | None, order: OrderOutput, business_name: str) -> bytes:
    """
    Render a customer receipt: header, order details, item table and total.

    Raises:
        InternalError: If reportlab fails to render the document.
    """
    try:
        buffer = io.BytesIO()
        c = canvas.Canvas(buffer, pagesize=letter)
        page = _Page(c)

        c.setFont("Helvetica-Bold", 18)
        c.drawCentredString(page.width / 2, page.y, business_name)
        page.down(20)
        c.setFont("Helvetica", 12)
        c.drawCentredString(page.width / 2, page.y, "Receipt")
        page.down(24)

        c.setFont("Helvetica", 10)
        c.drawString(LEFT, page.y, f"Receipt ID: {receipt_id}")
        page.down()
        c.drawString(LEFT, page.y, f"Order ID: {order.id}")
        page.down()
        c.drawString(LEFT, page.y, f"Date: {_stamp(created_at)}")
        page.down()
        c.drawString(LEFT, page.y, f"Payment Method: {order.payment_method or 'Not specified'}")
        page.down()
        if order.payment_reference:
            c.drawString(LEFT, page.y, f"Reference: {order.payment_reference}")
            page.down()
        if order.table_number is not None:
            c.drawString(LEFT, page.y, f"Table: {order.table_number}")
            page.down()
        page.down(10)

        c.setFont("Helvetica-Bold", 10)
        c.drawString(LEFT, page.y, "Item")
        c.drawString(330, page.y, "Qty")
        c.drawString(380, page.y, "Price")
        c.drawString(480, page.y, "Total")
        page.down(12)
        page.rule()
        page.down()

        c.setFont("Helvetica", 10)
        for item in order.items:
            if item.status == OrderStatus.CANCELLED:
                continue
            c.drawString(LEFT, page.y, item.menu_item_name[:45])
            c.drawRightString(350, page.y, str(item.qty))
            c.drawRightString(450, page.y, _money(item.unit_price_cents))
            c.drawRightString(RIGHT, page.y, _money(item.subtotal_cents))
            page.down()

        page.down(6)
        page.rule()
        page.down(16)
        c.setFont("Helvetica-Bold", 11)
        c.drawRightString(RIGHT, page.y, f"Total Amount: {_money(order.total_cents)}")
        if order.payment_amount_cents is not None:
            page.down()
            c.setFont("Helvetica", 10)
            c.drawRightString(RIGHT, page.y, f"Paid: {_money(order.payment_amount_cents)}")
            page.down()
            c.drawRightString(
                RIGHT, page.y, f"Change: {_money(order.payment_amount_cents - order.total_cents)}"
            )

        page.down(30)
        c.setFont("Helvetica", 8)
        c.drawCentredString(page.width / 2, page.y, "Thank you for dining with us!")

        c.showPage()
        c.save()
        return buffer.getvalue()
    except Exception as e:
        raise InternalError("Failed to render receipt PDF", receipt_id=receipt_id, error=str(e))


def build_sales_report_pdf(report: SalesReport, business_name: str) -> bytes:
    """Render the sales summary with top items and the seven-day breakdown."""
    try:
        buffer = io.BytesIO()
        c = canvas.Canvas(buffer, pagesize=letter)
        page = _Page(c)

        c.setFont("Helvetica-Bold", 16)
        c.drawString(LEFT, page.y, f"{business_name} - Sales Report")
        page.down(20)
        c.setFont("Helvetica", 10)
        c.drawString(
            LEFT,
            page.y,
            f"Range: {report.range} ({_stamp(report.period_start)} to {_stamp(report.period_end)})",
        )
        page.down(24)

        summary = [
            ("Total Sales", _money(report.total_sales_cents)),
            ("Total Orders", str(report.total_orders)),
            ("Average Order Value", _money(report.average_order_value_cents)),
            ("Serving Staff", str(report.customer_count)),
            ("Sales Growth", f"{report.sales_growth_percent:+.1f}%"),
        ]
        for label, value in summary:
            c.setFont("Helvetica-Bold", 10)
            c.drawString(LEFT, page.y, label)
            c.setFont("Helvetica", 10)
            c.drawRightString(300, page.y, value)
            page.down()
        page.down(10)

        c.setFont("Helvetica-Bold", 12)
        c.drawString(LEFT, page.y, "Top Items")
        page.down(16)
        c.setFont("Helvetica-Bold", 10)
        c.drawString(LEFT, page.y, "Item")
        c.drawString(330, page.y, "Sold")
        c.drawString(450, page.y, "Revenue")
        page.down(12)
        page.rule()
        page.down()
        c.setFont("Helvetica", 10)
        if not report.top_items:
            c.drawString(LEFT, page.y, "No sales in this period")
            page.down()
        for item in report.top_items:
            c.drawString(LEFT, page.y, item.name[:45])
            c.drawRightString(360, page.y, str(item.quantity))
            c.drawRightString(RIGHT, page.y, _money(item.revenue_cents))
            page.down()
        page.down(10)

        c.setFont("Helvetica-Bold", 12)
        c.drawString(LEFT, page.y, "Last 7 Days")
        page.down(16)
        c.setFont("Helvetica", 10)
        for day in report.daily_sales:
            c.drawString(LEFT, page.y, f"{day.day} {day.date}")
            c.drawRightString(RIGHT, page.y, _money(day.sales_cents))
            page.down()

        c.showPage()
        c.save()
        return buffer.getvalue()
    except Exception as e:
        raise InternalError("Failed to render sales report PDF", range=report.range, error=str(e))
