"""
Report Service.

Sales summaries over completed orders. ``compute_sales_report`` is pure and
works on the order snapshot; ``ReportService`` loads the two periods it needs
(the requested one and the equal-length period before it).
"""

from __future__ import annotations

import calendar
from collections import defaultdict
from datetime import datetime, timedelta, timezone

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from rest_api.models import Order
from rest_api.services.domain.order_service import order_query, to_order_output
from shared.config.constants import Limits, OrderStatus, ReportRange
from shared.config.logging import reports_logger as logger
from shared.utils.exceptions import ValidationError
from shared.utils.schemas import DailySales, OrderOutput, SalesReport, TopItem


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; they are stored as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _months_back(value: datetime, months: int) -> datetime:
    month_index = value.month - 1 - months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def period_start(range_: str, now: datetime) -> datetime:
    """
    Start of the reporting window ending at ``now``.

    today: midnight; week: seven days back; month / year: same moment one
    calendar month / year earlier (clamped to the month's last day).
    """
    if range_ == ReportRange.TODAY:
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if range_ == ReportRange.WEEK:
        return now - timedelta(days=7)
    if range_ == ReportRange.MONTH:
        return _months_back(now, 1)
    if range_ == ReportRange.YEAR:
        return _months_back(now, 12)
    raise ValidationError(f"Unknown report range '{range_}'")


def growth_percent(current_cents: int, previous_cents: int) -> float:
    if previous_cents <= 0:
        return 0.0
    return round((current_cents - previous_cents) / previous_cents * 100, 2)


def top_items(orders: list[OrderOutput], limit: int = Limits.TOP_ITEMS_IN_REPORT) -> list[TopItem]:
    """Best sellers by revenue. Cancelled lines are not sales."""
    quantity: dict[str, int] = defaultdict(int)
    revenue: dict[str, int] = defaultdict(int)
    for order in orders:
        for item in order.items:
            if item.status == OrderStatus.CANCELLED:
                continue
            quantity[item.menu_item_name] += item.qty
            revenue[item.menu_item_name] += item.subtotal_cents
    ranked = sorted(revenue, key=lambda name: (-revenue[name], name))
    return [TopItem(name=name, quantity=quantity[name], revenue_cents=revenue[name]) for name in ranked[:limit]]


def daily_sales(orders: list[OrderOutput], now: datetime, days: int = Limits.DAILY_SALES_DAYS) -> list[DailySales]:
    """Sales per calendar day for the last ``days`` days, oldest first."""
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    totals: dict[str, int] = defaultdict(int)
    for order in orders:
        if order.created_at is not None:
            totals[as_utc(order.created_at).date().isoformat()] += order.total_cents

    result = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        key = day.date().isoformat()
        result.append(DailySales(date=key, day=day.strftime("%a"), sales_cents=totals.get(key, 0)))
    return result


def compute_sales_report(
    orders: list[OrderOutput],
    range_: str,
    now: datetime,
    previous_total_cents: int = 0,
) -> SalesReport:
    """
    Build the summary for completed orders created inside the window.

    Orders outside [start, now] or not completed are ignored, so the caller
    may pass a wider snapshot.
    """
    now = as_utc(now)
    start = period_start(range_, now)
    in_period = [
        order
        for order in orders
        if order.status == OrderStatus.COMPLETED
        and order.created_at is not None
        and start <= as_utc(order.created_at) <= now
    ]

    total_sales = sum(order.total_cents for order in in_period)
    total_orders = len(in_period)

    return SalesReport(
        range=range_,
        period_start=start,
        period_end=now,
        total_sales_cents=total_sales,
        total_orders=total_orders,
        average_order_value_cents=round(total_sales / total_orders) if total_orders else 0,
        customer_count=len({order.waiter_id for order in in_period}),
        top_items=top_items(in_period),
        daily_sales=daily_sales(in_period, now),
        sales_growth_percent=growth_percent(total_sales, previous_total_cents),
    )


class ReportService:
    def __init__(self, db: Session):
        self._db = db

    def _completed_between(self, start: datetime, end: datetime, inclusive_end: bool = True):
        end_clause = Order.created_at <= end if inclusive_end else Order.created_at < end
        return (
            Order.is_active.is_(True),
            Order.status == OrderStatus.COMPLETED,
            Order.created_at >= start,
            end_clause,
        )

    def completed_orders(self, start: datetime, end: datetime) -> list[OrderOutput]:
        stmt = order_query().where(*self._completed_between(start, end)).order_by(Order.created_at)
        return [to_order_output(order) for order in self._db.execute(stmt).scalars().unique().all()]

    def previous_period_total(self, start: datetime, now: datetime) -> int:
        previous_start = start - (now - start)
        stmt = select(func.coalesce(func.sum(Order.total_cents), 0)).where(
            *self._completed_between(previous_start, start, inclusive_end=False)
        )
        return int(self._db.scalar(stmt) or 0)

    def sales_report(self, range_: str, now: datetime | None = None) -> SalesReport:
        if range_ not in ReportRange.ALL:
            raise ValidationError(f"Unknown report range '{range_}'")
        now = as_utc(now or datetime.now(timezone.utc))
        start = period_start(range_, now)

        orders = self.completed_orders(start, now)
        previous = self.previous_period_total(start, now)
        report = compute_sales_report(orders, range_, now, previous_total_cents=previous)

        logger.info(
            "Sales report computed",
            range=range_,
            total_orders=report.total_orders,
            total_sales_cents=report.total_sales_cents,
        )
        return report
