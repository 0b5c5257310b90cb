"""
Analytics Assistant.

Answers free-text questions about sales with canned, keyword-matched
summaries computed from an in-memory snapshot. No language model involved.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from rest_api.services.domain.menu_service import MenuService
from rest_api.services.domain.order_service import OrderService
from rest_api.services.domain.report_service import as_utc
from rest_api.services.domain.staff_service import StaffService
from rest_api.services.formatting import format_money
from shared.config.constants import OrderStatus, PreparationType
from shared.config.logging import get_logger
from shared.utils.schemas import AssistantAnswer, OrderOutput

logger = get_logger(__name__)

WEEKDAYS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


@dataclass
class AnalyticsSnapshot:
    """Completed orders plus the reference data the answers need."""

    orders: list[OrderOutput]
    staff: list[tuple[int, str, str]]  # (id, name, role)
    menu_routing_counts: dict[str, int] = field(default_factory=dict)
    now: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def load_snapshot(db: Session) -> AnalyticsSnapshot:
    orders = OrderService(db).list_orders(status=OrderStatus.COMPLETED)
    staff = [(user.id, user.name, user.role) for user in StaffService(db).list_all(include_inactive=True)]
    counts: dict[str, int] = defaultdict(int)
    for item in MenuService(db).list_items():
        counts[item.preparation_type] += 1
    return AnalyticsSnapshot(orders=orders, staff=staff, menu_routing_counts=dict(counts))


class AnalyticsAssistant:
    def __init__(self, snapshot: AnalyticsSnapshot):
        self._snapshot = snapshot
        self._orders = snapshot.orders

    # =========================================================================
    # Aggregates
    # =========================================================================

    def total_sales(self) -> int:
        return sum(order.total_cents for order in self._orders)

    def average_order_value(self) -> int:
        return round(self.total_sales() / len(self._orders)) if self._orders else 0

    def top_items(self, limit: int = 3) -> list[tuple[str, int]]:
        revenue: dict[str, int] = defaultdict(int)
        for order in self._orders:
            for item in order.items:
                if item.status != OrderStatus.CANCELLED:
                    revenue[item.menu_item_name] += item.subtotal_cents
        return sorted(revenue.items(), key=lambda pair: (-pair[1], pair[0]))[:limit]

    def sales_by_day(self) -> list[tuple[str, int]]:
        """Last seven days keyed by weekday, Sunday first."""
        since = as_utc(self._snapshot.now) - timedelta(days=7)
        totals: dict[str, int] = defaultdict(int)
        for order in self._orders:
            if order.created_at is None:
                continue
            created = as_utc(order.created_at)
            if created >= since:
                totals[created.strftime("%a")] += order.total_cents
        return sorted(totals.items(), key=lambda pair: WEEKDAYS.index(pair[0]))

    def sales_by_staff(self) -> list[tuple[str, int]]:
        totals: dict[int, int] = defaultdict(int)
        for order in self._orders:
            totals[order.waiter_id] += order.total_cents
        ranked = [(name, totals.get(user_id, 0)) for user_id, name, _ in self._snapshot.staff]
        return sorted(ranked, key=lambda pair: -pair[1])

    def sales_by_role(self) -> dict[str, int]:
        totals: dict[str, int] = defaultdict(int)
        for order in self._orders:
            totals[order.waiter_id] += order.total_cents
        by_role: dict[str, int] = defaultdict(int)
        for user_id, _, role in self._snapshot.staff:
            by_role[role] += totals.get(user_id, 0)
        return dict(by_role)

    def sales_by_routing(self) -> dict[str, int]:
        totals = {PreparationType.BAR: 0, PreparationType.KITCHEN: 0}
        for order in self._orders:
            for item in order.items:
                if item.status != OrderStatus.CANCELLED:
                    totals[item.preparation_type] += item.subtotal_cents
        return totals

    # =========================================================================
    # Answer fragments
    # =========================================================================

    def _top_items_text(self) -> str:
        items = self.top_items()
        if not items:
            return "No data available"
        return ", ".join(f"{name} ({format_money(revenue)})" for name, revenue in items)

    def _sales_by_day_text(self) -> str:
        days = self.sales_by_day()
        if not days:
            return "no sales in the last seven days"
        return ", ".join(f"{day}: {format_money(amount)}" for day, amount in days)

    def _top_staff_text(self) -> str:
        staff = self.sales_by_staff()[:3]
        if not staff:
            return "No data available"
        return ", ".join(f"{name} ({format_money(sales)})" for name, sales in staff)

    def _compare_text(self) -> str:
        routing = self.sales_by_routing()
        counts = self._snapshot.menu_routing_counts
        return (
            f"The bar generated {format_money(routing[PreparationType.BAR])} with "
            f"{counts.get(PreparationType.BAR, 0)} items, while the kitchen generated "
            f"{format_money(routing[PreparationType.KITCHEN])} with "
            f"{counts.get(PreparationType.KITCHEN, 0)} items."
        )

    # =========================================================================
    # Public
    # =========================================================================

    def answer(self, question: str) -> AssistantAnswer:
        """Pick the first matching topic; anything else gets the overview."""
        query = question.lower()
        total = format_money(self.total_sales())
        average = format_money(self.average_order_value())
        count = len(self._orders)

        if "top" in query and "sell" in query:
            topic = "top_items"
            text = (
                f"Based on our analytics data, the top selling items are: {self._top_items_text()}. "
                "These items are driving significant revenue for your restaurant and should be "
                "highlighted in promotions."
            )
        elif "sales" in query and "trend" in query:
            topic = "sales_trend"
            text = (
                f"Your sales trends over the week show the following pattern: {self._sales_by_day_text()}. "
                f"Total sales reached {total} across {count} orders, with an average order value of {average}."
            )
        elif "staff" in query or "waiter" in query or "highest sales" in query:
            topic = "staff"
            roles = ", ".join(f"{role}: {format_money(sales)}" for role, sales in self.sales_by_role().items())
            text = (
                f"Based on our data, your top performing staff members are: {self._top_staff_text()}. "
                f"Staff performance varies by role, with the following breakdown by role: {roles}."
            )
        elif "bar" in query and "kitchen" in query:
            topic = "bar_vs_kitchen"
            routing = self.sales_by_routing()
            direction = "higher" if routing[PreparationType.BAR] > routing[PreparationType.KITCHEN] else "lower"
            text = (
                f"{self._compare_text()} This represents a {direction} revenue for bar items "
                "compared to kitchen items."
            )
        elif "average" in query and "order" in query:
            topic = "average_order_value"
            text = (
                f"The average order value is {average}, calculated from {count} total orders. "
                "This is an important metric to track as it directly impacts your profitability."
            )
        else:
            topic = "overview"
            text = (
                f"Based on our analytics data, your restaurant has made {total} in total sales from "
                f"{count} orders, with an average order value of {average}.\n\n"
                f"Top selling items include {self._top_items_text()}.\n\n"
                f"In terms of staff performance, your top performers are {self._top_staff_text()}.\n\n"
                f"{self._compare_text()}\n\n"
                f"Sales distribution by day: {self._sales_by_day_text()}."
            )

        logger.info("Assistant answered", topic=topic, orders=count)
        return AssistantAnswer(topic=topic, answer=text)
