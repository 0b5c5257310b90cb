"""
Tests for the role-scoped order views and station queues.
"""

from rest_api.services.domain.order_views import (
    active_orders,
    completed_orders,
    filter_by_preparation,
    filter_by_status,
    group_station_queue,
    view_for_role,
)
from shared.utils.schemas import OrderItemOutput, OrderOutput

_next_item_id = iter(range(1, 10_000))


def make_order(order_id, waiter_id=1, status="PENDING", payment_status="UNPAID", items=()):
    """Snapshot entry; ``items`` are (preparation_type, status) pairs."""
    return OrderOutput(
        id=order_id,
        waiter_id=waiter_id,
        status=status,
        total_cents=1000 * len(items),
        payment_status=payment_status,
        items=[
            OrderItemOutput(
                id=next(_next_item_id),
                menu_item_id=1,
                menu_item_name="Dish",
                qty=1,
                unit_price_cents=1000,
                subtotal_cents=1000,
                preparation_type=prep,
                status=item_status,
            )
            for prep, item_status in items
        ],
    )


class TestRoleViews:
    def setup_method(self):
        self.orders = [
            make_order(1, waiter_id=10, items=[("KITCHEN", "PENDING"), ("BAR", "PENDING")]),
            make_order(2, waiter_id=11, items=[("BAR", "READY")], status="READY"),
            make_order(
                3,
                waiter_id=10,
                status="COMPLETED",
                payment_status="PAID",
                items=[("KITCHEN", "COMPLETED")],
            ),
        ]

    def test_admin_sees_everything(self):
        assert [o.id for o in view_for_role(self.orders, "ADMIN", 99)] == [1, 2, 3]

    def test_waiter_sees_own_orders(self):
        assert [o.id for o in view_for_role(self.orders, "WAITER", 10)] == [1, 3]
        assert view_for_role(self.orders, "WAITER", 12) == []

    def test_kitchen_sees_only_kitchen_items(self):
        view = view_for_role(self.orders, "KITCHEN", 99)
        assert [o.id for o in view] == [1, 3]
        assert all(item.preparation_type == "KITCHEN" for o in view for item in o.items)

    def test_barman_sees_only_bar_items(self):
        view = view_for_role(self.orders, "BARMAN", 99)
        assert [o.id for o in view] == [1, 2]
        assert [len(o.items) for o in view] == [1, 1]

    def test_trimming_keeps_order_fields(self):
        view = view_for_role(self.orders, "BARMAN", 99)
        assert view[0].total_cents == 2000
        assert len(self.orders[0].items) == 2

    def test_accountant_sees_paid_orders(self):
        assert [o.id for o in view_for_role(self.orders, "ACCOUNTANT", 99)] == [3]

    def test_unknown_role_sees_nothing(self):
        assert view_for_role(self.orders, "GUEST", 1) == []

    def test_active_and_completed(self):
        assert [o.id for o in active_orders(self.orders)] == [1, 2]
        assert [o.id for o in completed_orders(self.orders)] == [3]

    def test_filter_by_status(self):
        assert [o.id for o in filter_by_status(self.orders, "READY")] == [2]
        assert filter_by_status(self.orders, "CANCELLED") == []


class TestStationQueue:
    def test_buckets(self):
        orders = [
            make_order(1, items=[("KITCHEN", "PENDING")]),
            make_order(2, status="IN_PROGRESS", items=[("KITCHEN", "IN_PROGRESS")]),
            make_order(3, status="READY", items=[("KITCHEN", "READY"), ("KITCHEN", "CANCELLED")]),
            make_order(4, items=[("BAR", "PENDING")]),
        ]

        queue = group_station_queue(orders, "KITCHEN")

        assert [o.id for o in queue.pending] == [1]
        assert [o.id for o in queue.in_progress] == [2]
        assert [o.id for o in queue.done] == [3]

    def test_mixed_progress_listed_twice(self):
        orders = [make_order(1, items=[("KITCHEN", "PENDING"), ("KITCHEN", "IN_PROGRESS")])]

        queue = group_station_queue(orders, "KITCHEN")

        assert [o.id for o in queue.pending] == [1]
        assert [o.id for o in queue.in_progress] == [1]
        assert queue.done == []

    def test_station_done_while_order_waits_on_other_station(self):
        orders = [make_order(1, items=[("KITCHEN", "READY"), ("BAR", "PENDING")])]

        assert [o.id for o in group_station_queue(orders, "KITCHEN").done] == [1]
        assert [o.id for o in group_station_queue(orders, "BAR").pending] == [1]

    def test_cancelled_orders_left_out(self):
        orders = [make_order(1, status="CANCELLED", items=[("BAR", "CANCELLED")])]
        queue = group_station_queue(orders, "BAR")
        assert queue.pending == queue.in_progress == queue.done == []

    def test_filter_by_preparation_drops_orders_without_items(self):
        orders = [make_order(1, items=[("BAR", "PENDING")])]
        assert filter_by_preparation(orders, "KITCHEN") == []
