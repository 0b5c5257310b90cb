"""
Tests for the orders, stations and payment endpoints across roles.
"""

import re

import pytest

from shared.config.settings import settings
from tests.conftest import headers_for, items_of, place_order


def _lines(*pairs):
    return [{"menu_item_id": item.id, "qty": qty} for item, qty in pairs]


@pytest.fixture
def mixed_order(db_session, waiter_user, menu):
    """Jollof (kitchen) and two beers (bar) for the test waiter."""
    return place_order(db_session, waiter_user, [(menu["jollof"], 1), (menu["beer"], 2)])


class TestCreateOrder:
    def test_waiter_creates_order(self, client, waiter_headers, menu, mock_redis):
        response = client.post(
            "/api/orders",
            json={"items": _lines((menu["jollof"], 2), (menu["chapman"], 1))},
            headers=waiter_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "PENDING"
        assert data["payment_status"] == "UNPAID"
        assert data["total_cents"] == 6200
        assert len(data["items"]) == 2
        # order + 2 items
        assert mock_redis.publish.await_count == 3

    def test_order_on_table(self, client, waiter_headers, menu, dining_table):
        response = client.post(
            "/api/orders",
            json={"items": _lines((menu["suya"], 1)), "table_id": dining_table.id},
            headers=waiter_headers,
        )
        assert response.status_code == 201
        assert response.json()["table_number"] == 1

        tables = client.get("/api/admin/tables", headers=waiter_headers).json()
        assert tables[0]["status"] == "OCCUPIED"

    def test_station_cannot_create_orders(self, client, kitchen_headers, menu):
        response = client.post("/api/orders", json={"items": _lines((menu["suya"], 1))}, headers=kitchen_headers)
        assert response.status_code == 403

    def test_empty_order_rejected(self, client, waiter_headers):
        response = client.post("/api/orders", json={"items": []}, headers=waiter_headers)
        assert response.status_code == 422

    def test_quantity_must_be_positive(self, client, waiter_headers, menu):
        response = client.post("/api/orders", json={"items": _lines((menu["suya"], 0))}, headers=waiter_headers)
        assert response.status_code == 422

    def test_out_of_stock(self, client, waiter_headers, menu):
        response = client.post("/api/orders", json={"items": _lines((menu["beer"], 50))}, headers=waiter_headers)
        assert response.status_code == 400

    def test_low_stock_email(self, client, waiter_headers, menu, mock_resend, monkeypatch):
        monkeypatch.setattr(settings, "resend_api_key", "re_test")

        response = client.post("/api/orders", json={"items": _lines((menu["beer"], 8))}, headers=waiter_headers)

        assert response.status_code == 201
        subjects = [call.args[0]["subject"] for call in mock_resend.call_args_list]
        assert "Low Stock: Bottled Beer" in subjects

    def test_requires_authentication(self, client, menu):
        response = client.post("/api/orders", json={"items": _lines((menu["suya"], 1))})
        assert response.status_code == 401


class TestListOrders:
    def test_waiter_sees_own_orders(self, client, db_session, waiter_headers, other_waiter, mixed_order, menu):
        place_order(db_session, other_waiter, [(menu["suya"], 1)])

        response = client.get("/api/orders", headers=waiter_headers)

        assert [o["id"] for o in response.json()] == [mixed_order.id]

    def test_kitchen_sees_kitchen_items(self, client, kitchen_headers, mixed_order):
        orders = client.get("/api/orders", headers=kitchen_headers).json()

        assert len(orders) == 1
        assert [item["preparation_type"] for item in orders[0]["items"]] == ["KITCHEN"]

    def test_admin_sees_all(self, client, auth_headers, db_session, other_waiter, mixed_order, menu):
        place_order(db_session, other_waiter, [(menu["suya"], 1)])
        assert len(client.get("/api/orders", headers=auth_headers).json()) == 2

    def test_accountant_sees_paid_only(self, client, accountant_headers, waiter_headers, mixed_order):
        assert client.get("/api/orders", headers=accountant_headers).json() == []

        client.post(
            f"/api/orders/{mixed_order.id}/payment",
            json={"method": "CASH", "amount_cents": 10000},
            headers=waiter_headers,
        )
        assert len(client.get("/api/orders", headers=accountant_headers).json()) == 1

    def test_status_filter(self, client, auth_headers, mixed_order):
        assert client.get("/api/orders?status=READY", headers=auth_headers).json() == []
        assert len(client.get("/api/orders?status=PENDING", headers=auth_headers).json()) == 1

    def test_get_single_order(self, client, waiter_headers, mixed_order):
        response = client.get(f"/api/orders/{mixed_order.id}", headers=waiter_headers)
        assert response.status_code == 200
        assert response.json()["total_cents"] == 2500 + 2 * 1500

    def test_other_waiter_cannot_read(self, client, other_waiter, mixed_order):
        response = client.get(f"/api/orders/{mixed_order.id}", headers=headers_for(other_waiter))
        assert response.status_code == 403

    def test_missing_order(self, client, auth_headers):
        assert client.get("/api/orders/9999", headers=auth_headers).status_code == 404


class TestStatusEndpoint:
    def test_kitchen_moves_its_items(self, client, kitchen_headers, mixed_order, mock_redis):
        response = client.patch(
            f"/api/orders/{mixed_order.id}/status",
            json={"status": "IN_PROGRESS"},
            headers=kitchen_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert [item["status"] for item in data["items"]] == ["IN_PROGRESS"]
        # Bar items are still pending, so the order is too
        assert data["status"] == "PENDING"
        assert mock_redis.publish.await_count >= 2

    def test_both_stations_ready_promote_order(self, client, kitchen_headers, barman_headers, auth_headers, mixed_order):
        client.patch(f"/api/orders/{mixed_order.id}/status", json={"status": "READY"}, headers=kitchen_headers)
        response = client.patch(f"/api/orders/{mixed_order.id}/status", json={"status": "READY"}, headers=barman_headers)

        assert response.json()["status"] == "READY"
        full = client.get(f"/api/orders/{mixed_order.id}", headers=auth_headers).json()
        assert {item["status"] for item in full["items"]} == {"READY"}

    def test_station_cannot_touch_other_routing(self, client, kitchen_headers, mixed_order):
        response = client.patch(
            f"/api/orders/{mixed_order.id}/status",
            json={"status": "READY", "item_ids": items_of(mixed_order, "BAR")},
            headers=kitchen_headers,
        )
        assert response.status_code == 403

    def test_station_with_nothing_open(self, client, db_session, waiter_user, barman_headers, menu):
        order = place_order(db_session, waiter_user, [(menu["suya"], 1)])
        response = client.patch(f"/api/orders/{order.id}/status", json={"status": "READY"}, headers=barman_headers)
        assert response.status_code == 400

    def test_waiter_updates_whole_order(self, client, waiter_headers, mixed_order):
        response = client.patch(
            f"/api/orders/{mixed_order.id}/status", json={"status": "CANCELLED"}, headers=waiter_headers
        )
        assert response.status_code == 200
        assert response.json()["status"] == "CANCELLED"
        assert {item["status"] for item in response.json()["items"]} == {"CANCELLED"}

    def test_waiter_cannot_update_others_order(self, client, other_waiter, mixed_order):
        response = client.patch(
            f"/api/orders/{mixed_order.id}/status", json={"status": "READY"}, headers=headers_for(other_waiter)
        )
        assert response.status_code == 403

    def test_accountant_cannot_update_status(self, client, accountant_headers, mixed_order):
        response = client.patch(
            f"/api/orders/{mixed_order.id}/status", json={"status": "READY"}, headers=accountant_headers
        )
        assert response.status_code == 403

    def test_completed_requires_payment(self, client, auth_headers, mixed_order):
        client.patch(f"/api/orders/{mixed_order.id}/status", json={"status": "READY"}, headers=auth_headers)
        response = client.patch(
            f"/api/orders/{mixed_order.id}/status", json={"status": "COMPLETED"}, headers=auth_headers
        )
        assert response.status_code == 400

    def test_unknown_status_is_422(self, client, auth_headers, mixed_order):
        response = client.patch(f"/api/orders/{mixed_order.id}/status", json={"status": "SERVED"}, headers=auth_headers)
        assert response.status_code == 422


class TestStationQueue:
    def test_kitchen_queue(self, client, kitchen_headers, mixed_order):
        response = client.get("/api/stations/kitchen/queue", headers=kitchen_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["preparation_type"] == "KITCHEN"
        assert [o["id"] for o in data["pending"]] == [mixed_order.id]
        assert data["done"] == []

    def test_paid_order_stays_workable(self, client, waiter_headers, kitchen_headers, mixed_order):
        client.post(
            f"/api/orders/{mixed_order.id}/payment",
            json={"method": "CASH", "amount_cents": 5500},
            headers=waiter_headers,
        )
        queue = client.get("/api/stations/kitchen/queue", headers=kitchen_headers).json()
        assert [o["id"] for o in queue["pending"]] == [mixed_order.id]

        response = client.patch(
            f"/api/orders/{mixed_order.id}/status", json={"status": "READY"}, headers=kitchen_headers
        )

        assert response.status_code == 200
        assert response.json()["status"] == "COMPLETED"
        queue = client.get("/api/stations/kitchen/queue", headers=kitchen_headers).json()
        assert queue["pending"] == []
        assert [o["id"] for o in queue["done"]] == [mixed_order.id]

    def test_barman_cannot_read_kitchen_queue(self, client, barman_headers):
        assert client.get("/api/stations/kitchen/queue", headers=barman_headers).status_code == 403

    def test_admin_reads_any_queue(self, client, auth_headers, mixed_order):
        assert client.get("/api/stations/bar/queue", headers=auth_headers).status_code == 200

    def test_unknown_station(self, client, auth_headers):
        assert client.get("/api/stations/grill/queue", headers=auth_headers).status_code == 422


class TestPaymentEndpoint:
    def test_waiter_takes_payment(self, client, waiter_headers, mixed_order):
        response = client.post(
            f"/api/orders/{mixed_order.id}/payment",
            json={"method": "CASH", "amount_cents": 6000},
            headers=waiter_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert re.match(r"^PAY-\d+-[0-9a-z]{9}$", data["payment_reference"])
        assert data["change_cents"] == 500
        assert data["order"]["status"] == "COMPLETED"
        assert data["order"]["payment_status"] == "PAID"

    def test_transaction_email_sent(self, client, waiter_headers, mixed_order, mock_resend, monkeypatch):
        monkeypatch.setattr(settings, "resend_api_key", "re_test")

        client.post(
            f"/api/orders/{mixed_order.id}/payment",
            json={"method": "CARD", "amount_cents": 5500},
            headers=waiter_headers,
        )

        subjects = [call.args[0]["subject"] for call in mock_resend.call_args_list]
        assert "New Transaction Completed" in subjects

    def test_email_failure_does_not_block_payment(self, client, waiter_headers, mixed_order, mock_resend, monkeypatch):
        monkeypatch.setattr(settings, "resend_api_key", "re_test")
        mock_resend.side_effect = RuntimeError("provider down")

        response = client.post(
            f"/api/orders/{mixed_order.id}/payment",
            json={"method": "CARD", "amount_cents": 5500},
            headers=waiter_headers,
        )

        assert response.status_code == 200

    def test_notifications_can_be_disabled(self, client, auth_headers, waiter_headers, mixed_order, mock_resend, monkeypatch):
        monkeypatch.setattr(settings, "resend_api_key", "re_test")
        client.patch("/api/admin/settings", json={"notify_transactions": False}, headers=auth_headers)
        mock_resend.reset_mock()

        client.post(
            f"/api/orders/{mixed_order.id}/payment",
            json={"method": "CASH", "amount_cents": 5500},
            headers=waiter_headers,
        )

        mock_resend.assert_not_called()

    def test_accountant_takes_payment(self, client, accountant_headers, mixed_order):
        response = client.post(
            f"/api/orders/{mixed_order.id}/payment",
            json={"method": "TRANSFER", "amount_cents": 5500},
            headers=accountant_headers,
        )
        assert response.status_code == 200

    def test_station_cannot_take_payment(self, client, kitchen_headers, mixed_order):
        response = client.post(
            f"/api/orders/{mixed_order.id}/payment",
            json={"method": "CASH", "amount_cents": 5500},
            headers=kitchen_headers,
        )
        assert response.status_code == 403

    def test_other_waiter_cannot_take_payment(self, client, other_waiter, mixed_order):
        response = client.post(
            f"/api/orders/{mixed_order.id}/payment",
            json={"method": "CASH", "amount_cents": 5500},
            headers=headers_for(other_waiter),
        )
        assert response.status_code == 403

    def test_amount_too_low(self, client, waiter_headers, mixed_order):
        response = client.post(
            f"/api/orders/{mixed_order.id}/payment",
            json={"method": "CASH", "amount_cents": 100},
            headers=waiter_headers,
        )
        assert response.status_code == 400

    def test_double_payment(self, client, waiter_headers, mixed_order):
        body = {"method": "CASH", "amount_cents": 5500}
        client.post(f"/api/orders/{mixed_order.id}/payment", json=body, headers=waiter_headers)
        response = client.post(f"/api/orders/{mixed_order.id}/payment", json=body, headers=waiter_headers)
        assert response.status_code == 409

    def test_unknown_method_is_422(self, client, waiter_headers, mixed_order):
        response = client.post(
            f"/api/orders/{mixed_order.id}/payment",
            json={"method": "CHEQUE", "amount_cents": 5500},
            headers=waiter_headers,
        )
        assert response.status_code == 422
