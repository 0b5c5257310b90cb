"""
Tests for admin maintenance endpoints: staff, tables, inventory, menu and settings.
"""

from shared.config.settings import settings
from tests.conftest import TEST_PASSWORD, place_order


class TestStaffEndpoints:
    def test_create_staff(self, client, auth_headers):
        response = client.post(
            "/api/admin/staff",
            json={"name": "New Cook", "email": "Cook@Test.com", "password": "secret123", "role": "KITCHEN"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "cook@test.com"
        assert data["role"] == "KITCHEN"
        assert "password" not in data

    def test_new_staff_can_log_in(self, client, auth_headers):
        client.post(
            "/api/admin/staff",
            json={"name": "New Barman", "email": "barman2@test.com", "password": "secret123", "role": "BARMAN"},
            headers=auth_headers,
        )

        response = client.post("/api/auth/login", json={"email": "barman2@test.com", "password": "secret123"})

        assert response.status_code == 200
        assert response.json()["user"]["role"] == "BARMAN"

    def test_duplicate_email_rejected(self, client, auth_headers, waiter_user):
        response = client.post(
            "/api/admin/staff",
            json={"name": "Copy", "email": "WAITER@test.com", "password": "secret123", "role": "WAITER"},
            headers=auth_headers,
        )
        assert response.status_code == 400

    def test_short_password_rejected(self, client, auth_headers):
        response = client.post(
            "/api/admin/staff",
            json={"name": "Short", "email": "short@test.com", "password": "abc", "role": "WAITER"},
            headers=auth_headers,
        )
        assert response.status_code == 422

    def test_non_admin_forbidden(self, client, waiter_headers):
        assert client.get("/api/admin/staff", headers=waiter_headers).status_code == 403

    def test_list_filters_by_role(self, client, auth_headers, waiter_user, kitchen_user):
        response = client.get("/api/admin/staff?role=WAITER", headers=auth_headers)
        assert [s["email"] for s in response.json()] == ["waiter@test.com"]

    def test_deactivate_is_soft(self, client, auth_headers, waiter_user):
        response = client.delete(f"/api/admin/staff/{waiter_user.id}", headers=auth_headers)
        assert response.status_code == 204

        assert client.get(f"/api/admin/staff/{waiter_user.id}", headers=auth_headers).status_code == 404
        active = client.get("/api/admin/staff", headers=auth_headers).json()
        assert waiter_user.id not in [s["id"] for s in active]
        everyone = client.get("/api/admin/staff?include_deleted=true", headers=auth_headers).json()
        assert waiter_user.id in [s["id"] for s in everyone]

    def test_deactivated_user_cannot_log_in(self, client, auth_headers, waiter_user):
        client.delete(f"/api/admin/staff/{waiter_user.id}", headers=auth_headers)
        response = client.post("/api/auth/login", json={"email": "waiter@test.com", "password": TEST_PASSWORD})
        assert response.status_code == 401

    def test_cannot_deactivate_self(self, client, auth_headers, admin_user):
        response = client.delete(f"/api/admin/staff/{admin_user.id}", headers=auth_headers)
        assert response.status_code == 400

    def test_last_admin_cannot_be_demoted(self, client, auth_headers, admin_user):
        response = client.patch(f"/api/admin/staff/{admin_user.id}", json={"role": "WAITER"}, headers=auth_headers)
        assert response.status_code == 400

    def test_update_name_and_role(self, client, auth_headers, waiter_user):
        response = client.patch(
            f"/api/admin/staff/{waiter_user.id}",
            json={"name": "Head Waiter", "role": "ACCOUNTANT"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Head Waiter"
        assert response.json()["role"] == "ACCOUNTANT"

    def test_changes_are_published(self, client, auth_headers, mock_redis):
        mock_redis.publish.reset_mock()
        client.post(
            "/api/admin/staff",
            json={"name": "Feed", "email": "feed@test.com", "password": "secret123", "role": "WAITER"},
            headers=auth_headers,
        )
        channels = [call.args[0] for call in mock_redis.publish.call_args_list]
        assert channels == ["changes:users"]


class TestTableEndpoints:
    def test_any_staff_can_list(self, client, waiter_headers, dining_table):
        response = client.get("/api/admin/tables", headers=waiter_headers)

        assert response.status_code == 200
        assert [t["number"] for t in response.json()] == [1]

    def test_status_filter(self, client, db_session, waiter_headers, waiter_user, dining_table, menu):
        place_order(db_session, waiter_user, [(menu["suya"], 1)], table=dining_table)

        available = client.get("/api/admin/tables?status=AVAILABLE", headers=waiter_headers).json()
        occupied = client.get("/api/admin/tables?status=OCCUPIED", headers=waiter_headers).json()

        assert available == []
        assert [t["number"] for t in occupied] == [1]

    def test_create_table(self, client, auth_headers):
        response = client.post("/api/admin/tables", json={"number": 7, "capacity": 6}, headers=auth_headers)

        assert response.status_code == 201
        assert response.json()["status"] == "AVAILABLE"

    def test_duplicate_number(self, client, auth_headers, dining_table):
        response = client.post("/api/admin/tables", json={"number": 1}, headers=auth_headers)
        assert response.status_code == 400

    def test_waiter_cannot_create(self, client, waiter_headers):
        response = client.post("/api/admin/tables", json={"number": 9}, headers=waiter_headers)
        assert response.status_code == 403

    def test_cannot_free_table_with_active_order(self, client, db_session, auth_headers, waiter_user, dining_table, menu):
        place_order(db_session, waiter_user, [(menu["suya"], 1)], table=dining_table)

        response = client.patch(
            f"/api/admin/tables/{dining_table.id}", json={"status": "AVAILABLE"}, headers=auth_headers
        )

        assert response.status_code == 409

    def test_reserve_table(self, client, auth_headers, dining_table):
        response = client.patch(
            f"/api/admin/tables/{dining_table.id}", json={"status": "RESERVED"}, headers=auth_headers
        )
        assert response.status_code == 200
        assert response.json()["status"] == "RESERVED"

    def test_delete_table(self, client, auth_headers, dining_table):
        assert client.delete(f"/api/admin/tables/{dining_table.id}", headers=auth_headers).status_code == 204
        assert client.get("/api/admin/tables", headers=auth_headers).json() == []


class TestInventoryEndpoints:
    def test_list(self, client, auth_headers, beer_stock):
        response = client.get("/api/admin/inventory", headers=auth_headers)

        assert response.status_code == 200
        item = response.json()[0]
        assert item["name"] == "Bottled Beer"
        assert item["is_low_stock"] is False

    def test_create(self, client, auth_headers):
        response = client.post(
            "/api/admin/inventory",
            json={"name": "Palm Wine", "category": "drinks", "quantity": 20, "unit": "litre", "min_stock": 5},
            headers=auth_headers,
        )
        assert response.status_code == 201
        assert response.json()["unit"] == "litre"

    def test_negative_quantity_rejected(self, client, auth_headers, beer_stock):
        response = client.patch(f"/api/admin/inventory/{beer_stock.id}", json={"quantity": -1}, headers=auth_headers)
        assert response.status_code == 422

    def test_drop_to_minimum_sends_alert(self, client, auth_headers, beer_stock, mock_resend, monkeypatch):
        monkeypatch.setattr(settings, "resend_api_key", "re_test")
        mock_resend.reset_mock()

        response = client.patch(f"/api/admin/inventory/{beer_stock.id}", json={"quantity": 2}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["is_low_stock"] is True
        subjects = [call.args[0]["subject"] for call in mock_resend.call_args_list]
        assert subjects == ["Low Stock: Bottled Beer"]

        low = client.get("/api/admin/inventory/low-stock", headers=auth_headers).json()
        assert [i["id"] for i in low] == [beer_stock.id]

    def test_already_low_item_does_not_alert_again(self, client, auth_headers, beer_stock, mock_resend, monkeypatch):
        monkeypatch.setattr(settings, "resend_api_key", "re_test")
        client.patch(f"/api/admin/inventory/{beer_stock.id}", json={"quantity": 2}, headers=auth_headers)
        mock_resend.reset_mock()

        client.patch(f"/api/admin/inventory/{beer_stock.id}", json={"quantity": 1}, headers=auth_headers)

        mock_resend.assert_not_called()

    def test_linked_item_cannot_be_deleted(self, client, auth_headers, menu, beer_stock):
        response = client.delete(f"/api/admin/inventory/{beer_stock.id}", headers=auth_headers)
        assert response.status_code == 409

    def test_waiter_forbidden(self, client, waiter_headers):
        assert client.get("/api/admin/inventory", headers=waiter_headers).status_code == 403


class TestMenuEndpoints:
    def test_any_staff_reads_menu(self, client, kitchen_headers, menu):
        response = client.get("/api/menu/items", headers=kitchen_headers)

        assert response.status_code == 200
        names = [i["name"] for i in response.json()]
        assert "Jollof Rice" in names
        beer = next(i for i in response.json() if i["name"] == "Bottled Beer")
        assert beer["available_quantity"] == 10

    def test_filter_by_routing(self, client, waiter_headers, menu):
        response = client.get("/api/menu/items?preparation_type=BAR", headers=waiter_headers)
        assert {i["preparation_type"] for i in response.json()} == {"BAR"}

    def test_available_only_hides_sold_out(self, client, db_session, waiter_headers, menu, beer_stock):
        beer_stock.quantity = 0
        db_session.commit()

        response = client.get("/api/menu/items?available_only=true", headers=waiter_headers)

        assert "Bottled Beer" not in [i["name"] for i in response.json()]

    def test_admin_creates_item(self, client, auth_headers):
        response = client.post(
            "/api/menu/items",
            json={"name": "Pepper Soup", "category": "FOOD", "price_cents": 1800, "preparation_type": "KITCHEN"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        assert response.json()["available_quantity"] is None

    def test_unknown_inventory_link(self, client, auth_headers):
        response = client.post(
            "/api/menu/items",
            json={
                "name": "Ghost Drink",
                "category": "DRINK",
                "price_cents": 500,
                "preparation_type": "BAR",
                "inventory_item_id": 999,
            },
            headers=auth_headers,
        )
        assert response.status_code == 404

    def test_bad_routing_rejected(self, client, auth_headers):
        response = client.post(
            "/api/menu/items",
            json={"name": "Mystery", "category": "FOOD", "price_cents": 500, "preparation_type": "GRILL"},
            headers=auth_headers,
        )
        assert response.status_code == 422

    def test_waiter_cannot_edit(self, client, waiter_headers, menu):
        response = client.patch(f"/api/menu/items/{menu['jollof'].id}", json={"price_cents": 1}, headers=waiter_headers)
        assert response.status_code == 403

    def test_update_and_delete(self, client, auth_headers, menu):
        item_id = menu["jollof"].id

        updated = client.patch(f"/api/menu/items/{item_id}", json={"price_cents": 2800}, headers=auth_headers)
        assert updated.json()["price_cents"] == 2800

        assert client.delete(f"/api/menu/items/{item_id}", headers=auth_headers).status_code == 204
        assert client.get(f"/api/menu/items/{item_id}", headers=auth_headers).status_code == 404


class TestSettingsEndpoints:
    def test_defaults_created_on_first_read(self, client, auth_headers):
        response = client.get("/api/admin/settings", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["admin_email"] == settings.default_admin_email
        assert data["notify_transactions"] is True
        assert data["business_name"] == settings.business_name

    def test_update(self, client, auth_headers):
        response = client.patch(
            "/api/admin/settings",
            json={"admin_email": "owner@decube.com", "notify_logins": False},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["admin_email"] == "owner@decube.com"
        assert response.json()["notify_logins"] is False
        assert client.get("/api/admin/settings", headers=auth_headers).json()["notify_logins"] is False

    def test_invalid_email(self, client, auth_headers):
        response = client.patch("/api/admin/settings", json={"admin_email": "not-an-email"}, headers=auth_headers)
        assert response.status_code == 422

    def test_accountant_forbidden(self, client, accountant_headers):
        assert client.get("/api/admin/settings", headers=accountant_headers).status_code == 403
