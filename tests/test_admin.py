"""Tests for admin order management, dashboard and inventory endpoints."""

from datetime import UTC, datetime, timedelta

import pytest

from pizzeria.models import Order
from pizzeria.models.enums import OrderStatus, PaymentStatus, TrackingSource


@pytest.fixture
def confirmed_order(client, db, auth_headers, catalog, delivery_address, gateway):
    """A paid order owned by the auth_headers user."""
    response = client.post(
        "/api/v1/orders/create-payment-order",
        headers=auth_headers,
        json={
            "items": [
                {
                    "base_id": catalog["base"].id,
                    "sauce_id": catalog["sauce"].id,
                    "cheese_id": catalog["cheese"].id,
                    "quantity": 1,
                }
            ],
            "delivery_address": delivery_address,
        },
    )
    intent_id = response.json()["data"]["intent_id"]
    response = client.post(
        "/api/v1/orders/verify-payment",
        headers=auth_headers,
        json={
            "intent_id": intent_id,
            "payment_id": "pay_admin1",
            "signature": gateway.expected_signature(intent_id, "pay_admin1"),
        },
    )
    assert response.status_code == 200
    return db.get(Order, response.json()["data"]["id"])


def set_status(client, headers, order_pk, status, note=None):
    payload = {"status": status}
    if note is not None:
        payload["note"] = note
    return client.put(f"/api/v1/admin/orders/{order_pk}/status", headers=headers, json=payload)


class TestAdminAccess:
    def test_regular_user_forbidden(self, client, auth_headers):
        response = client.get("/api/v1/admin/dashboard", headers=auth_headers)
        assert response.status_code == 403
        assert response.json() == {"success": False, "message": "Admin access required"}

    def test_missing_token(self, client):
        response = client.get("/api/v1/admin/orders")
        assert response.status_code in (401, 403)


class TestUpdateOrderStatus:
    def test_confirmed_to_delivered_without_note(
        self, client, db, admin_headers, confirmed_order, email_service
    ):
        email_service.reset_mock()

        response = set_status(client, admin_headers, confirmed_order.id, "delivered")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "delivered"
        assert data["actual_delivery_time"] is not None
        assert data["tracking"][-1]["status"] == "delivered"
        assert data["tracking"][-1]["message"] == "Order status updated to delivered"
        assert data["tracking"][-1]["source"] == "admin-override"

        email_service.send_order_delivered.assert_called_once()
        delivered_order, user = email_service.send_order_delivered.call_args[0]
        assert delivered_order.id == confirmed_order.id
        assert user.email == "test@example.com"
        email_service.send_order_status_update.assert_not_called()

    def test_normal_step_sends_status_email_with_note(
        self, client, admin_headers, confirmed_order, email_service
    ):
        email_service.reset_mock()

        response = set_status(
            client, admin_headers, confirmed_order.id, "preparing", note="Dough is being stretched"
        )

        assert response.status_code == 200
        entry = response.json()["data"]["tracking"][-1]
        assert entry["message"] == "Dough is being stretched"
        assert entry["source"] == "admin"
        email_service.send_order_status_update.assert_called_once()
        args = email_service.send_order_status_update.call_args[0]
        assert args[0].status == OrderStatus.PREPARING
        assert args[2] == "Dough is being stretched"
        email_service.send_order_delivered.assert_not_called()

    def test_accepts_notes_alias(self, client, admin_headers, confirmed_order):
        response = client.put(
            f"/api/v1/admin/orders/{confirmed_order.id}/status",
            headers=admin_headers,
            json={"status": "preparing", "notes": "On it"},
        )
        assert response.json()["data"]["tracking"][-1]["message"] == "On it"

    def test_full_progression_is_never_an_override(self, client, admin_headers, confirmed_order):
        for status in ["preparing", "baking", "ready", "out-for-delivery", "delivered"]:
            response = set_status(client, admin_headers, confirmed_order.id, status)
            assert response.status_code == 200
            assert response.json()["data"]["tracking"][-1]["source"] == "admin"

    def test_backwards_write_is_recorded_as_override(
        self, client, db, admin_headers, confirmed_order
    ):
        set_status(client, admin_headers, confirmed_order.id, "ready")

        response = set_status(client, admin_headers, confirmed_order.id, "preparing")

        assert response.status_code == 200
        db.refresh(confirmed_order)
        assert confirmed_order.status == OrderStatus.PREPARING
        assert confirmed_order.tracking[-1].source == TrackingSource.ADMIN_OVERRIDE

    def test_same_status_adds_entry_without_email(
        self, client, admin_headers, confirmed_order, email_service
    ):
        email_service.reset_mock()

        response = set_status(
            client, admin_headers, confirmed_order.id, "confirmed", note="Customer called"
        )

        assert response.status_code == 200
        assert response.json()["data"]["tracking"][-1]["message"] == "Customer called"
        email_service.send_order_status_update.assert_not_called()
        email_service.send_order_delivered.assert_not_called()

    def test_email_failure_does_not_fail_update(
        self, client, db, admin_headers, confirmed_order, email_service
    ):
        email_service.send_order_status_update.side_effect = RuntimeError("SMTP down")

        response = set_status(client, admin_headers, confirmed_order.id, "preparing")

        assert response.status_code == 200
        db.refresh(confirmed_order)
        assert confirmed_order.status == OrderStatus.PREPARING

    def test_unknown_status_is_validation_error(self, client, admin_headers, confirmed_order):
        response = set_status(client, admin_headers, confirmed_order.id, "teleported")
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "status"

    def test_unknown_order(self, client, admin_headers):
        response = set_status(client, admin_headers, 9999, "preparing")
        assert response.status_code == 404


class TestAdminOrders:
    def test_lists_every_users_orders(self, client, admin_headers, confirmed_order):
        response = client.get("/api/v1/admin/orders", headers=admin_headers)

        assert response.status_code == 200
        orders = response.json()["data"]["orders"]
        assert [o["id"] for o in orders] == [confirmed_order.id]
        assert orders[0]["payment_status"] == "paid"

    def test_get_any_order(self, client, admin_headers, confirmed_order):
        response = client.get(f"/api/v1/admin/orders/{confirmed_order.id}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["data"]["order_id"] == confirmed_order.order_id


class TestDashboard:
    def test_totals(self, client, db, admin_headers, confirmed_order, catalog):
        catalog["meat"].stock = 3
        db.commit()

        response = client.get("/api/v1/admin/dashboard", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        overview = data["overview"]
        assert overview["total_users"] == 2
        assert overview["total_orders"] == 1
        assert overview["total_revenue"] == 350.0
        assert overview["average_order_value"] == 350.0
        assert data["order_status_distribution"] == [{"status": "confirmed", "count": 1}]
        assert [i["name"] for i in data["low_stock_items"]] == ["Pepperoni"]
        assert data["recent_orders"][0]["order_id"] == confirmed_order.order_id

    def test_unpaid_orders_excluded_from_revenue(
        self, client, db, admin_headers, confirmed_order
    ):
        confirmed_order.payment_status = PaymentStatus.FAILED
        db.commit()

        response = client.get("/api/v1/admin/dashboard", headers=admin_headers)

        overview = response.json()["data"]["overview"]
        assert overview["total_revenue"] == 0.0
        assert overview["average_order_value"] == 0.0


class TestSalesAnalytics:
    def test_paid_sales_and_bases(self, client, db, admin_headers, confirmed_order):
        response = client.get("/api/v1/admin/analytics", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["period"] == "30d"
        assert data["sales_by_day"] == [
            {"date": datetime.now(UTC).date().isoformat(), "revenue": 350.0, "orders": 1}
        ]
        assert data["popular_bases"] == [{"name": "Thin Crust", "count": 1}]
        assert data["status_breakdown"] == [{"status": "confirmed", "count": 1}]

    def test_unpaid_orders_only_in_status_breakdown(
        self, client, admin_headers, auth_headers, confirmed_order, catalog, delivery_address
    ):
        client.post(
            "/api/v1/orders/create-payment-order",
            headers=auth_headers,
            json={
                "items": [
                    {
                        "base_id": catalog["base"].id,
                        "sauce_id": catalog["sauce"].id,
                        "cheese_id": catalog["cheese"].id,
                    }
                ],
                "delivery_address": delivery_address,
            },
        )

        data = client.get("/api/v1/admin/analytics", headers=admin_headers).json()["data"]

        assert data["sales_by_day"][0]["orders"] == 1
        assert data["popular_bases"] == [{"name": "Thin Crust", "count": 1}]
        assert sorted((s["status"], s["count"]) for s in data["status_breakdown"]) == [
            ("confirmed", 1),
            ("pending", 1),
        ]

    def test_period_window(self, client, db, admin_headers, confirmed_order):
        confirmed_order.created_at = datetime.now(UTC) - timedelta(days=10)
        db.commit()

        week = client.get("/api/v1/admin/analytics?period=7d", headers=admin_headers)
        month = client.get("/api/v1/admin/analytics?period=30d", headers=admin_headers)

        assert week.json()["data"]["sales_by_day"] == []
        assert week.json()["data"]["status_breakdown"] == []
        assert len(month.json()["data"]["sales_by_day"]) == 1

    def test_rejects_unknown_period(self, client, admin_headers):
        response = client.get("/api/v1/admin/analytics?period=1y", headers=admin_headers)
        assert response.status_code == 400

    def test_regular_user_forbidden(self, client, auth_headers):
        response = client.get("/api/v1/admin/analytics", headers=auth_headers)
        assert response.status_code == 403


class TestAdminInventory:
    def test_overview_includes_inactive_items(self, client, db, admin_headers, catalog):
        catalog["veggie"].is_active = False
        catalog["meat"].stock = 0
        catalog["meat"].is_available = False
        db.commit()

        response = client.get("/api/v1/admin/inventory", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert [v["name"] for v in data["inventory"]["veggies"]] == ["Mushrooms"]
        assert data["statistics"] == {
            "total_items": 5,
            "low_stock_items": 1,
            "out_of_stock_items": 1,
            "available_items": 4,
        }

    def test_set_stock_to_zero_clears_availability(self, client, admin_headers, catalog):
        response = client.put(
            f"/api/v1/admin/inventory/base/{catalog['base'].id}",
            headers=admin_headers,
            json={"stock": 0},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["stock"] == 0
        assert data["is_available"] is False

    def test_restock_restores_availability(self, client, db, admin_headers, catalog):
        catalog["sauce"].stock = 0
        catalog["sauce"].is_available = False
        db.commit()

        response = client.put(
            f"/api/v1/admin/inventory/sauce/{catalog['sauce'].id}",
            headers=admin_headers,
            json={"stock": 40, "threshold": 8, "price": 85},
        )

        data = response.json()["data"]
        assert data["stock"] == 40
        assert data["threshold"] == 8
        assert data["price"] == 85.0
        assert data["is_available"] is True

    def test_cannot_mark_zero_stock_available(self, client, admin_headers, catalog):
        response = client.put(
            f"/api/v1/admin/inventory/cheese/{catalog['cheese'].id}",
            headers=admin_headers,
            json={"stock": 0, "is_available": True},
        )
        assert response.status_code == 400

    def test_negative_stock_rejected(self, client, admin_headers, catalog):
        response = client.put(
            f"/api/v1/admin/inventory/cheese/{catalog['cheese'].id}",
            headers=admin_headers,
            json={"stock": -1},
        )
        assert response.status_code == 400

    def test_unknown_item(self, client, admin_headers, catalog):
        response = client.put(
            "/api/v1/admin/inventory/meat/9999", headers=admin_headers, json={"stock": 5}
        )
        assert response.status_code == 404


class TestMonitorEndpoints:
    def test_status_before_any_check(self, client, admin_headers):
        response = client.get("/api/v1/admin/inventory/monitor/status", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["data"] == {
            "is_monitoring": False,
            "last_check": None,
            "check_interval_minutes": 30,
            "next_check": None,
        }

    def test_manual_check(self, client, db, admin_headers, admin_user, catalog, email_service):
        catalog["base"].stock = 0
        catalog["cheese"].stock = 4
        db.commit()
        email_service.send_stock_alert.return_value = True

        response = client.post("/api/v1/admin/inventory/monitor/check", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["summary"] == {"total_low_stock": 1, "total_out_of_stock": 1}
        assert data["availability_updates"] == 1
        assert data["alert_sent"] is True
        assert data["out_of_stock_items"][0]["type"] == "base"

        status = client.get("/api/v1/admin/inventory/monitor/status", headers=admin_headers)
        assert status.json()["data"]["last_check"] is not None
