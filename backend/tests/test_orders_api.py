"""
Order tests.

Verifies:
- Orders snapshot catalog prices; later price edits never change them
- Visibility: admins see every order, others only their own
- Status assignment follows the role gate and stores side data
- Optional delivery-linked stock deduction and its reversal
- Receipt text and WhatsApp share link
"""

import re
from urllib.parse import unquote

import pytest

from backoffice.extensions import db
from backoffice.models import Order, Product, DeliveryStatus, PaymentStatus, StockMovement, MovementKind
from backoffice.services import inventory_service
from conftest import auth_headers, order_payload


def _create(client, user, region, product, quantity=2, **overrides):
    resp = client.post(
        "/api/orders",
        json=order_payload(region, product, quantity, **overrides),
        headers=auth_headers(user),
    )
    assert resp.status_code == 201, resp.json
    return resp.json


def _set_status(client, user, order_id, **body):
    return client.post(f"/api/orders/{order_id}/status", json=body, headers=auth_headers(user))


# =============================================================================
# CREATION
# =============================================================================


class TestCreateOrder:

    def test_snapshot_pricing(self, client, agent, lagos, product):
        order = _create(client, agent, lagos, product, quantity=2)

        assert order["total_amount"] == 30000
        assert order["delivery_status"] == DeliveryStatus.PENDING
        assert order["payment_status"] == PaymentStatus.POD
        assert order["created_by"] == agent.name
        assert order["items"] == [{
            "product_id": product.id,
            "product_name": "Ginger Shot",
            "quantity": 2,
            "price_at_order": 15000,
            "cost_at_order": 5000,
            "line_total": 30000,
        }]
        assert re.fullmatch(r"ORD-[A-Z0-9]{6}", order["order_number"])
        assert re.fullmatch(r"MAG-[A-Z0-9]{8}", order["tracking_id"])

    def test_price_change_does_not_touch_existing_order(self, client, admin, agent, lagos, product):
        order = _create(client, agent, lagos, product, quantity=2)

        resp = client.put(
            f"/api/products/{product.id}",
            json={"selling_price": 20000, "cost_price": 9000},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 200

        fetched = client.get(f"/api/orders/{order['id']}", headers=auth_headers(agent)).json
        assert fetched["total_amount"] == 30000
        assert fetched["items"][0]["price_at_order"] == 15000
        assert fetched["items"][0]["cost_at_order"] == 5000

        newer = _create(client, agent, lagos, product, quantity=1)
        assert newer["total_amount"] == 20000

    def test_price_override_per_line(self, client, agent, lagos, product):
        order = _create(
            client, agent, lagos, product,
            items=[{"product_id": product.id, "quantity": 3, "price_at_order": 12000}],
        )
        assert order["total_amount"] == 36000

    def test_order_does_not_move_stock(self, client, agent, lagos, product):
        _create(client, agent, lagos, product, quantity=5)
        db.session.expire_all()
        assert db.session.get(Product, product.id).total_stock == 20

    @pytest.mark.parametrize("overrides", [
        {"items": []},
        {"items": [{"product_id": 9999, "quantity": 1}]},
        {"items": [{"product_id": 1, "quantity": 0}]},
        {"customer_name": ""},
        {"region_id": 9999},
        {"payment_status": "Credit"},
    ])
    def test_invalid_orders(self, client, agent, lagos, product, overrides):
        resp = client.post(
            "/api/orders",
            json=order_payload(lagos, product, **overrides),
            headers=auth_headers(agent),
        )
        assert resp.status_code == 400
        assert db.session.query(Order).count() == 0

    def test_pending_user_cannot_create(self, client, pending_user, lagos, product):
        resp = client.post("/api/orders", json=order_payload(lagos, product), headers=auth_headers(pending_user))
        assert resp.status_code == 403

    def test_missing_identity_is_401(self, client, lagos, product):
        resp = client.post("/api/orders", json=order_payload(lagos, product))
        assert resp.status_code == 401


# =============================================================================
# VISIBILITY
# =============================================================================


class TestVisibility:

    def test_agent_sees_only_own_orders(self, client, admin, agent, other_agent, lagos, product):
        mine = _create(client, agent, lagos, product)
        theirs = _create(client, other_agent, lagos, product)

        listing = client.get("/api/orders", headers=auth_headers(agent)).json
        assert [o["id"] for o in listing["items"]] == [mine["id"]]
        assert listing["allowed_statuses"] == [DeliveryStatus.RESCHEDULED]

        resp = client.get(f"/api/orders/{theirs['id']}", headers=auth_headers(agent))
        assert resp.status_code == 404

        everything = client.get("/api/orders", headers=auth_headers(admin)).json
        assert everything["count"] == 2
        assert len(everything["allowed_statuses"]) == len(DeliveryStatus.ALL)

    def test_status_filter(self, client, admin, lagos, product):
        first = _create(client, admin, lagos, product)
        _create(client, admin, lagos, product)
        _set_status(client, admin, first["id"], status=DeliveryStatus.IN_TRANSIT)

        listing = client.get(
            "/api/orders", query_string={"status": DeliveryStatus.IN_TRANSIT}, headers=auth_headers(admin)
        ).json
        assert [o["id"] for o in listing["items"]] == [first["id"]]

        bad = client.get("/api/orders", query_string={"status": "Lost"}, headers=auth_headers(admin))
        assert bad.status_code == 400


# =============================================================================
# STATUS UPDATES
# =============================================================================


class TestStatusUpdates:

    def test_agent_cannot_deliver(self, client, agent, lagos, product):
        order = _create(client, agent, lagos, product)

        resp = _set_status(client, agent, order["id"], status=DeliveryStatus.DELIVERED, logistics_cost=2000)
        assert resp.status_code == 403
        assert resp.json["allowed_statuses"] == [DeliveryStatus.RESCHEDULED]

        # Forbidden even without the side data
        resp = _set_status(client, agent, order["id"], status=DeliveryStatus.DELIVERED)
        assert resp.status_code == 403

        fetched = client.get(f"/api/orders/{order['id']}", headers=auth_headers(agent)).json
        assert fetched["delivery_status"] == DeliveryStatus.PENDING
        assert fetched["logistics_cost"] == 0

    def test_agent_can_reschedule(self, client, agent, lagos, product):
        order = _create(client, agent, lagos, product)
        resp = _set_status(
            client, agent, order["id"],
            status=DeliveryStatus.RESCHEDULED,
            reschedule_date="2026-11-02",
            notes="Customer out of town",
            reminder_enabled=False,
        )
        assert resp.status_code == 200
        assert resp.json["delivery_status"] == DeliveryStatus.RESCHEDULED
        assert resp.json["reschedule_date"] == "2026-11-02"
        assert resp.json["reschedule_notes"] == "Customer out of town"
        assert resp.json["reminder_enabled"] is False

    def test_reschedule_needs_a_real_date(self, client, agent, lagos, product):
        order = _create(client, agent, lagos, product)
        resp = _set_status(
            client, agent, order["id"],
            status=DeliveryStatus.RESCHEDULED, reschedule_date="   ", notes="call back",
        )
        assert resp.status_code == 400
        fetched = client.get(f"/api/orders/{order['id']}", headers=auth_headers(agent)).json
        assert fetched["delivery_status"] == DeliveryStatus.PENDING

    def test_manager_delivers_own_order(self, client, manager, lagos, product):
        order = _create(client, manager, lagos, product)
        resp = _set_status(client, manager, order["id"], status=DeliveryStatus.DELIVERED, logistics_cost=2500)
        assert resp.status_code == 200
        assert resp.json["delivery_status"] == DeliveryStatus.DELIVERED
        assert resp.json["logistics_cost"] == 2500
        assert resp.json["total_amount"] == 30000

    def test_delivered_requires_logistics_cost(self, client, admin, lagos, product):
        order = _create(client, admin, lagos, product)
        resp = _set_status(client, admin, order["id"], status=DeliveryStatus.DELIVERED)
        assert resp.status_code == 400

    def test_cancel_requires_confirm(self, client, admin, lagos, product):
        order = _create(client, admin, lagos, product)
        assert _set_status(client, admin, order["id"], status=DeliveryStatus.CANCELLED).status_code == 400
        resp = _set_status(client, admin, order["id"], status=DeliveryStatus.CANCELLED, confirm=True)
        assert resp.status_code == 200
        assert resp.json["delivery_status"] == DeliveryStatus.CANCELLED

    def test_any_status_from_any_status(self, client, admin, lagos, product):
        order = _create(client, admin, lagos, product)
        _set_status(client, admin, order["id"], status=DeliveryStatus.DELIVERED, logistics_cost=0)
        resp = _set_status(client, admin, order["id"], status=DeliveryStatus.PENDING)
        assert resp.status_code == 200
        assert resp.json["delivery_status"] == DeliveryStatus.PENDING

    def test_unknown_order_is_404(self, client, admin, db_session):
        resp = _set_status(client, admin, 4242, status=DeliveryStatus.IN_TRANSIT)
        assert resp.status_code == 404


# =============================================================================
# DELIVERY-LINKED STOCK
# =============================================================================


class TestDeliveryStock:

    def _stocked_order(self, client, admin, lagos, product):
        inventory_service.transfer_stock(product.id, lagos.id, 10)
        db.session.commit()
        return _create(client, admin, lagos, product, quantity=3)

    def _hub_quantity(self, product, region):
        db.session.expire_all()
        return db.session.get(Product, product.id).stock_per_state.get(region.id)

    def test_disabled_by_default(self, app, client, admin, lagos, product):
        order = self._stocked_order(client, admin, lagos, product)
        _set_status(client, admin, order["id"], status=DeliveryStatus.DELIVERED, logistics_cost=1000)
        assert self._hub_quantity(product, lagos) == 10

    def test_deduct_and_restore(self, app, client, admin, lagos, product, monkeypatch):
        monkeypatch.setitem(app.config, "DEDUCT_STOCK_ON_DELIVERY", True)
        order = self._stocked_order(client, admin, lagos, product)

        _set_status(client, admin, order["id"], status=DeliveryStatus.DELIVERED, logistics_cost=1000)
        assert self._hub_quantity(product, lagos) == 7

        # Re-marking Delivered does not deduct twice
        _set_status(client, admin, order["id"], status=DeliveryStatus.DELIVERED, logistics_cost=1200)
        assert self._hub_quantity(product, lagos) == 7

        _set_status(client, admin, order["id"], status=DeliveryStatus.RETURNED)
        assert self._hub_quantity(product, lagos) == 10

        kinds = [
            m.kind for m in
            db.session.query(StockMovement).filter_by(order_id=order["id"]).order_by(StockMovement.id)
        ]
        assert kinds == [MovementKind.DELIVERY_DEDUCT, MovementKind.DELIVERY_RESTORE]

    def test_hub_without_counter_is_left_alone(self, app, client, admin, abuja, product, monkeypatch):
        monkeypatch.setitem(app.config, "DEDUCT_STOCK_ON_DELIVERY", True)
        order = _create(client, admin, abuja, product, quantity=2)
        resp = _set_status(client, admin, order["id"], status=DeliveryStatus.DELIVERED, logistics_cost=0)
        assert resp.status_code == 200
        assert self._hub_quantity(product, abuja) is None


# =============================================================================
# RECEIPT
# =============================================================================


def test_receipt_and_whatsapp_link(client, agent, lagos, product):
    order = _create(client, agent, lagos, product, quantity=2)
    resp = client.get(f"/api/orders/{order['id']}/receipt", headers=auth_headers(agent))
    assert resp.status_code == 200

    receipt = resp.json["receipt"]
    assert receipt.splitlines()[0] == "MAGIRA RECEIPT"
    assert f"Order ID: {order['order_number']}" in receipt
    assert "Ginger Shot x2 @ ₦15,000" in receipt
    assert "Total: ₦30,000" in receipt
    assert f"Tracking: {order['tracking_id']}" in receipt

    url = resp.json["whatsapp_url"]
    assert url.startswith("https://wa.me/2348035550101?text=")
    text = unquote(url.split("?text=", 1)[1])
    assert text == (
        f"Hello Chioma Obi, your Magira order {order['order_number']} is Pending. "
        f"Tracking: {order['tracking_id']}. Total: ₦30,000"
    )
