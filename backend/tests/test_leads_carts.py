"""
Web lead and abandoned cart tests.

Verifies:
- Public capture of leads and carts
- Lead triage and one-time conversion into a Pending order
- Cart upsert by session id, completion rate, and recovery into an order
- Leads are a shared queue; carts are agent-scoped
"""

import re

import pytest

from backoffice.extensions import db
from backoffice.models import WebLead, AbandonedCart, LeadStatus, CartStatus, DeliveryStatus
from conftest import auth_headers


def _capture_lead(client, product, **overrides):
    body = {
        "form_id": "landing-ginger",
        "customer_name": "Bola Ade",
        "phone": "08031112222",
        "address": "4 Allen Avenue, Ikeja",
        "items": [{"product_id": product.id, "quantity": 3}],
    }
    body.update(overrides)
    return client.post("/api/leads/capture", json=body)


# =============================================================================
# WEB LEADS
# =============================================================================


class TestLeads:

    def test_public_capture(self, client, product, db_session):
        resp = _capture_lead(client, product)
        assert resp.status_code == 201
        assert resp.json["status"] == LeadStatus.NEW
        assert resp.json["items"] == [{"product_id": product.id, "quantity": 3}]

    @pytest.mark.parametrize("overrides", [
        {"items": []},
        {"customer_name": " "},
        {"phone": None},
        {"items": [{"product_id": 1, "quantity": -1}]},
        {"region_id": 9999},
    ])
    def test_capture_validation(self, client, product, overrides):
        assert _capture_lead(client, product, **overrides).status_code == 400

    def test_triage_status(self, client, agent, product):
        lead_id = _capture_lead(client, product).json["id"]
        resp = client.post(
            f"/api/leads/{lead_id}/status",
            json={"status": LeadStatus.FAKE, "notes": "Number unreachable"},
            headers=auth_headers(agent),
        )
        assert resp.status_code == 200
        assert resp.json["status"] == LeadStatus.FAKE
        assert resp.json["notes"] == "Number unreachable"

        bad = client.post(
            f"/api/leads/{lead_id}/status", json={"status": "Hot"}, headers=auth_headers(agent)
        )
        assert bad.status_code == 400

    def test_every_role_sees_the_whole_lead_queue(self, client, admin, agent, other_agent, product):
        _capture_lead(client, product)
        _capture_lead(client, product, agent_name=agent.name)
        theirs = _capture_lead(client, product, agent_name=other_agent.name).json["id"]

        mine = client.get("/api/leads", headers=auth_headers(agent)).json
        assert mine["count"] == 3
        assert client.get("/api/leads", headers=auth_headers(admin)).json["count"] == 3

        resp = client.post(
            f"/api/leads/{theirs}/status", json={"status": LeadStatus.VERIFIED}, headers=auth_headers(agent)
        )
        assert resp.status_code == 200

    def test_convert_lead(self, client, agent, lagos, product):
        lead_id = _capture_lead(client, product, region_id=lagos.id).json["id"]

        resp = client.post(f"/api/leads/{lead_id}/convert", json={}, headers=auth_headers(agent))
        assert resp.status_code == 201
        order = resp.json
        assert order["lead_id"] == lead_id
        assert order["delivery_status"] == DeliveryStatus.PENDING
        assert order["total_amount"] == 45000
        assert order["region_id"] == lagos.id
        assert order["customer_name"] == "Bola Ade"

        db.session.expire_all()
        lead = db.session.get(WebLead, lead_id)
        assert lead.status == LeadStatus.VERIFIED
        assert lead.notes == f"Converted to order {order['order_number']}"

        again = client.post(f"/api/leads/{lead_id}/convert", json={}, headers=auth_headers(agent))
        assert again.status_code == 409

    def test_convert_needs_region(self, client, agent, product):
        lead_id = _capture_lead(client, product).json["id"]
        resp = client.post(f"/api/leads/{lead_id}/convert", json={}, headers=auth_headers(agent))
        assert resp.status_code == 400

    def test_convert_missing_product_becomes_unknown_item(self, client, admin, lagos, product):
        lead_id = _capture_lead(
            client, product, items=[{"product_id": 777, "quantity": 2}]
        ).json["id"]
        resp = client.post(
            f"/api/leads/{lead_id}/convert", json={"region_id": lagos.id}, headers=auth_headers(admin)
        )
        assert resp.status_code == 201
        line = resp.json["items"][0]
        assert line["product_name"] == "Unknown Item"
        assert line["price_at_order"] == 0
        assert resp.json["total_amount"] == 0

    def test_convert_unknown_lead_is_404(self, client, admin):
        resp = client.post("/api/leads/4242/convert", json={}, headers=auth_headers(admin))
        assert resp.status_code == 404


# =============================================================================
# ABANDONED CARTS
# =============================================================================


class TestCarts:

    def test_capture_upserts_by_session(self, client, db_session):
        first = client.post("/api/carts/capture", json={"session_id": "sess-1", "customer_name": "Ifeoma"})
        assert first.status_code == 200
        assert first.json["completion_rate"] == 25

        second = client.post(
            "/api/carts/capture",
            json={"session_id": "sess-1", "phone": "08039998888", "address": "Yaba"},
        )
        assert second.status_code == 200
        assert second.json["customer_name"] == "Ifeoma"
        assert second.json["completion_rate"] == 75
        assert db.session.query(AbandonedCart).count() == 1

    @pytest.mark.parametrize("session_id", [None, "", "x" * 65])
    def test_capture_requires_session_id(self, client, db_session, session_id):
        resp = client.post("/api/carts/capture", json={"session_id": session_id})
        assert resp.status_code == 400

    def test_agent_sees_only_attributed_carts(self, client, admin, agent, db_session):
        client.post("/api/carts/capture", json={"session_id": "a", "agent_name": agent.name})
        client.post("/api/carts/capture", json={"session_id": "b"})

        mine = client.get("/api/carts", headers=auth_headers(agent)).json
        assert [c["id"] for c in mine["items"]] == ["a"]
        assert client.get("/api/carts", headers=auth_headers(admin)).json["count"] == 2

    def test_convert_cart_with_placeholders(self, client, admin, lagos, product):
        client.post(
            "/api/carts/capture",
            json={"session_id": "sess-9", "phone": "08030001111",
                  "items": [{"product_id": product.id, "quantity": 2}]},
        )
        resp = client.post(
            "/api/carts/sess-9/convert", json={"region_id": lagos.id}, headers=auth_headers(admin)
        )
        assert resp.status_code == 201
        order = resp.json
        assert re.fullmatch(r"MAG-REC-[A-Z0-9]{6}", order["tracking_id"])
        assert order["customer_name"] == "Recovered Customer"
        assert order["phone"] == "08030001111"
        assert order["address"] == "Address captured from abandoned cart"
        assert order["total_amount"] == 30000

        db.session.expire_all()
        assert db.session.get(AbandonedCart, "sess-9").status == CartStatus.CONVERTED
        assert client.get("/api/carts", headers=auth_headers(admin)).json["count"] == 0

        again = client.post(
            "/api/carts/sess-9/convert", json={"region_id": lagos.id}, headers=auth_headers(admin)
        )
        assert again.status_code == 409

    def test_converted_cart_ignores_later_capture(self, client, admin, lagos, db_session):
        client.post("/api/carts/capture", json={"session_id": "sess-c", "customer_name": "Ngozi"})
        client.post("/api/carts/sess-c/convert", json={"region_id": lagos.id}, headers=auth_headers(admin))

        resp = client.post("/api/carts/capture", json={"session_id": "sess-c", "customer_name": "Someone"})
        assert resp.status_code == 200
        assert resp.json["status"] == CartStatus.CONVERTED
        assert resp.json["customer_name"] == "Ngozi"

    def test_empty_cart_uses_fallback_product(self, client, admin, lagos, db_session):
        client.post("/api/carts/capture", json={"session_id": "sess-e", "customer_name": "Emeka"})
        resp = client.post(
            "/api/carts/sess-e/convert", json={"region_id": lagos.id}, headers=auth_headers(admin)
        )
        assert resp.status_code == 201
        assert resp.json["items"] == [{
            "product_id": None,
            "product_name": "Ginger Shot Recovery",
            "quantity": 1,
            "price_at_order": 20000,
            "cost_at_order": 5000,
            "line_total": 20000,
        }]

    def test_convert_requires_region(self, client, admin, db_session):
        client.post("/api/carts/capture", json={"session_id": "sess-r"})
        resp = client.post("/api/carts/sess-r/convert", json={}, headers=auth_headers(admin))
        assert resp.status_code == 400

    def test_delete_cart(self, client, agent, db_session):
        client.post("/api/carts/capture", json={"session_id": "sess-d", "agent_name": agent.name})
        assert client.delete("/api/carts/sess-d", headers=auth_headers(agent)).status_code == 200
        assert client.delete("/api/carts/sess-d", headers=auth_headers(agent)).status_code == 404
