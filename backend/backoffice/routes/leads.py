# backend/backoffice/routes/leads.py
"""
Web leads and abandoned carts.

The two capture endpoints are public: landing-page forms post to them
directly. Everything else needs an approved user.
"""
from flask import Blueprint, request, jsonify, g, current_app

from ..extensions import db
from ..decorators import require_auth, require_permission
from ..events import publish_change
from ..services import lead_service
from ..services.concurrency import commit_session
from ..validation import ValidationError, ConflictError, NotFoundError


leads_bp = Blueprint("leads", __name__, url_prefix="/api/leads")
carts_bp = Blueprint("carts", __name__, url_prefix="/api/carts")


# ===================== Web leads =====================

@leads_bp.post("/capture")
def capture_lead_route():
    """
    Public. Request body:
    {
        "form_id": str (optional),
        "customer_name": str,
        "phone": str,
        "whatsapp": str (optional),
        "address": str (optional),
        "delivery_instructions": str (optional),
        "region_id": int (optional),
        "agent_name": str (optional),
        "items": [{"product_id": int, "quantity": int}]
    }
    """
    payload = request.get_json(silent=True) or {}
    try:
        lead = lead_service.capture_lead(payload=payload)
        commit_session()
        publish_change("leads")
        return jsonify(lead.to_dict()), 201
    except ValidationError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to capture lead")
        return jsonify({"error": "Internal server error"}), 500


@leads_bp.get("")
@require_auth
@require_permission("VIEW_LEADS")
def list_leads_route():
    """Query params: status (optional)."""
    try:
        leads = lead_service.list_leads(status=request.args.get("status"))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify({"items": [lead.to_dict() for lead in leads], "count": len(leads)}), 200


@leads_bp.post("/<int:lead_id>/status")
@require_auth
@require_permission("MANAGE_LEADS")
def update_lead_status_route(lead_id: int):
    """
    Request body:
    {
        "status": "New Lead" | "Verified" | "Rejected" | "Fake",
        "notes": str (optional)
    }
    """
    data = request.get_json(silent=True) or {}
    try:
        lead = lead_service.update_lead_status(
            lead_id,
            status=data.get("status"),
            notes=data.get("notes"),
        )
        commit_session()
        publish_change("leads")
        return jsonify(lead.to_dict()), 200
    except ValidationError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 404
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to update lead status")
        return jsonify({"error": "Internal server error"}), 500


@leads_bp.post("/<int:lead_id>/convert")
@require_auth
@require_permission("CREATE_ORDER")
def convert_lead_route(lead_id: int):
    """
    Request body:
    {
        "region_id": int (required unless the lead carries one),
        "payment_status": str (optional),
        ...optional contact overrides
    }

    Returns:
        201: Created order
        400: Missing region / invalid input
        404: Lead not found
        409: Lead already converted
    """
    data = request.get_json(silent=True) or {}
    try:
        order = lead_service.convert_lead(lead_id, actor=g.current_user, payload=data)
        commit_session()
        publish_change("orders", "leads")
        return jsonify(order.to_dict()), 201
    except ValidationError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 409
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to convert lead")
        return jsonify({"error": "Internal server error"}), 500


# ===================== Abandoned carts =====================

@carts_bp.post("/capture")
def capture_cart_route():
    """
    Public. Called repeatedly while the customer types. Request body:
    {
        "session_id": str,
        "form_id": str (optional),
        "customer_name" / "phone" / "whatsapp" / "address" /
        "delivery_instructions": str (optional),
        "agent_name": str (optional),
        "page_url": str (optional),
        "items": [{"product_id": int, "quantity": int}] (optional)
    }
    """
    payload = request.get_json(silent=True) or {}
    try:
        cart = lead_service.record_cart(payload=payload)
        commit_session()
        publish_change("carts")
        return jsonify(cart.to_dict()), 200
    except ValidationError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to record abandoned cart")
        return jsonify({"error": "Internal server error"}), 500


@carts_bp.get("")
@require_auth
@require_permission("VIEW_LEADS")
def list_carts_route():
    carts = lead_service.list_abandoned_carts(actor=g.current_user)
    return jsonify({"items": [c.to_dict() for c in carts], "count": len(carts)}), 200


@carts_bp.delete("/<string:cart_id>")
@require_auth
@require_permission("MANAGE_LEADS")
def delete_cart_route(cart_id: str):
    try:
        lead_service.delete_cart(cart_id)
        commit_session()
        publish_change("carts")
        return jsonify({"ok": True}), 200
    except NotFoundError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 404
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to delete abandoned cart")
        return jsonify({"error": "Internal server error"}), 500


@carts_bp.post("/<string:cart_id>/convert")
@require_auth
@require_permission("CREATE_ORDER")
def convert_cart_route(cart_id: str):
    """
    Request body:
    {
        "region_id": int,
        "payment_status": str (optional),
        ...optional contact overrides
    }
    """
    data = request.get_json(silent=True) or {}
    try:
        order = lead_service.convert_cart(cart_id, actor=g.current_user, payload=data)
        commit_session()
        publish_change("orders", "carts")
        return jsonify(order.to_dict()), 201
    except ValidationError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 409
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to convert abandoned cart")
        return jsonify({"error": "Internal server error"}), 500
