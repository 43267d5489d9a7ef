# backend/backoffice/routes/orders.py
"""
Order routes.

- Everyone with CREATE_ORDER can place orders.
- Listing is visibility-filtered: Admin sees all, others their own.
- Status changes go through the status gate: agents may only reschedule.
"""
from flask import Blueprint, request, jsonify, g, current_app

from ..extensions import db
from ..decorators import require_auth, require_permission
from ..events import publish_change
from ..services import order_service
from ..services.concurrency import commit_session
from ..services.status_gate import authorize_transition, allowed_statuses, TransitionForbiddenError
from ..validation import ValidationError, NotFoundError


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


@orders_bp.get("")
@require_auth
@require_permission("VIEW_ORDERS")
def list_orders_route():
    """Query params: status (optional delivery status filter)."""
    try:
        orders = order_service.list_orders(actor=g.current_user, status=request.args.get("status"))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify({
        "items": [o.to_dict() for o in orders],
        "count": len(orders),
        "allowed_statuses": list(allowed_statuses(g.current_user.role)),
    }), 200


@orders_bp.post("")
@require_auth
@require_permission("CREATE_ORDER")
def create_order_route():
    """
    Request body:
    {
        "customer_name": str,
        "phone": str,
        "whatsapp": str (optional),
        "address": str,
        "delivery_instructions": str (optional),
        "region_id": int,
        "payment_status": "Paid" | "Pay on Delivery" | "Part Payment" (optional),
        "items": [{"product_id": int, "quantity": int, "price_at_order": int (optional)}]
    }

    Returns:
        201: Order created (Pending)
        400: Invalid input
    """
    payload = request.get_json(silent=True) or {}
    try:
        order = order_service.create_order(actor=g.current_user, payload=payload)
        commit_session()
        publish_change("orders")
        return jsonify(order.to_dict()), 201
    except ValidationError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to create order")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.get("/<int:order_id>")
@require_auth
@require_permission("VIEW_ORDERS")
def get_order_route(order_id: int):
    try:
        order = order_service.get_order(order_id, actor=g.current_user)
        return jsonify(order.to_dict()), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@orders_bp.post("/<int:order_id>/status")
@require_auth
@require_permission("UPDATE_ORDER_STATUS")
def update_status_route(order_id: int):
    """
    Request body by target status:
    - Delivered:   {"status": "Delivered", "logistics_cost": int}
    - Rescheduled: {"status": "Rescheduled", "reschedule_date": "YYYY-MM-DD",
                    "notes": str, "reminder_enabled": bool (default true)}
    - Cancelled:   {"status": "Cancelled", "confirm": true}
    - otherwise:   {"status": str}

    Returns:
        200: Updated order
        400: Unknown status or missing side data
        403: Role may not assign this status
        404: Order not found (or not visible)
    """
    data = request.get_json(silent=True) or {}
    try:
        details = authorize_transition(g.current_user.role, data.get("status"), data)
        order = order_service.update_order_status(order_id, actor=g.current_user, details=details)
        commit_session()
        if current_app.config["DEDUCT_STOCK_ON_DELIVERY"]:
            publish_change("orders", "products", "stock_movements")
        else:
            publish_change("orders")
        return jsonify(order.to_dict()), 200
    except TransitionForbiddenError as e:
        db.session.rollback()
        return jsonify({
            "error": "Transition not allowed",
            "message": str(e),
            "allowed_statuses": list(allowed_statuses(g.current_user.role)),
        }), 403
    except ValidationError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 404
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to update order status")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.get("/<int:order_id>/receipt")
@require_auth
@require_permission("VIEW_ORDERS")
def receipt_route(order_id: int):
    """Plain-text receipt and a WhatsApp share link for the customer."""
    try:
        order = order_service.get_order(order_id, actor=g.current_user)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({
        "order_number": order.order_number,
        "receipt": order_service.render_receipt(order),
        "whatsapp_url": order_service.whatsapp_share_url(order),
    }), 200
