# backend/backoffice/routes/inventory.py
"""
Regional inventory ledger routes.

- Transfers need TRANSFER_STOCK (Admin, State Manager).
- Manual corrections need ADJUST_STOCK (Admin).
- Insufficient central stock is a 409 and changes nothing.
"""
from flask import Blueprint, request, jsonify, g, current_app

from ..extensions import db
from ..decorators import require_auth, require_permission
from ..events import publish_change
from ..services import inventory_service
from ..services.concurrency import commit_session
from ..validation import ValidationError, NotFoundError


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.post("/<int:product_id>/transfer")
@require_auth
@require_permission("TRANSFER_STOCK")
def transfer_route(product_id: int):
    """
    Move stock from the central warehouse into a state hub.

    Request body:
    {
        "region_id": int,
        "quantity": int (> 0),
        "note": str (optional)
    }

    Returns:
        200: Updated stock snapshot
        400: Invalid quantity / no destination region
        404: Product or region not found
        409: Insufficient central stock
    """
    data = request.get_json(silent=True) or {}
    try:
        product = inventory_service.transfer_stock(
            product_id,
            data.get("region_id"),
            data.get("quantity"),
            actor_user_id=g.current_user.id,
            note=data.get("note"),
        )
        commit_session()
        publish_change("products", "stock_movements")
        return jsonify(product.to_dict()), 200
    except ValidationError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 404
    except inventory_service.InsufficientStockError as e:
        db.session.rollback()
        return jsonify({
            "error": "Insufficient central stock",
            "message": str(e),
            "available": e.available,
            "requested": e.requested,
        }), 409
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to transfer stock")
        return jsonify({"error": "Internal server error"}), 500


@inventory_bp.post("/<int:product_id>/regions/<int:region_id>/adjust")
@require_auth
@require_permission("ADJUST_STOCK")
def adjust_region_route(product_id: int, region_id: int):
    """
    Request body:
    {
        "delta": int (non-zero, clamped at zero) | "clear",
        "note": str (optional)
    }
    """
    data = request.get_json(silent=True) or {}
    try:
        row = inventory_service.adjust_region_stock(
            product_id,
            region_id,
            data.get("delta"),
            actor_user_id=g.current_user.id,
            note=data.get("note"),
        )
        commit_session()
        publish_change("products", "stock_movements")
        return jsonify(row.to_dict()), 200
    except ValidationError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 404
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to adjust regional stock")
        return jsonify({"error": "Internal server error"}), 500


@inventory_bp.post("/<int:product_id>/central/adjust")
@require_auth
@require_permission("ADJUST_STOCK")
def adjust_central_route(product_id: int):
    """
    Request body:
    {
        "delta": int (non-zero, clamped at zero),
        "note": str (optional)
    }
    """
    data = request.get_json(silent=True) or {}
    try:
        product = inventory_service.adjust_central_stock(
            product_id,
            data.get("delta"),
            actor_user_id=g.current_user.id,
            note=data.get("note"),
        )
        commit_session()
        publish_change("products", "stock_movements")
        return jsonify(product.to_dict()), 200
    except ValidationError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 404
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to adjust central stock")
        return jsonify({"error": "Internal server error"}), 500


@inventory_bp.get("/<int:product_id>")
@require_auth
@require_permission("VIEW_INVENTORY")
def snapshot_route(product_id: int):
    try:
        return jsonify(inventory_service.get_stock_snapshot(product_id)), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@inventory_bp.get("/<int:product_id>/movements")
@require_auth
@require_permission("VIEW_INVENTORY")
def movements_route(product_id: int):
    """Query params: limit (default 100, max 500). Newest first."""
    limit = min(request.args.get("limit", 100, type=int) or 100, 500)
    try:
        movements = inventory_service.list_stock_movements(product_id, limit=limit)
        return jsonify({"items": [m.to_dict() for m in movements], "count": len(movements)}), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@inventory_bp.get("/low-stock")
@require_auth
@require_permission("VIEW_INVENTORY")
def low_stock_route():
    """Query params: threshold (optional override of each product's own threshold)."""
    threshold = request.args.get("threshold", type=int)
    products = inventory_service.list_low_stock(threshold)
    return jsonify({"items": [p.to_dict() for p in products], "count": len(products)}), 200
