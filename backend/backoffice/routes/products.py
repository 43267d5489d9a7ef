# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/backoffice/routes/products.py
"""
Product catalog routes.

SECURITY: All routes require an approved user.
- Read operations require VIEW_PRODUCTS permission (every role builds orders)
- Write operations require MANAGE_PRODUCTS permission (Admin)
"""
from flask import Blueprint, request, jsonify, g, current_app

from ..extensions import db
from ..decorators import require_auth, require_permission
from ..events import publish_change
from ..services import products_service
from ..services.concurrency import commit_session
from ..validation import ValidationError, ConflictError, NotFoundError

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@require_auth
@require_permission("VIEW_PRODUCTS")
def list_products():
    """
    Query params:
    - q: str (optional) - case-insensitive name/SKU search
    - low_stock: bool (optional) - only products at or below their threshold
    """
    low_stock = request.args.get("low_stock", "").lower() in {"1", "true", "yes"}
    products = products_service.list_products(search=request.args.get("q"), low_stock=low_stock)
    return jsonify({"items": [p.to_dict() for p in products], "count": len(products)}), 200


@products_bp.get("/<int:product_id>")
@require_auth
@require_permission("VIEW_PRODUCTS")
def get_product_route(product_id: int):
    try:
        return jsonify(products_service.get_product(product_id).to_dict()), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@products_bp.post("")
@require_auth
@require_permission("MANAGE_PRODUCTS")
def create_product_route():
    """
    Request body:
    {
        "name": str,
        "selling_price": int,
        "cost_price": int (optional),
        "sku": str (optional, unique),
        "batch_number": str (optional),
        "expiry_date": "YYYY-MM-DD" (optional),
        "low_stock_threshold": int (optional),
        "total_stock": int (optional, opening central stock),
        "stock_per_state": {region_id: int} (optional, opening regional stock)
    }
    """
    payload = request.get_json(silent=True) or {}
    try:
        product = products_service.create_product(payload=payload, actor_user_id=g.current_user.id)
        commit_session()
        publish_change("products", "stock_movements")
        return jsonify(product.to_dict()), 201
    except ValidationError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 409
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.put("/<int:product_id>")
@require_auth
@require_permission("MANAGE_PRODUCTS")
def update_product_route(product_id: int):
    """Partial update; stock counters are rejected (use the inventory routes)."""
    payload = request.get_json(silent=True) or {}
    try:
        product = products_service.update_product(product_id=product_id, payload=payload)
        commit_session()
        publish_change("products")
        return jsonify(product.to_dict()), 200
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
        current_app.logger.exception("Failed to update product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.delete("/<int:product_id>")
@require_auth
@require_permission("MANAGE_PRODUCTS")
def delete_product_route(product_id: int):
    try:
        products_service.delete_product(product_id=product_id)
        commit_session()
        publish_change("products")
        return jsonify({"ok": True}), 200
    except NotFoundError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 404
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to delete product")
        return jsonify({"error": "Internal server error"}), 500
