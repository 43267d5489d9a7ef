# backend/backoffice/routes/users.py
"""
User registration and approval routes.

Registration is public: the identity provider has already authenticated the
person, this only creates the back-office profile (pending approval unless it
is the very first one).
"""
from flask import Blueprint, request, jsonify, g, current_app

from ..extensions import db
from ..decorators import require_auth, require_permission
from ..events import publish_change
from ..services import user_service
from ..services.concurrency import commit_session
from ..permissions import permission_catalog, role_permissions
from ..validation import ValidationError, ConflictError, NotFoundError


users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.post("/register")
def register_route():
    """
    Request body:
    {
        "name": str,
        "email": str,
        "phone": str (optional),
        "role": str (optional, requested role; default Sales Agent),
        "region_id": int (optional)
    }

    Returns:
        201: Registered (approved Admin if first user, otherwise pending)
        400: Invalid input
        409: Email already registered
    """
    payload = request.get_json(silent=True) or {}
    try:
        user = user_service.register_user(payload=payload)
        publish_change("users")
        return jsonify({"user": user.to_dict()}), 201
    except ValidationError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 409
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to register user")
        return jsonify({"error": "Internal server error"}), 500


@users_bp.get("/me")
@require_auth
def me_route():
    """Current user profile plus effective permission codes."""
    user = g.current_user
    return jsonify({
        "user": user.to_dict(),
        "permissions": sorted(role_permissions(user.role)),
    }), 200


@users_bp.get("/permissions")
@require_auth
@require_permission("VIEW_USERS")
def permission_catalog_route():
    """Every permission grouped by category, plus the codes each role is granted."""
    return jsonify(permission_catalog()), 200


@users_bp.get("")
@require_auth
@require_permission("VIEW_USERS")
def list_users_route():
    """Query params: status (pending|approved|rejected, optional)."""
    try:
        users = user_service.list_users(status=request.args.get("status"))
        return jsonify({"items": [u.to_dict() for u in users], "count": len(users)}), 200
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400


@users_bp.post("/<int:user_id>/approve")
@require_auth
@require_permission("APPROVE_USERS")
def approve_user_route(user_id: int):
    """
    Request body (optional):
    {
        "role": str,
        "region_id": int
    }
    """
    payload = request.get_json(silent=True) or {}
    try:
        user = user_service.approve_user(
            user_id,
            actor=g.current_user,
            role=payload.get("role"),
            region_id=payload.get("region_id"),
        )
        commit_session()
        publish_change("users")
        return jsonify({"user": user.to_dict()}), 200
    except ValidationError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 404
    except user_service.UserError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 409
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to approve user")
        return jsonify({"error": "Internal server error"}), 500


@users_bp.post("/<int:user_id>/reject")
@require_auth
@require_permission("APPROVE_USERS")
def reject_user_route(user_id: int):
    try:
        user = user_service.reject_user(user_id, actor=g.current_user)
        commit_session()
        publish_change("users")
        return jsonify({"user": user.to_dict()}), 200
    except NotFoundError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 404
    except user_service.UserError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 409
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to reject user")
        return jsonify({"error": "Internal server error"}), 500
