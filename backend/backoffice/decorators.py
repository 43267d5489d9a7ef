# Overview: Request and permission decorators for API routes.

from functools import wraps
from flask import request, jsonify, g, current_app

from .extensions import db
from .models import User, ApprovalStatus
from .services import permission_service
from .services.permission_service import PermissionDeniedError
from .permissions import validate_permission_code


def _is_authenticated() -> bool:
    return hasattr(g, 'current_user')


def require_auth(f):
    """
    Resolve the caller from the identity header and require approval.

    The identity provider in front of this service authenticates the caller
    and forwards the verified user id in IDENTITY_HEADER.

    Sets g.current_user to the User row.

    Returns 401 if the header is missing or names no known user,
    403 if the user is pending or rejected.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        raw = request.headers.get(current_app.config["IDENTITY_HEADER"])
        if not raw:
            return jsonify({"error": "Authentication required"}), 401

        try:
            user_id = int(raw.strip())
        except ValueError:
            return jsonify({"error": "Invalid identity"}), 401

        user = db.session.get(User, user_id)
        if user is None:
            return jsonify({"error": "Invalid identity"}), 401

        if user.status != ApprovalStatus.APPROVED:
            return jsonify({
                "error": "Account not approved",
                "status": user.status,
            }), 403

        g.current_user = user
        return f(*args, **kwargs)

    return decorated_function


def require_permission(permission_code: str):
    """Require a specific permission. Must be stacked under @require_auth."""
    if not validate_permission_code(permission_code):
        raise ValueError(f"Unknown permission code: {permission_code}")

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _is_authenticated():
                return jsonify({"error": "Authentication required"}), 401

            try:
                permission_service.require_permission(
                    g.current_user,
                    permission_code,
                    resource=request.path,
                )
            except PermissionDeniedError as e:
                return jsonify({
                    "error": "Permission denied",
                    "required_permission": permission_code,
                    "message": str(e)
                }), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator
