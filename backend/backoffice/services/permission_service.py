# Overview: Service-layer operations for permission checks.

"""
Role-based access control.

Permissions come from the static DEFAULT_ROLE_PERMISSIONS map; there are no
per-user overrides. Checks fail closed: unknown roles and unapproved users
get nothing. Denials are logged, grants are not.
"""

from flask import current_app

from ..models import User, ApprovalStatus
from ..permissions import role_permissions


class PermissionDeniedError(Exception):
    """Raised when user lacks required permission."""
    pass


def get_user_permissions(user: User) -> set[str]:
    if user is None or user.status != ApprovalStatus.APPROVED:
        return set()
    return role_permissions(user.role)


def user_has_permission(user: User, permission_code: str) -> bool:
    return permission_code in get_user_permissions(user)


def require_permission(user: User, permission_code: str, *, resource: str | None = None) -> None:
    """Raise PermissionDeniedError (and log the denial) if user lacks permission_code."""
    if user_has_permission(user, permission_code):
        return
    current_app.logger.warning(
        "Permission denied: user_id=%s role=%s permission=%s resource=%s",
        getattr(user, "id", None),
        getattr(user, "role", None),
        permission_code,
        resource,
    )
    raise PermissionDeniedError(f"Missing permission: {permission_code}")
