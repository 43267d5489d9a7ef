# Overview: Lookups over the permission definitions and the role map.

from ..models.statuses import UserRole
from .categories import PermissionCategory
from .definitions import PERMISSION_DEFINITIONS
from .roles import DEFAULT_ROLE_PERMISSIONS


_FIELDS = ("code", "name", "description", "category")
_BY_CODE = {perm[0]: dict(zip(_FIELDS, perm)) for perm in PERMISSION_DEFINITIONS}


def get_permission_definition(code):
    """Definition dict for a code, or None if the code is unknown."""
    definition = _BY_CODE.get(code)
    return dict(definition) if definition else None


def get_permissions_by_category(category):
    return [dict(d) for d in _BY_CODE.values() if d["category"] == category]


def validate_permission_code(code):
    return code in _BY_CODE


def role_permissions(role):
    """Permission codes granted to a role; unknown roles get nothing."""
    return set(DEFAULT_ROLE_PERMISSIONS.get(role, ()))


def permission_catalog():
    """Definitions grouped by category plus the sorted codes of each role."""
    return {
        "categories": {c: get_permissions_by_category(c) for c in PermissionCategory.ALL},
        "roles": {role: sorted(role_permissions(role)) for role in UserRole.ALL},
    }
