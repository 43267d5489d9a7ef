# Overview: Permission system package.
# Re-exports all public APIs.

from .categories import PermissionCategory
from .definitions import (
    PERMISSION_DEFINITIONS,
    INVENTORY_PERMISSIONS,
    LOGISTICS_PERMISSIONS,
    ORDER_PERMISSIONS,
    LEAD_PERMISSIONS,
    REPORT_PERMISSIONS,
    USER_PERMISSIONS,
)
from .roles import DEFAULT_ROLE_PERMISSIONS
from .helpers import (
    get_permissions_by_category,
    get_permission_definition,
    validate_permission_code,
    role_permissions,
    permission_catalog,
)

__all__ = [
    "PermissionCategory",
    "PERMISSION_DEFINITIONS",
    "INVENTORY_PERMISSIONS",
    "LOGISTICS_PERMISSIONS",
    "ORDER_PERMISSIONS",
    "LEAD_PERMISSIONS",
    "REPORT_PERMISSIONS",
    "USER_PERMISSIONS",
    "DEFAULT_ROLE_PERMISSIONS",
    "get_permissions_by_category",
    "get_permission_definition",
    "validate_permission_code",
    "role_permissions",
    "permission_catalog",
]
