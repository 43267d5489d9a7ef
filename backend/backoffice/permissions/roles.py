# Overview: Default permission sets per role.

from ..models.statuses import UserRole
from .definitions import PERMISSION_DEFINITIONS


DEFAULT_ROLE_PERMISSIONS = {
    # Admin: everything
    UserRole.ADMIN: [perm[0] for perm in PERMISSION_DEFINITIONS],

    # State Manager: stock movement into hubs, logistics, and any delivery status
    UserRole.STATE_MANAGER: [
        "VIEW_PRODUCTS",
        "VIEW_INVENTORY",
        "TRANSFER_STOCK",
        "VIEW_REGIONS",
        "VIEW_LOGISTICS",
        "MANAGE_LOGISTICS",
        "CREATE_ORDER",
        "VIEW_ORDERS",
        "UPDATE_ORDER_STATUS",
        "SET_ANY_DELIVERY_STATUS",
        "VIEW_LEADS",
        "MANAGE_LEADS",
        "VIEW_DASHBOARD",
    ],

    # Sales Agent: leads, carts, own orders (reschedule only), dashboard
    UserRole.SALES_AGENT: [
        "VIEW_PRODUCTS",
        "VIEW_REGIONS",
        "CREATE_ORDER",
        "VIEW_ORDERS",
        "UPDATE_ORDER_STATUS",
        "VIEW_LEADS",
        "MANAGE_LEADS",
        "VIEW_DASHBOARD",
    ],
}
