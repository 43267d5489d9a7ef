# Overview: All permission definitions organized by category.
# Each permission is defined as: (code, name, description, category)

from .categories import PermissionCategory


# -- INVENTORY --

INVENTORY_PERMISSIONS = [
    (
        "VIEW_PRODUCTS",
        "View Products",
        "View the product catalog (needed to build orders)",
        PermissionCategory.INVENTORY,
    ),
    (
        "MANAGE_PRODUCTS",
        "Manage Products",
        "Create, edit and delete products",
        PermissionCategory.INVENTORY,
    ),
    (
        "VIEW_INVENTORY",
        "View Inventory",
        "View central and regional stock, movements and low-stock alerts",
        PermissionCategory.INVENTORY,
    ),
    (
        "TRANSFER_STOCK",
        "Transfer Stock",
        "Move stock from the central warehouse to a state hub",
        PermissionCategory.INVENTORY,
    ),
    (
        "ADJUST_STOCK",
        "Adjust Stock",
        "Manually correct central or regional counters",
        PermissionCategory.INVENTORY,
    ),
]


# -- LOGISTICS --

LOGISTICS_PERMISSIONS = [
    (
        "VIEW_REGIONS",
        "View Regions",
        "View state hubs",
        PermissionCategory.LOGISTICS,
    ),
    (
        "MANAGE_REGIONS",
        "Manage Regions",
        "Create and edit state hubs",
        PermissionCategory.LOGISTICS,
    ),
    (
        "VIEW_LOGISTICS",
        "View Logistics Partners",
        "View delivery partners per state",
        PermissionCategory.LOGISTICS,
    ),
    (
        "MANAGE_LOGISTICS",
        "Manage Logistics Partners",
        "Register delivery partners",
        PermissionCategory.LOGISTICS,
    ),
]


# -- ORDERS --

ORDER_PERMISSIONS = [
    (
        "CREATE_ORDER",
        "Create Order",
        "Create orders and convert leads or carts into orders",
        PermissionCategory.ORDERS,
    ),
    (
        "VIEW_ORDERS",
        "View Orders",
        "View own orders and receipts",
        PermissionCategory.ORDERS,
    ),
    (
        "VIEW_ALL_ORDERS",
        "View All Orders",
        "View orders created by any user",
        PermissionCategory.ORDERS,
    ),
    (
        "UPDATE_ORDER_STATUS",
        "Update Order Status",
        "Reschedule orders",
        PermissionCategory.ORDERS,
    ),
    (
        "SET_ANY_DELIVERY_STATUS",
        "Set Any Delivery Status",
        "Move orders to any delivery status (deliver, cancel, return...)",
        PermissionCategory.ORDERS,
    ),
]


# -- LEADS --

LEAD_PERMISSIONS = [
    (
        "VIEW_LEADS",
        "View Leads",
        "View web leads and abandoned carts",
        PermissionCategory.LEADS,
    ),
    (
        "MANAGE_LEADS",
        "Manage Leads",
        "Update lead status and discard abandoned carts",
        PermissionCategory.LEADS,
    ),
]


# -- REPORTS --

REPORT_PERMISSIONS = [
    (
        "VIEW_DASHBOARD",
        "View Dashboard",
        "View the daily sales dashboard",
        PermissionCategory.REPORTS,
    ),
    (
        "VIEW_ANALYTICS",
        "View Analytics",
        "View per-state delivery success rates",
        PermissionCategory.REPORTS,
    ),
]


# -- USERS --

USER_PERMISSIONS = [
    (
        "VIEW_USERS",
        "View Users",
        "View registered users",
        PermissionCategory.USERS,
    ),
    (
        "APPROVE_USERS",
        "Approve Users",
        "Approve or reject pending registrations",
        PermissionCategory.USERS,
    ),
]


PERMISSION_DEFINITIONS = (
    INVENTORY_PERMISSIONS
    + LOGISTICS_PERMISSIONS
    + ORDER_PERMISSIONS
    + LEAD_PERMISSIONS
    + REPORT_PERMISSIONS
    + USER_PERMISSIONS
)
