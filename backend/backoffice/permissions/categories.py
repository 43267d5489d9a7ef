# Overview: Permission category constants for grouping related permissions.


class PermissionCategory:
    """Permission categories for organization and UI display."""
    INVENTORY = "INVENTORY"
    LOGISTICS = "LOGISTICS"
    ORDERS = "ORDERS"
    LEADS = "LEADS"
    REPORTS = "REPORTS"
    USERS = "USERS"

    ALL = (INVENTORY, LOGISTICS, ORDERS, LEADS, REPORTS, USERS)
