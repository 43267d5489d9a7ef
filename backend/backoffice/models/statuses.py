# Overview: Status and role vocabularies shared by models, services, and routes.


class UserRole:
    ADMIN = "Admin"
    STATE_MANAGER = "State Manager"
    SALES_AGENT = "Sales Agent"

    ALL = (ADMIN, STATE_MANAGER, SALES_AGENT)


class ApprovalStatus:
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    ALL = (PENDING, APPROVED, REJECTED)


class PaymentStatus:
    PAID = "Paid"
    POD = "Pay on Delivery"
    PART_PAYMENT = "Part Payment"

    ALL = (PAID, POD, PART_PAYMENT)


class DeliveryStatus:
    PENDING = "Pending"
    IN_TRANSIT = "In Transit"
    DELIVERED = "Delivered"
    RETURNED = "Returned"
    FAILED = "Failed"
    CANCELLED = "Cancelled"
    RESCHEDULED = "Rescheduled"

    ALL = (PENDING, IN_TRANSIT, DELIVERED, RETURNED, FAILED, CANCELLED, RESCHEDULED)


class LeadStatus:
    NEW = "New Lead"
    VERIFIED = "Verified"
    REJECTED = "Rejected"
    FAKE = "Fake"

    ALL = (NEW, VERIFIED, REJECTED, FAKE)


class CartStatus:
    ABANDONED = "abandoned"
    CONVERTED = "converted"


class StockPool:
    CENTRAL = "CENTRAL"
    REGION = "REGION"


class MovementKind:
    TRANSFER_OUT = "TRANSFER_OUT"
    TRANSFER_IN = "TRANSFER_IN"
    CENTRAL_ADJUST = "CENTRAL_ADJUST"
    REGION_ADJUST = "REGION_ADJUST"
    REGION_CLEAR = "REGION_CLEAR"
    DELIVERY_DEDUCT = "DELIVERY_DEDUCT"
    DELIVERY_RESTORE = "DELIVERY_RESTORE"
