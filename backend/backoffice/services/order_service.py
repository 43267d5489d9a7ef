# Overview: Service-layer operations for orders; snapshot pricing, status updates and receipts.

from __future__ import annotations

"""
Orders

SNAPSHOT PRICING:
- Each line copies product name, selling price and cost price when the order
  is created (the price may be overridden per line by the order taker).
- total_amount is computed once from the snapshot lines and never touched
  again, whatever the status does later.

VISIBILITY:
- Users with VIEW_ALL_ORDERS (Admin) see every order.
- Everyone else sees only orders whose created_by equals their name.

STATUS:
- Assignments go through status_gate (role rule + typed side data).
- Stock moves on delivery only when DEDUCT_STOCK_ON_DELIVERY is enabled.

Callers commit (routes use commit_session).
"""

import secrets
import string
from urllib.parse import quote

from flask import current_app

from ..extensions import db
from ..models import Order, OrderItem, Product, Region, User, DeliveryStatus, PaymentStatus
from ..permissions import role_permissions
from ..time_utils import utcnow
from ..validation import ValidationError, NotFoundError, coerce_int, require_text, optional_text
from .concurrency import lock_for_update, run_with_retry
from .order_totals import order_total
from .status_gate import (
    TransitionDetails,
    DeliveredDetails,
    RescheduledDetails,
    check_transition,
)
from . import inventory_service


ORDER_NUMBER_PREFIX = "ORD"
_ALPHABET = string.ascii_uppercase + string.digits

# Statuses that undo a delivery when reached from Delivered
REVERSAL_STATUSES = (DeliveryStatus.RETURNED, DeliveryStatus.CANCELLED)


def _random_code(length: int) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def next_order_number() -> str:
    """ORD-XXXXXX, unique among existing orders."""
    while True:
        candidate = f"{ORDER_NUMBER_PREFIX}-{_random_code(6)}"
        exists = db.session.query(Order.id).filter_by(order_number=candidate).first()
        if not exists:
            return candidate


def new_tracking_id(*, recovered: bool = False) -> str:
    """<PREFIX>-XXXXXXXX, or <PREFIX>-REC-XXXXXX for orders recovered from carts."""
    prefix = current_app.config["TRACKING_PREFIX"]
    if recovered:
        return f"{prefix}-REC-{_random_code(6)}"
    return f"{prefix}-{_random_code(8)}"


def can_view_all_orders(user: User) -> bool:
    return "VIEW_ALL_ORDERS" in role_permissions(user.role)


def snapshot_line(product: Product, quantity: int, price_override: int | None = None) -> OrderItem:
    return OrderItem(
        product_id=product.id,
        product_name=product.name,
        quantity=quantity,
        price_at_order=product.selling_price if price_override is None else price_override,
        cost_at_order=product.cost_price,
    )


def build_catalog_lines(items) -> list[OrderItem]:
    """
    Resolve [{product_id, quantity, price_at_order?}, ...] against the catalog.

    Every product must exist; quantity must be a positive integer.
    """
    if not isinstance(items, list) or not items:
        raise ValidationError("Order must contain at least one item")

    lines = []
    for idx, raw in enumerate(items):
        if not isinstance(raw, dict):
            raise ValidationError(f"items[{idx}] must be an object")
        if raw.get("product_id") is None:
            raise ValidationError(f"items[{idx}].product_id is required")
        product_id = coerce_int(raw["product_id"], f"items[{idx}].product_id")
        if raw.get("quantity") is None:
            raise ValidationError(f"items[{idx}].quantity is required")
        quantity = coerce_int(raw["quantity"], f"items[{idx}].quantity")
        if quantity <= 0:
            raise ValidationError(f"items[{idx}].quantity must be positive")

        override = None
        if raw.get("price_at_order") is not None:
            override = coerce_int(raw["price_at_order"], f"items[{idx}].price_at_order")
            if override < 0:
                raise ValidationError(f"items[{idx}].price_at_order must be >= 0")

        product = db.session.get(Product, product_id)
        if not product:
            raise ValidationError(f"items[{idx}]: product {product_id} not found")

        lines.append(snapshot_line(product, quantity, override))
    return lines


def _resolve_region(region_id) -> Region:
    if region_id is None or region_id == "":
        raise ValidationError("region_id is required")
    region = db.session.get(Region, coerce_int(region_id, "region_id"))
    if not region:
        raise ValidationError(f"Region {region_id} not found")
    return region


def _resolve_payment_status(value) -> str:
    if value is None:
        return PaymentStatus.POD
    if value not in PaymentStatus.ALL:
        raise ValidationError(
            f"Invalid payment status: {value!r}. Must be one of: {', '.join(PaymentStatus.ALL)}"
        )
    return value


def place_order(
    *,
    actor: User,
    customer: dict,
    region_id,
    lines: list[OrderItem],
    payment_status=None,
    lead_id: int | None = None,
    recovered: bool = False,
) -> Order:
    """
    Persist an order from already-built snapshot lines.

    Shared by manual entry, lead conversion and cart recovery.
    """
    if not lines:
        raise ValidationError("Order must contain at least one item")

    region = _resolve_region(region_id)
    order = Order(
        order_number=next_order_number(),
        tracking_id=new_tracking_id(recovered=recovered),
        customer_name=require_text(customer, "customer_name"),
        phone=require_text(customer, "phone"),
        whatsapp=optional_text(customer, "whatsapp"),
        address=require_text(customer, "address"),
        delivery_instructions=optional_text(customer, "delivery_instructions"),
        region_id=region.id,
        total_amount=order_total(lines),
        logistics_cost=0,
        payment_status=_resolve_payment_status(payment_status),
        delivery_status=DeliveryStatus.PENDING,
        created_at=utcnow(),
        created_by=actor.name,
        created_by_user_id=actor.id,
        lead_id=lead_id,
    )
    order.items = lines
    db.session.add(order)
    db.session.flush()

    current_app.logger.info(
        "Order created: %s total=%s region=%s by=%s",
        order.order_number, order.total_amount, region.name, actor.name,
    )
    return order


def create_order(*, actor: User, payload: dict) -> Order:
    """
    Manual order entry.

    payload: customer_name, phone, whatsapp?, address, delivery_instructions?,
    region_id, payment_status?, items [{product_id, quantity, price_at_order?}]
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    # Contact fields first so the caller sees the most basic problem
    require_text(payload, "customer_name")
    require_text(payload, "phone")
    require_text(payload, "address")
    lines = build_catalog_lines(payload.get("items"))
    return place_order(
        actor=actor,
        customer=payload,
        region_id=payload.get("region_id"),
        lines=lines,
        payment_status=payload.get("payment_status"),
    )


def get_order(order_id: int, *, actor: User | None = None) -> Order:
    """Fetch one order; orders the actor may not see are reported as missing."""
    order = db.session.get(Order, order_id)
    if not order:
        raise NotFoundError(f"Order {order_id} not found")
    if actor is not None and not can_view_all_orders(actor) and order.created_by != actor.name:
        raise NotFoundError(f"Order {order_id} not found")
    return order


def list_orders(*, actor: User, status: str | None = None) -> list[Order]:
    """Newest first, filtered by visibility."""
    q = db.session.query(Order)
    if not can_view_all_orders(actor):
        q = q.filter(Order.created_by == actor.name)
    if status:
        if status not in DeliveryStatus.ALL:
            raise ValidationError(f"Invalid delivery status: {status!r}")
        q = q.filter(Order.delivery_status == status)
    return q.order_by(Order.created_at.desc(), Order.id.desc()).all()


def update_order_status(order_id: int, *, actor: User, details: TransitionDetails) -> Order:
    """
    Assign a delivery status.

    The role check runs before anything is read or written, so a rejected
    transition leaves the order exactly as it was. total_amount is never
    touched.
    """
    check_transition(actor.role, details.status)

    def _op():
        order = lock_for_update(db.session.query(Order).filter_by(id=order_id)).first()
        if not order:
            raise NotFoundError(f"Order {order_id} not found")
        if not can_view_all_orders(actor) and order.created_by != actor.name:
            raise NotFoundError(f"Order {order_id} not found")

        previous = order.delivery_status
        order.delivery_status = details.status

        if isinstance(details, DeliveredDetails):
            order.logistics_cost = details.logistics_cost
        elif isinstance(details, RescheduledDetails):
            order.reschedule_date = details.date
            order.reschedule_notes = details.notes
            order.reminder_enabled = details.reminder_enabled

        if current_app.config["DEDUCT_STOCK_ON_DELIVERY"]:
            if details.status == DeliveryStatus.DELIVERED and previous != DeliveryStatus.DELIVERED:
                inventory_service.deduct_for_delivery(order, actor_user_id=actor.id)
            elif previous == DeliveryStatus.DELIVERED and details.status in REVERSAL_STATUSES:
                inventory_service.restore_for_reversal(order, actor_user_id=actor.id)

        db.session.flush()
        current_app.logger.info(
            "Order %s status %s -> %s by %s",
            order.order_number, previous, order.delivery_status, actor.name,
        )
        return order

    return run_with_retry(_op)


def _naira(amount: int) -> str:
    return f"₦{amount:,}"


def render_receipt(order: Order) -> str:
    """Plain-text receipt for copy/paste."""
    brand = current_app.config["BRAND_NAME"].upper()
    items_text = "\n".join(
        f"{item.product_name} x{item.quantity} @ {_naira(item.price_at_order)}"
        for item in order.items
    )
    return "\n".join([
        f"{brand} RECEIPT",
        f"Order ID: {order.order_number}",
        f"Customer: {order.customer_name}",
        f"Phone: {order.phone}",
        f"Address: {order.address}",
        "---",
        "Items:",
        items_text,
        "---",
        f"Total: {_naira(order.total_amount)}",
        f"Payment: {order.payment_status}",
        f"Tracking: {order.tracking_id}",
    ])


def whatsapp_share_url(order: Order) -> str:
    """wa.me link to the customer's phone with a status update message."""
    brand = current_app.config["BRAND_NAME"]
    text = (
        f"Hello {order.customer_name}, your {brand} order {order.order_number} is "
        f"{order.delivery_status}. Tracking: {order.tracking_id}. Total: {_naira(order.total_amount)}"
    )
    digits = "".join(ch for ch in order.phone if ch.isdigit())
    return f"https://wa.me/{digits}?text={quote(text, safe='')}"
