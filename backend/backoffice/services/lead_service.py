# Overview: Web leads and abandoned carts: capture, triage and conversion into orders.

from __future__ import annotations

"""
Leads & Abandoned Carts

- Capture endpoints are public (called from landing-page forms); everything
  else requires an approved user.
- Conversion is one-directional: the Order gets lead_id, the lead only
  records the conversion through its status and notes.
- Prices on converted orders come from the catalog at conversion time, with
  fallbacks for products that are no longer in the catalog:
    lead  -> "Unknown Item", price 0, cost 0
    cart  -> CART_FALLBACK_PRODUCT_NAME / _PRICE / _COST
- A converted cart is kept (status converted), never reopened by a later capture.

Callers commit.
"""

from flask import current_app

from ..extensions import db
from ..models import (
    WebLead,
    WebLeadItem,
    AbandonedCart,
    Order,
    OrderItem,
    Product,
    Region,
    User,
    UserRole,
    LeadStatus,
    CartStatus,
)
from ..time_utils import utcnow
from ..validation import (
    ValidationError,
    ConflictError,
    NotFoundError,
    coerce_int,
    require_text,
    optional_text,
)
from .order_service import place_order, snapshot_line


UNKNOWN_ITEM_NAME = "Unknown Item"

# Contact placeholders for carts abandoned before the customer typed them
RECOVERED_CUSTOMER_NAME = "Recovered Customer"
RECOVERED_PHONE = "0000000000"
RECOVERED_ADDRESS = "Address captured from abandoned cart"
RECOVERED_INSTRUCTIONS = "Manual recovery follow-up"

CONTACT_FIELDS = ("customer_name", "phone", "whatsapp", "address", "delivery_instructions")


class LeadError(ConflictError):
    """Lead or cart is not in a state that allows the operation."""
    pass


def _is_admin(user: User) -> bool:
    return user.role == UserRole.ADMIN


def _parse_items(raw, *, required: bool) -> list[dict]:
    """[{product_id, quantity}] with positive integer quantities."""
    if raw is None:
        if required:
            raise ValidationError("items are required")
        return []
    if not isinstance(raw, list):
        raise ValidationError("items must be a list")
    if required and not raw:
        raise ValidationError("items are required")

    parsed = []
    for idx, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ValidationError(f"items[{idx}] must be an object")
        if item.get("product_id") is None:
            raise ValidationError(f"items[{idx}].product_id is required")
        product_id = coerce_int(item["product_id"], f"items[{idx}].product_id")
        qty = coerce_int(item.get("quantity", 1), f"items[{idx}].quantity")
        if qty <= 0:
            raise ValidationError(f"items[{idx}].quantity must be positive")
        parsed.append({"product_id": product_id, "quantity": qty})
    return parsed


# ===================== Web leads =====================

def capture_lead(*, payload: dict) -> WebLead:
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    region_id = payload.get("region_id")
    if region_id is not None:
        region_id = coerce_int(region_id, "region_id")
        if not db.session.get(Region, region_id):
            raise ValidationError(f"Region {region_id} not found")

    lead = WebLead(
        form_id=optional_text(payload, "form_id"),
        customer_name=require_text(payload, "customer_name"),
        phone=require_text(payload, "phone"),
        whatsapp=optional_text(payload, "whatsapp"),
        address=optional_text(payload, "address"),
        delivery_instructions=optional_text(payload, "delivery_instructions"),
        region_id=region_id,
        status=LeadStatus.NEW,
        notes="",
        agent_name=optional_text(payload, "agent_name"),
        created_at=utcnow(),
    )
    for item in _parse_items(payload.get("items"), required=True):
        lead.items.append(WebLeadItem(**item))

    db.session.add(lead)
    db.session.flush()
    current_app.logger.info("Web lead captured: id=%s form=%s", lead.id, lead.form_id)
    return lead


def get_lead(lead_id: int) -> WebLead:
    lead = db.session.get(WebLead, lead_id)
    if not lead:
        raise NotFoundError(f"Lead {lead_id} not found")
    return lead


def list_leads(*, status: str | None = None) -> list[WebLead]:
    """Newest first. Leads are a shared queue: every role with VIEW_LEADS sees all of them."""
    q = db.session.query(WebLead)
    if status:
        if status not in LeadStatus.ALL:
            raise ValidationError(f"Invalid lead status: {status!r}")
        q = q.filter(WebLead.status == status)
    return q.order_by(WebLead.created_at.desc(), WebLead.id.desc()).all()


def update_lead_status(lead_id: int, *, status: str, notes: str | None = None) -> WebLead:
    if status not in LeadStatus.ALL:
        raise ValidationError(
            f"Invalid lead status: {status!r}. Must be one of: {', '.join(LeadStatus.ALL)}"
        )
    lead = get_lead(lead_id)
    lead.status = status
    if notes is not None:
        lead.notes = str(notes).strip()
    db.session.flush()
    return lead


def convert_lead(lead_id: int, *, actor: User, payload: dict | None = None) -> Order:
    """
    Turn a lead into a Pending order.

    payload: region_id (required unless the lead has one), payment_status?,
    and optional contact overrides (customer_name, phone, address, ...).
    """
    payload = payload or {}
    lead = get_lead(lead_id)

    if db.session.query(Order.id).filter_by(lead_id=lead.id).first():
        raise LeadError(f"Lead {lead_id} was already converted")
    if not lead.items:
        raise ValidationError("Lead has no items to convert")

    region_id = payload.get("region_id") or lead.region_id
    if not region_id:
        raise ValidationError("region_id is required")

    lines = []
    for item in lead.items:
        product = db.session.get(Product, item.product_id)
        if product:
            lines.append(snapshot_line(product, item.quantity))
        else:
            lines.append(OrderItem(
                product_id=item.product_id,
                product_name=UNKNOWN_ITEM_NAME,
                quantity=item.quantity,
                price_at_order=0,
                cost_at_order=0,
            ))

    customer = {f: getattr(lead, f) for f in CONTACT_FIELDS}
    customer.update({f: payload[f] for f in CONTACT_FIELDS if payload.get(f)})

    order = place_order(
        actor=actor,
        customer=customer,
        region_id=region_id,
        lines=lines,
        payment_status=payload.get("payment_status"),
        lead_id=lead.id,
    )

    lead.status = LeadStatus.VERIFIED
    lead.notes = f"Converted to order {order.order_number}"
    db.session.flush()
    return order


# ===================== Abandoned carts =====================

def record_cart(*, payload: dict) -> AbandonedCart:
    """
    Upsert a partially filled form by its client session id.

    Only fields present in the payload are overwritten. Converted carts are
    returned unchanged.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    cart_id = require_text(payload, "session_id")
    if len(cart_id) > 64:
        raise ValidationError("session_id exceeds max length 64")

    now = utcnow()
    cart = db.session.get(AbandonedCart, cart_id)
    if cart is None:
        cart = AbandonedCart(id=cart_id, status=CartStatus.ABANDONED, items=[], created_at=now)
        db.session.add(cart)
    elif cart.status == CartStatus.CONVERTED:
        return cart

    for field in CONTACT_FIELDS + ("form_id", "agent_name", "page_url"):
        if field in payload:
            setattr(cart, field, optional_text(payload, field))
    if "items" in payload:
        cart.items = _parse_items(payload.get("items"), required=False)

    cart.last_updated_at = now
    db.session.flush()
    return cart


def get_cart(cart_id: str) -> AbandonedCart:
    cart = db.session.get(AbandonedCart, cart_id)
    if not cart:
        raise NotFoundError(f"Cart {cart_id} not found")
    return cart


def list_abandoned_carts(*, actor: User) -> list[AbandonedCart]:
    """Most recently touched first; non-admins see carts attributed to them."""
    q = db.session.query(AbandonedCart).filter(AbandonedCart.status == CartStatus.ABANDONED)
    if not _is_admin(actor):
        q = q.filter(AbandonedCart.agent_name == actor.name)
    return q.order_by(AbandonedCart.last_updated_at.desc(), AbandonedCart.id.asc()).all()


def delete_cart(cart_id: str) -> None:
    cart = get_cart(cart_id)
    db.session.delete(cart)
    db.session.flush()


def _cart_line(product_id: int | None, quantity: int) -> OrderItem:
    product = db.session.get(Product, product_id) if product_id is not None else None
    if product:
        return snapshot_line(product, quantity)
    cfg = current_app.config
    return OrderItem(
        product_id=product_id,
        product_name=cfg["CART_FALLBACK_PRODUCT_NAME"],
        quantity=quantity,
        price_at_order=cfg["CART_FALLBACK_PRICE"],
        cost_at_order=cfg["CART_FALLBACK_COST"],
    )


def convert_cart(cart_id: str, *, actor: User, payload: dict | None = None) -> Order:
    """
    Recover an abandoned cart as a Pending order.

    Missing contact fields get placeholders; a cart with no items becomes one
    unit of the fallback product.
    """
    payload = payload or {}
    cart = get_cart(cart_id)
    if cart.status == CartStatus.CONVERTED:
        raise LeadError(f"Cart {cart_id} was already converted")

    region_id = payload.get("region_id")
    if not region_id:
        raise ValidationError("region_id is required")

    items = cart.items or []
    if items:
        lines = [_cart_line(i.get("product_id"), i.get("quantity") or 1) for i in items]
    else:
        lines = [_cart_line(None, 1)]

    customer = {
        "customer_name": cart.customer_name or RECOVERED_CUSTOMER_NAME,
        "phone": cart.phone or RECOVERED_PHONE,
        "whatsapp": cart.whatsapp,
        "address": cart.address or RECOVERED_ADDRESS,
        "delivery_instructions": cart.delivery_instructions or RECOVERED_INSTRUCTIONS,
    }
    customer.update({f: payload[f] for f in CONTACT_FIELDS if payload.get(f)})

    order = place_order(
        actor=actor,
        customer=customer,
        region_id=region_id,
        lines=lines,
        payment_status=payload.get("payment_status"),
        recovered=True,
    )

    cart.status = CartStatus.CONVERTED
    cart.last_updated_at = utcnow()
    db.session.flush()
    return order
