# Overview: Product catalog: create, partial update, delete, search.

"""
Products Service

- Stock counters are set only at creation. Afterwards total_stock and the
  regional counters change exclusively through inventory_service, so every
  change is recorded as a StockMovement.
- SKU is optional but unique when present.
"""
from __future__ import annotations

from flask import current_app
from sqlalchemy import func, or_

from ..extensions import db
from ..models import Product, Region, RegionStock, StockPool, MovementKind
from ..validation import (
    ConflictError,
    NotFoundError,
    ValidationError,
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
    coerce_int,
)
from .ledger_service import append_stock_movement
from .inventory_service import is_low_stock

PRODUCT_MUTABLE_FIELDS = {
    "name", "sku", "cost_price", "selling_price",
    "batch_number", "expiry_date", "low_stock_threshold",
}

CREATE_POLICY = ModelValidationPolicy(
    writable_fields=PRODUCT_MUTABLE_FIELDS | {"total_stock"},
    required_on_create={"name", "selling_price"},
)
UPDATE_POLICY = ModelValidationPolicy(writable_fields=PRODUCT_MUTABLE_FIELDS)


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def _ensure_unique_sku(sku: str | None, *, exclude_id: int | None = None) -> None:
    if not sku:
        return
    q = db.session.query(Product).filter(Product.sku == sku)
    if exclude_id is not None:
        q = q.filter(Product.id != exclude_id)
    if q.first():
        raise ConflictError(f"SKU already exists: {sku}")


def _parse_allocations(raw) -> dict[int, int]:
    """{region_id: qty} from a JSON object (keys may be strings)."""
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValidationError("stock_per_state must be an object of region_id -> quantity")
    allocations = {}
    for key, value in raw.items():
        region_id = coerce_int(key, "stock_per_state region id")
        qty = coerce_int(value, f"stock_per_state[{key}]")
        if qty < 0:
            raise ValidationError(f"stock_per_state[{key}] must be >= 0")
        if not db.session.get(Region, region_id):
            raise ValidationError(f"Region {region_id} not found")
        allocations[region_id] = qty
    return allocations


def create_product(*, payload: dict, actor_user_id: int | None = None) -> Product:
    """
    Create a product, optionally with opening stock.

    payload may carry total_stock and stock_per_state ({region_id: qty});
    opening quantities are logged as movements.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    body = dict(payload)
    allocations = _parse_allocations(body.pop("stock_per_state", None))

    patch = validate_payload(model=Product, payload=body, policy=CREATE_POLICY, partial=False)
    enforce_rules_product(patch)
    _ensure_unique_sku(patch.get("sku"))

    p = Product(
        total_stock=patch.pop("total_stock", None) or 0,
        low_stock_threshold=current_app.config["DEFAULT_LOW_STOCK_THRESHOLD"],
    )
    apply_product_patch(p, patch)
    for region_id, qty in allocations.items():
        p.region_stock.append(RegionStock(region_id=region_id, quantity=qty))

    db.session.add(p)
    db.session.flush()  # ensure p.id exists before movements

    if p.total_stock:
        append_stock_movement(
            product_id=p.id,
            pool=StockPool.CENTRAL,
            kind=MovementKind.CENTRAL_ADJUST,
            requested_delta=p.total_stock,
            applied_delta=p.total_stock,
            quantity_after=p.total_stock,
            actor_user_id=actor_user_id,
            note="Opening stock",
        )
    for region_id, qty in allocations.items():
        if qty:
            append_stock_movement(
                product_id=p.id,
                pool=StockPool.REGION,
                kind=MovementKind.REGION_ADJUST,
                requested_delta=qty,
                applied_delta=qty,
                quantity_after=qty,
                region_id=region_id,
                actor_user_id=actor_user_id,
                note="Opening stock",
            )

    current_app.logger.info("Product created: id=%s name=%s", p.id, p.name)
    return p


def get_product(product_id: int) -> Product:
    p = db.session.get(Product, product_id)
    if not p:
        raise NotFoundError(f"Product {product_id} not found")
    return p


def update_product(*, product_id: int, payload: dict) -> Product:
    """Partial update of catalog fields. Stock counters are rejected here."""
    if isinstance(payload, dict) and ("total_stock" in payload or "stock_per_state" in payload):
        raise ValidationError("Stock counters change only through inventory transfers and adjustments")
    patch = validate_payload(model=Product, payload=payload, policy=UPDATE_POLICY, partial=True)
    enforce_rules_product(patch)

    p = get_product(product_id)
    if "sku" in patch:
        _ensure_unique_sku(patch["sku"], exclude_id=p.id)
    apply_product_patch(p, patch)
    db.session.flush()
    return p


def delete_product(*, product_id: int) -> None:
    """
    Remove a product and its regional counters.

    Order lines and stock movements keep their plain product_id values.
    """
    p = get_product(product_id)
    name = p.name
    db.session.delete(p)
    db.session.flush()
    current_app.logger.info("Product deleted: id=%s name=%s", product_id, name)


def list_products(*, search: str | None = None, low_stock: bool = False) -> list[Product]:
    """Name/SKU search is case-insensitive substring match."""
    q = db.session.query(Product)
    if search:
        term = f"%{search.strip().lower()}%"
        q = q.filter(or_(func.lower(Product.name).like(term), func.lower(Product.sku).like(term)))
    products = q.order_by(Product.name.asc(), Product.id.asc()).all()
    if low_stock:
        products = [p for p in products if is_low_stock(p)]
    return products
