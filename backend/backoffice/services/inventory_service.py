# Overview: Regional inventory ledger: central and per-hub stock counters.

from __future__ import annotations

"""
Inventory Ledger Invariants (authoritative)

TWO INDEPENDENT POOLS:
- Product.total_stock is the central warehouse counter.
- RegionStock.quantity is one counter per (product, region).
- Both are non-negative integers and are clamped at zero independently.
- Nothing enforces total_stock == sum of anything. A transfer moves the same
  amount between the pools; manual adjustments touch exactly one pool.

CONCURRENCY:
- Every mutation is one read-check-write unit run under run_with_retry.
- Rows are read with SELECT ... FOR UPDATE where the database honours it.
- Every mutation bumps the Product version (updated_at is touched), so two
  writers on the same product conflict with StaleDataError at flush and the
  loser re-runs its checks against fresh counters.

SELLING DOES NOT MOVE STOCK unless DEDUCT_STOCK_ON_DELIVERY is enabled; see
deduct_for_delivery / restore_for_reversal.

Every counter change appends a StockMovement in the same transaction.
Callers commit (routes use commit_session).
"""

from flask import current_app

from ..extensions import db
from ..models import Product, Region, RegionStock, StockPool, MovementKind
from ..time_utils import utcnow
from ..validation import ValidationError, NotFoundError, coerce_int
from .concurrency import lock_for_update, run_with_retry
from .ledger_service import append_stock_movement, list_stock_movements as _list_movements


# Sentinel accepted by adjust_region_stock instead of an integer delta
CLEAR = "clear"


class InventoryError(Exception):
    """Raised when inventory operations fail."""
    pass


class InsufficientStockError(InventoryError):
    """Central stock cannot cover the requested transfer."""

    def __init__(self, product_id: int, available: int, requested: int):
        self.product_id = product_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient central stock for product {product_id}. "
            f"Available: {available}, requested: {requested}"
        )


def _get_product_locked(product_id: int) -> Product:
    product = lock_for_update(db.session.query(Product).filter_by(id=product_id)).first()
    if not product:
        raise NotFoundError(f"Product {product_id} not found")
    return product


def _get_region(region_id) -> Region:
    if region_id is None or region_id == "":
        raise ValidationError("destination region is required")
    region = db.session.get(Region, coerce_int(region_id, "region_id"))
    if not region:
        raise NotFoundError(f"Region {region_id} not found")
    return region


def _get_region_row(product_id: int, region_id: int) -> RegionStock | None:
    return lock_for_update(
        db.session.query(RegionStock).filter_by(product_id=product_id, region_id=region_id)
    ).first()


def _touch(product: Product) -> None:
    # Forces the product row into the UPDATE so its version_id is checked and bumped
    product.updated_at = utcnow()


def transfer_stock(
    product_id: int,
    region_id: int,
    quantity,
    *,
    actor_user_id: int | None = None,
    note: str | None = None,
) -> Product:
    """
    Move quantity units from the central pool into a region's pool.

    Raises:
        ValidationError: quantity not a positive integer, or no region given
        NotFoundError: unknown product or region
        InsufficientStockError: total_stock < quantity (nothing changes)
    """
    if quantity is None:
        raise ValidationError("quantity is required")
    qty = coerce_int(quantity, "quantity")
    if qty <= 0:
        raise ValidationError("quantity must be positive")

    def _op():
        region = _get_region(region_id)
        product = _get_product_locked(product_id)

        if product.total_stock < qty:
            raise InsufficientStockError(product.id, product.total_stock, qty)

        row = _get_region_row(product.id, region.id)
        if row is None:
            row = RegionStock(product_id=product.id, region_id=region.id, quantity=0)
            db.session.add(row)

        product.total_stock -= qty
        row.quantity += qty
        _touch(product)
        db.session.flush()

        append_stock_movement(
            product_id=product.id,
            pool=StockPool.CENTRAL,
            kind=MovementKind.TRANSFER_OUT,
            requested_delta=-qty,
            applied_delta=-qty,
            quantity_after=product.total_stock,
            region_id=None,
            actor_user_id=actor_user_id,
            note=note or f"Transfer to {region.name}",
        )
        append_stock_movement(
            product_id=product.id,
            pool=StockPool.REGION,
            kind=MovementKind.TRANSFER_IN,
            requested_delta=qty,
            applied_delta=qty,
            quantity_after=row.quantity,
            region_id=region.id,
            actor_user_id=actor_user_id,
            note=note or "Transfer from central warehouse",
        )

        current_app.logger.info(
            "Stock transfer: product_id=%s region=%s quantity=%s central_after=%s region_after=%s",
            product.id, region.name, qty, product.total_stock, row.quantity,
        )
        return product

    return run_with_retry(_op)


def adjust_region_stock(
    product_id: int,
    region_id: int,
    delta,
    *,
    actor_user_id: int | None = None,
    note: str | None = None,
) -> RegionStock:
    """
    Apply a signed delta to one regional counter (clamped at zero), or reset
    it to exactly zero with delta=CLEAR. total_stock is untouched.
    """
    clear = isinstance(delta, str) and delta.strip().lower() == CLEAR
    if not clear:
        if delta is None:
            raise ValidationError("delta is required")
        requested = coerce_int(delta, "delta")
        if requested == 0:
            raise ValidationError("delta must be non-zero")

    def _op():
        region = _get_region(region_id)
        product = _get_product_locked(product_id)

        row = _get_region_row(product.id, region.id)
        if row is None:
            row = RegionStock(product_id=product.id, region_id=region.id, quantity=0)
            db.session.add(row)

        before = row.quantity or 0
        if clear:
            req = -before
            after = 0
            kind = MovementKind.REGION_CLEAR
        else:
            req = requested
            after = max(0, before + requested)
            kind = MovementKind.REGION_ADJUST

        row.quantity = after
        _touch(product)
        db.session.flush()

        append_stock_movement(
            product_id=product.id,
            pool=StockPool.REGION,
            kind=kind,
            requested_delta=req,
            applied_delta=after - before,
            quantity_after=after,
            region_id=region.id,
            actor_user_id=actor_user_id,
            note=note,
        )
        return row

    return run_with_retry(_op)


def adjust_central_stock(
    product_id: int,
    delta,
    *,
    actor_user_id: int | None = None,
    note: str | None = None,
) -> Product:
    """Apply a signed delta to total_stock, clamped at zero. Regions untouched."""
    if delta is None:
        raise ValidationError("delta is required")
    requested = coerce_int(delta, "delta")
    if requested == 0:
        raise ValidationError("delta must be non-zero")

    def _op():
        product = _get_product_locked(product_id)
        before = product.total_stock
        after = max(0, before + requested)

        product.total_stock = after
        _touch(product)
        db.session.flush()

        append_stock_movement(
            product_id=product.id,
            pool=StockPool.CENTRAL,
            kind=MovementKind.CENTRAL_ADJUST,
            requested_delta=requested,
            applied_delta=after - before,
            quantity_after=after,
            actor_user_id=actor_user_id,
            note=note,
        )
        return product

    return run_with_retry(_op)


def get_stock_snapshot(product_id: int) -> dict:
    product = db.session.get(Product, product_id)
    if not product:
        raise NotFoundError(f"Product {product_id} not found")
    return {
        "product_id": product.id,
        "total_stock": product.total_stock,
        "stock_per_state": {str(k): v for k, v in product.stock_per_state.items()},
    }


def list_stock_movements(product_id: int, limit: int = 100):
    if not db.session.get(Product, product_id):
        raise NotFoundError(f"Product {product_id} not found")
    return _list_movements(product_id=product_id, limit=limit)


def is_low_stock(product: Product, threshold: int | None = None) -> bool:
    """Central count or any regional count at or below the threshold."""
    limit = product.low_stock_threshold if threshold is None else threshold
    if product.total_stock <= limit:
        return True
    return any(qty <= limit for qty in product.stock_per_state.values())


def list_low_stock(threshold: int | None = None) -> list[Product]:
    products = db.session.query(Product).order_by(Product.name.asc(), Product.id.asc()).all()
    return [p for p in products if is_low_stock(p, threshold)]


# -- Delivery-linked stock (only when DEDUCT_STOCK_ON_DELIVERY is on) --

def _apply_order_lines(order, *, sign: int, kind: str, actor_user_id: int | None) -> None:
    for item in order.items:
        if item.product_id is None:
            continue
        product = lock_for_update(db.session.query(Product).filter_by(id=item.product_id)).first()
        if product is None:
            continue
        row = _get_region_row(product.id, order.region_id)
        # Hubs that never held this product are left alone
        if row is None:
            continue

        before = row.quantity
        after = max(0, before + sign * item.quantity)
        row.quantity = after
        _touch(product)

        append_stock_movement(
            product_id=product.id,
            pool=StockPool.REGION,
            kind=kind,
            requested_delta=sign * item.quantity,
            applied_delta=after - before,
            quantity_after=after,
            region_id=order.region_id,
            actor_user_id=actor_user_id,
            order_id=order.id,
            note=f"{order.order_number}",
        )


def deduct_for_delivery(order, *, actor_user_id: int | None = None) -> None:
    """Take each line out of the order region's counter (clamped at zero)."""
    _apply_order_lines(order, sign=-1, kind=MovementKind.DELIVERY_DEDUCT, actor_user_id=actor_user_id)


def restore_for_reversal(order, *, actor_user_id: int | None = None) -> None:
    """Put each line back into the order region's counter."""
    _apply_order_lines(order, sign=1, kind=MovementKind.DELIVERY_RESTORE, actor_user_id=actor_user_id)
