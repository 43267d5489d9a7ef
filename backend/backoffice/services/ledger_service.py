# Overview: Append-only stock movement log.

from __future__ import annotations

from typing import Optional

from ..extensions import db
from ..models import StockMovement
"""
Stock Movement Invariants (authoritative)

- Append-only: movements are never updated or deleted.
- Written inside the same DB transaction as the counter change they record.
- applied_delta is what actually happened; it differs from requested_delta
  only when a counter was clamped at zero (or cleared).
- quantity_after is the counter value right after this movement.
"""


def append_stock_movement(
    *,
    product_id: int,
    pool: str,
    kind: str,
    requested_delta: int,
    applied_delta: int,
    quantity_after: int,
    region_id: int | None = None,
    actor_user_id: int | None = None,
    order_id: int | None = None,
    note: Optional[str] = None,
) -> StockMovement:
    mv = StockMovement(
        product_id=product_id,
        region_id=region_id,
        pool=pool,
        kind=kind,
        requested_delta=requested_delta,
        applied_delta=applied_delta,
        quantity_after=quantity_after,
        actor_user_id=actor_user_id,
        order_id=order_id,
        note=note,
    )
    db.session.add(mv)
    db.session.flush()  # ensures mv.id is assigned without committing
    return mv


def list_stock_movements(
    *,
    product_id: int | None = None,
    region_id: int | None = None,
    order_id: int | None = None,
    limit: int = 100,
) -> list[StockMovement]:
    """Newest first."""
    q = db.session.query(StockMovement)
    if product_id is not None:
        q = q.filter(StockMovement.product_id == product_id)
    if region_id is not None:
        q = q.filter(StockMovement.region_id == region_id)
    if order_id is not None:
        q = q.filter(StockMovement.order_id == order_id)
    return q.order_by(StockMovement.id.desc()).limit(limit).all()
