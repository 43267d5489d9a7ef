from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class StockMovement(db.Model):
    """
    Append-only record of one stock counter change.

    - Written inside the same transaction as the counter change it records.
    - Never updated or deleted.
    - product_id is not a foreign key: history outlives catalog deletes.
    - requested_delta is what the caller asked for; applied_delta is what
      actually happened after clamping at zero.
    """
    __tablename__ = "stock_movements"
    __table_args__ = (
        db.Index("ix_stock_movements_product_occurred", "product_id", "occurred_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    product_id = db.Column(db.Integer, nullable=False)
    region_id = db.Column(db.Integer, nullable=True)  # None for the central pool

    pool = db.Column(db.String(16), nullable=False)  # CENTRAL, REGION
    kind = db.Column(db.String(32), nullable=False, index=True)

    requested_delta = db.Column(db.Integer, nullable=False)
    applied_delta = db.Column(db.Integer, nullable=False)
    quantity_after = db.Column(db.Integer, nullable=False)

    actor_user_id = db.Column(db.Integer, nullable=True)
    order_id = db.Column(db.Integer, nullable=True, index=True)
    note = db.Column(db.String(255), nullable=True)

    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "region_id": self.region_id,
            "pool": self.pool,
            "kind": self.kind,
            "requested_delta": self.requested_delta,
            "applied_delta": self.applied_delta,
            "quantity_after": self.quantity_after,
            "actor_user_id": self.actor_user_id,
            "order_id": self.order_id,
            "note": self.note,
            "occurred_at": to_utc_z(self.occurred_at),
        }
