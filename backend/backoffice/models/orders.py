from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, to_iso_date
from .statuses import DeliveryStatus, PaymentStatus


class Order(db.Model):
    """
    Customer order.

    SNAPSHOT PRICING: line items copy product name, selling price and cost
    price at creation. total_amount is computed once from those snapshots
    and never recomputed, so later catalog price changes and status changes
    do not affect existing orders.

    lead_id is a one-directional back-reference to the web lead this order
    was converted from (if any).
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.UniqueConstraint("order_number", name="uq_orders_order_number"),
        db.Index("ix_orders_status", "delivery_status"),
        db.Index("ix_orders_created_by", "created_by"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_number = db.Column(db.String(32), nullable=False)
    tracking_id = db.Column(db.String(32), nullable=False)

    customer_name = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(32), nullable=False)
    whatsapp = db.Column(db.String(32), nullable=True)
    address = db.Column(db.Text, nullable=False)
    delivery_instructions = db.Column(db.Text, nullable=True)

    region_id = db.Column(db.Integer, db.ForeignKey("regions.id"), nullable=False, index=True)

    total_amount = db.Column(db.Integer, nullable=False)
    logistics_cost = db.Column(db.Integer, nullable=False, default=0)

    payment_status = db.Column(db.String(32), nullable=False, default=PaymentStatus.POD)
    delivery_status = db.Column(db.String(32), nullable=False, default=DeliveryStatus.PENDING)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    created_by = db.Column(db.String(255), nullable=False)
    created_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    lead_id = db.Column(db.Integer, db.ForeignKey("web_leads.id"), nullable=True, index=True)

    reschedule_date = db.Column(db.Date, nullable=True)
    reschedule_notes = db.Column(db.Text, nullable=True)
    reminder_enabled = db.Column(db.Boolean, nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    items = db.relationship(
        "OrderItem",
        back_populates="order",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )
    region = db.relationship("Region")

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Order id={self.id} number={self.order_number!r} status={self.delivery_status!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_number": self.order_number,
            "tracking_id": self.tracking_id,
            "customer_name": self.customer_name,
            "phone": self.phone,
            "whatsapp": self.whatsapp,
            "address": self.address,
            "delivery_instructions": self.delivery_instructions,
            "region_id": self.region_id,
            "items": [item.to_dict() for item in self.items],
            "total_amount": self.total_amount,
            "logistics_cost": self.logistics_cost,
            "payment_status": self.payment_status,
            "delivery_status": self.delivery_status,
            "created_at": to_utc_z(self.created_at),
            "created_by": self.created_by,
            "created_by_user_id": self.created_by_user_id,
            "lead_id": self.lead_id,
            "reschedule_date": to_iso_date(self.reschedule_date),
            "reschedule_notes": self.reschedule_notes,
            "reminder_enabled": self.reminder_enabled,
        }


class OrderItem(db.Model):
    """
    Order line snapshot.

    product_id is a plain value, not a foreign key: the line must survive
    the product being edited or deleted from the catalog.
    """
    __tablename__ = "order_items"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)

    product_id = db.Column(db.Integer, nullable=True)
    product_name = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    price_at_order = db.Column(db.Integer, nullable=False)
    cost_at_order = db.Column(db.Integer, nullable=False, default=0)

    order = db.relationship("Order", back_populates="items")

    @property
    def line_total(self) -> int:
        return self.price_at_order * self.quantity

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "price_at_order": self.price_at_order,
            "cost_at_order": self.cost_at_order,
            "line_total": self.line_total,
        }
