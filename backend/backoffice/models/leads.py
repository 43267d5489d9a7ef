from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z
from .statuses import LeadStatus, CartStatus


class WebLead(db.Model):
    """
    Pre-order contact captured by an embedded landing-page form.

    Conversion into an Order is one-directional: the Order keeps lead_id,
    the lead only records it through its status and notes.
    """
    __tablename__ = "web_leads"
    __table_args__ = (
        db.Index("ix_web_leads_created_at", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    form_id = db.Column(db.String(64), nullable=True)

    customer_name = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(32), nullable=False)
    whatsapp = db.Column(db.String(32), nullable=True)
    address = db.Column(db.Text, nullable=True)
    delivery_instructions = db.Column(db.Text, nullable=True)
    region_id = db.Column(db.Integer, db.ForeignKey("regions.id"), nullable=True)

    status = db.Column(db.String(32), nullable=False, default=LeadStatus.NEW)
    notes = db.Column(db.Text, nullable=False, default="")
    agent_name = db.Column(db.String(255), nullable=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    items = db.relationship(
        "WebLeadItem",
        back_populates="lead",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="WebLeadItem.id",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "form_id": self.form_id,
            "customer_name": self.customer_name,
            "phone": self.phone,
            "whatsapp": self.whatsapp,
            "address": self.address,
            "delivery_instructions": self.delivery_instructions,
            "region_id": self.region_id,
            "items": [item.to_dict() for item in self.items],
            "status": self.status,
            "notes": self.notes,
            "agent_name": self.agent_name,
            "created_at": to_utc_z(self.created_at),
        }


class WebLeadItem(db.Model):
    __tablename__ = "web_lead_items"
    __table_args__ = ({"sqlite_autoincrement": True},)

    id = db.Column(db.Integer, primary_key=True)
    lead_id = db.Column(db.Integer, db.ForeignKey("web_leads.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = db.Column(db.Integer, nullable=False)
    quantity = db.Column(db.Integer, nullable=False)

    lead = db.relationship("WebLead", back_populates="items")

    def to_dict(self) -> dict:
        return {"product_id": self.product_id, "quantity": self.quantity}


class AbandonedCart(db.Model):
    """
    Partially filled form captured while the customer was still typing.

    id is the client-side session id, so repeated captures from the same
    browser session update one row.
    """
    __tablename__ = "abandoned_carts"

    id = db.Column(db.String(64), primary_key=True)
    form_id = db.Column(db.String(64), nullable=True)

    customer_name = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    whatsapp = db.Column(db.String(32), nullable=True)
    address = db.Column(db.Text, nullable=True)
    delivery_instructions = db.Column(db.Text, nullable=True)

    # [{"product_id": int, "quantity": int}, ...]
    items = db.Column(db.JSON, nullable=False, default=list)

    agent_name = db.Column(db.String(255), nullable=True, index=True)
    page_url = db.Column(db.String(512), nullable=True)
    status = db.Column(db.String(16), nullable=False, default=CartStatus.ABANDONED, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    last_updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    @property
    def completion_rate(self) -> int:
        filled = sum(1 for v in (self.customer_name, self.phone, self.address, self.whatsapp) if v)
        return round(filled / 4 * 100)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "form_id": self.form_id,
            "customer_name": self.customer_name,
            "phone": self.phone,
            "whatsapp": self.whatsapp,
            "address": self.address,
            "delivery_instructions": self.delivery_instructions,
            "items": list(self.items or []),
            "agent_name": self.agent_name,
            "page_url": self.page_url,
            "status": self.status,
            "completion_rate": self.completion_rate,
            "created_at": to_utc_z(self.created_at),
            "last_updated_at": to_utc_z(self.last_updated_at),
        }
