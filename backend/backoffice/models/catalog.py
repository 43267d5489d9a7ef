from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, to_iso_date


class Region(db.Model):
    """
    Regional distribution hub ("state hub").

    Each hub holds its own stock counter per product (RegionStock), separate
    from the central warehouse counter on Product.
    """
    __tablename__ = "regions"
    __table_args__ = (
        db.UniqueConstraint("name", name="uq_regions_name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    whatsapp_group_link = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<Region id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "whatsapp_group_link": self.whatsapp_group_link,
            "created_at": to_utc_z(self.created_at),
        }


class Product(db.Model):
    """
    Product master data plus the central warehouse counter.

    TWO-POOL STOCK MODEL:
    - total_stock is the un-allocated central pool.
    - RegionStock rows hold one counter per (product, region).
    - The pools are independent counters. A transfer moves the same amount
      out of one and into the other, but manual adjustments touch only one
      pool, so total_stock is NOT the sum of anything.

    version_id is SQLAlchemy's optimistic version counter: an UPDATE that
    races with another writer fails with StaleDataError instead of silently
    overwriting.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_name", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    sku = db.Column(db.String(64), nullable=True)

    # Integer Naira units
    cost_price = db.Column(db.Integer, nullable=False, default=0)
    selling_price = db.Column(db.Integer, nullable=False, default=0)

    batch_number = db.Column(db.String(64), nullable=True)
    expiry_date = db.Column(db.Date, nullable=True)

    total_stock = db.Column(db.Integer, nullable=False, default=0)
    low_stock_threshold = db.Column(db.Integer, nullable=False, default=10)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    region_stock = db.relationship(
        "RegionStock",
        back_populates="product",
        lazy=True,
        cascade="all, delete-orphan",
    )

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} total_stock={self.total_stock}>"

    @property
    def stock_per_state(self) -> dict[int, int]:
        return {row.region_id: row.quantity for row in self.region_stock}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "sku": self.sku,
            "cost_price": self.cost_price,
            "selling_price": self.selling_price,
            "batch_number": self.batch_number,
            "expiry_date": to_iso_date(self.expiry_date),
            "total_stock": self.total_stock,
            # JSON object keys are strings
            "stock_per_state": {str(k): v for k, v in self.stock_per_state.items()},
            "low_stock_threshold": self.low_stock_threshold,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class RegionStock(db.Model):
    """One regional counter: how many units of a product sit in a hub."""
    __tablename__ = "region_stock"
    __table_args__ = (
        db.UniqueConstraint("product_id", "region_id", name="uq_region_stock_product_region"),
        db.CheckConstraint("quantity >= 0", name="ck_region_stock_non_negative"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    region_id = db.Column(db.Integer, db.ForeignKey("regions.id"), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False, default=0)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    product = db.relationship("Product", back_populates="region_stock")
    region = db.relationship("Region")

    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "region_id": self.region_id,
            "quantity": self.quantity,
        }


class LogisticsPartner(db.Model):
    __tablename__ = "logistics_partners"
    __table_args__ = ({"sqlite_autoincrement": True},)

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    region_id = db.Column(db.Integer, db.ForeignKey("regions.id"), nullable=True, index=True)
    contact_person = db.Column(db.String(120), nullable=True)
    phone = db.Column(db.String(32), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    region = db.relationship("Region", backref=db.backref("logistics_partners", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "region_id": self.region_id,
            "contact_person": self.contact_person,
            "phone": self.phone,
            "created_at": to_utc_z(self.created_at),
        }
