from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z
from .statuses import UserRole, ApprovalStatus


class User(db.Model):
    """
    Back-office user account.

    Credentials live with the external identity provider; this row only
    carries the role, region and approval state used for permission checks
    and attribution (Order.created_by, lead/cart agent_name).

    BOOTSTRAP ADMIN: the first registrant is auto-approved as Admin and
    flagged is_bootstrap. The partial unique index allows at most one
    is_bootstrap=True row, so two concurrent "first" registrations cannot
    both become the bootstrap admin.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.UniqueConstraint("email", name="uq_users_email"),
        db.Index(
            "uq_users_single_bootstrap",
            "is_bootstrap",
            unique=True,
            sqlite_where=db.text("is_bootstrap = 1"),
            postgresql_where=db.text("is_bootstrap"),
        ),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(32), nullable=True)

    role = db.Column(db.String(32), nullable=False, default=UserRole.SALES_AGENT)
    region_id = db.Column(db.Integer, db.ForeignKey("regions.id"), nullable=True)

    status = db.Column(db.String(16), nullable=False, default=ApprovalStatus.PENDING, index=True)
    is_approved = db.Column(db.Boolean, nullable=False, default=False)
    is_bootstrap = db.Column(db.Boolean, nullable=False, default=False)

    registered_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    decided_at = db.Column(db.DateTime(timezone=True), nullable=True)
    decided_by_user_id = db.Column(db.Integer, nullable=True)

    def __repr__(self) -> str:
        return f"<User id={self.id} name={self.name!r} role={self.role!r} status={self.status!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "role": self.role,
            "region_id": self.region_id,
            "status": self.status,
            "is_approved": self.is_approved,
            "is_bootstrap": self.is_bootstrap,
            "registered_at": to_utc_z(self.registered_at),
            "decided_at": to_utc_z(self.decided_at) if self.decided_at else None,
        }
