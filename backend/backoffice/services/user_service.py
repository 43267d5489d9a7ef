# Overview: User registration with a single bootstrap admin, plus approve/reject.

from __future__ import annotations

"""
Users & Approval

- Credentials are held by the identity provider; this service never sees them.
- The first registrant becomes the bootstrap admin: role Admin, approved,
  is_bootstrap=True. A partial unique index guarantees at most one such row,
  so when two "first" registrations race, the loser's insert fails and it is
  re-registered as an ordinary pending user.
- Everyone after that is pending until an admin approves or rejects them.

register_user commits itself (the bootstrap race is decided at commit);
approve/reject leave the commit to the caller.
"""

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import User, UserRole, ApprovalStatus, Region
from ..time_utils import utcnow
from ..validation import (
    ValidationError,
    ConflictError,
    NotFoundError,
    coerce_int,
    require_text,
    optional_text,
)


class UserError(Exception):
    """Raised when user operations fail."""
    pass


def _normalize_email(raw: str) -> str:
    email = raw.strip().lower()
    if "@" not in email or email.startswith("@") or email.endswith("@"):
        raise ValidationError("email must be a valid email address")
    return email


def _resolve_role(role) -> str:
    if role is None:
        return UserRole.SALES_AGENT
    if role not in UserRole.ALL:
        raise ValidationError(f"Invalid role: {role!r}. Must be one of: {', '.join(UserRole.ALL)}")
    return role


def _resolve_region_id(region_id):
    if region_id is None or region_id == "":
        return None
    rid = coerce_int(region_id, "region_id")
    if not db.session.get(Region, rid):
        raise ValidationError(f"Region {rid} not found")
    return rid


def register_user(*, payload: dict) -> User:
    """
    Register a user. Commits.

    Raises:
        ValidationError: missing/invalid fields
        ConflictError: email already registered
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    name = require_text(payload, "name")
    email = _normalize_email(require_text(payload, "email"))
    phone = optional_text(payload, "phone")
    requested_role = _resolve_role(payload.get("role"))
    region_id = _resolve_region_id(payload.get("region_id"))

    if db.session.query(User.id).filter_by(email=email).first():
        raise ConflictError(f"Email already registered: {email}")

    is_first = db.session.query(User.id).first() is None
    if is_first:
        user = User(
            name=name,
            email=email,
            phone=phone,
            role=UserRole.ADMIN,
            region_id=region_id,
            status=ApprovalStatus.APPROVED,
            is_approved=True,
            is_bootstrap=True,
            registered_at=utcnow(),
            decided_at=utcnow(),
        )
        db.session.add(user)
        try:
            db.session.commit()
            current_app.logger.info("Bootstrap admin registered: id=%s email=%s", user.id, email)
            return user
        except IntegrityError:
            # Another registration won the bootstrap slot (or took the email)
            db.session.rollback()
            if db.session.query(User.id).filter_by(email=email).first():
                raise ConflictError(f"Email already registered: {email}")

    user = User(
        name=name,
        email=email,
        phone=phone,
        role=requested_role,
        region_id=region_id,
        status=ApprovalStatus.PENDING,
        is_approved=False,
        is_bootstrap=False,
        registered_at=utcnow(),
    )
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError(f"Email already registered: {email}")

    current_app.logger.info("User registered (pending approval): id=%s email=%s", user.id, email)
    return user


def get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError(f"User {user_id} not found")
    return user


def list_users(*, status: str | None = None) -> list[User]:
    q = db.session.query(User)
    if status:
        if status not in ApprovalStatus.ALL:
            raise ValidationError(f"Invalid status: {status!r}")
        q = q.filter(User.status == status)
    return q.order_by(User.registered_at.asc(), User.id.asc()).all()


def approve_user(user_id: int, *, actor: User, role: str | None = None, region_id=None) -> User:
    """Approve a pending (or previously rejected) user, optionally assigning role/region."""
    user = get_user(user_id)
    if user.is_bootstrap:
        raise UserError("The bootstrap admin cannot be re-decided")

    if role is not None:
        user.role = _resolve_role(role)
    if region_id is not None:
        user.region_id = _resolve_region_id(region_id)

    user.status = ApprovalStatus.APPROVED
    user.is_approved = True
    user.decided_at = utcnow()
    user.decided_by_user_id = actor.id
    db.session.flush()

    current_app.logger.info("User approved: id=%s role=%s by=%s", user.id, user.role, actor.id)
    return user


def reject_user(user_id: int, *, actor: User) -> User:
    user = get_user(user_id)
    if user.is_bootstrap:
        raise UserError("The bootstrap admin cannot be re-decided")
    if user.id == actor.id:
        raise UserError("You cannot reject your own account")

    user.status = ApprovalStatus.REJECTED
    user.is_approved = False
    user.decided_at = utcnow()
    user.decided_by_user_id = actor.id
    db.session.flush()

    current_app.logger.info("User rejected: id=%s by=%s", user.id, actor.id)
    return user
