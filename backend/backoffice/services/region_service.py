# Overview: State hubs (regions) and the logistics partners that deliver in them.

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import Region, LogisticsPartner
from ..validation import (
    ConflictError,
    NotFoundError,
    ModelValidationPolicy,
    validate_payload,
)


REGION_POLICY = ModelValidationPolicy(
    writable_fields={"name", "whatsapp_group_link"},
    required_on_create={"name"},
)

PARTNER_POLICY = ModelValidationPolicy(
    writable_fields={"name", "region_id", "contact_person", "phone"},
    required_on_create={"name"},
)


def _ensure_unique_name(name: str, *, exclude_id: int | None = None) -> None:
    q = db.session.query(Region).filter(Region.name == name)
    if exclude_id is not None:
        q = q.filter(Region.id != exclude_id)
    if q.first():
        raise ConflictError(f"Region already exists: {name}")


def list_regions() -> list[Region]:
    return db.session.query(Region).order_by(Region.name.asc()).all()


def get_region(region_id: int) -> Region:
    region = db.session.get(Region, region_id)
    if not region:
        raise NotFoundError(f"Region {region_id} not found")
    return region


def create_region(*, payload: dict) -> Region:
    patch = validate_payload(model=Region, payload=payload, policy=REGION_POLICY, partial=False)
    _ensure_unique_name(patch["name"])
    region = Region(**patch)
    db.session.add(region)
    db.session.flush()
    current_app.logger.info("Region created: %s", region.name)
    return region


def update_region(*, region_id: int, payload: dict) -> Region:
    patch = validate_payload(model=Region, payload=payload, policy=REGION_POLICY, partial=True)
    region = get_region(region_id)
    if "name" in patch:
        _ensure_unique_name(patch["name"], exclude_id=region.id)
    for k, v in patch.items():
        setattr(region, k, v)
    db.session.flush()
    return region


def list_logistics_partners(*, region_id: int | None = None) -> list[LogisticsPartner]:
    q = db.session.query(LogisticsPartner)
    if region_id is not None:
        q = q.filter(LogisticsPartner.region_id == region_id)
    return q.order_by(LogisticsPartner.name.asc(), LogisticsPartner.id.asc()).all()


def create_logistics_partner(*, payload: dict) -> LogisticsPartner:
    patch = validate_payload(model=LogisticsPartner, payload=payload, policy=PARTNER_POLICY, partial=False)
    if patch.get("region_id") is not None:
        get_region(patch["region_id"])
    partner = LogisticsPartner(**patch)
    db.session.add(partner)
    db.session.flush()
    return partner
