# Overview: Role-gated delivery status assignment with typed per-transition details.

from __future__ import annotations

"""
Delivery status is a flat enum assignment, not a graph:
- Any status may be selected from any status (no terminal states).
- Roles without SET_ANY_DELIVERY_STATUS (Sales Agent) may only pick Rescheduled.
- Delivered, Rescheduled and Cancelled carry mandatory side data, modelled
  as one details type per kind instead of a loose dict of extra fields.

parse_transition() turns a JSON body into the right details object;
check_transition() enforces the role rule. Neither touches the database.
"""

from dataclasses import dataclass
from datetime import date
from typing import Union

from ..models.statuses import DeliveryStatus
from ..permissions import role_permissions
from ..time_utils import parse_iso_date
from ..validation import ValidationError, coerce_int


class TransitionForbiddenError(Exception):
    """Actor's role may not assign the requested status."""

    def __init__(self, role: str, status: str):
        self.role = role
        self.status = status
        super().__init__(f"Role '{role}' may not set delivery status to '{status}'")


@dataclass(frozen=True)
class DeliveredDetails:
    logistics_cost: int
    status: str = DeliveryStatus.DELIVERED


@dataclass(frozen=True)
class RescheduledDetails:
    date: date
    notes: str
    reminder_enabled: bool = True
    status: str = DeliveryStatus.RESCHEDULED


@dataclass(frozen=True)
class CancelledDetails:
    confirmed: bool
    status: str = DeliveryStatus.CANCELLED


@dataclass(frozen=True)
class NoDetails:
    """Pending, In Transit, Returned, Failed."""
    status: str


TransitionDetails = Union[DeliveredDetails, RescheduledDetails, CancelledDetails, NoDetails]


def parse_transition(status: str | None, payload: dict | None = None) -> TransitionDetails:
    """
    Build the details object for status from a JSON body.

    Raises ValidationError for unknown statuses and missing/malformed side data.
    """
    payload = payload or {}
    if status not in DeliveryStatus.ALL:
        raise ValidationError(
            f"Invalid delivery status: {status!r}. Must be one of: {', '.join(DeliveryStatus.ALL)}"
        )

    if status == DeliveryStatus.DELIVERED:
        raw = payload.get("logistics_cost")
        if raw is None or raw == "":
            raise ValidationError("logistics_cost is required when marking an order Delivered")
        cost = coerce_int(raw, "logistics_cost")
        if cost < 0:
            raise ValidationError("logistics_cost must be >= 0")
        return DeliveredDetails(logistics_cost=cost)

    if status == DeliveryStatus.RESCHEDULED:
        raw_date = payload.get("reschedule_date")
        if not raw_date:
            raise ValidationError("reschedule_date is required when rescheduling")
        if not isinstance(raw_date, str):
            raise ValidationError("reschedule_date must be an ISO-8601 date (YYYY-MM-DD)")
        try:
            when = parse_iso_date(raw_date)
        except ValueError:
            raise ValidationError("reschedule_date must be an ISO-8601 date (YYYY-MM-DD)")
        if when is None:
            raise ValidationError("reschedule_date is required when rescheduling")
        notes = payload.get("notes")
        if notes is None or str(notes).strip() == "":
            raise ValidationError("notes are required when rescheduling")
        reminder = payload.get("reminder_enabled", True)
        if not isinstance(reminder, bool):
            raise ValidationError("reminder_enabled must be a boolean")
        return RescheduledDetails(date=when, notes=str(notes).strip(), reminder_enabled=reminder)

    if status == DeliveryStatus.CANCELLED:
        if payload.get("confirm") is not True:
            raise ValidationError("Cancelling an order must be confirmed (confirm: true)")
        return CancelledDetails(confirmed=True)

    return NoDetails(status=status)


def can_set_any_status(role: str) -> bool:
    return "SET_ANY_DELIVERY_STATUS" in role_permissions(role)


def check_transition(role: str, status: str) -> None:
    """Raise TransitionForbiddenError unless role may assign status."""
    if status == DeliveryStatus.RESCHEDULED:
        return
    if not can_set_any_status(role):
        raise TransitionForbiddenError(role, status)


def allowed_statuses(role: str) -> tuple[str, ...]:
    if can_set_any_status(role):
        return DeliveryStatus.ALL
    return (DeliveryStatus.RESCHEDULED,)


def authorize_transition(role: str, status: str | None, payload: dict | None = None) -> TransitionDetails:
    """
    Role check first, then side data: an agent asking for Delivered gets
    TransitionForbiddenError even when logistics_cost is missing.
    """
    if status in DeliveryStatus.ALL:
        check_transition(role, status)
    return parse_transition(status, payload)
