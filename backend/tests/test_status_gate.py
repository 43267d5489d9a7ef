"""
Delivery status gate tests (no database).

Verifies:
- Agents may only reschedule; managers and admins may pick any status
- Delivered, Rescheduled and Cancelled require their side data
- The role check runs before side data is inspected
"""

from datetime import date

import pytest

from backoffice.models import DeliveryStatus, UserRole
from backoffice.services.status_gate import (
    TransitionForbiddenError,
    DeliveredDetails,
    RescheduledDetails,
    CancelledDetails,
    NoDetails,
    parse_transition,
    check_transition,
    allowed_statuses,
    authorize_transition,
)
from backoffice.validation import ValidationError


# =============================================================================
# ROLE RULE
# =============================================================================


class TestRoleRule:

    @pytest.mark.parametrize("status", [s for s in DeliveryStatus.ALL if s != DeliveryStatus.RESCHEDULED])
    def test_agent_denied_everything_but_reschedule(self, status):
        with pytest.raises(TransitionForbiddenError) as exc:
            check_transition(UserRole.SALES_AGENT, status)
        assert exc.value.status == status

    def test_agent_may_reschedule(self):
        check_transition(UserRole.SALES_AGENT, DeliveryStatus.RESCHEDULED)

    @pytest.mark.parametrize("role", [UserRole.ADMIN, UserRole.STATE_MANAGER])
    @pytest.mark.parametrize("status", DeliveryStatus.ALL)
    def test_privileged_roles_any_status(self, role, status):
        check_transition(role, status)

    def test_allowed_statuses(self):
        assert allowed_statuses(UserRole.SALES_AGENT) == (DeliveryStatus.RESCHEDULED,)
        assert allowed_statuses(UserRole.ADMIN) == DeliveryStatus.ALL

    def test_unknown_role_only_reschedules(self):
        assert allowed_statuses("Intern") == (DeliveryStatus.RESCHEDULED,)


# =============================================================================
# SIDE DATA
# =============================================================================


class TestSideData:

    def test_delivered_requires_logistics_cost(self):
        with pytest.raises(ValidationError):
            parse_transition(DeliveryStatus.DELIVERED, {})
        with pytest.raises(ValidationError):
            parse_transition(DeliveryStatus.DELIVERED, {"logistics_cost": -1})
        assert parse_transition(DeliveryStatus.DELIVERED, {"logistics_cost": 2500}) == DeliveredDetails(2500)

    def test_delivered_zero_cost_is_allowed(self):
        assert parse_transition(DeliveryStatus.DELIVERED, {"logistics_cost": 0}).logistics_cost == 0

    def test_rescheduled_requires_date_and_notes(self):
        with pytest.raises(ValidationError):
            parse_transition(DeliveryStatus.RESCHEDULED, {"notes": "Customer travelling"})
        with pytest.raises(ValidationError):
            parse_transition(DeliveryStatus.RESCHEDULED, {"reschedule_date": "2026-11-02"})
        with pytest.raises(ValidationError):
            parse_transition(DeliveryStatus.RESCHEDULED, {"reschedule_date": "02/11/2026", "notes": "x"})
        with pytest.raises(ValidationError):
            parse_transition(DeliveryStatus.RESCHEDULED, {"reschedule_date": "   ", "notes": "call back"})

        details = parse_transition(
            DeliveryStatus.RESCHEDULED,
            {"reschedule_date": "2026-11-02", "notes": " Customer travelling "},
        )
        assert details == RescheduledDetails(date=date(2026, 11, 2), notes="Customer travelling")
        assert details.reminder_enabled is True

    def test_rescheduled_reminder_must_be_bool(self):
        with pytest.raises(ValidationError):
            parse_transition(
                DeliveryStatus.RESCHEDULED,
                {"reschedule_date": "2026-11-02", "notes": "x", "reminder_enabled": "no"},
            )
        details = parse_transition(
            DeliveryStatus.RESCHEDULED,
            {"reschedule_date": "2026-11-02", "notes": "x", "reminder_enabled": False},
        )
        assert details.reminder_enabled is False

    def test_cancel_requires_confirmation(self):
        with pytest.raises(ValidationError):
            parse_transition(DeliveryStatus.CANCELLED, {})
        with pytest.raises(ValidationError):
            parse_transition(DeliveryStatus.CANCELLED, {"confirm": "yes"})
        assert parse_transition(DeliveryStatus.CANCELLED, {"confirm": True}) == CancelledDetails(True)

    @pytest.mark.parametrize("status", [DeliveryStatus.PENDING, DeliveryStatus.IN_TRANSIT,
                                        DeliveryStatus.RETURNED, DeliveryStatus.FAILED])
    def test_plain_statuses(self, status):
        assert parse_transition(status, {}) == NoDetails(status)

    @pytest.mark.parametrize("status", [None, "", "Lost", "delivered"])
    def test_unknown_status(self, status):
        with pytest.raises(ValidationError):
            parse_transition(status, {})


# =============================================================================
# ORDER OF CHECKS
# =============================================================================


def test_agent_forbidden_before_side_data_checked():
    with pytest.raises(TransitionForbiddenError):
        authorize_transition(UserRole.SALES_AGENT, DeliveryStatus.DELIVERED, {})


def test_unknown_status_is_validation_error_for_any_role():
    with pytest.raises(ValidationError):
        authorize_transition(UserRole.SALES_AGENT, "Lost", {})


def test_manager_gets_side_data_error():
    with pytest.raises(ValidationError):
        authorize_transition(UserRole.STATE_MANAGER, DeliveryStatus.DELIVERED, {})
