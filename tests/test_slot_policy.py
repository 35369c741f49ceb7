import pytest

from app.core.exceptions import BadRequestException, InvalidTransitionException
from app.services import slot_policy


class TestStatusTransitions:
    """Tests for appointment status rules."""

    @pytest.mark.parametrize("current", ["PENDING", "CONFIRMED"])
    @pytest.mark.parametrize("requested", ["PENDING", "CONFIRMED", "COMPLETED", "CANCELLED"])
    def test_active_appointment_can_move_anywhere(self, current, requested):
        slot_policy.check_status_transition(current, requested)

    def test_completed_appointment_is_frozen(self):
        with pytest.raises(InvalidTransitionException) as exc_info:
            slot_policy.check_status_transition("COMPLETED", "PENDING")
        assert exc_info.value.message == "Cannot change status of completed appointment"
        assert exc_info.value.status_code == 400

    def test_cancelled_appointment_is_frozen(self):
        with pytest.raises(InvalidTransitionException) as exc_info:
            slot_policy.check_status_transition("CANCELLED", "CONFIRMED")
        assert exc_info.value.message == "Cannot change status of cancelled appointment"

    def test_terminal_status_may_be_resubmitted(self):
        slot_policy.check_status_transition("COMPLETED", "COMPLETED")
        slot_policy.check_status_transition("CANCELLED", "CANCELLED")


class TestPaymentTransitions:
    """Tests for payment status rules."""

    def test_refunded_payment_is_frozen(self):
        with pytest.raises(InvalidTransitionException) as exc_info:
            slot_policy.check_payment_transition("REFUNDED", "PAID")
        assert exc_info.value.message == "Cannot change status of refunded payment"

    def test_pending_and_paid_can_change(self):
        slot_policy.check_payment_transition("PENDING", "PAID")
        slot_policy.check_payment_transition("PAID", "REFUNDED")
        slot_policy.check_payment_transition("PAID", "PENDING")

    def test_payment_after_cancel(self):
        assert slot_policy.payment_status_after_cancel("PAID") == "REFUNDED"
        assert slot_policy.payment_status_after_cancel("PENDING") == "PENDING"
        assert slot_policy.payment_status_after_cancel("REFUNDED") == "REFUNDED"

    def test_cancel_keeps_refunded_payment(self):
        changes = slot_policy.resolve_status_change("CONFIRMED", "REFUNDED", "CANCELLED")
        assert changes == {"status": "CANCELLED", "payment_status": "REFUNDED"}


class TestResolveStatusChange:
    """Tests for combined status and payment changes."""

    def test_cancel_paid_refunds(self):
        changes = slot_policy.resolve_status_change("CONFIRMED", "PAID", "CANCELLED")
        assert changes == {"status": "CANCELLED", "payment_status": "REFUNDED"}

    def test_cancel_unpaid_keeps_pending(self):
        changes = slot_policy.resolve_status_change("PENDING", "PENDING", "CANCELLED")
        assert changes == {"status": "CANCELLED", "payment_status": "PENDING"}

    def test_confirm_leaves_payment_alone(self):
        changes = slot_policy.resolve_status_change("PENDING", "PAID", "CONFIRMED")
        assert changes == {"status": "CONFIRMED"}

    def test_recancelling_does_not_touch_payment(self):
        changes = slot_policy.resolve_status_change("CANCELLED", "REFUNDED", "CANCELLED")
        assert changes == {"status": "CANCELLED"}

    def test_completed_cannot_be_cancelled(self):
        with pytest.raises(InvalidTransitionException):
            slot_policy.resolve_status_change("COMPLETED", "PAID", "CANCELLED")


class TestBookingChecks:
    """Tests for chamber and slot checks done before booking."""

    def test_check_cancellable(self):
        slot_policy.check_cancellable("PENDING")
        with pytest.raises(InvalidTransitionException) as exc_info:
            slot_policy.check_cancellable("COMPLETED")
        assert exc_info.value.message == "Cannot cancel completed appointment"

    @pytest.mark.parametrize(
        "is_active,is_verified",
        [(False, True), (True, False), (False, False)],
    )
    def test_unbookable_chamber(self, is_active, is_verified):
        with pytest.raises(BadRequestException) as exc_info:
            slot_policy.check_chamber_bookable({"is_active": is_active, "is_verified": is_verified})
        assert exc_info.value.message == "Chamber is not active or verified"

    def test_bookable_chamber(self):
        slot_policy.check_chamber_bookable({"is_active": True, "is_verified": True})

    @pytest.mark.parametrize("slot", [0, -1, 9])
    def test_slot_out_of_range(self, slot):
        with pytest.raises(BadRequestException) as exc_info:
            slot_policy.check_slot_number(slot, 8)
        assert exc_info.value.message == "Invalid slot number"

    def test_slot_bounds_are_inclusive(self):
        slot_policy.check_slot_number(1, 8)
        slot_policy.check_slot_number(8, 8)

    def test_available_slots(self):
        assert slot_policy.available_slots(5, [2, 4]) == [1, 3, 5]
        assert slot_policy.available_slots(3, []) == [1, 2, 3]
        assert slot_policy.available_slots(2, [1, 2]) == []
