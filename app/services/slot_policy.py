"""Rules deciding whether an appointment change is allowed.

Nothing here touches the database; callers load the current rows and
apply the returned changes.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from app.core.exceptions import BadRequestException, InvalidTransitionException
from app.schemas.appointments import AppointmentStatus, PaymentStatus

# Statuses that hold a slot.
ACTIVE_STATUSES = frozenset({AppointmentStatus.PENDING.value, AppointmentStatus.CONFIRMED.value})
TERMINAL_STATUSES = frozenset(
    {AppointmentStatus.COMPLETED.value, AppointmentStatus.CANCELLED.value}
)


def check_status_transition(current: str, requested: str) -> None:
    """
    Reject moving a completed or cancelled appointment to another status.

    Raises:
        InvalidTransitionException: If the transition is not allowed
    """
    if current in TERMINAL_STATUSES and requested != current:
        raise InvalidTransitionException(
            f"Cannot change status of {current.lower()} appointment"
        )


def check_payment_transition(current: str, requested: str) -> None:
    """
    Reject moving a refunded payment to another status.

    Raises:
        InvalidTransitionException: If the transition is not allowed
    """
    if current == PaymentStatus.REFUNDED.value and requested != current:
        raise InvalidTransitionException("Cannot change status of refunded payment")


def payment_status_after_cancel(current_payment: str) -> str:
    """Paid appointments are refunded on cancellation; other payment states are kept."""
    if current_payment == PaymentStatus.PAID.value:
        return PaymentStatus.REFUNDED.value
    return current_payment


def resolve_status_change(
    current_status: str,
    current_payment: str,
    requested_status: str,
) -> dict[str, str]:
    """
    Work out the column changes for a requested status.

    Args:
        current_status: Stored appointment status
        current_payment: Stored payment status
        requested_status: Status the caller asks for

    Returns:
        Values to write, including the payment status implied by a cancellation

    Raises:
        InvalidTransitionException: If the status may not change
    """
    check_status_transition(current_status, requested_status)

    changes = {"status": requested_status}
    if (
        requested_status == AppointmentStatus.CANCELLED.value
        and current_status != AppointmentStatus.CANCELLED.value
    ):
        changes["payment_status"] = payment_status_after_cancel(current_payment)
    return changes


def check_cancellable(current_status: str) -> None:
    if current_status == AppointmentStatus.COMPLETED.value:
        raise InvalidTransitionException("Cannot cancel completed appointment")


def check_chamber_bookable(chamber: Mapping[str, Any]) -> None:
    if not (chamber["is_verified"] and chamber["is_active"]):
        raise BadRequestException("Chamber is not active or verified")


def check_slot_number(slot_number: int, max_slots: int) -> None:
    if not 1 <= slot_number <= max_slots:
        raise BadRequestException("Invalid slot number")


def available_slots(max_slots: int, booked: Iterable[int]) -> list[int]:
    """Slots in ``1..max_slots`` not present in ``booked``."""
    taken = set(booked)
    return [slot for slot in range(1, max_slots + 1) if slot not in taken]
