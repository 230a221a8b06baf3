"""
Booking lifecycle state machine.

    pending -> confirmed -> checked_in -> checked_out
    pending -> cancelled
    confirmed -> cancelled

checked_out and cancelled are terminal. Guards raise domain exceptions and
leave the booking untouched; the ``apply_*`` methods perform the field and
room side effects once a guard has passed. Persistence, locking and the
activity log belong to the booking service.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Dict, FrozenSet, Optional

from homestay.core.exceptions import (
    CancellationWindowClosedError,
    GuestAlreadyCheckedInError,
    GuestAlreadyCheckedOutError,
    GuestNotCheckedInError,
    InvalidStateTransitionError,
    ValidationError,
)
from homestay.models.booking import Booking
from homestay.models.enums import BookingActivityType, BookingStatus
from homestay.utils.date_utils import start_of_local_day, to_utc

TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CHECKED_IN, BookingStatus.CANCELLED}),
    BookingStatus.CHECKED_IN: frozenset({BookingStatus.CHECKED_OUT}),
    BookingStatus.CHECKED_OUT: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

ACTIVITY_FOR_STATUS: Dict[BookingStatus, BookingActivityType] = {
    BookingStatus.PENDING: BookingActivityType.CREATED,
    BookingStatus.CONFIRMED: BookingActivityType.CONFIRMED,
    BookingStatus.CHECKED_IN: BookingActivityType.CHECKED_IN,
    BookingStatus.CHECKED_OUT: BookingActivityType.CHECKED_OUT,
    BookingStatus.CANCELLED: BookingActivityType.CANCELLED,
}

# Stay details (dates, guests, requests) can still change in these states
MODIFIABLE_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})

# Targets reachable through the staff "update status" action
STAFF_DECISION_TARGETS = frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED})


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return target in TRANSITIONS[current]


def is_terminal(status: BookingStatus) -> bool:
    return not TRANSITIONS[status]


class BookingLifecycle:
    """
    Guards and effects for every booking transition.

    Args:
        timezone: Hotel timezone used for calendar-day comparisons
        cancellation_window_hours: Customers cannot cancel a confirmed
            booking this close to the start of the check-in day
    """

    def __init__(self, timezone: str, cancellation_window_hours: int = 24):
        self.timezone = timezone
        self.cancellation_window = timedelta(hours=cancellation_window_hours)
        self.cancellation_window_hours = cancellation_window_hours

    # ------------------------------------------------------------------ guards

    def ensure_status_update(self, booking: Booking, target: BookingStatus) -> None:
        """Staff decision on a pending booking: confirm or cancel."""
        if booking.booking_status != BookingStatus.PENDING:
            raise InvalidStateTransitionError(
                "Only pending bookings can be updated",
                current_status=booking.booking_status.value,
                target_status=target.value,
            )
        if target not in STAFF_DECISION_TARGETS:
            raise ValidationError(
                f"Invalid status '{target.value}'. Pending bookings can only be confirmed or cancelled",
                field_errors={"status": ["Must be 'confirmed' or 'cancelled'"]},
            )

    def ensure_can_modify(self, booking: Booking) -> None:
        if booking.booking_status not in MODIFIABLE_STATUSES:
            raise InvalidStateTransitionError(
                "Only pending or confirmed bookings can be modified",
                current_status=booking.booking_status.value,
                target_status=booking.booking_status.value,
            )

    def ensure_can_check_in(self, booking: Booking, today: date) -> None:
        if booking.check_in_time is not None:
            raise GuestAlreadyCheckedInError(booking.id)
        if booking.booking_status != BookingStatus.CONFIRMED:
            raise InvalidStateTransitionError(
                "Only confirmed bookings can be checked in",
                current_status=booking.booking_status.value,
                target_status=BookingStatus.CHECKED_IN.value,
            )
        if today < booking.check_in_date:
            raise InvalidStateTransitionError(
                "Check-in date has not arrived yet",
                current_status=booking.booking_status.value,
                target_status=BookingStatus.CHECKED_IN.value,
            )

    def ensure_can_check_out(self, booking: Booking) -> None:
        if booking.check_in_time is None:
            raise GuestNotCheckedInError(booking.id)
        if booking.check_out_time is not None:
            raise GuestAlreadyCheckedOutError(booking.id)
        if booking.booking_status != BookingStatus.CHECKED_IN:
            raise InvalidStateTransitionError(
                "Only checked-in bookings can be checked out",
                current_status=booking.booking_status.value,
                target_status=BookingStatus.CHECKED_OUT.value,
            )

    def ensure_can_cancel(self, booking: Booking, by_customer: bool, now: datetime) -> None:
        status = booking.booking_status
        if status in (BookingStatus.CHECKED_IN, BookingStatus.CHECKED_OUT):
            raise InvalidStateTransitionError(
                "Cannot cancel a booking already checked in or completed",
                current_status=status.value,
                target_status=BookingStatus.CANCELLED.value,
            )
        if not can_transition(status, BookingStatus.CANCELLED):
            raise InvalidStateTransitionError(
                "Booking is already cancelled",
                current_status=status.value,
                target_status=BookingStatus.CANCELLED.value,
            )
        if by_customer and status == BookingStatus.CONFIRMED:
            check_in_starts = start_of_local_day(booking.check_in_date, self.timezone)
            if to_utc(now) > check_in_starts - self.cancellation_window:
                raise CancellationWindowClosedError(booking.id, self.cancellation_window_hours)

    # ----------------------------------------------------------------- effects

    @staticmethod
    def apply_confirm(booking: Booking) -> None:
        booking.booking_status = BookingStatus.CONFIRMED

    @staticmethod
    def apply_cancel(booking: Booking, actor_id: str, now: datetime, reason: Optional[str] = None) -> None:
        booking.booking_status = BookingStatus.CANCELLED
        booking.cancelled_at = now
        booking.cancelled_by = actor_id
        booking.cancellation_reason = reason

    @staticmethod
    def apply_check_in(booking: Booking, staff_id: str, now: datetime, notes: Optional[str] = None) -> None:
        booking.booking_status = BookingStatus.CHECKED_IN
        booking.check_in_time = now
        booking.checked_in_by = staff_id
        booking.room.mark_occupied()
        booking.append_staff_note(
            f"[{now.isoformat(timespec='seconds')}] Checked in by {staff_id}" + (f": {notes}" if notes else "")
        )

    @staticmethod
    def apply_check_out(
        booking: Booking,
        staff_id: str,
        now: datetime,
        additional_charges: Decimal = Decimal("0"),
        notes: Optional[str] = None,
    ) -> None:
        if additional_charges < 0:
            raise ValidationError(
                "Additional charges cannot be negative",
                field_errors={"additional_charges": ["Must be greater than or equal to 0"]},
            )
        booking.booking_status = BookingStatus.CHECKED_OUT
        booking.check_out_time = now
        booking.checked_out_by = staff_id
        booking.additional_charges = (booking.additional_charges or Decimal("0")) + additional_charges
        booking.recalculate_total()
        booking.room.mark_vacated()
        booking.append_staff_note(
            f"[{now.isoformat(timespec='seconds')}] Checked out by {staff_id}" + (f": {notes}" if notes else "")
        )
