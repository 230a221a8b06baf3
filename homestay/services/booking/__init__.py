from homestay.services.booking.availability_service import AvailabilityChecker
from homestay.services.booking.booking_lifecycle import (
    TRANSITIONS,
    BookingLifecycle,
    can_transition,
    is_terminal,
)
from homestay.services.booking.booking_service import BookingService

__all__ = [
    "AvailabilityChecker",
    "TRANSITIONS",
    "BookingLifecycle",
    "can_transition",
    "is_terminal",
    "BookingService",
]
