"""
Room availability checks.

A room is unavailable for ``[check_in, check_out)`` when a confirmed or
checked-in booking on it overlaps that range. Pending bookings are
optimistic and never block; staff confirmation is the commit point.
"""

from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from homestay.core.exceptions import InvalidDateRangeError, RoomUnavailableError
from homestay.core.logging import get_logger
from homestay.models.booking import Booking
from homestay.repositories.booking_repository import BookingRepository
from homestay.repositories.room_repository import RoomRepository
from homestay.utils.date_utils import DateRange

logger = get_logger(__name__)


class AvailabilityChecker:
    """Read-only availability queries over the injected session."""

    def __init__(self, db: Session):
        self.booking_repository = BookingRepository(db)
        self.room_repository = RoomRepository(db)

    @staticmethod
    def _stay(check_in_date: date, check_out_date: date) -> DateRange:
        stay = DateRange(check_in_date, check_out_date)
        if stay.is_empty:
            raise InvalidDateRangeError(check_in_date.isoformat(), check_out_date.isoformat())
        return stay

    def find_conflicts(
        self,
        room_id: str,
        check_in_date: date,
        check_out_date: date,
        excluding_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        """Blocking bookings on the room overlapping the stay."""
        stay = self._stay(check_in_date, check_out_date)
        self.room_repository.get_by_id(room_id)
        return self.booking_repository.find_conflicting_bookings(
            room_id, stay.start, stay.end, exclude_booking_id=excluding_booking_id
        )

    def is_available(
        self,
        room_id: str,
        check_in_date: date,
        check_out_date: date,
        excluding_booking_id: Optional[str] = None,
    ) -> bool:
        return not self.find_conflicts(room_id, check_in_date, check_out_date, excluding_booking_id)

    def assert_available(
        self,
        room_id: str,
        check_in_date: date,
        check_out_date: date,
        excluding_booking_id: Optional[str] = None,
    ) -> None:
        """
        Raises:
            RoomUnavailableError: listing each conflicting stay as
                ``YYYY-MM-DD to YYYY-MM-DD``
        """
        conflicts = self.find_conflicts(room_id, check_in_date, check_out_date, excluding_booking_id)
        if not conflicts:
            return

        ranges = [str(booking.stay) for booking in conflicts]
        logger.info(
            "Room unavailable",
            extra={
                "room_id": room_id,
                "check_in_date": check_in_date.isoformat(),
                "check_out_date": check_out_date.isoformat(),
                "conflicting_ranges": ranges,
            },
        )
        raise RoomUnavailableError(
            room_id,
            check_in_date.isoformat(),
            check_out_date.isoformat(),
            conflicting_ranges=ranges,
        )
