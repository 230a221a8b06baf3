"""
Booking repository: overlap queries, activity log and customer listings.
"""

import secrets
from datetime import date
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from homestay.core.exceptions import BookingNotFoundError, DatabaseError
from homestay.models.booking import Booking, BookingActivity, BookingServiceItem
from homestay.models.enums import (
    BLOCKING_BOOKING_STATUSES,
    BookingActivityType,
    BookingStatus,
    UserRole,
)
from homestay.repositories.base_repository import BaseRepository


class BookingRepository(BaseRepository[Booking]):
    """Repository for bookings and their activity log."""

    not_found_error = BookingNotFoundError

    def __init__(self, db: Session):
        super().__init__(Booking, db)

    # ==================== Availability ====================

    def find_conflicting_bookings(
        self,
        room_id: str,
        check_in_date: date,
        check_out_date: date,
        exclude_booking_id: Optional[str] = None,
        statuses: Sequence[BookingStatus] = BLOCKING_BOOKING_STATUSES,
    ) -> List[Booking]:
        """
        Bookings on the room whose half-open stay overlaps
        ``[check_in_date, check_out_date)`` and whose status blocks the room.
        """
        try:
            stmt = (
                select(Booking)
                .where(
                    Booking.room_id == room_id,
                    Booking.booking_status.in_(list(statuses)),
                    Booking.check_in_date < check_out_date,
                    Booking.check_out_date > check_in_date,
                )
                .order_by(Booking.check_in_date)
            )
            if exclude_booking_id:
                stmt = stmt.where(Booking.id != exclude_booking_id)
            return list(self.db.scalars(stmt).unique().all())
        except SQLAlchemyError as e:
            raise DatabaseError(f"Conflict lookup failed: {str(e)}") from e

    def lock_booking(self, booking_id: str) -> Booking:
        """Reload the booking row with ``SELECT ... FOR UPDATE``."""
        try:
            booking = self.db.scalar(
                select(Booking)
                .where(Booking.id == booking_id)
                .with_for_update(of=Booking)
                .execution_options(populate_existing=True)
            )
        except SQLAlchemyError as e:
            raise DatabaseError(f"Booking lock failed: {str(e)}") from e
        if booking is None:
            raise BookingNotFoundError(booking_id)
        return booking

    # ==================== Lookups ====================

    def find_by_customer(
        self,
        customer_id: str,
        status: Optional[BookingStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Booking]:
        stmt = select(Booking).where(Booking.customer_id == customer_id)
        if status is not None:
            stmt = stmt.where(Booking.booking_status == status)
        stmt = stmt.order_by(Booking.check_in_date.desc()).offset(skip).limit(limit)
        try:
            return list(self.db.scalars(stmt).unique().all())
        except SQLAlchemyError as e:
            raise DatabaseError(f"Customer booking lookup failed: {str(e)}") from e

    @staticmethod
    def generate_booking_code(booking_day: date) -> str:
        """Readable reference such as ``BK20250601A1B2C3``."""
        return f"BK{booking_day.strftime('%Y%m%d')}{secrets.token_hex(3).upper()}"

    # ==================== Activity log ====================

    def add_activity(
        self,
        booking: Booking,
        activity_type: BookingActivityType,
        to_status: BookingStatus,
        from_status: Optional[BookingStatus] = None,
        actor_id: Optional[str] = None,
        actor_role: Optional[UserRole] = None,
        notes: Optional[str] = None,
    ) -> BookingActivity:
        activity = BookingActivity(
            booking_id=booking.id,
            activity_type=activity_type,
            from_status=from_status,
            to_status=to_status,
            actor_id=actor_id,
            actor_role=actor_role,
            notes=notes,
        )
        try:
            self.db.add(activity)
            self.db.flush()
        except SQLAlchemyError as e:
            raise DatabaseError(f"Activity write failed: {str(e)}") from e
        return activity

    def get_activities(self, booking_id: str) -> List[BookingActivity]:
        stmt = (
            select(BookingActivity)
            .where(BookingActivity.booking_id == booking_id)
            .order_by(BookingActivity.created_at, BookingActivity.id)
        )
        return list(self.db.scalars(stmt).all())

    # ==================== Service lines ====================

    def find_service_line(self, booking_id: str, service_id: str) -> Optional[BookingServiceItem]:
        return self.db.scalar(
            select(BookingServiceItem).where(
                BookingServiceItem.booking_id == booking_id,
                BookingServiceItem.service_id == service_id,
            )
        )
