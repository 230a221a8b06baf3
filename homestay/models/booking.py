"""
Booking models.

This module defines the core booking entity, its service line items and
the append-only activity log written on every lifecycle transition.
"""

from datetime import date as Date, datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    DDL,
    CheckConstraint,
    Date as SQLDate,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    event,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates
from sqlalchemy.sql import func

from homestay.models.base import BaseModel, TimestampModel, enum_column
from homestay.models.enums import (
    BookingActivityType,
    BookingStatus,
    UserRole,
)
from homestay.utils.date_utils import DateRange

if TYPE_CHECKING:
    from homestay.models.room import Room
    from homestay.models.service import AdditionalService

__all__ = [
    "Booking",
    "BookingServiceItem",
    "BookingActivity",
]


class Booking(TimestampModel):
    """
    Core booking entity for room reservations.

    The stay is the half-open range [check_in_date, check_out_date).
    Bookings are never deleted; cancellation is a status.

    Attributes:
        booking_code: Unique human-readable reference (e.g. BK20250601A1B2C3)
        customer_id: Principal who owns the booking
        room_id: Booked room
        number_of_guests: Guests staying, bounded by room type capacity
        base_amount: Sum of nightly prices at booking time
        services_amount: Sum of service line totals
        additional_charges: Charges added at check-out
        total_amount: base_amount + services_amount + additional_charges
        booking_status: Lifecycle state
        staff_notes: Append-only log of staff notes
    """

    __tablename__ = "bookings"

    booking_code: Mapped[str] = mapped_column(
        String(32),
        unique=True,
        nullable=False,
        index=True,
        comment="Unique human-readable booking reference",
    )

    customer_id: Mapped[str] = mapped_column(
        String(36),
        nullable=False,
        index=True,
        comment="Customer principal id (identity is external)",
    )

    room_id: Mapped[str] = mapped_column(
        ForeignKey("rooms.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    check_in_date: Mapped[Date] = mapped_column(
        SQLDate,
        nullable=False,
        index=True,
    )

    check_out_date: Mapped[Date] = mapped_column(
        SQLDate,
        nullable=False,
    )

    number_of_guests: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
    )

    # Pricing captured at booking time
    base_amount: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
        default=Decimal("0"),
    )

    services_amount: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
        default=Decimal("0"),
    )

    additional_charges: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
        default=Decimal("0"),
    )

    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
        default=Decimal("0"),
    )

    booking_status: Mapped[BookingStatus] = mapped_column(
        enum_column(BookingStatus),
        nullable=False,
        default=BookingStatus.PENDING,
        index=True,
    )

    special_requests: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    # Front desk
    check_in_time: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    check_out_time: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    checked_in_by: Mapped[Optional[str]] = mapped_column(
        String(36),
        nullable=True,
    )

    checked_out_by: Mapped[Optional[str]] = mapped_column(
        String(36),
        nullable=True,
    )

    # Cancellation
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    cancelled_by: Mapped[Optional[str]] = mapped_column(
        String(36),
        nullable=True,
    )

    cancellation_reason: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    staff_notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Append-only staff log",
    )

    # Relationships
    room: Mapped["Room"] = relationship(
        "Room",
        back_populates="bookings",
        lazy="joined",
    )

    services: Mapped[List["BookingServiceItem"]] = relationship(
        "BookingServiceItem",
        back_populates="booking",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    activities: Mapped[List["BookingActivity"]] = relationship(
        "BookingActivity",
        back_populates="booking",
        order_by="BookingActivity.created_at",
        lazy="select",
    )

    __table_args__ = (
        Index("ix_booking_room_dates", "room_id", "check_in_date", "check_out_date"),
        Index("ix_booking_room_status", "room_id", "booking_status"),
        CheckConstraint(
            "check_out_date > check_in_date",
            name="ck_booking_dates_ordered",
        ),
        CheckConstraint(
            "number_of_guests >= 1",
            name="ck_booking_guests_positive",
        ),
        CheckConstraint(
            "total_amount >= 0",
            name="ck_booking_total_positive",
        ),
    )

    @validates("base_amount", "services_amount", "additional_charges", "total_amount")
    def validate_amounts(self, key: str, value: Decimal) -> Decimal:
        """Validate monetary amounts are non-negative."""
        if value is not None and value < 0:
            raise ValueError(f"{key} cannot be negative")
        return value

    @property
    def stay(self) -> DateRange:
        return DateRange(self.check_in_date, self.check_out_date)

    @property
    def nights(self) -> int:
        return self.stay.nights

    def append_staff_note(self, entry: str) -> None:
        """Append a line to the staff log; existing lines are never rewritten."""
        self.staff_notes = f"{self.staff_notes}\n{entry}" if self.staff_notes else entry

    def recalculate_total(self) -> None:
        self.total_amount = self.base_amount + self.services_amount + self.additional_charges

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, code={self.booking_code}, "
            f"status={self.booking_status}, stay={self.check_in_date}..{self.check_out_date})>"
        )


# Storage-level guard against double booking on PostgreSQL. Elsewhere the
# row lock from RoomRepository.lock_room serializes writers; on SQLite that
# is the write lock taken by BEGIN IMMEDIATE.
event.listen(
    Booking.__table__,
    "before_create",
    DDL("CREATE EXTENSION IF NOT EXISTS btree_gist").execute_if(dialect="postgresql"),
)
event.listen(
    Booking.__table__,
    "after_create",
    DDL(
        "ALTER TABLE bookings ADD CONSTRAINT ex_booking_room_no_overlap "
        "EXCLUDE USING gist (room_id WITH =, "
        "daterange(check_in_date, check_out_date, '[)') WITH &&) "
        "WHERE (booking_status IN ('confirmed', 'checked_in'))"
    ).execute_if(dialect="postgresql"),
)


class BookingServiceItem(TimestampModel):
    """
    Additional service attached to a booking.

    unit_price is captured when the line is created so later catalog price
    changes never alter historical bookings.
    """

    __tablename__ = "booking_services"

    booking_id: Mapped[str] = mapped_column(
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    service_id: Mapped[str] = mapped_column(
        ForeignKey("additional_services.id", ondelete="RESTRICT"),
        nullable=False,
    )

    quantity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
    )

    unit_price: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
    )

    total_price: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
    )

    booking: Mapped["Booking"] = relationship(
        "Booking",
        back_populates="services",
    )

    service: Mapped["AdditionalService"] = relationship(
        "AdditionalService",
        lazy="joined",
    )

    __table_args__ = (
        UniqueConstraint("booking_id", "service_id", name="uq_booking_service"),
        CheckConstraint("quantity >= 1", name="ck_booking_service_quantity_positive"),
    )

    @property
    def service_name(self) -> str:
        return self.service.name

    def set_quantity(self, quantity: int) -> None:
        if quantity < 1:
            raise ValueError("Quantity must be at least 1")
        self.quantity = quantity
        self.total_price = self.unit_price * quantity


class BookingActivity(BaseModel):
    """
    Audit record for a booking transition. Rows are only ever inserted.
    """

    __tablename__ = "booking_activities"

    booking_id: Mapped[str] = mapped_column(
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    actor_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        nullable=True,
    )

    actor_role: Mapped[Optional[UserRole]] = mapped_column(
        enum_column(UserRole),
        nullable=True,
    )

    activity_type: Mapped[BookingActivityType] = mapped_column(
        enum_column(BookingActivityType),
        nullable=False,
    )

    from_status: Mapped[Optional[BookingStatus]] = mapped_column(
        enum_column(BookingStatus),
        nullable=True,
    )

    to_status: Mapped[BookingStatus] = mapped_column(
        enum_column(BookingStatus),
        nullable=False,
    )

    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )

    booking: Mapped["Booking"] = relationship(
        "Booking",
        back_populates="activities",
    )
