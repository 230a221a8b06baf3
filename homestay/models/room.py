"""
Room inventory models.

RoomType is reference data for pricing fallback and capacity; Room is the
bookable unit whose status is flipped by check-in and check-out.
"""

from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import JSON, CheckConstraint, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from homestay.models.base import TimestampModel, enum_column
from homestay.models.enums import CleaningStatus, RoomStatus

if TYPE_CHECKING:
    from homestay.models.booking import Booking
    from homestay.models.pricing import SeasonalPricingRule

__all__ = ["RoomType", "Room"]


class RoomType(TimestampModel):
    """
    Room category with its nightly fallback price and capacity.

    Attributes:
        name: Unique display name (e.g. "Deluxe Double")
        base_price: Nightly rate used when no seasonal rule applies
        max_occupancy: Maximum number of guests
        amenities: List of amenity labels
    """

    __tablename__ = "room_types"

    name: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
        comment="Room type name",
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    base_price: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
        comment="Nightly base price",
    )

    max_occupancy: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=2,
        comment="Maximum number of guests",
    )

    amenities: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Amenity labels",
    )

    rooms: Mapped[List["Room"]] = relationship(
        "Room",
        back_populates="room_type",
        lazy="select",
    )

    pricing_rules: Mapped[List["SeasonalPricingRule"]] = relationship(
        "SeasonalPricingRule",
        back_populates="room_type",
        lazy="select",
    )

    __table_args__ = (
        CheckConstraint("base_price >= 0", name="ck_room_type_base_price_positive"),
        CheckConstraint("max_occupancy >= 1", name="ck_room_type_occupancy_positive"),
    )

    @validates("base_price")
    def validate_base_price(self, key: str, value: Decimal) -> Decimal:
        if value is not None and Decimal(value) < 0:
            raise ValueError("Base price cannot be negative")
        return value

    @validates("max_occupancy")
    def validate_max_occupancy(self, key: str, value: int) -> int:
        if value is not None and value < 1:
            raise ValueError("Max occupancy must be at least 1")
        return value

    def __repr__(self) -> str:
        return f"<RoomType(id={self.id}, name={self.name})>"


class Room(TimestampModel):
    """
    Bookable room.

    Status flips to OCCUPIED on check-in and back to AVAILABLE (with a
    DIRTY cleaning status) on check-out.
    """

    __tablename__ = "rooms"

    room_number: Mapped[str] = mapped_column(
        String(20),
        unique=True,
        nullable=False,
        index=True,
        comment="Display label, unique per property",
    )

    room_type_id: Mapped[str] = mapped_column(
        ForeignKey("room_types.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    status: Mapped[RoomStatus] = mapped_column(
        enum_column(RoomStatus),
        nullable=False,
        default=RoomStatus.AVAILABLE,
        index=True,
    )

    cleaning_status: Mapped[CleaningStatus] = mapped_column(
        enum_column(CleaningStatus),
        nullable=False,
        default=CleaningStatus.CLEAN,
    )

    room_type: Mapped["RoomType"] = relationship(
        "RoomType",
        back_populates="rooms",
        lazy="joined",
    )

    bookings: Mapped[List["Booking"]] = relationship(
        "Booking",
        back_populates="room",
        lazy="select",
    )

    @property
    def is_bookable(self) -> bool:
        """Rooms under maintenance or out of order take no new bookings."""
        return self.status not in (RoomStatus.MAINTENANCE, RoomStatus.OUT_OF_ORDER)

    def mark_occupied(self) -> None:
        self.status = RoomStatus.OCCUPIED

    def mark_vacated(self) -> None:
        self.status = RoomStatus.AVAILABLE
        self.cleaning_status = CleaningStatus.DIRTY

    def __repr__(self) -> str:
        return f"<Room(id={self.id}, number={self.room_number}, status={self.status})>"
