"""
SQLAlchemy models. Importing this package registers every table on
``Base.metadata``.
"""

from homestay.models.base import Base, BaseModel, TimestampModel
from homestay.models.enums import (
    BLOCKING_BOOKING_STATUSES,
    STAFF_ROLES,
    TERMINAL_BOOKING_STATUSES,
    BookingActivityType,
    BookingStatus,
    CleaningStatus,
    PricingRuleStatus,
    RoomStatus,
    UserRole,
)
from homestay.models.room import Room, RoomType
from homestay.models.service import AdditionalService
from homestay.models.pricing import SeasonalPricingRule
from homestay.models.booking import Booking, BookingActivity, BookingServiceItem

__all__ = [
    "Base",
    "BaseModel",
    "TimestampModel",
    "BLOCKING_BOOKING_STATUSES",
    "STAFF_ROLES",
    "TERMINAL_BOOKING_STATUSES",
    "BookingActivityType",
    "BookingStatus",
    "CleaningStatus",
    "PricingRuleStatus",
    "RoomStatus",
    "UserRole",
    "Room",
    "RoomType",
    "AdditionalService",
    "SeasonalPricingRule",
    "Booking",
    "BookingActivity",
    "BookingServiceItem",
]
