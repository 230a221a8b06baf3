"""
Closed status vocabularies shared by models, schemas and services.
"""

import enum


class UserRole(str, enum.Enum):
    """Roles supplied by the upstream identity layer."""
    CUSTOMER = "customer"
    STAFF = "staff"
    ADMIN = "admin"


class RoomStatus(str, enum.Enum):
    """Room status"""
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"
    OUT_OF_ORDER = "out_of_order"


class CleaningStatus(str, enum.Enum):
    """Housekeeping status of a room"""
    CLEAN = "clean"
    DIRTY = "dirty"
    IN_PROGRESS = "in_progress"
    INSPECTED = "inspected"


class BookingStatus(str, enum.Enum):
    """Booking status"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    CANCELLED = "cancelled"


class PricingRuleStatus(str, enum.Enum):
    """Seasonal pricing rule status"""
    ACTIVE = "active"
    INACTIVE = "inactive"


class BookingActivityType(str, enum.Enum):
    """Audit entries written for every booking transition"""
    CREATED = "created"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    SERVICE_ADDED = "service_added"
    SERVICE_REMOVED = "service_removed"
    MODIFIED = "modified"


# Bookings in these states hold the room for their date range.
BLOCKING_BOOKING_STATUSES = (BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN)

TERMINAL_BOOKING_STATUSES = (BookingStatus.CHECKED_OUT, BookingStatus.CANCELLED)

STAFF_ROLES = (UserRole.STAFF, UserRole.ADMIN)
