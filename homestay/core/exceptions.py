"""
Custom Exceptions for the Homestay Booking Core

This module defines custom exception classes raised by the availability,
pricing and booking lifecycle components.
"""

from typing import Any, Dict, List, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Standard error codes for the application"""
    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"

    # Authorization
    AUTHENTICATION_REQUIRED = "AUTHENTICATION_REQUIRED"
    AUTHORIZATION_FAILED = "AUTHORIZATION_FAILED"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"
    INSUFFICIENT_CAPACITY = "INSUFFICIENT_CAPACITY"

    # Database errors
    DATABASE_ERROR = "DATABASE_ERROR"

    # Business logic errors
    BOOKING_CONFLICT = "BOOKING_CONFLICT"
    ROOM_UNAVAILABLE = "ROOM_UNAVAILABLE"
    PRICING_RULE_OVERLAP = "PRICING_RULE_OVERLAP"
    CONFLICT = "CONFLICT"
    INVALID_STATE_TRANSITION = "INVALID_STATE_TRANSITION"
    GUEST_ALREADY_CHECKED_IN = "GUEST_ALREADY_CHECKED_IN"
    GUEST_NOT_CHECKED_IN = "GUEST_NOT_CHECKED_IN"
    GUEST_ALREADY_CHECKED_OUT = "GUEST_ALREADY_CHECKED_OUT"
    CANCELLATION_WINDOW_CLOSED = "CANCELLATION_WINDOW_CLOSED"

    # Entity specific not-found codes
    ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
    ROOM_TYPE_NOT_FOUND = "ROOM_TYPE_NOT_FOUND"
    BOOKING_NOT_FOUND = "BOOKING_NOT_FOUND"
    SERVICE_NOT_FOUND = "SERVICE_NOT_FOUND"
    PRICING_RULE_NOT_FOUND = "PRICING_RULE_NOT_FOUND"


class BaseAppException(Exception):
    """
    Base exception class for all application exceptions.

    Provides consistent error handling across the application with
    structured error information.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format"""
        return {
            "error": {
                "message": self.message,
                "code": self.error_code.value,
                "details": self.details,
                "type": self.__class__.__name__
            }
        }

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}', error_code='{self.error_code.value}')"


# ========================================
# Validation Exceptions
# ========================================

class ValidationError(BaseAppException):
    """Exception raised when data validation fails"""

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[Dict[str, List[str]]] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 422
    ):
        details = dict(details or {})
        if field_errors:
            details["field_errors"] = field_errors
        super().__init__(message, error_code, details, status_code)


class InvalidDateRangeError(ValidationError):
    """Exception raised for an unusable check-in/check-out or rule window"""

    def __init__(
        self,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        message: str = "Check-out date must be after check-in date"
    ):
        super().__init__(
            message,
            error_code=ErrorCode.INVALID_DATE_RANGE,
            details={"start_date": start_date, "end_date": end_date},
        )


class InsufficientCapacityError(ValidationError):
    """Exception raised when guest count exceeds room capacity"""

    def __init__(self, requested: int, capacity: int):
        super().__init__(
            f"Room capacity is {capacity}, but {requested} guests requested",
            error_code=ErrorCode.INSUFFICIENT_CAPACITY,
            details={"requested_guests": requested, "max_occupancy": capacity},
        )


# ========================================
# Not Found Exceptions
# ========================================

class ResourceNotFoundError(BaseAppException):
    """Exception raised when a requested resource is not found"""

    def __init__(
        self,
        resource_type: str = "Resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.RESOURCE_NOT_FOUND
    ):
        if not message:
            message = f"{resource_type} not found"
            if resource_id:
                message += f" (ID: {resource_id})"

        details = {
            "resource_type": resource_type,
            "resource_id": resource_id
        }
        super().__init__(message, error_code, details, 404)


class RoomNotFoundError(ResourceNotFoundError):
    def __init__(self, room_id: Optional[str] = None):
        super().__init__("Room", room_id, error_code=ErrorCode.ROOM_NOT_FOUND)


class RoomTypeNotFoundError(ResourceNotFoundError):
    def __init__(self, room_type_id: Optional[str] = None):
        super().__init__("Room type", room_type_id, error_code=ErrorCode.ROOM_TYPE_NOT_FOUND)


class BookingNotFoundError(ResourceNotFoundError):
    def __init__(self, booking_id: Optional[str] = None):
        super().__init__("Booking", booking_id, error_code=ErrorCode.BOOKING_NOT_FOUND)


class ServiceNotFoundError(ResourceNotFoundError):
    def __init__(self, service_id: Optional[str] = None):
        super().__init__("Service", service_id, error_code=ErrorCode.SERVICE_NOT_FOUND)


class PricingRuleNotFoundError(ResourceNotFoundError):
    def __init__(self, rule_id: Optional[str] = None):
        super().__init__(
            "Seasonal pricing rule", rule_id, error_code=ErrorCode.PRICING_RULE_NOT_FOUND
        )


# ========================================
# Authorization Exceptions
# ========================================

class AuthenticationRequiredError(BaseAppException):
    """Exception raised when no principal accompanies the request"""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, ErrorCode.AUTHENTICATION_REQUIRED, {}, 401)


class AuthorizationError(BaseAppException):
    """Exception raised when the principal may not perform an action"""

    def __init__(
        self,
        message: str = "Access denied",
        required_roles: Optional[List[str]] = None
    ):
        details = {"required_roles": required_roles} if required_roles else {}
        super().__init__(message, ErrorCode.AUTHORIZATION_FAILED, details, 403)


# ========================================
# Database Exceptions
# ========================================

class DatabaseError(BaseAppException):
    """Exception raised for storage and transport failures"""

    def __init__(
        self,
        message: str = "Database operation failed",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, ErrorCode.DATABASE_ERROR, details, 500)


# ========================================
# Booking Exceptions
# ========================================

class BookingError(BaseAppException):
    """Base exception for booking-related conflicts"""

    def __init__(
        self,
        message: str = "Booking operation failed",
        error_code: ErrorCode = ErrorCode.BOOKING_CONFLICT,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 409
    ):
        super().__init__(message, error_code, details, status_code)


class BookingConflictError(BookingError):
    """Exception raised when a booking overlaps committed bookings"""

    def __init__(
        self,
        message: str = "Booking conflicts with existing bookings",
        conflicting_ranges: Optional[List[str]] = None
    ):
        details = {"conflicting_ranges": conflicting_ranges or []}
        super().__init__(message, ErrorCode.BOOKING_CONFLICT, details)


class RoomUnavailableError(BookingError):
    """Exception raised when a room cannot be booked for the requested dates"""

    def __init__(
        self,
        room_id: str,
        check_in_date: str,
        check_out_date: str,
        conflicting_ranges: Optional[List[str]] = None,
        message: Optional[str] = None
    ):
        conflicting_ranges = conflicting_ranges or []
        if not message:
            message = (
                "Room is not available for the selected dates. "
                f"Conflicting bookings: {', '.join(conflicting_ranges) or 'Unknown'}"
            )
        details = {
            "room_id": room_id,
            "check_in_date": check_in_date,
            "check_out_date": check_out_date,
            "conflicting_ranges": conflicting_ranges,
        }
        super().__init__(message, ErrorCode.ROOM_UNAVAILABLE, details)


class InvalidStateTransitionError(BookingError):
    """Exception raised when a transition is not valid from the current status"""

    def __init__(
        self,
        message: str,
        current_status: Optional[str] = None,
        target_status: Optional[str] = None
    ):
        details = {"current_status": current_status, "target_status": target_status}
        super().__init__(message, ErrorCode.INVALID_STATE_TRANSITION, details)


class GuestAlreadyCheckedInError(BookingError):
    def __init__(self, booking_id: str):
        super().__init__(
            "Customer already checked in",
            ErrorCode.GUEST_ALREADY_CHECKED_IN,
            {"booking_id": booking_id},
        )


class GuestNotCheckedInError(BookingError):
    def __init__(self, booking_id: str):
        super().__init__(
            "Customer not checked in",
            ErrorCode.GUEST_NOT_CHECKED_IN,
            {"booking_id": booking_id},
        )


class GuestAlreadyCheckedOutError(BookingError):
    def __init__(self, booking_id: str):
        super().__init__(
            "Customer already checked out",
            ErrorCode.GUEST_ALREADY_CHECKED_OUT,
            {"booking_id": booking_id},
        )


class CancellationWindowClosedError(BookingError):
    """Exception raised when a customer cancels too close to check-in"""

    def __init__(self, booking_id: str, window_hours: int):
        super().__init__(
            f"Confirmed bookings cannot be cancelled within {window_hours} hours of check-in",
            ErrorCode.CANCELLATION_WINDOW_CLOSED,
            {"booking_id": booking_id, "window_hours": window_hours},
        )


# ========================================
# Pricing Exceptions
# ========================================

class PricingRuleOverlapError(BaseAppException):
    """Exception raised when active rules at one priority would overlap"""

    def __init__(self, overlapping_rules: Optional[List[Dict[str, Any]]] = None):
        super().__init__(
            "Overlapping seasonal pricing periods detected",
            ErrorCode.PRICING_RULE_OVERLAP,
            {"overlapping_rules": overlapping_rules or []},
            409,
        )


__all__ = [
    "ErrorCode",
    "BaseAppException",
    "ValidationError",
    "InvalidDateRangeError",
    "InsufficientCapacityError",
    "ResourceNotFoundError",
    "RoomNotFoundError",
    "RoomTypeNotFoundError",
    "BookingNotFoundError",
    "ServiceNotFoundError",
    "PricingRuleNotFoundError",
    "AuthenticationRequiredError",
    "AuthorizationError",
    "DatabaseError",
    "BookingError",
    "BookingConflictError",
    "RoomUnavailableError",
    "InvalidStateTransitionError",
    "GuestAlreadyCheckedInError",
    "GuestNotCheckedInError",
    "GuestAlreadyCheckedOutError",
    "CancellationWindowClosedError",
    "PricingRuleOverlapError",
]
