"""
Booking request and response schemas.

Requests are parsed and validated here, at the boundary, so services only
ever see well-typed dates, Decimals and enums.
"""

from __future__ import annotations

from datetime import date as Date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from homestay.models.enums import BookingActivityType, BookingStatus, UserRole
from homestay.schemas.common import BaseDBSchema, BaseSchema

__all__ = [
    "ServiceRequest",
    "StayRequest",
    "BookingCreate",
    "BookingUpdate",
    "CostPreviewRequest",
    "AvailabilityQuery",
    "AvailabilityResponse",
    "BookingCancelRequest",
    "BookingStatusUpdate",
    "CheckInRequest",
    "CheckOutRequest",
    "AddServiceRequest",
    "DailyPrice",
    "ServiceLine",
    "CostBreakdown",
    "BookingServiceResponse",
    "BookingResponse",
    "BookingActivityResponse",
]


class ServiceRequest(BaseSchema):
    """Additional service requested with a booking."""

    service_id: str = Field(..., min_length=1)
    quantity: int = Field(1, ge=1, le=100)


class StayRequest(BaseSchema):
    room_id: str = Field(..., min_length=1)
    check_in_date: Date
    check_out_date: Date

    @model_validator(mode="after")
    def validate_dates(self) -> "StayRequest":
        if self.check_out_date <= self.check_in_date:
            raise ValueError("Check-out date must be after check-in date")
        return self


class BookingCreate(StayRequest):
    """Customer booking request."""

    number_of_guests: int = Field(1, ge=1, le=20)
    special_requests: Optional[str] = Field(None, max_length=2000)
    services: List[ServiceRequest] = Field(default_factory=list)

    @field_validator("services")
    @classmethod
    def merge_duplicate_services(cls, v: List[ServiceRequest]) -> List[ServiceRequest]:
        """The same service listed twice becomes one line with summed quantity."""
        merged = {}
        for item in v:
            if item.service_id in merged:
                merged[item.service_id] = ServiceRequest(
                    service_id=item.service_id,
                    quantity=merged[item.service_id].quantity + item.quantity,
                )
            else:
                merged[item.service_id] = item
        return list(merged.values())


class BookingUpdate(BaseSchema):
    """Changes to an open booking; fields left unset keep their stored value."""

    check_in_date: Optional[Date] = None
    check_out_date: Optional[Date] = None
    number_of_guests: Optional[int] = Field(None, ge=1, le=20)
    special_requests: Optional[str] = Field(None, max_length=2000)

    @model_validator(mode="after")
    def validate_dates(self) -> "BookingUpdate":
        if self.check_in_date and self.check_out_date and self.check_out_date <= self.check_in_date:
            raise ValueError("Check-out date must be after check-in date")
        return self


class CostPreviewRequest(BookingCreate):
    pass


class AvailabilityQuery(StayRequest):
    exclude_booking_id: Optional[str] = None


class AvailabilityResponse(BaseSchema):
    room_id: str
    check_in_date: Date
    check_out_date: Date
    available: bool
    conflicting_ranges: List[str] = Field(default_factory=list)


class BookingCancelRequest(BaseSchema):
    reason: Optional[str] = Field(None, max_length=1000)


class BookingStatusUpdate(BaseSchema):
    """Staff decision on a pending booking."""

    status: BookingStatus
    notes: Optional[str] = Field(None, max_length=1000)


class CheckInRequest(BaseSchema):
    notes: Optional[str] = Field(None, max_length=1000)


class CheckOutRequest(BaseSchema):
    additional_charges: Decimal = Field(Decimal("0"), ge=0)
    notes: Optional[str] = Field(None, max_length=1000)


class AddServiceRequest(ServiceRequest):
    pass


class DailyPrice(BaseSchema):
    date: Date
    price: Decimal
    is_weekend: bool = False
    is_holiday: bool = False
    rule_id: Optional[str] = None
    season_name: Optional[str] = None


class ServiceLine(BaseSchema):
    service_id: str
    name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal


class CostBreakdown(BaseSchema):
    room_id: str
    room_type_id: str
    check_in_date: Date
    check_out_date: Date
    nights: int
    number_of_guests: int
    base_amount: Decimal
    services_amount: Decimal
    total_amount: Decimal
    currency: str
    daily_prices: List[DailyPrice] = Field(default_factory=list)
    services: List[ServiceLine] = Field(default_factory=list)


class BookingServiceResponse(BaseDBSchema):
    service_id: str
    service_name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal


class BookingResponse(BaseDBSchema):
    booking_code: str
    customer_id: str
    room_id: str
    check_in_date: Date
    check_out_date: Date
    number_of_guests: int
    base_amount: Decimal
    services_amount: Decimal
    additional_charges: Decimal
    total_amount: Decimal
    booking_status: BookingStatus
    special_requests: Optional[str] = None
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    checked_in_by: Optional[str] = None
    checked_out_by: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[str] = None
    cancellation_reason: Optional[str] = None
    staff_notes: Optional[str] = None
    services: List[BookingServiceResponse] = Field(default_factory=list)


class BookingActivityResponse(BaseSchema):
    id: str
    booking_id: str
    activity_type: BookingActivityType
    from_status: Optional[BookingStatus] = None
    to_status: BookingStatus
    actor_id: Optional[str] = None
    actor_role: Optional[UserRole] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
