"""
Booking endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, status

from homestay.api.deps import get_booking_service, get_current_principal
from homestay.api.responses import dump_as, dump_each, respond
from homestay.models.enums import BookingStatus
from homestay.schemas.booking import (
    AddServiceRequest,
    AvailabilityQuery,
    AvailabilityResponse,
    BookingActivityResponse,
    BookingCancelRequest,
    BookingCreate,
    BookingResponse,
    BookingServiceResponse,
    BookingStatusUpdate,
    BookingUpdate,
    CheckInRequest,
    CheckOutRequest,
    CostBreakdown,
    CostPreviewRequest,
)
from homestay.schemas.common import Principal
from homestay.services.booking.booking_service import BookingService

router = APIRouter(prefix="/bookings", tags=["Booking Management"])

_booking = dump_as(BookingResponse)
_bookings = dump_each(BookingResponse)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: BookingCreate,
    principal: Principal = Depends(get_current_principal),
    service: BookingService = Depends(get_booking_service),
):
    """Create a pending booking for the caller."""
    return respond(service.create_booking(payload, principal), _booking, status.HTTP_201_CREATED)


@router.get("/me")
def list_my_bookings(
    booking_status: Optional[BookingStatus] = Query(default=None, alias="status"),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=200),
    principal: Principal = Depends(get_current_principal),
    service: BookingService = Depends(get_booking_service),
):
    return respond(service.list_my_bookings(principal, booking_status, skip, limit), _bookings)


@router.post("/check-availability")
def check_availability(
    payload: AvailabilityQuery,
    principal: Principal = Depends(get_current_principal),
    service: BookingService = Depends(get_booking_service),
):
    return respond(
        service.check_availability(
            payload.room_id,
            payload.check_in_date,
            payload.check_out_date,
            payload.exclude_booking_id,
        ),
        dump_as(AvailabilityResponse),
    )


@router.post("/calculate-cost")
def calculate_cost(
    payload: CostPreviewRequest,
    principal: Principal = Depends(get_current_principal),
    service: BookingService = Depends(get_booking_service),
):
    """Price a stay without creating a booking."""
    return respond(service.calculate_cost(payload), dump_as(CostBreakdown))


@router.get("/{booking_id}")
def get_booking(
    booking_id: str,
    principal: Principal = Depends(get_current_principal),
    service: BookingService = Depends(get_booking_service),
):
    return respond(service.get_booking(booking_id, principal), _booking)


@router.put("/{booking_id}")
def update_booking(
    booking_id: str,
    payload: BookingUpdate,
    principal: Principal = Depends(get_current_principal),
    service: BookingService = Depends(get_booking_service),
):
    """Change dates, guests or special requests of a pending or confirmed booking."""
    return respond(service.update_booking(booking_id, payload, principal), _booking)


@router.post("/{booking_id}/cancel")
def cancel_booking(
    booking_id: str,
    payload: BookingCancelRequest = Body(default_factory=BookingCancelRequest),
    principal: Principal = Depends(get_current_principal),
    service: BookingService = Depends(get_booking_service),
):
    return respond(service.cancel_booking(booking_id, principal, payload.reason), _booking)


@router.patch("/{booking_id}/status")
def update_booking_status(
    booking_id: str,
    payload: BookingStatusUpdate,
    principal: Principal = Depends(get_current_principal),
    service: BookingService = Depends(get_booking_service),
):
    """Confirm or cancel a pending booking (staff)."""
    return respond(service.update_status(booking_id, payload, principal), _booking)


@router.post("/{booking_id}/check-in")
def check_in(
    booking_id: str,
    payload: CheckInRequest = Body(default_factory=CheckInRequest),
    principal: Principal = Depends(get_current_principal),
    service: BookingService = Depends(get_booking_service),
):
    return respond(service.check_in(booking_id, principal, payload.notes), _booking)


@router.post("/{booking_id}/check-out")
def check_out(
    booking_id: str,
    payload: CheckOutRequest = Body(default_factory=CheckOutRequest),
    principal: Principal = Depends(get_current_principal),
    service: BookingService = Depends(get_booking_service),
):
    return respond(
        service.check_out(booking_id, principal, payload.additional_charges, payload.notes),
        _booking,
    )


@router.post("/{booking_id}/services")
def add_service(
    booking_id: str,
    payload: AddServiceRequest,
    principal: Principal = Depends(get_current_principal),
    service: BookingService = Depends(get_booking_service),
):
    return respond(service.add_service(booking_id, payload, principal), _booking)


@router.get("/{booking_id}/activities")
def list_booking_activities(
    booking_id: str,
    principal: Principal = Depends(get_current_principal),
    service: BookingService = Depends(get_booking_service),
):
    return respond(service.get_activities(booking_id, principal), dump_each(BookingActivityResponse))


@router.get("/{booking_id}/services")
def list_booking_services(
    booking_id: str,
    principal: Principal = Depends(get_current_principal),
    service: BookingService = Depends(get_booking_service),
):
    return respond(service.list_services(booking_id, principal), dump_each(BookingServiceResponse))


@router.delete("/{booking_id}/services/{line_id}")
def remove_booking_service(
    booking_id: str,
    line_id: str,
    principal: Principal = Depends(get_current_principal),
    service: BookingService = Depends(get_booking_service),
):
    return respond(service.remove_service(booking_id, line_id, principal), _booking)
