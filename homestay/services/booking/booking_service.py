"""
Booking application service.

Orchestrates availability, pricing and the lifecycle state machine inside
one transaction per operation. Every write that can make a booking hold a
room takes the room row lock first and re-checks availability under it.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from homestay.config.settings import Settings
from homestay.core.exceptions import (
    AuthorizationError,
    InvalidDateRangeError,
    ResourceNotFoundError,
    ValidationError,
)
from homestay.models.booking import Booking, BookingActivity, BookingServiceItem
from homestay.models.enums import (
    TERMINAL_BOOKING_STATUSES,
    BookingActivityType,
    BookingStatus,
    UserRole,
)
from homestay.repositories.booking_repository import BookingRepository
from homestay.repositories.room_repository import RoomRepository
from homestay.schemas.booking import (
    AddServiceRequest,
    BookingCreate,
    BookingStatusUpdate,
    BookingUpdate,
    CostPreviewRequest,
)
from homestay.schemas.common import Principal
from homestay.services.base import BaseService, Clock, ServiceResult
from homestay.services.booking.availability_service import AvailabilityChecker
from homestay.services.booking.booking_lifecycle import ACTIVITY_FOR_STATUS, BookingLifecycle
from homestay.services.pricing.holiday_calendar import HolidayCalendar
from homestay.services.pricing.pricing_engine import PricingEngine


class BookingService(BaseService):
    """
    Customer and front-desk booking operations.

    Customers act only on their own bookings; confirmation, check-in and
    check-out are staff actions.
    """

    def __init__(
        self,
        db_session: Session,
        settings: Optional[Settings] = None,
        clock: Optional[Clock] = None,
        holidays: Optional[HolidayCalendar] = None,
    ):
        super().__init__(db_session, settings, clock)
        self.repository = BookingRepository(db_session)
        self.room_repository = RoomRepository(db_session)
        self.availability = AvailabilityChecker(db_session)
        self.pricing = PricingEngine(db_session, self.settings, holidays)
        self.lifecycle = BookingLifecycle(
            self.settings.TIMEZONE,
            self.settings.CANCELLATION_WINDOW_HOURS,
        )

    # -------------------------------------------------------------------------
    # Authorization helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _require_staff(principal: Principal, action: str) -> None:
        if not principal.is_staff:
            raise AuthorizationError(
                f"Only staff can {action}",
                required_roles=[UserRole.STAFF.value, UserRole.ADMIN.value],
            )

    @staticmethod
    def _ensure_can_view(booking: Booking, principal: Principal) -> None:
        if not principal.is_staff and booking.customer_id != principal.id:
            raise AuthorizationError("You can only access your own bookings")

    def _record(
        self,
        booking: Booking,
        activity_type: BookingActivityType,
        principal: Principal,
        from_status: Optional[BookingStatus] = None,
        notes: Optional[str] = None,
    ) -> BookingActivity:
        return self.repository.add_activity(
            booking,
            activity_type=activity_type,
            from_status=from_status,
            to_status=booking.booking_status,
            actor_id=principal.id,
            actor_role=principal.role,
            notes=notes,
        )

    def _lock_for_transition(self, booking_id: str) -> Booking:
        """Room lock first, then the booking row, always in that order."""
        booking = self.repository.get_by_id(booking_id)
        self.room_repository.lock_room(booking.room_id)
        return self.repository.lock_booking(booking_id)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def check_availability(
        self,
        room_id: str,
        check_in_date: date,
        check_out_date: date,
        excluding_booking_id: Optional[str] = None,
    ) -> ServiceResult[Dict[str, Any]]:
        try:
            conflicts = self.availability.find_conflicts(
                room_id, check_in_date, check_out_date, excluding_booking_id
            )
            return ServiceResult.success(
                {
                    "room_id": room_id,
                    "check_in_date": check_in_date,
                    "check_out_date": check_out_date,
                    "available": not conflicts,
                    "conflicting_ranges": [str(b.stay) for b in conflicts],
                }
            )
        except Exception as e:
            return self._handle_exception(e, "check room availability", room_id)

    def calculate_cost(self, request: CostPreviewRequest) -> ServiceResult[Dict[str, Any]]:
        """Price a prospective stay without writing anything."""
        try:
            breakdown = self.pricing.calculate_total(
                request.room_id,
                request.check_in_date,
                request.check_out_date,
                request.number_of_guests,
                request.services,
            )
            return ServiceResult.success(breakdown.to_dict())
        except Exception as e:
            return self._handle_exception(e, "calculate booking cost", request.room_id)

    def get_booking(self, booking_id: str, principal: Principal) -> ServiceResult[Booking]:
        try:
            booking = self.repository.get_by_id(booking_id)
            self._ensure_can_view(booking, principal)
            return ServiceResult.success(booking)
        except Exception as e:
            return self._handle_exception(e, "get booking", booking_id)

    def list_my_bookings(
        self,
        principal: Principal,
        status: Optional[BookingStatus] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> ServiceResult[List[Booking]]:
        try:
            return ServiceResult.success(
                self.repository.find_by_customer(principal.id, status=status, skip=skip, limit=limit)
            )
        except Exception as e:
            return self._handle_exception(e, "list bookings", principal.id)

    def get_activities(self, booking_id: str, principal: Principal) -> ServiceResult[List[BookingActivity]]:
        try:
            booking = self.repository.get_by_id(booking_id)
            self._ensure_can_view(booking, principal)
            return ServiceResult.success(self.repository.get_activities(booking_id))
        except Exception as e:
            return self._handle_exception(e, "list booking activities", booking_id)

    # -------------------------------------------------------------------------
    # Create
    # -------------------------------------------------------------------------

    def create_booking(self, data: BookingCreate, principal: Principal) -> ServiceResult[Booking]:
        """
        Create a pending booking for the calling principal.

        The room is locked, then availability and pricing run inside the
        same transaction as the insert.
        """
        try:
            today = self.today()
            if data.check_in_date < today:
                raise ValidationError(
                    "Check-in date cannot be in the past",
                    field_errors={"check_in_date": [f"Must be on or after {today.isoformat()}"]},
                )

            with self.transaction():
                room = self.room_repository.lock_room(data.room_id)
                if not room.is_bookable:
                    raise ValidationError(
                        f"Room {room.room_number} is not open for booking",
                        details={"room_id": room.id, "room_status": room.status.value},
                    )

                self.availability.assert_available(room.id, data.check_in_date, data.check_out_date)
                breakdown = self.pricing.calculate_total(
                    room.id,
                    data.check_in_date,
                    data.check_out_date,
                    data.number_of_guests,
                    data.services,
                    room=room,
                )

                booking = Booking(
                    booking_code=self.repository.generate_booking_code(today),
                    customer_id=principal.id,
                    room_id=room.id,
                    check_in_date=data.check_in_date,
                    check_out_date=data.check_out_date,
                    number_of_guests=data.number_of_guests,
                    base_amount=breakdown.base_amount,
                    services_amount=breakdown.services_amount,
                    additional_charges=Decimal("0"),
                    total_amount=breakdown.total_amount,
                    booking_status=BookingStatus.PENDING,
                    special_requests=data.special_requests,
                )
                booking.services = [
                    BookingServiceItem(
                        service_id=charge.service_id,
                        quantity=charge.quantity,
                        unit_price=charge.unit_price,
                        total_price=charge.total_price,
                    )
                    for charge in breakdown.services
                ]
                booking = self.repository.create(booking)
                self._record(booking, ACTIVITY_FOR_STATUS[BookingStatus.PENDING], principal)

            self._log_operation(
                "create booking",
                booking.booking_code,
                {
                    "room_id": booking.room_id,
                    "customer_id": booking.customer_id,
                    "nights": breakdown.nights,
                    "total_amount": str(booking.total_amount),
                },
            )
            return ServiceResult.success(booking, message="Booking created successfully")
        except Exception as e:
            return self._handle_exception(e, "create booking", data.room_id)

    # -------------------------------------------------------------------------
    # Modification
    # -------------------------------------------------------------------------

    def update_booking(self, booking_id: str, data: BookingUpdate, principal: Principal) -> ServiceResult[Booking]:
        """
        Change the dates, guest count or special requests of an open booking.

        New dates are re-checked against other bookings. A change of dates
        or guests re-prices the nights at the current rules; service lines
        keep their captured prices.
        """
        try:
            with self.transaction():
                booking = self._lock_for_transition(booking_id)
                self._ensure_can_view(booking, principal)
                self.lifecycle.ensure_can_modify(booking)

                check_in_date = data.check_in_date or booking.check_in_date
                check_out_date = data.check_out_date or booking.check_out_date
                guests = data.number_of_guests or booking.number_of_guests
                dates_changed = (check_in_date, check_out_date) != (booking.check_in_date, booking.check_out_date)

                if check_out_date <= check_in_date:
                    raise InvalidDateRangeError(check_in_date.isoformat(), check_out_date.isoformat())
                today = self.today()
                if dates_changed and check_in_date < today:
                    raise ValidationError(
                        "Check-in date cannot be in the past",
                        field_errors={"check_in_date": [f"Must be on or after {today.isoformat()}"]},
                    )

                if dates_changed:
                    self.availability.assert_available(
                        booking.room_id,
                        check_in_date,
                        check_out_date,
                        excluding_booking_id=booking.id,
                    )
                if dates_changed or guests != booking.number_of_guests:
                    breakdown = self.pricing.calculate_total(
                        booking.room_id,
                        check_in_date,
                        check_out_date,
                        guests,
                        room=booking.room,
                    )
                    booking.base_amount = breakdown.base_amount

                booking.check_in_date = check_in_date
                booking.check_out_date = check_out_date
                booking.number_of_guests = guests
                if data.special_requests is not None:
                    booking.special_requests = data.special_requests
                booking.recalculate_total()
                self.db.flush()
                self._record(
                    booking,
                    BookingActivityType.MODIFIED,
                    principal,
                    booking.booking_status,
                    f"stay={booking.stay} guests={guests}",
                )

            self._log_operation(
                "update booking",
                booking.booking_code,
                {"nights": booking.nights, "total_amount": str(booking.total_amount)},
            )
            return ServiceResult.success(booking, message="Booking updated successfully")
        except Exception as e:
            return self._handle_exception(e, "update booking", booking_id)

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def update_status(
        self, booking_id: str, update: BookingStatusUpdate, principal: Principal
    ) -> ServiceResult[Booking]:
        """
        Staff decision on a pending booking. Confirmation re-checks
        availability under the room lock, excluding the booking itself.
        """
        try:
            self._require_staff(principal, "update booking status")
            with self.transaction():
                booking = self._lock_for_transition(booking_id)
                previous = booking.booking_status
                self.lifecycle.ensure_status_update(booking, update.status)

                if update.status == BookingStatus.CONFIRMED:
                    self.availability.assert_available(
                        booking.room_id,
                        booking.check_in_date,
                        booking.check_out_date,
                        excluding_booking_id=booking.id,
                    )
                    self.lifecycle.apply_confirm(booking)
                else:
                    self.lifecycle.apply_cancel(booking, principal.id, self.now(), update.notes)

                self.db.flush()
                self._record(booking, ACTIVITY_FOR_STATUS[update.status], principal, previous, update.notes)

            self._log_operation(
                "update booking status",
                booking.booking_code,
                {"from_status": previous.value, "to_status": booking.booking_status.value},
            )
            return ServiceResult.success(booking, message=f"Booking {booking.booking_status.value} successfully")
        except Exception as e:
            return self._handle_exception(e, "update booking status", booking_id)

    def cancel_booking(
        self, booking_id: str, principal: Principal, reason: Optional[str] = None
    ) -> ServiceResult[Booking]:
        """
        Cancel a pending or confirmed booking. Customers may cancel only
        their own bookings and not inside the cancellation window.
        """
        try:
            with self.transaction():
                booking = self.repository.lock_booking(booking_id)
                self._ensure_can_view(booking, principal)
                previous = booking.booking_status
                now = self.now()
                self.lifecycle.ensure_can_cancel(booking, by_customer=not principal.is_staff, now=now)
                self.lifecycle.apply_cancel(booking, principal.id, now, reason)
                self.db.flush()
                self._record(booking, BookingActivityType.CANCELLED, principal, previous, reason)

            self._log_operation(
                "cancel booking",
                booking.booking_code,
                {"from_status": previous.value, "by_role": principal.role.value},
            )
            return ServiceResult.success(booking, message="Booking cancelled successfully")
        except Exception as e:
            return self._handle_exception(e, "cancel booking", booking_id)

    def check_in(self, booking_id: str, principal: Principal, notes: Optional[str] = None) -> ServiceResult[Booking]:
        try:
            self._require_staff(principal, "check in guests")
            with self.transaction():
                booking = self._lock_for_transition(booking_id)
                previous = booking.booking_status
                self.lifecycle.ensure_can_check_in(booking, self.today())
                self.lifecycle.apply_check_in(booking, principal.id, self.now(), notes)
                self.db.flush()
                self._record(booking, BookingActivityType.CHECKED_IN, principal, previous, notes)

            self._log_operation("check in", booking.booking_code, {"room_id": booking.room_id})
            return ServiceResult.success(booking, message="Customer checked in successfully")
        except Exception as e:
            return self._handle_exception(e, "check in booking", booking_id)

    def check_out(
        self,
        booking_id: str,
        principal: Principal,
        additional_charges: Decimal = Decimal("0"),
        notes: Optional[str] = None,
    ) -> ServiceResult[Booking]:
        try:
            self._require_staff(principal, "check out guests")
            with self.transaction():
                booking = self._lock_for_transition(booking_id)
                previous = booking.booking_status
                self.lifecycle.ensure_can_check_out(booking)
                self.lifecycle.apply_check_out(booking, principal.id, self.now(), additional_charges, notes)
                self.db.flush()
                self._record(booking, BookingActivityType.CHECKED_OUT, principal, previous, notes)

            self._log_operation(
                "check out",
                booking.booking_code,
                {"room_id": booking.room_id, "additional_charges": str(additional_charges)},
            )
            return ServiceResult.success(booking, message="Customer checked out successfully")
        except Exception as e:
            return self._handle_exception(e, "check out booking", booking_id)

    # -------------------------------------------------------------------------
    # Service add-ons
    # -------------------------------------------------------------------------

    def add_service(
        self, booking_id: str, request: AddServiceRequest, principal: Principal
    ) -> ServiceResult[Booking]:
        """
        Attach a catalog service to an open booking. A service already on the
        booking has its quantity increased at the originally captured price.
        """
        try:
            with self.transaction():
                booking = self.repository.lock_booking(booking_id)
                self._ensure_can_view(booking, principal)
                if booking.booking_status in TERMINAL_BOOKING_STATUSES:
                    raise ValidationError(
                        f"Services cannot be added to a {booking.booking_status.value} booking",
                        details={"booking_status": booking.booking_status.value},
                    )

                line = self.repository.find_service_line(booking.id, request.service_id)
                if line is not None:
                    line.set_quantity(line.quantity + request.quantity)
                else:
                    charge = self.pricing.price_services([request])[0]
                    line = BookingServiceItem(
                        booking_id=booking.id,
                        service_id=charge.service_id,
                        quantity=charge.quantity,
                        unit_price=charge.unit_price,
                        total_price=charge.total_price,
                    )
                    booking.services.append(line)

                self.db.flush()
                self._retotal_services(booking)
                self._record(
                    booking,
                    BookingActivityType.SERVICE_ADDED,
                    principal,
                    booking.booking_status,
                    f"service={request.service_id} quantity={request.quantity}",
                )

            self._log_operation(
                "add booking service",
                booking.booking_code,
                {"service_id": request.service_id, "quantity": request.quantity},
            )
            return ServiceResult.success(booking, message="Service added successfully")
        except Exception as e:
            return self._handle_exception(e, "add service to booking", booking_id)

    def list_services(self, booking_id: str, principal: Principal) -> ServiceResult[List[BookingServiceItem]]:
        try:
            booking = self.repository.get_by_id(booking_id)
            self._ensure_can_view(booking, principal)
            return ServiceResult.success(list(booking.services))
        except Exception as e:
            return self._handle_exception(e, "list booking services", booking_id)

    def remove_service(self, booking_id: str, line_id: str, principal: Principal) -> ServiceResult[Booking]:
        """Drop one service line from an open booking and re-total it."""
        try:
            with self.transaction():
                booking = self.repository.lock_booking(booking_id)
                self._ensure_can_view(booking, principal)
                if booking.booking_status in TERMINAL_BOOKING_STATUSES:
                    raise ValidationError(
                        f"Services cannot be removed from a {booking.booking_status.value} booking",
                        details={"booking_status": booking.booking_status.value},
                    )

                line = next((item for item in booking.services if item.id == line_id), None)
                if line is None:
                    raise ResourceNotFoundError("Booking service", line_id)

                booking.services.remove(line)
                self.db.flush()
                self._retotal_services(booking)
                self._record(
                    booking,
                    BookingActivityType.SERVICE_REMOVED,
                    principal,
                    booking.booking_status,
                    f"service={line.service_id} quantity={line.quantity}",
                )

            self._log_operation("remove booking service", booking.booking_code, {"service_id": line.service_id})
            return ServiceResult.success(booking, message="Service removed successfully")
        except Exception as e:
            return self._handle_exception(e, "remove service from booking", booking_id)

    def _retotal_services(self, booking: Booking) -> None:
        booking.services_amount = sum((item.total_price for item in booking.services), Decimal("0"))
        booking.recalculate_total()
        self.db.flush()
