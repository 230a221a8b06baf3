"""Booking application service: creation, transitions, add-ons and access."""

from datetime import date, datetime, timezone
from decimal import Decimal
from itertools import combinations

import pytest
from sqlalchemy import func, select

from conftest import ADMIN, CUSTOMER, OTHER_CUSTOMER, STAFF
from homestay.core.exceptions import ErrorCode
from homestay.models import Booking, BookingActivity
from homestay.models.enums import BookingActivityType, BookingStatus, CleaningStatus, RoomStatus
from homestay.schemas.booking import (
    AddServiceRequest,
    BookingCreate,
    BookingStatusUpdate,
    BookingUpdate,
    CostPreviewRequest,
    ServiceRequest,
)


def _create(service, room, check_in, check_out, principal=CUSTOMER, guests=1, services=()):
    return service.create_booking(
        BookingCreate(
            room_id=room.id,
            check_in_date=check_in,
            check_out_date=check_out,
            number_of_guests=guests,
            services=list(services),
        ),
        principal,
    )


def _confirmed(service, room, check_in, check_out, principal=CUSTOMER):
    booking = _create(service, room, check_in, check_out, principal).unwrap()
    service.update_status(booking.id, BookingStatusUpdate(status=BookingStatus.CONFIRMED), STAFF).unwrap()
    return booking


def _booking_count(db_session):
    return db_session.scalar(select(func.count()).select_from(Booking))


class TestCreateBooking:
    def test_creates_pending_booking_with_price_snapshot(self, booking_service, seed):
        result = _create(
            booking_service,
            seed.room_101,
            date(2025, 6, 1),
            date(2025, 6, 3),
            guests=2,
            services=[ServiceRequest(service_id=seed.breakfast.id, quantity=2)],
        )
        assert result.is_success, result.error
        booking = result.data
        assert booking.booking_status == BookingStatus.PENDING
        assert booking.customer_id == CUSTOMER.id
        assert booking.base_amount == Decimal("1000000")
        assert booking.services_amount == Decimal("200000")
        assert booking.total_amount == Decimal("1200000")
        assert booking.booking_code.startswith("BK20250520")
        assert [(line.service_id, line.quantity) for line in booking.services] == [(seed.breakfast.id, 2)]

    def test_records_created_activity(self, booking_service, seed):
        booking = _create(booking_service, seed.room_101, date(2025, 6, 1), date(2025, 6, 3)).unwrap()
        activities = booking_service.get_activities(booking.id, CUSTOMER).unwrap()
        assert [(a.activity_type, a.from_status, a.to_status) for a in activities] == [
            (BookingActivityType.CREATED, None, BookingStatus.PENDING)
        ]
        assert activities[0].actor_id == CUSTOMER.id

    def test_check_in_today_allowed(self, booking_service, seed):
        assert _create(booking_service, seed.room_101, date(2025, 5, 20), date(2025, 5, 21)).is_success

    def test_check_in_in_the_past_rejected(self, booking_service, seed, db_session):
        result = _create(booking_service, seed.room_101, date(2025, 5, 19), date(2025, 5, 21))
        assert result.error.code == ErrorCode.VALIDATION_ERROR
        assert _booking_count(db_session) == 0

    def test_room_under_maintenance_rejected(self, booking_service, seed):
        result = _create(booking_service, seed.room_301, date(2025, 6, 1), date(2025, 6, 3))
        assert result.error.code == ErrorCode.VALIDATION_ERROR
        assert result.error.details["room_status"] == "maintenance"

    def test_conflict_with_confirmed_booking(self, booking_service, seed, make_booking, db_session):
        make_booking(seed.room_101, date(2025, 7, 1), date(2025, 7, 5))
        result = _create(booking_service, seed.room_101, date(2025, 7, 4), date(2025, 7, 6))
        assert not result
        assert result.error.code == ErrorCode.ROOM_UNAVAILABLE
        assert result.error.status_code == 409
        assert result.error.details["conflicting_ranges"] == ["2025-07-01 to 2025-07-05"]
        assert _booking_count(db_session) == 1

    def test_back_to_back_stays(self, booking_service, seed, make_booking):
        make_booking(seed.room_101, date(2025, 7, 1), date(2025, 7, 5))
        assert _create(booking_service, seed.room_101, date(2025, 7, 5), date(2025, 7, 6)).is_success

    def test_capacity_exceeded(self, booking_service, seed):
        result = _create(booking_service, seed.room_101, date(2025, 6, 1), date(2025, 6, 3), guests=3)
        assert result.error.code == ErrorCode.INSUFFICIENT_CAPACITY
        assert result.error.status_code == 422

    def test_unknown_room(self, booking_service, seed):
        result = booking_service.create_booking(
            BookingCreate(room_id="missing", check_in_date=date(2025, 6, 1), check_out_date=date(2025, 6, 2)),
            CUSTOMER,
        )
        assert result.error.code == ErrorCode.ROOM_NOT_FOUND
        assert result.error.status_code == 404

    def test_pending_bookings_do_not_block(self, booking_service, seed):
        first = _create(booking_service, seed.room_101, date(2025, 7, 1), date(2025, 7, 5)).unwrap()
        second = _create(
            booking_service, seed.room_101, date(2025, 7, 3), date(2025, 7, 6), principal=OTHER_CUSTOMER
        ).unwrap()

        confirm = BookingStatusUpdate(status=BookingStatus.CONFIRMED)
        assert booking_service.update_status(first.id, confirm, STAFF).is_success
        result = booking_service.update_status(second.id, confirm, STAFF)
        assert result.error.code == ErrorCode.ROOM_UNAVAILABLE
        assert booking_service.get_booking(second.id, STAFF).unwrap().booking_status == BookingStatus.PENDING

    def test_duplicate_service_lines_merged(self, booking_service, seed):
        booking = _create(
            booking_service,
            seed.room_101,
            date(2025, 6, 1),
            date(2025, 6, 2),
            services=[
                ServiceRequest(service_id=seed.breakfast.id, quantity=1),
                ServiceRequest(service_id=seed.breakfast.id, quantity=2),
            ],
        ).unwrap()
        assert len(booking.services) == 1
        assert booking.services[0].quantity == 3
        assert booking.services_amount == Decimal("300000")


class TestQueries:
    def test_calculate_cost_has_no_side_effects(self, booking_service, seed, db_session):
        result = booking_service.calculate_cost(
            CostPreviewRequest(
                room_id=seed.room_101.id,
                check_in_date=date(2025, 6, 1),
                check_out_date=date(2025, 6, 3),
                number_of_guests=2,
            )
        )
        assert result.data["nights"] == 2
        assert result.data["total_amount"] == Decimal("1000000")
        assert _booking_count(db_session) == 0

    def test_check_availability(self, booking_service, seed, make_booking):
        make_booking(seed.room_101, date(2025, 7, 1), date(2025, 7, 5))
        busy = booking_service.check_availability(seed.room_101.id, date(2025, 7, 4), date(2025, 7, 6)).unwrap()
        free = booking_service.check_availability(seed.room_101.id, date(2025, 7, 5), date(2025, 7, 6)).unwrap()
        assert busy["available"] is False
        assert busy["conflicting_ranges"] == ["2025-07-01 to 2025-07-05"]
        assert free["available"] is True

    def test_check_availability_invalid_range(self, booking_service, seed):
        result = booking_service.check_availability(seed.room_101.id, date(2025, 7, 5), date(2025, 7, 4))
        assert result.error.code == ErrorCode.INVALID_DATE_RANGE

    def test_customers_see_only_their_own_bookings(self, booking_service, seed):
        booking = _create(booking_service, seed.room_101, date(2025, 6, 1), date(2025, 6, 3)).unwrap()
        _create(booking_service, seed.room_102, date(2025, 6, 1), date(2025, 6, 3), principal=OTHER_CUSTOMER)

        assert booking_service.get_booking(booking.id, CUSTOMER).is_success
        assert booking_service.get_booking(booking.id, STAFF).is_success
        denied = booking_service.get_booking(booking.id, OTHER_CUSTOMER)
        assert denied.error.code == ErrorCode.AUTHORIZATION_FAILED
        assert denied.error.status_code == 403

        mine = booking_service.list_my_bookings(CUSTOMER).unwrap()
        assert [b.id for b in mine] == [booking.id]

    def test_list_filtered_by_status(self, booking_service, seed):
        _confirmed(booking_service, seed.room_101, date(2025, 6, 1), date(2025, 6, 3))
        _create(booking_service, seed.room_102, date(2025, 6, 1), date(2025, 6, 3))
        confirmed = booking_service.list_my_bookings(CUSTOMER, status=BookingStatus.CONFIRMED).unwrap()
        assert [b.booking_status for b in confirmed] == [BookingStatus.CONFIRMED]

    def test_booking_not_found(self, booking_service, seed):
        assert booking_service.get_booking("missing", STAFF).error.code == ErrorCode.BOOKING_NOT_FOUND


class TestUpdateStatus:
    def test_staff_confirms(self, booking_service, seed):
        booking = _confirmed(booking_service, seed.room_101, date(2025, 6, 1), date(2025, 6, 3))
        assert booking.booking_status == BookingStatus.CONFIRMED
        activities = booking_service.get_activities(booking.id, STAFF).unwrap()
        assert activities[-1].activity_type == BookingActivityType.CONFIRMED
        assert activities[-1].from_status == BookingStatus.PENDING

    def test_customer_cannot_update_status(self, booking_service, seed):
        booking = _create(booking_service, seed.room_101, date(2025, 6, 1), date(2025, 6, 3)).unwrap()
        result = booking_service.update_status(
            booking.id, BookingStatusUpdate(status=BookingStatus.CONFIRMED), CUSTOMER
        )
        assert result.error.code == ErrorCode.AUTHORIZATION_FAILED

    def test_confirming_twice_is_a_state_error(self, booking_service, seed):
        booking = _confirmed(booking_service, seed.room_101, date(2025, 6, 1), date(2025, 6, 3))
        result = booking_service.update_status(
            booking.id, BookingStatusUpdate(status=BookingStatus.CONFIRMED), STAFF
        )
        assert result.error.code == ErrorCode.INVALID_STATE_TRANSITION
        assert result.error.status_code == 409

    def test_staff_rejects_pending(self, booking_service, seed):
        booking = _create(booking_service, seed.room_101, date(2025, 6, 1), date(2025, 6, 3)).unwrap()
        result = booking_service.update_status(
            booking.id, BookingStatusUpdate(status=BookingStatus.CANCELLED, notes="no deposit"), ADMIN
        )
        cancelled = result.unwrap()
        assert cancelled.booking_status == BookingStatus.CANCELLED
        assert cancelled.cancelled_by == ADMIN.id
        assert cancelled.cancellation_reason == "no deposit"

    def test_invalid_target(self, booking_service, seed):
        booking = _create(booking_service, seed.room_101, date(2025, 6, 1), date(2025, 6, 3)).unwrap()
        result = booking_service.update_status(
            booking.id, BookingStatusUpdate(status=BookingStatus.CHECKED_IN), STAFF
        )
        assert result.error.code == ErrorCode.VALIDATION_ERROR


class TestCheckInAndOut:
    def test_check_in_waits_for_check_in_date(self, booking_service, seed, clock):
        booking = _confirmed(booking_service, seed.room_101, date(2025, 5, 21), date(2025, 5, 23))

        early = booking_service.check_in(booking.id, STAFF)
        assert early.error.code == ErrorCode.INVALID_STATE_TRANSITION
        assert "has not arrived yet" in early.error.message
        assert seed.room_101.status == RoomStatus.AVAILABLE

        clock.advance(days=1)
        checked_in = booking_service.check_in(booking.id, STAFF, notes="passport copied").unwrap()
        assert checked_in.booking_status == BookingStatus.CHECKED_IN
        assert checked_in.checked_in_by == STAFF.id
        assert checked_in.room.status == RoomStatus.OCCUPIED

    def test_check_in_twice(self, booking_service, seed, clock):
        booking = _confirmed(booking_service, seed.room_101, date(2025, 5, 20), date(2025, 5, 22))
        booking_service.check_in(booking.id, STAFF).unwrap()
        assert booking_service.check_in(booking.id, STAFF).error.code == ErrorCode.GUEST_ALREADY_CHECKED_IN

    def test_customer_cannot_check_in(self, booking_service, seed):
        booking = _confirmed(booking_service, seed.room_101, date(2025, 5, 20), date(2025, 5, 22))
        assert booking_service.check_in(booking.id, CUSTOMER).error.code == ErrorCode.AUTHORIZATION_FAILED

    def test_check_out_requires_check_in(self, booking_service, seed):
        booking = _confirmed(booking_service, seed.room_101, date(2025, 5, 20), date(2025, 5, 22))
        assert booking_service.check_out(booking.id, STAFF).error.code == ErrorCode.GUEST_NOT_CHECKED_IN

    def test_full_stay(self, booking_service, seed, clock):
        booking = _confirmed(booking_service, seed.room_101, date(2025, 5, 20), date(2025, 5, 22))
        booking_service.check_in(booking.id, STAFF).unwrap()
        clock.advance(days=2)
        done = booking_service.check_out(
            booking.id, STAFF, additional_charges=Decimal("150000"), notes="minibar"
        ).unwrap()

        assert done.booking_status == BookingStatus.CHECKED_OUT
        assert done.additional_charges == Decimal("150000")
        assert done.total_amount == Decimal("1150000")
        assert done.room.status == RoomStatus.AVAILABLE
        assert done.room.cleaning_status == CleaningStatus.DIRTY
        assert "minibar" in done.staff_notes

        activities = booking_service.get_activities(booking.id, CUSTOMER).unwrap()
        assert [a.activity_type for a in activities] == [
            BookingActivityType.CREATED,
            BookingActivityType.CONFIRMED,
            BookingActivityType.CHECKED_IN,
            BookingActivityType.CHECKED_OUT,
        ]

    def test_checked_out_booking_stops_blocking(self, booking_service, seed, clock):
        booking = _confirmed(booking_service, seed.room_101, date(2025, 5, 20), date(2025, 5, 25))
        booking_service.check_in(booking.id, STAFF).unwrap()
        booking_service.check_out(booking.id, STAFF).unwrap()
        assert _create(booking_service, seed.room_101, date(2025, 5, 21), date(2025, 5, 23)).is_success


class TestCancelBooking:
    CHECK_IN = date(2025, 6, 10)

    def test_customer_inside_window_rejected(self, booking_service, seed, clock):
        booking = _confirmed(booking_service, seed.room_101, self.CHECK_IN, date(2025, 6, 12))
        # Check-in day starts 2025-06-09 17:00 UTC; this is 12 hours earlier
        clock.set(datetime(2025, 6, 9, 5, 0, tzinfo=timezone.utc))
        result = booking_service.cancel_booking(booking.id, CUSTOMER, "too late")
        assert result.error.code == ErrorCode.CANCELLATION_WINDOW_CLOSED
        assert booking_service.get_booking(booking.id, CUSTOMER).unwrap().booking_status == BookingStatus.CONFIRMED

    def test_customer_outside_window_succeeds(self, booking_service, seed, clock):
        booking = _confirmed(booking_service, seed.room_101, self.CHECK_IN, date(2025, 6, 12))
        clock.set(datetime(2025, 6, 7, 17, 0, tzinfo=timezone.utc))
        cancelled = booking_service.cancel_booking(booking.id, CUSTOMER, "plans changed").unwrap()
        assert cancelled.booking_status == BookingStatus.CANCELLED
        assert cancelled.cancelled_by == CUSTOMER.id
        assert cancelled.cancellation_reason == "plans changed"

    def test_staff_may_cancel_inside_window(self, booking_service, seed, clock):
        booking = _confirmed(booking_service, seed.room_101, self.CHECK_IN, date(2025, 6, 12))
        clock.set(datetime(2025, 6, 9, 20, 0, tzinfo=timezone.utc))
        assert booking_service.cancel_booking(booking.id, STAFF).is_success

    def test_cancelled_booking_frees_the_room(self, booking_service, seed):
        booking = _confirmed(booking_service, seed.room_101, self.CHECK_IN, date(2025, 6, 12))
        booking_service.cancel_booking(booking.id, CUSTOMER).unwrap()
        assert booking_service.check_availability(seed.room_101.id, self.CHECK_IN, date(2025, 6, 12)).data["available"]

    def test_other_customer_cannot_cancel(self, booking_service, seed):
        booking = _create(booking_service, seed.room_101, self.CHECK_IN, date(2025, 6, 12)).unwrap()
        result = booking_service.cancel_booking(booking.id, OTHER_CUSTOMER)
        assert result.error.code == ErrorCode.AUTHORIZATION_FAILED

    def test_cancelling_checked_in_booking_never_mutates_it(self, booking_service, seed):
        booking = _confirmed(booking_service, seed.room_101, date(2025, 5, 20), date(2025, 5, 22))
        booking_service.check_in(booking.id, STAFF).unwrap()

        for principal in (CUSTOMER, STAFF, ADMIN):
            result = booking_service.cancel_booking(booking.id, principal, "should fail")
            assert result.error.code == ErrorCode.INVALID_STATE_TRANSITION

        current = booking_service.get_booking(booking.id, STAFF).unwrap()
        assert current.booking_status == BookingStatus.CHECKED_IN
        assert current.cancelled_at is None
        assert current.cancellation_reason is None

    def test_cancel_twice(self, booking_service, seed):
        booking = _create(booking_service, seed.room_101, self.CHECK_IN, date(2025, 6, 12)).unwrap()
        booking_service.cancel_booking(booking.id, CUSTOMER).unwrap()
        assert booking_service.cancel_booking(booking.id, CUSTOMER).error.code == ErrorCode.INVALID_STATE_TRANSITION


class TestAddService:
    def test_adds_line_and_updates_total(self, booking_service, seed):
        booking = _create(booking_service, seed.room_101, date(2025, 6, 1), date(2025, 6, 3)).unwrap()
        updated = booking_service.add_service(
            booking.id, AddServiceRequest(service_id=seed.pickup.id, quantity=1), CUSTOMER
        ).unwrap()
        assert updated.services_amount == Decimal("250000")
        assert updated.total_amount == Decimal("1250000")

        activities = booking_service.get_activities(booking.id, CUSTOMER).unwrap()
        assert activities[-1].activity_type == BookingActivityType.SERVICE_ADDED

    def test_existing_line_quantity_increased(self, booking_service, seed):
        booking = _create(
            booking_service,
            seed.room_101,
            date(2025, 6, 1),
            date(2025, 6, 3),
            services=[ServiceRequest(service_id=seed.breakfast.id, quantity=1)],
        ).unwrap()
        updated = booking_service.add_service(
            booking.id, AddServiceRequest(service_id=seed.breakfast.id, quantity=2), CUSTOMER
        ).unwrap()
        assert len(updated.services) == 1
        assert updated.services[0].quantity == 3
        assert updated.services_amount == Decimal("300000")
        assert updated.total_amount == Decimal("1300000")

    def test_terminal_booking_rejected(self, booking_service, seed):
        booking = _create(booking_service, seed.room_101, date(2025, 6, 1), date(2025, 6, 3)).unwrap()
        booking_service.cancel_booking(booking.id, CUSTOMER).unwrap()
        result = booking_service.add_service(
            booking.id, AddServiceRequest(service_id=seed.breakfast.id), CUSTOMER
        )
        assert result.error.code == ErrorCode.VALIDATION_ERROR

    def test_inactive_service_rejected(self, booking_service, seed):
        booking = _create(booking_service, seed.room_101, date(2025, 6, 1), date(2025, 6, 3)).unwrap()
        result = booking_service.add_service(booking.id, AddServiceRequest(service_id=seed.spa.id), CUSTOMER)
        assert result.error.code == ErrorCode.VALIDATION_ERROR
        assert booking_service.get_booking(booking.id, CUSTOMER).unwrap().services_amount == Decimal("0")

class TestUpdateBooking:
    def test_new_dates_repriced(self, booking_service, seed):
        booking = _create(booking_service, seed.room_101, date(2025, 6, 1), date(2025, 6, 3)).unwrap()
        updated = booking_service.update_booking(
            booking.id, BookingUpdate(check_out_date=date(2025, 6, 5)), CUSTOMER
        ).unwrap()
        assert (updated.check_in_date, updated.check_out_date) == (date(2025, 6, 1), date(2025, 6, 5))
        assert updated.base_amount == Decimal("2000000")
        assert updated.total_amount == Decimal("2000000")

        activities = booking_service.get_activities(booking.id, CUSTOMER).unwrap()
        assert [(a.activity_type, a.from_status, a.to_status) for a in activities][-1] == (
            BookingActivityType.MODIFIED,
            BookingStatus.PENDING,
            BookingStatus.PENDING,
        )

    def test_service_lines_kept_when_dates_change(self, booking_service, seed):
        booking = _create(
            booking_service,
            seed.room_101,
            date(2025, 6, 1),
            date(2025, 6, 3),
            services=[ServiceRequest(service_id=seed.breakfast.id, quantity=2)],
        ).unwrap()
        updated = booking_service.update_booking(
            booking.id,
            BookingUpdate(check_in_date=date(2025, 6, 10), check_out_date=date(2025, 6, 11)),
            CUSTOMER,
        ).unwrap()
        assert updated.base_amount == Decimal("500000")
        assert updated.services_amount == Decimal("200000")
        assert updated.total_amount == Decimal("700000")

    def test_special_requests_only_keeps_price(self, booking_service, seed, make_booking):
        booking = make_booking(
            seed.room_101, date(2025, 6, 1), date(2025, 6, 3), BookingStatus.PENDING, base_amount=Decimal("777000")
        )
        updated = booking_service.update_booking(
            booking.id, BookingUpdate(special_requests="Late arrival"), CUSTOMER
        ).unwrap()
        assert updated.special_requests == "Late arrival"
        assert updated.base_amount == Decimal("777000")
        assert updated.total_amount == Decimal("777000")

    def test_new_dates_must_be_free(self, booking_service, seed, make_booking):
        make_booking(seed.room_101, date(2025, 6, 10), date(2025, 6, 12))
        booking = _create(booking_service, seed.room_101, date(2025, 6, 1), date(2025, 6, 3)).unwrap()
        result = booking_service.update_booking(
            booking.id,
            BookingUpdate(check_in_date=date(2025, 6, 9), check_out_date=date(2025, 6, 11)),
            CUSTOMER,
        )
        assert result.error.code == ErrorCode.ROOM_UNAVAILABLE
        stored = booking_service.get_booking(booking.id, CUSTOMER).unwrap()
        assert (stored.check_in_date, stored.check_out_date) == (date(2025, 6, 1), date(2025, 6, 3))

    def test_confirmed_booking_ignores_its_own_stay(self, booking_service, seed):
        booking = _confirmed(booking_service, seed.room_101, date(2025, 7, 1), date(2025, 7, 5))
        result = booking_service.update_booking(
            booking.id, BookingUpdate(check_in_date=date(2025, 7, 2)), CUSTOMER
        )
        assert result.is_success, result.error
        assert result.data.booking_status == BookingStatus.CONFIRMED
        assert result.data.base_amount == Decimal("1500000")

    def test_guests_above_capacity(self, booking_service, seed):
        booking = _create(booking_service, seed.room_101, date(2025, 6, 1), date(2025, 6, 3)).unwrap()
        result = booking_service.update_booking(booking.id, BookingUpdate(number_of_guests=3), CUSTOMER)
        assert result.error.code == ErrorCode.INSUFFICIENT_CAPACITY
        assert booking_service.get_booking(booking.id, CUSTOMER).unwrap().number_of_guests == 1

    def test_past_check_in_rejected(self, booking_service, seed):
        booking = _create(booking_service, seed.room_101, date(2025, 6, 1), date(2025, 6, 3)).unwrap()
        result = booking_service.update_booking(
            booking.id, BookingUpdate(check_in_date=date(2025, 5, 19)), CUSTOMER
        )
        assert result.error.code == ErrorCode.VALIDATION_ERROR

    def test_merged_dates_must_form_a_stay(self, booking_service, seed):
        booking = _create(booking_service, seed.room_101, date(2025, 6, 1), date(2025, 6, 3)).unwrap()
        result = booking_service.update_booking(
            booking.id, BookingUpdate(check_out_date=date(2025, 6, 1)), CUSTOMER
        )
        assert result.error.code == ErrorCode.INVALID_DATE_RANGE

    def test_checked_in_booking_cannot_be_modified(self, booking_service, seed, make_booking):
        booking = make_booking(seed.room_101, date(2025, 5, 20), date(2025, 5, 22), BookingStatus.CHECKED_IN)
        result = booking_service.update_booking(booking.id, BookingUpdate(special_requests="Extra towels"), STAFF)
        assert result.error.code == ErrorCode.INVALID_STATE_TRANSITION

    def test_other_customer_rejected(self, booking_service, seed):
        booking = _create(booking_service, seed.room_101, date(2025, 6, 1), date(2025, 6, 3)).unwrap()
        result = booking_service.update_booking(booking.id, BookingUpdate(number_of_guests=2), OTHER_CUSTOMER)
        assert result.error.code == ErrorCode.AUTHORIZATION_FAILED


class TestServiceLines:
    def _with_services(self, booking_service, seed):
        return _create(
            booking_service,
            seed.room_101,
            date(2025, 6, 1),
            date(2025, 6, 3),
            services=[
                ServiceRequest(service_id=seed.breakfast.id, quantity=2),
                ServiceRequest(service_id=seed.pickup.id, quantity=1),
            ],
        ).unwrap()

    def test_list_services(self, booking_service, seed):
        booking = self._with_services(booking_service, seed)
        lines = booking_service.list_services(booking.id, CUSTOMER).unwrap()
        assert sorted((line.service_name, line.quantity, line.total_price) for line in lines) == [
            ("Airport Pickup", 1, Decimal("250000")),
            ("Breakfast", 2, Decimal("200000")),
        ]

    def test_list_services_of_other_customer(self, booking_service, seed):
        booking = self._with_services(booking_service, seed)
        result = booking_service.list_services(booking.id, OTHER_CUSTOMER)
        assert result.error.code == ErrorCode.AUTHORIZATION_FAILED

    def test_remove_line_and_retotal(self, booking_service, seed):
        booking = self._with_services(booking_service, seed)
        breakfast = next(line for line in booking.services if line.service_id == seed.breakfast.id)

        updated = booking_service.remove_service(booking.id, breakfast.id, CUSTOMER).unwrap()
        assert [line.service_id for line in updated.services] == [seed.pickup.id]
        assert updated.services_amount == Decimal("250000")
        assert updated.total_amount == Decimal("1250000")

        activities = booking_service.get_activities(booking.id, CUSTOMER).unwrap()
        assert activities[-1].activity_type == BookingActivityType.SERVICE_REMOVED

    def test_line_of_another_booking_not_found(self, booking_service, seed):
        booking = self._with_services(booking_service, seed)
        other = self._with_services(booking_service, seed)
        result = booking_service.remove_service(booking.id, other.services[0].id, CUSTOMER)
        assert result.error.code == ErrorCode.RESOURCE_NOT_FOUND
        assert len(booking_service.get_booking(other.id, CUSTOMER).unwrap().services) == 2

    def test_terminal_booking_rejected(self, booking_service, seed):
        booking = self._with_services(booking_service, seed)
        booking_service.cancel_booking(booking.id, CUSTOMER).unwrap()
        result = booking_service.remove_service(booking.id, booking.services[0].id, CUSTOMER)
        assert result.error.code == ErrorCode.VALIDATION_ERROR



class TestNoDoubleBooking:
    def test_confirmed_stays_never_overlap(self, booking_service, seed, db_session):
        requests = [
            (date(2025, 7, 1), date(2025, 7, 5)),
            (date(2025, 7, 4), date(2025, 7, 6)),
            (date(2025, 7, 5), date(2025, 7, 8)),
            (date(2025, 7, 2), date(2025, 7, 3)),
            (date(2025, 7, 8), date(2025, 7, 9)),
            (date(2025, 6, 28), date(2025, 7, 12)),
        ]
        pending = [
            _create(booking_service, seed.room_101, check_in, check_out).unwrap()
            for check_in, check_out in requests
        ]
        confirm = BookingStatusUpdate(status=BookingStatus.CONFIRMED)
        for booking in pending:
            booking_service.update_status(booking.id, confirm, STAFF)

        confirmed = db_session.scalars(
            select(Booking).where(
                Booking.room_id == seed.room_101.id,
                Booking.booking_status == BookingStatus.CONFIRMED,
            )
        ).all()
        assert len(confirmed) == 3
        for a, b in combinations(confirmed, 2):
            assert not a.stay.overlaps(b.stay)

        activity_count = db_session.scalar(select(func.count()).select_from(BookingActivity))
        assert activity_count == len(requests) + len(confirmed)
