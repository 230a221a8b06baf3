"""Shared fixtures: in-memory database, seeded inventory, frozen clock."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest

from homestay.config.settings import Settings
from homestay.db.session import Database
from homestay.models import AdditionalService, Booking, Room, RoomType, SeasonalPricingRule
from homestay.models.enums import BookingStatus, PricingRuleStatus, RoomStatus, UserRole
from homestay.schemas.common import Principal
from homestay.services.booking.booking_service import BookingService
from homestay.services.pricing.seasonal_pricing_service import SeasonalPricingService

# 10:00 local time (UTC+7) on Tuesday 2025-05-20
NOW = datetime(2025, 5, 20, 3, 0, 0, tzinfo=timezone.utc)

CUSTOMER = Principal(id="customer-1", role=UserRole.CUSTOMER)
OTHER_CUSTOMER = Principal(id="customer-2", role=UserRole.CUSTOMER)
STAFF = Principal(id="staff-1", role=UserRole.STAFF)
ADMIN = Principal(id="admin-1", role=UserRole.ADMIN)

TEST_HOLIDAYS = ["09-02", "2025-07-10", "07-12"]


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = NOW):
        self.current = now

    def __call__(self) -> datetime:
        return self.current

    def set(self, now: datetime) -> None:
        self.current = now

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL="sqlite://",
        ENVIRONMENT="test",
        TIMEZONE="Asia/Ho_Chi_Minh",
        HOLIDAYS=TEST_HOLIDAYS,
        CANCELLATION_WINDOW_HOURS=24,
        CURRENCY="VND",
        CURRENCY_MINOR_UNITS=0,
    )


@pytest.fixture
def database(settings):
    db = Database("sqlite://", settings=settings)
    db.create_all()
    yield db
    db.drop_all()
    db.dispose()


@pytest.fixture
def db_session(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def seed(db_session):
    standard = RoomType(name="Standard Double", base_price=Decimal("500000"), max_occupancy=2)
    family = RoomType(name="Family Suite", base_price=Decimal("900000"), max_occupancy=4)
    db_session.add_all([standard, family])
    db_session.flush()

    room_101 = Room(room_number="101", room_type_id=standard.id)
    room_102 = Room(room_number="102", room_type_id=standard.id)
    room_201 = Room(room_number="201", room_type_id=family.id)
    room_301 = Room(room_number="301", room_type_id=standard.id, status=RoomStatus.MAINTENANCE)

    breakfast = AdditionalService(name="Breakfast", category="food", unit_price=Decimal("100000"))
    pickup = AdditionalService(name="Airport Pickup", category="transport", unit_price=Decimal("250000"))
    spa = AdditionalService(name="Spa", category="wellness", unit_price=Decimal("400000"), is_active=False)

    db_session.add_all([room_101, room_102, room_201, room_301, breakfast, pickup, spa])
    db_session.commit()

    return SimpleNamespace(
        standard=standard,
        family=family,
        room_101=room_101,
        room_102=room_102,
        room_201=room_201,
        room_301=room_301,
        breakfast=breakfast,
        pickup=pickup,
        spa=spa,
    )


@pytest.fixture
def make_booking(db_session):
    """Insert a booking directly, bypassing the service."""
    counter = {"n": 0}

    def _make(
        room: Room,
        check_in: date,
        check_out: date,
        status: BookingStatus = BookingStatus.CONFIRMED,
        customer_id: str = CUSTOMER.id,
        base_amount: Decimal = Decimal("1000000"),
    ) -> Booking:
        counter["n"] += 1
        booking = Booking(
            booking_code=f"BKTEST{counter['n']:06d}",
            customer_id=customer_id,
            room_id=room.id,
            check_in_date=check_in,
            check_out_date=check_out,
            number_of_guests=1,
            base_amount=base_amount,
            services_amount=Decimal("0"),
            additional_charges=Decimal("0"),
            total_amount=base_amount,
            booking_status=status,
        )
        db_session.add(booking)
        db_session.commit()
        return booking

    return _make


@pytest.fixture
def booking_service(db_session, settings, clock):
    return BookingService(db_session, settings=settings, clock=clock)


@pytest.fixture
def pricing_service(db_session, settings, clock):
    return SeasonalPricingService(db_session, settings=settings, clock=clock)


@pytest.fixture
def make_rule(db_session):
    """Insert a seasonal pricing rule directly, bypassing overlap checks."""

    def _make(
        room_type: RoomType,
        start: date,
        end: date,
        base_price: str = "1000000",
        season_name: str = "Season",
        priority: int = 1,
        weekend_multiplier: str = "1.0",
        holiday_multiplier: str = "1.0",
        min_stay_nights: int = 1,
        max_stay_nights=None,
        status: PricingRuleStatus = PricingRuleStatus.ACTIVE,
    ) -> SeasonalPricingRule:
        rule = SeasonalPricingRule(
            room_type_id=room_type.id,
            season_name=season_name,
            start_date=start,
            end_date=end,
            base_price=Decimal(base_price),
            weekend_multiplier=Decimal(weekend_multiplier),
            holiday_multiplier=Decimal(holiday_multiplier),
            min_stay_nights=min_stay_nights,
            max_stay_nights=max_stay_nights,
            priority=priority,
            status=status,
        )
        db_session.add(rule)
        db_session.commit()
        return rule

    return _make
