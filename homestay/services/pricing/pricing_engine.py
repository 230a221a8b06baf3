"""
Pricing engine: total cost of a stay.

Every night in ``[check_in, check_out)`` is priced by the seasonal rule
resolver, then requested additional services are added at their catalog
price.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from homestay.config.settings import Settings, get_settings
from homestay.core.exceptions import (
    InsufficientCapacityError,
    InvalidDateRangeError,
    ServiceNotFoundError,
    ValidationError,
)
from homestay.core.logging import get_logger
from homestay.models.room import Room, RoomType
from homestay.repositories.room_repository import RoomRepository
from homestay.repositories.service_repository import AdditionalServiceRepository
from homestay.schemas.booking import ServiceRequest
from homestay.services.pricing.holiday_calendar import HolidayCalendar
from homestay.services.pricing.rule_resolver import DailyQuote, SeasonalPricingResolver
from homestay.utils.date_utils import DateRange
from homestay.utils.money import round_money, to_decimal

logger = get_logger(__name__)


@dataclass
class ServiceCharge:
    service_id: str
    name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "service_id": self.service_id,
            "name": self.name,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "total_price": self.total_price,
        }


@dataclass
class PricingBreakdown:
    """Result of :meth:`PricingEngine.calculate_total`."""

    room_id: str
    room_type_id: str
    check_in_date: date
    check_out_date: date
    nights: int
    number_of_guests: int
    base_amount: Decimal
    services_amount: Decimal
    total_amount: Decimal
    currency: str
    daily_prices: List[DailyQuote] = field(default_factory=list)
    services: List[ServiceCharge] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "room_id": self.room_id,
            "room_type_id": self.room_type_id,
            "check_in_date": self.check_in_date,
            "check_out_date": self.check_out_date,
            "nights": self.nights,
            "number_of_guests": self.number_of_guests,
            "base_amount": self.base_amount,
            "services_amount": self.services_amount,
            "total_amount": self.total_amount,
            "currency": self.currency,
            "daily_prices": [quote.to_dict() for quote in self.daily_prices],
            "services": [charge.to_dict() for charge in self.services],
        }


class PricingEngine:
    """Read-only cost calculation over rooms, rules and the service catalog."""

    def __init__(
        self,
        db: Session,
        settings: Optional[Settings] = None,
        holidays: Optional[HolidayCalendar] = None,
        resolver: Optional[SeasonalPricingResolver] = None,
    ):
        self.settings = settings or get_settings()
        self.resolver = resolver or SeasonalPricingResolver(db, self.settings, holidays)
        self.room_repository = RoomRepository(db)
        self.service_repository = AdditionalServiceRepository(db)

    def calculate_total(
        self,
        room_id: str,
        check_in_date: date,
        check_out_date: date,
        guest_count: int = 1,
        services: Sequence[ServiceRequest] = (),
        room: Optional[Room] = None,
    ) -> PricingBreakdown:
        """
        Price a stay.

        Args:
            room_id: Room being booked
            check_in_date: First night
            check_out_date: Departure day (not charged)
            guest_count: Guests staying
            services: Requested additional services
            room: Already loaded (possibly locked) room to reuse

        Raises:
            InvalidDateRangeError: fewer than one night
            InsufficientCapacityError: guests above the room type capacity
            ValidationError: stay length outside the applied rule's bounds,
                inactive service, non-positive quantity
            RoomNotFoundError, ServiceNotFoundError
        """
        stay = DateRange(check_in_date, check_out_date)
        if stay.nights < 1:
            raise InvalidDateRangeError(check_in_date.isoformat(), check_out_date.isoformat())

        if guest_count < 1:
            raise ValidationError(
                "Number of guests must be at least 1",
                field_errors={"number_of_guests": ["Must be at least 1"]},
            )

        room = room or self.room_repository.get_by_id(room_id)
        room_type: RoomType = room.room_type
        if guest_count > room_type.max_occupancy:
            raise InsufficientCapacityError(guest_count, room_type.max_occupancy)

        daily_prices = self.resolver.quote_range(room_type, stay)
        self._check_stay_length(daily_prices[0], stay)

        minor_units = self.settings.CURRENCY_MINOR_UNITS
        base_amount = round_money(sum((quote.price for quote in daily_prices), Decimal("0")), minor_units)
        charges = self.price_services(services)
        services_amount = round_money(sum((c.total_price for c in charges), Decimal("0")), minor_units)

        breakdown = PricingBreakdown(
            room_id=room.id,
            room_type_id=room_type.id,
            check_in_date=check_in_date,
            check_out_date=check_out_date,
            nights=stay.nights,
            number_of_guests=guest_count,
            base_amount=base_amount,
            services_amount=services_amount,
            total_amount=base_amount + services_amount,
            currency=self.settings.CURRENCY,
            daily_prices=daily_prices,
            services=charges,
        )
        logger.debug(
            "Stay priced",
            extra={
                "room_id": room.id,
                "nights": stay.nights,
                "total_amount": str(breakdown.total_amount),
            },
        )
        return breakdown

    def price_services(self, services: Sequence[ServiceRequest]) -> List[ServiceCharge]:
        """Catalog lookup and line totals for requested services."""
        catalog = self.service_repository.find_many(item.service_id for item in services)
        charges: List[ServiceCharge] = []
        for item in services:
            if item.quantity <= 0:
                raise ValidationError(
                    "Service quantity must be at least 1",
                    field_errors={"quantity": ["Must be at least 1"]},
                )
            service = catalog.get(item.service_id)
            if service is None:
                raise ServiceNotFoundError(item.service_id)
            if not service.is_active:
                raise ValidationError(
                    f"Service '{service.name}' is not available",
                    details={"service_id": service.id},
                )
            unit_price = to_decimal(service.unit_price)
            charges.append(
                ServiceCharge(
                    service_id=service.id,
                    name=service.name,
                    quantity=item.quantity,
                    unit_price=unit_price,
                    total_price=unit_price * item.quantity,
                )
            )
        return charges

    @staticmethod
    def _check_stay_length(first_night: DailyQuote, stay: DateRange) -> None:
        rule = first_night.rule
        if rule is None or rule.accepts_stay_length(stay.nights):
            return
        if stay.nights < rule.min_stay_nights:
            message = f"{rule.season_name} requires a minimum stay of {rule.min_stay_nights} nights"
        else:
            message = f"{rule.season_name} allows a maximum stay of {rule.max_stay_nights} nights"
        raise ValidationError(
            message,
            details={
                "rule_id": rule.id,
                "nights": stay.nights,
                "min_stay_nights": rule.min_stay_nights,
                "max_stay_nights": rule.max_stay_nights,
            },
        )
