"""
Seasonal pricing rule resolver.

Picks the rule that prices a given day and applies the weekend and holiday
multipliers. Also owns the write-time validation of rules, including the
same-priority overlap check.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from homestay.config.settings import Settings, get_settings
from homestay.core.exceptions import InvalidDateRangeError, PricingRuleOverlapError, ValidationError
from homestay.core.logging import get_logger
from homestay.models.enums import PricingRuleStatus
from homestay.models.pricing import SeasonalPricingRule
from homestay.models.room import RoomType
from homestay.repositories.pricing_repository import SeasonalPricingRuleRepository
from homestay.repositories.room_repository import RoomTypeRepository
from homestay.services.pricing.holiday_calendar import HolidayCalendar
from homestay.utils.date_utils import DateRange, is_weekend
from homestay.utils.money import round_money, to_decimal

logger = get_logger(__name__)


@dataclass(frozen=True)
class DailyQuote:
    """Price of one night and how it was derived."""

    day: date
    price: Decimal
    is_weekend: bool
    is_holiday: bool
    rule: Optional[SeasonalPricingRule] = None

    @property
    def season_name(self) -> Optional[str]:
        return self.rule.season_name if self.rule else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.day,
            "price": self.price,
            "is_weekend": self.is_weekend,
            "is_holiday": self.is_holiday,
            "rule_id": self.rule.id if self.rule else None,
            "season_name": self.season_name,
        }


def select_rule(rules: Iterable[SeasonalPricingRule], day: date) -> Optional[SeasonalPricingRule]:
    """
    Best active rule covering ``day``: highest priority, then earliest start.
    The id breaks any remaining tie so the choice is deterministic.
    """
    candidates = [rule for rule in rules if rule.applies_on(day)]
    if not candidates:
        return None
    return min(candidates, key=lambda r: (-r.priority, r.start_date, r.id or ""))


class SeasonalPricingResolver:
    """
    Resolves nightly prices for a room type.

    Rules are read through the injected session; the resolver never writes.
    """

    def __init__(
        self,
        db: Session,
        settings: Optional[Settings] = None,
        holidays: Optional[HolidayCalendar] = None,
    ):
        self.settings = settings or get_settings()
        self.holidays = holidays or HolidayCalendar.from_settings(self.settings)
        self.rule_repository = SeasonalPricingRuleRepository(db)
        self.room_type_repository = RoomTypeRepository(db)

    # ---------------------------------------------------------------- pricing

    def price_with_rule(self, room_type: RoomType, day: date, rule: Optional[SeasonalPricingRule]) -> DailyQuote:
        weekend = is_weekend(day)
        holiday = self.holidays.is_holiday(day)

        if rule is None:
            price = to_decimal(room_type.base_price)
        else:
            price = to_decimal(rule.base_price)
            if weekend:
                price *= to_decimal(rule.weekend_multiplier)
            if holiday:
                price *= to_decimal(rule.holiday_multiplier)

        return DailyQuote(
            day=day,
            price=round_money(price, self.settings.CURRENCY_MINOR_UNITS),
            is_weekend=weekend,
            is_holiday=holiday,
            rule=rule,
        )

    def resolve_rule(self, room_type_id: str, day: date) -> Optional[SeasonalPricingRule]:
        rules = self.rule_repository.find_applicable_rules(room_type_id, day)
        return rules[0] if rules else None

    def quote_day(self, room_type_id: str, day: date) -> DailyQuote:
        room_type = self.room_type_repository.get_by_id(room_type_id)
        return self.price_with_rule(room_type, day, self.resolve_rule(room_type_id, day))

    def resolve_daily_price(self, room_type_id: str, day: date) -> Decimal:
        """Nightly price of the room type on ``day``."""
        return self.quote_day(room_type_id, day).price

    def quote_range(self, room_type: RoomType, stay: DateRange) -> List[DailyQuote]:
        """
        One quote per night of ``stay`` (check-out day excluded).

        Rules touching the stay are loaded once and resolved in memory.
        """
        if stay.is_empty:
            return []
        last_night = stay.end - timedelta(days=1)
        rules = self.rule_repository.find_active_in_window(room_type.id, stay.start, last_night)
        return [self.price_with_rule(room_type, day, select_rule(rules, day)) for day in stay.days()]

    # ------------------------------------------------------------- validation

    @staticmethod
    def validate_rule_values(values: Dict[str, Any]) -> None:
        """
        Field checks shared by create and update, on the merged values.

        Raises:
            InvalidDateRangeError: start_date after end_date
            ValidationError: non-positive price or multiplier, bad stay bounds
        """
        start, end = values["start_date"], values["end_date"]
        if start > end:
            raise InvalidDateRangeError(
                start.isoformat(),
                end.isoformat(),
                message="Start date must be on or before end date",
            )

        field_errors: Dict[str, List[str]] = {}
        if to_decimal(values["base_price"]) <= 0:
            field_errors["base_price"] = ["Base price must be greater than 0"]
        for key in ("weekend_multiplier", "holiday_multiplier"):
            if to_decimal(values.get(key, Decimal("1.0"))) <= 0:
                field_errors[key] = ["Multiplier must be greater than 0"]

        min_stay = values.get("min_stay_nights", 1)
        max_stay = values.get("max_stay_nights")
        if min_stay < 1:
            field_errors["min_stay_nights"] = ["Minimum stay must be at least 1 night"]
        if max_stay is not None and max_stay < min_stay:
            field_errors["max_stay_nights"] = [
                "Maximum stay must be greater than or equal to minimum stay"
            ]
        if values.get("priority", 1) < 1:
            field_errors["priority"] = ["Priority must be at least 1"]

        if field_errors:
            raise ValidationError("Invalid seasonal pricing rule", field_errors=field_errors)

    def ensure_no_overlap(self, values: Dict[str, Any], exclude_rule_id: Optional[str] = None) -> None:
        """
        Reject an active rule whose window intersects another active rule of
        the same room type at the same priority. Inactive rules are exempt.
        """
        if values.get("status", PricingRuleStatus.ACTIVE) != PricingRuleStatus.ACTIVE:
            return

        overlapping = self.rule_repository.find_overlapping(
            values["room_type_id"],
            values["start_date"],
            values["end_date"],
            values.get("priority", 1),
            exclude_rule_id=exclude_rule_id,
        )
        if overlapping:
            logger.info(
                "Pricing rule overlap rejected",
                extra={
                    "room_type_id": values["room_type_id"],
                    "priority": values.get("priority", 1),
                    "overlapping_ids": [rule.id for rule in overlapping],
                },
            )
            raise PricingRuleOverlapError(
                [
                    {
                        "id": rule.id,
                        "season_name": rule.season_name,
                        "start_date": rule.start_date.isoformat(),
                        "end_date": rule.end_date.isoformat(),
                        "priority": rule.priority,
                    }
                    for rule in overlapping
                ]
            )
