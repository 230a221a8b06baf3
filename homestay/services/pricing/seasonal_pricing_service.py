"""
Seasonal pricing management service.

Wraps the rule resolver with transactional CRUD, range pricing, the pricing
calendar and template-based bulk creation. Every operation returns a
ServiceResult; domain errors never escape as exceptions.
"""

from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import Session

from homestay.config.settings import Settings
from homestay.core.exceptions import (
    AuthorizationError,
    BaseAppException,
    InvalidDateRangeError,
    ValidationError,
)
from homestay.models.enums import UserRole
from homestay.models.pricing import SeasonalPricingRule
from homestay.repositories.pricing_repository import PricingRuleFilter, SeasonalPricingRuleRepository
from homestay.repositories.room_repository import RoomTypeRepository
from homestay.schemas.common import Principal
from homestay.schemas.pricing import (
    BulkTemplateRequest,
    PricingRuleCreate,
    PricingRuleListQuery,
    PricingRuleUpdate,
    PricingTemplate,
    SeasonTemplate,
)
from homestay.services.base import BaseService, Clock, ServiceResult
from homestay.services.pricing.holiday_calendar import HolidayCalendar
from homestay.services.pricing.rule_resolver import SeasonalPricingResolver
from homestay.services.pricing.templates import PRICING_TEMPLATES, get_template
from homestay.utils.date_utils import DateRange, safe_date
from homestay.utils.money import round_money

_RULE_FIELDS = (
    "room_type_id",
    "season_name",
    "description",
    "start_date",
    "end_date",
    "base_price",
    "weekend_multiplier",
    "holiday_multiplier",
    "min_stay_nights",
    "max_stay_nights",
    "priority",
    "status",
)


class SeasonalPricingService(BaseService):
    """Application service for seasonal pricing rules."""

    def __init__(
        self,
        db_session: Session,
        settings: Optional[Settings] = None,
        clock: Optional[Clock] = None,
        holidays: Optional[HolidayCalendar] = None,
    ):
        super().__init__(db_session, settings, clock)
        self.resolver = SeasonalPricingResolver(db_session, self.settings, holidays)
        self.repository = SeasonalPricingRuleRepository(db_session)
        self.room_type_repository = RoomTypeRepository(db_session)

    # -------------------------------------------------------------------------
    # Authorization
    # -------------------------------------------------------------------------

    @staticmethod
    def _require_admin(principal: Principal) -> None:
        if not principal.is_admin:
            raise AuthorizationError(
                "Only administrators can manage seasonal pricing",
                required_roles=[UserRole.ADMIN.value],
            )

    @staticmethod
    def _require_staff(principal: Principal) -> None:
        if not principal.is_staff:
            raise AuthorizationError(
                "Staff access required",
                required_roles=[UserRole.STAFF.value, UserRole.ADMIN.value],
            )

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    def create_rule(self, data: PricingRuleCreate, principal: Principal) -> ServiceResult[SeasonalPricingRule]:
        try:
            self._require_admin(principal)
            values = data.model_dump()
            with self.transaction():
                rule = self._create_rule_locked(values, created_by=principal.id)
            self._log_operation(
                "create seasonal pricing rule",
                rule.id,
                {"room_type_id": rule.room_type_id, "priority": rule.priority},
            )
            return ServiceResult.success(rule, message="Seasonal pricing created successfully")
        except Exception as e:
            return self._handle_exception(e, "create seasonal pricing rule", data.room_type_id)

    def _create_rule_locked(self, values: Dict[str, Any], created_by: Optional[str] = None) -> SeasonalPricingRule:
        """Lock the room type, validate and insert. Caller owns the transaction."""
        self.room_type_repository.lock_room_type(values["room_type_id"])
        self.resolver.validate_rule_values(values)
        self.resolver.ensure_no_overlap(values)
        rule = SeasonalPricingRule(**{key: values[key] for key in _RULE_FIELDS if key in values})
        rule.created_by = created_by
        return self.repository.create(rule)

    def get_rule(self, rule_id: str, principal: Principal) -> ServiceResult[SeasonalPricingRule]:
        try:
            self._require_staff(principal)
            return ServiceResult.success(self.repository.get_by_id(rule_id))
        except Exception as e:
            return self._handle_exception(e, "get seasonal pricing rule", rule_id)

    def list_rules(self, query: PricingRuleListQuery, principal: Principal) -> ServiceResult[Dict[str, Any]]:
        try:
            self._require_staff(principal)
            skip = (query.page - 1) * query.page_size
            items, total = self.repository.search(
                PricingRuleFilter(
                    room_type_id=query.room_type_id,
                    status=query.status,
                    year=query.year,
                    sort_by=query.sort_by,
                    sort_desc=query.sort_desc,
                    skip=skip,
                    limit=query.page_size,
                )
            )
            return ServiceResult.success(
                {
                    "items": items,
                    "total": total,
                    "page": query.page,
                    "page_size": query.page_size,
                    "total_pages": (total + query.page_size - 1) // query.page_size,
                }
            )
        except Exception as e:
            return self._handle_exception(e, "list seasonal pricing rules")

    def update_rule(
        self, rule_id: str, data: PricingRuleUpdate, principal: Principal
    ) -> ServiceResult[SeasonalPricingRule]:
        """
        Partial update. Validation and the overlap check run on the merged
        values, excluding the rule itself from the overlap query.
        The room type is locked before the rule is reloaded, so the merge
        starts from the committed row.
        """
        try:
            self._require_admin(principal)
            changes = {
                key: value
                for key, value in data.model_dump(exclude_unset=True).items()
                if value is not None or key in ("description", "max_stay_nights")
            }
            with self.transaction():
                room_type_id = self.repository.get_by_id(rule_id).room_type_id
                self.room_type_repository.lock_room_type(room_type_id)
                rule = self.repository.lock_rule(rule_id)

                merged = {key: getattr(rule, key) for key in _RULE_FIELDS}
                merged.update(changes)
                self.resolver.validate_rule_values(merged)
                self.resolver.ensure_no_overlap(merged, exclude_rule_id=rule.id)

                rule = self.repository.update(rule, changes)
            self._log_operation("update seasonal pricing rule", rule.id, {"fields": sorted(changes)})
            return ServiceResult.success(rule, message="Seasonal pricing updated successfully")
        except Exception as e:
            return self._handle_exception(e, "update seasonal pricing rule", rule_id)

    def delete_rule(self, rule_id: str, principal: Principal) -> ServiceResult[bool]:
        try:
            self._require_admin(principal)
            with self.transaction():
                room_type_id = self.repository.get_by_id(rule_id).room_type_id
                self.room_type_repository.lock_room_type(room_type_id)
                self.repository.delete(self.repository.lock_rule(rule_id))
            self._log_operation("delete seasonal pricing rule", rule_id)
            return ServiceResult.success(True, message="Seasonal pricing deleted successfully")
        except Exception as e:
            return self._handle_exception(e, "delete seasonal pricing rule", rule_id)

    # -------------------------------------------------------------------------
    # Pricing queries
    # -------------------------------------------------------------------------

    def get_pricing_for_range(
        self, room_type_id: str, check_in_date: date, check_out_date: date
    ) -> ServiceResult[Dict[str, Any]]:
        """Nightly breakdown for ``[check_in_date, check_out_date)`` and the rules used."""
        try:
            stay = DateRange(check_in_date, check_out_date)
            if stay.nights < 1:
                raise InvalidDateRangeError(check_in_date.isoformat(), check_out_date.isoformat())
            room_type = self.room_type_repository.get_by_id(room_type_id)
            quotes = self.resolver.quote_range(room_type, stay)

            applied: Dict[str, SeasonalPricingRule] = {}
            for quote in quotes:
                if quote.rule is not None:
                    applied.setdefault(quote.rule.id, quote.rule)

            total = round_money(sum(q.price for q in quotes), self.settings.CURRENCY_MINOR_UNITS)
            return ServiceResult.success(
                {
                    "room_type_id": room_type_id,
                    "check_in_date": check_in_date,
                    "check_out_date": check_out_date,
                    "total_nights": stay.nights,
                    "total_amount": total,
                    "daily_prices": [quote.to_dict() for quote in quotes],
                    "applied_rules": list(applied.values()),
                }
            )
        except Exception as e:
            return self._handle_exception(e, "get pricing for date range", room_type_id)

    def get_pricing_calendar(
        self,
        room_type_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> ServiceResult[List[Dict[str, Any]]]:
        """
        One entry per day of the inclusive window. Defaults to today through
        the configured number of months ahead.
        """
        try:
            start_date = start_date or self.today()
            end_date = end_date or start_date + relativedelta(
                months=self.settings.PRICING_CALENDAR_DEFAULT_MONTHS
            )
            if start_date > end_date:
                raise InvalidDateRangeError(
                    start_date.isoformat(),
                    end_date.isoformat(),
                    message="Start date must be on or before end date",
                )
            if (end_date - start_date).days > 366:
                raise ValidationError("Pricing calendar window cannot exceed one year")

            room_type = self.room_type_repository.get_by_id(room_type_id)
            window = DateRange(start_date, end_date + timedelta(days=1))
            calendar = [
                {
                    "date": quote.day,
                    "price": quote.price,
                    "is_weekend": quote.is_weekend,
                    "is_holiday": quote.is_holiday,
                    "season_name": quote.season_name or "Base Rate",
                }
                for quote in self.resolver.quote_range(room_type, window)
            ]
            return ServiceResult.success(calendar)
        except Exception as e:
            return self._handle_exception(e, "get pricing calendar", room_type_id)

    # -------------------------------------------------------------------------
    # Templates
    # -------------------------------------------------------------------------

    def get_templates(self) -> ServiceResult[List[PricingTemplate]]:
        return ServiceResult.success(list(PRICING_TEMPLATES))

    def bulk_create_from_template(
        self, request: BulkTemplateRequest, principal: Principal
    ) -> ServiceResult[Dict[str, Any]]:
        """
        Instantiate every season of a template for each room type.

        A rule rejected by validation or the overlap check is reported in
        ``skipped`` and the rest are still created. Rules created earlier in
        the batch take part in the overlap check for later ones.
        """
        try:
            self._require_admin(principal)
            template = get_template(request.template_name)
            if template is None:
                raise ValidationError(
                    "Template not found",
                    field_errors={"template_name": [f"Unknown template '{request.template_name}'"]},
                )

            created: List[SeasonalPricingRule] = []
            skipped: List[Dict[str, str]] = []
            with self.transaction():
                for room_type_id in request.room_type_ids:
                    for season in template.seasons:
                        values = self._season_values(season, request.year, room_type_id)
                        if values is None:
                            skipped.append(
                                {
                                    "room_type_id": room_type_id,
                                    "season_name": season.name,
                                    "reason": "Season dates do not exist in this year",
                                }
                            )
                            continue
                        try:
                            # Rejections are raised before anything is flushed
                            created.append(self._create_rule_locked(values, created_by=principal.id))
                        except BaseAppException as exc:
                            self._logger.warning(
                                f"Skipped season {season.name} for room type {room_type_id}: {exc.message}",
                                extra={"template": template.name, "year": request.year},
                            )
                            skipped.append(
                                {
                                    "room_type_id": room_type_id,
                                    "season_name": season.name,
                                    "reason": exc.message,
                                }
                            )

            self._log_operation(
                "bulk create seasonal pricing from template",
                template.name,
                {"year": request.year, "created_count": len(created), "skipped_count": len(skipped)},
            )
            return ServiceResult.success(
                {
                    "template_name": template.name,
                    "year": request.year,
                    "room_type_ids": request.room_type_ids,
                    "created_rules": created,
                    "created_count": len(created),
                    "skipped": skipped,
                },
                message="Seasonal pricing created from template successfully",
            )
        except Exception as e:
            return self._handle_exception(e, "bulk create seasonal pricing", request.template_name)

    @staticmethod
    def _season_values(season: SeasonTemplate, year: int, room_type_id: str) -> Optional[Dict[str, Any]]:
        start_month, start_day = (int(part) for part in season.start.split("-"))
        end_month, end_day = (int(part) for part in season.end.split("-"))
        wraps = (end_month, end_day) < (start_month, start_day)

        start = safe_date(year, start_month, start_day)
        end = safe_date(year + 1 if wraps else year, end_month, end_day)
        if end is None and (end_month, end_day) == (2, 29):
            end = date(year + 1 if wraps else year, 2, 28)
        if start is None or end is None:
            return None

        return {
            "room_type_id": room_type_id,
            "season_name": season.name,
            "start_date": start,
            "end_date": end,
            "base_price": season.base_price,
            "weekend_multiplier": season.weekend_multiplier,
            "holiday_multiplier": season.holiday_multiplier,
            "min_stay_nights": season.min_stay_nights,
            "max_stay_nights": None,
            "priority": season.priority,
        }
