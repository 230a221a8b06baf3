"""
Seasonal pricing schemas.
"""

from __future__ import annotations

from datetime import date as Date
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, model_validator

from homestay.models.enums import PricingRuleStatus
from homestay.schemas.booking import DailyPrice
from homestay.schemas.common import BaseDBSchema, BaseSchema

__all__ = [
    "PricingRuleCreate",
    "PricingRuleUpdate",
    "PricingRuleResponse",
    "PricingRuleListQuery",
    "PricingRulePage",
    "RangePricingResponse",
    "CalendarDay",
    "SeasonTemplate",
    "PricingTemplate",
    "BulkTemplateRequest",
    "BulkTemplateResult",
]


def _check_stay_bounds(min_stay: Optional[int], max_stay: Optional[int]) -> None:
    if min_stay is not None and max_stay is not None and max_stay < min_stay:
        raise ValueError("Maximum stay must be greater than or equal to minimum stay")


class PricingRuleCreate(BaseSchema):
    room_type_id: str = Field(..., min_length=1)
    season_name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    start_date: Date
    end_date: Date
    base_price: Decimal = Field(..., gt=0)
    weekend_multiplier: Decimal = Field(Decimal("1.0"), gt=0, le=10)
    holiday_multiplier: Decimal = Field(Decimal("1.0"), gt=0, le=10)
    min_stay_nights: int = Field(1, ge=1)
    max_stay_nights: Optional[int] = Field(None, ge=1)
    priority: int = Field(1, ge=1, le=100)
    status: PricingRuleStatus = PricingRuleStatus.ACTIVE

    @model_validator(mode="after")
    def validate_window(self) -> "PricingRuleCreate":
        if self.start_date > self.end_date:
            raise ValueError("Start date must be on or before end date")
        _check_stay_bounds(self.min_stay_nights, self.max_stay_nights)
        return self


class PricingRuleUpdate(BaseSchema):
    """Partial update; fields left unset keep their stored value."""

    season_name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    start_date: Optional[Date] = None
    end_date: Optional[Date] = None
    base_price: Optional[Decimal] = Field(None, gt=0)
    weekend_multiplier: Optional[Decimal] = Field(None, gt=0, le=10)
    holiday_multiplier: Optional[Decimal] = Field(None, gt=0, le=10)
    min_stay_nights: Optional[int] = Field(None, ge=1)
    max_stay_nights: Optional[int] = Field(None, ge=1)
    priority: Optional[int] = Field(None, ge=1, le=100)
    status: Optional[PricingRuleStatus] = None

    @model_validator(mode="after")
    def validate_partial_window(self) -> "PricingRuleUpdate":
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("Start date must be on or before end date")
        _check_stay_bounds(self.min_stay_nights, self.max_stay_nights)
        return self


class PricingRuleResponse(BaseDBSchema):
    room_type_id: str
    season_name: str
    description: Optional[str] = None
    start_date: Date
    end_date: Date
    base_price: Decimal
    weekend_multiplier: Decimal
    holiday_multiplier: Decimal
    min_stay_nights: int
    max_stay_nights: Optional[int] = None
    priority: int
    status: PricingRuleStatus


class PricingRuleListQuery(BaseSchema):
    room_type_id: Optional[str] = None
    status: Optional[PricingRuleStatus] = None
    year: Optional[int] = Field(None, ge=2000, le=2100)
    sort_by: str = Field("start_date", pattern=r"^(start_date|end_date|priority|base_price|season_name|created_at)$")
    sort_desc: bool = False
    page: int = Field(1, ge=1)
    page_size: int = Field(50, ge=1, le=200)


class PricingRulePage(BaseSchema):
    items: List[PricingRuleResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class RangePricingResponse(BaseSchema):
    room_type_id: str
    check_in_date: Date
    check_out_date: Date
    total_nights: int
    total_amount: Decimal
    daily_prices: List[DailyPrice]
    applied_rules: List[PricingRuleResponse] = Field(default_factory=list)


class CalendarDay(BaseSchema):
    date: Date
    price: Decimal
    is_weekend: bool
    is_holiday: bool
    season_name: str


class SeasonTemplate(BaseSchema):
    name: str
    start: str = Field(..., pattern=r"^\d{2}-\d{2}$", description="MM-DD")
    end: str = Field(..., pattern=r"^\d{2}-\d{2}$", description="MM-DD")
    base_price: Decimal
    weekend_multiplier: Decimal = Decimal("1.0")
    holiday_multiplier: Decimal = Decimal("1.0")
    min_stay_nights: int = 1
    priority: int = 1


class PricingTemplate(BaseSchema):
    name: str
    display_name: str
    description: str
    seasons: List[SeasonTemplate]


class BulkTemplateRequest(BaseSchema):
    template_name: str = Field(..., min_length=1)
    year: int = Field(..., ge=2000, le=2100)
    room_type_ids: List[str] = Field(..., min_length=1)


class SkippedRule(BaseSchema):
    room_type_id: str
    season_name: str
    reason: str


class BulkTemplateResult(BaseSchema):
    template_name: str
    year: int
    room_type_ids: List[str]
    created_rules: List[PricingRuleResponse]
    created_count: int
    skipped: List[SkippedRule] = Field(default_factory=list)
