"""
Seasonal pricing endpoints.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from homestay.api.deps import get_current_principal, get_pricing_service
from homestay.api.responses import dump_as, dump_each, respond
from homestay.models.enums import PricingRuleStatus
from homestay.schemas.common import Principal
from homestay.schemas.pricing import (
    BulkTemplateRequest,
    BulkTemplateResult,
    CalendarDay,
    PricingRuleCreate,
    PricingRuleListQuery,
    PricingRulePage,
    PricingRuleResponse,
    PricingRuleUpdate,
    PricingTemplate,
    RangePricingResponse,
)
from homestay.services.pricing.seasonal_pricing_service import SeasonalPricingService

router = APIRouter(prefix="/pricing", tags=["Seasonal Pricing"])

_rule = dump_as(PricingRuleResponse)


@router.get("/templates")
def list_templates(service: SeasonalPricingService = Depends(get_pricing_service)):
    return respond(service.get_templates(), dump_each(PricingTemplate))


@router.post("/templates/bulk", status_code=status.HTTP_201_CREATED)
def bulk_create_from_template(
    payload: BulkTemplateRequest,
    principal: Principal = Depends(get_current_principal),
    service: SeasonalPricingService = Depends(get_pricing_service),
):
    return respond(
        service.bulk_create_from_template(payload, principal),
        dump_as(BulkTemplateResult),
        status.HTTP_201_CREATED,
    )


@router.get("/rules")
def list_rules(
    room_type_id: Optional[str] = Query(default=None),
    rule_status: Optional[PricingRuleStatus] = Query(default=None, alias="status"),
    year: Optional[int] = Query(default=None, ge=2000, le=2100),
    sort_by: str = Query(default="start_date"),
    sort_desc: bool = Query(default=False),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=50, ge=1, le=200),
    principal: Principal = Depends(get_current_principal),
    service: SeasonalPricingService = Depends(get_pricing_service),
):
    query = PricingRuleListQuery(
        room_type_id=room_type_id,
        status=rule_status,
        year=year,
        sort_by=sort_by,
        sort_desc=sort_desc,
        page=page,
        page_size=page_size,
    )
    return respond(service.list_rules(query, principal), dump_as(PricingRulePage))


@router.post("/rules", status_code=status.HTTP_201_CREATED)
def create_rule(
    payload: PricingRuleCreate,
    principal: Principal = Depends(get_current_principal),
    service: SeasonalPricingService = Depends(get_pricing_service),
):
    return respond(service.create_rule(payload, principal), _rule, status.HTTP_201_CREATED)


@router.get("/rules/{rule_id}")
def get_rule(
    rule_id: str,
    principal: Principal = Depends(get_current_principal),
    service: SeasonalPricingService = Depends(get_pricing_service),
):
    return respond(service.get_rule(rule_id, principal), _rule)


@router.put("/rules/{rule_id}")
def update_rule(
    rule_id: str,
    payload: PricingRuleUpdate,
    principal: Principal = Depends(get_current_principal),
    service: SeasonalPricingService = Depends(get_pricing_service),
):
    return respond(service.update_rule(rule_id, payload, principal), _rule)


@router.delete("/rules/{rule_id}")
def delete_rule(
    rule_id: str,
    principal: Principal = Depends(get_current_principal),
    service: SeasonalPricingService = Depends(get_pricing_service),
):
    return respond(service.delete_rule(rule_id, principal))


@router.get("/room-types/{room_type_id}/range")
def get_pricing_for_range(
    room_type_id: str,
    check_in_date: date = Query(...),
    check_out_date: date = Query(...),
    service: SeasonalPricingService = Depends(get_pricing_service),
):
    """Nightly prices for a stay and the rules that produced them."""
    return respond(
        service.get_pricing_for_range(room_type_id, check_in_date, check_out_date),
        dump_as(RangePricingResponse),
    )


@router.get("/room-types/{room_type_id}/calendar")
def get_pricing_calendar(
    room_type_id: str,
    start_date: Optional[date] = Query(default=None),
    end_date: Optional[date] = Query(default=None),
    service: SeasonalPricingService = Depends(get_pricing_service),
):
    return respond(
        service.get_pricing_calendar(room_type_id, start_date, end_date),
        dump_each(CalendarDay),
    )
