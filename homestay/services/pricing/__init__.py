from homestay.services.pricing.holiday_calendar import HolidayCalendar
from homestay.services.pricing.pricing_engine import PricingBreakdown, PricingEngine, ServiceCharge
from homestay.services.pricing.rule_resolver import DailyQuote, SeasonalPricingResolver, select_rule
from homestay.services.pricing.seasonal_pricing_service import SeasonalPricingService

__all__ = [
    "HolidayCalendar",
    "PricingBreakdown",
    "PricingEngine",
    "ServiceCharge",
    "DailyQuote",
    "SeasonalPricingResolver",
    "select_rule",
    "SeasonalPricingService",
]
