"""
Predefined seasonal pricing templates.

Seasons are given as ``MM-DD`` bounds and are instantiated for a concrete
year by the pricing service. A season whose end precedes its start (e.g.
12-15 to 01-31) wraps into the following year.
"""

from decimal import Decimal
from typing import List, Optional

from homestay.schemas.pricing import PricingTemplate, SeasonTemplate

PRICING_TEMPLATES: List[PricingTemplate] = [
    PricingTemplate(
        name="vietnam_standard",
        display_name="Vietnam Standard Seasons",
        description="Standard seasonal pricing for Vietnam tourism",
        seasons=[
            SeasonTemplate(
                name="Low Season",
                start="05-01",
                end="09-30",
                base_price=Decimal("800000"),
                weekend_multiplier=Decimal("1.2"),
                holiday_multiplier=Decimal("1.5"),
            ),
            SeasonTemplate(
                name="Peak Season",
                start="12-15",
                end="01-31",
                base_price=Decimal("1500000"),
                weekend_multiplier=Decimal("1.3"),
                holiday_multiplier=Decimal("2.0"),
            ),
            SeasonTemplate(
                name="High Season",
                start="02-01",
                end="04-30",
                base_price=Decimal("1200000"),
                weekend_multiplier=Decimal("1.25"),
                holiday_multiplier=Decimal("1.8"),
            ),
        ],
    ),
    PricingTemplate(
        name="beach_resort",
        display_name="Beach Resort Pricing",
        description="Optimized for beach and coastal properties",
        seasons=[
            SeasonTemplate(
                name="Dry Season",
                start="11-01",
                end="04-30",
                base_price=Decimal("1800000"),
                weekend_multiplier=Decimal("1.4"),
                holiday_multiplier=Decimal("2.2"),
            ),
            SeasonTemplate(
                name="Rainy Season",
                start="05-01",
                end="10-31",
                base_price=Decimal("1000000"),
                weekend_multiplier=Decimal("1.15"),
                holiday_multiplier=Decimal("1.6"),
            ),
        ],
    ),
]


def get_template(name: str) -> Optional[PricingTemplate]:
    return next((template for template in PRICING_TEMPLATES if template.name == name), None)
