"""
Seasonal pricing rule model.

A rule overrides the nightly base price of one room type over an inclusive
date window. When several active rules cover a day, the highest priority
wins and ties go to the earliest start date.
"""

from datetime import date as Date
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, Date as SQLDate, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from homestay.models.base import TimestampModel, enum_column
from homestay.models.enums import PricingRuleStatus
from homestay.utils.date_utils import DateWindow

if TYPE_CHECKING:
    from homestay.models.room import RoomType

__all__ = ["SeasonalPricingRule"]


class SeasonalPricingRule(TimestampModel):
    """
    Date-bounded price override for a room type.

    Attributes:
        season_name: Display label ("Peak Season", "Tet Holiday"...)
        start_date / end_date: Inclusive window
        base_price: Nightly price inside the window
        weekend_multiplier: Applied on Saturday and Sunday
        holiday_multiplier: Applied on configured holidays (after weekend)
        min_stay_nights / max_stay_nights: Stay length bounds when the rule
            prices the first night
        priority: Higher wins
        status: Only ACTIVE rules resolve prices or block other rules
    """

    __tablename__ = "seasonal_pricing_rules"

    room_type_id: Mapped[str] = mapped_column(
        ForeignKey("room_types.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    season_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    start_date: Mapped[Date] = mapped_column(
        SQLDate,
        nullable=False,
    )

    end_date: Mapped[Date] = mapped_column(
        SQLDate,
        nullable=False,
    )

    base_price: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
    )

    weekend_multiplier: Mapped[Decimal] = mapped_column(
        Numeric(6, 3),
        nullable=False,
        default=Decimal("1.0"),
    )

    holiday_multiplier: Mapped[Decimal] = mapped_column(
        Numeric(6, 3),
        nullable=False,
        default=Decimal("1.0"),
    )

    min_stay_nights: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
    )

    max_stay_nights: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )

    priority: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
    )

    status: Mapped[PricingRuleStatus] = mapped_column(
        enum_column(PricingRuleStatus),
        nullable=False,
        default=PricingRuleStatus.ACTIVE,
        index=True,
    )

    created_by: Mapped[Optional[str]] = mapped_column(
        String(36),
        nullable=True,
    )

    room_type: Mapped["RoomType"] = relationship(
        "RoomType",
        back_populates="pricing_rules",
        lazy="joined",
    )

    __table_args__ = (
        Index("ix_pricing_rule_lookup", "room_type_id", "status", "start_date", "end_date"),
        CheckConstraint("end_date >= start_date", name="ck_pricing_rule_window"),
        CheckConstraint("base_price > 0", name="ck_pricing_rule_price_positive"),
        CheckConstraint(
            "weekend_multiplier > 0 AND holiday_multiplier > 0",
            name="ck_pricing_rule_multipliers_positive",
        ),
        CheckConstraint("min_stay_nights >= 1", name="ck_pricing_rule_min_stay"),
        CheckConstraint(
            "max_stay_nights IS NULL OR max_stay_nights >= min_stay_nights",
            name="ck_pricing_rule_max_stay",
        ),
    )

    @property
    def window(self) -> DateWindow:
        return DateWindow(self.start_date, self.end_date)

    @property
    def is_active(self) -> bool:
        return self.status == PricingRuleStatus.ACTIVE

    def applies_on(self, day: Date) -> bool:
        return self.is_active and self.window.contains(day)

    def accepts_stay_length(self, nights: int) -> bool:
        if nights < self.min_stay_nights:
            return False
        return self.max_stay_nights is None or nights <= self.max_stay_nights

    def __repr__(self) -> str:
        return (
            f"<SeasonalPricingRule(id={self.id}, season={self.season_name}, "
            f"{self.start_date}..{self.end_date}, priority={self.priority})>"
        )
