"""
Additional service catalog (breakfast, airport pickup, laundry...).
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, validates

from homestay.models.base import TimestampModel

__all__ = ["AdditionalService"]


class AdditionalService(TimestampModel):
    """Catalog entry that can be attached to bookings."""

    __tablename__ = "additional_services"

    name: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
    )

    category: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        index=True,
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    unit_price: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    __table_args__ = (
        CheckConstraint("unit_price >= 0", name="ck_service_unit_price_positive"),
    )

    @validates("unit_price")
    def validate_unit_price(self, key: str, value: Decimal) -> Decimal:
        if value is not None and Decimal(value) < 0:
            raise ValueError("Unit price cannot be negative")
        return value

    def __repr__(self) -> str:
        return f"<AdditionalService(id={self.id}, name={self.name}, active={self.is_active})>"
