"""Shared calendar and money helpers."""

from homestay.utils.date_utils import DateRange, DateWindow, daterange, is_weekend
from homestay.utils.money import round_money, to_decimal

__all__ = [
    "DateRange",
    "DateWindow",
    "daterange",
    "is_weekend",
    "round_money",
    "to_decimal",
]
