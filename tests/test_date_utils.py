"""Calendar-day and money helpers."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from itertools import product

import pytest

from homestay.utils.date_utils import (
    DateRange,
    DateUtilsError,
    DateWindow,
    daterange,
    is_weekend,
    local_date,
    safe_date,
    start_of_local_day,
)
from homestay.utils.money import round_money, to_decimal

BASE = date(2025, 7, 1)


def _ranges():
    for start_offset, length in product(range(0, 6), range(1, 4)):
        start = BASE + timedelta(days=start_offset)
        yield DateRange(start, start + timedelta(days=length))


class TestDateRange:
    def test_nights_excludes_checkout_day(self):
        stay = DateRange(date(2025, 6, 1), date(2025, 6, 3))
        assert stay.nights == 2
        assert list(stay.days()) == [date(2025, 6, 1), date(2025, 6, 2)]

    def test_overlap_is_symmetric(self):
        ranges = list(_ranges())
        for a, b in product(ranges, ranges):
            assert a.overlaps(b) == b.overlaps(a)

    def test_touching_ranges_do_not_overlap(self):
        first = DateRange(date(2025, 7, 1), date(2025, 7, 5))
        assert not first.overlaps(DateRange(date(2025, 7, 5), date(2025, 7, 6)))
        assert first.overlaps(DateRange(date(2025, 7, 4), date(2025, 7, 6)))

    def test_empty_range(self):
        stay = DateRange(date(2025, 7, 2), date(2025, 7, 2))
        assert stay.is_empty
        assert list(stay.days()) == []

    def test_rejects_datetimes(self):
        with pytest.raises(DateUtilsError):
            DateRange(datetime(2025, 7, 1), date(2025, 7, 2))

    def test_str_format(self):
        assert str(DateRange(date(2025, 7, 1), date(2025, 7, 5))) == "2025-07-01 to 2025-07-05"


class TestDateWindow:
    def test_inclusive_bounds(self):
        window = DateWindow(date(2025, 12, 15), date(2026, 1, 31))
        assert window.contains(date(2025, 12, 15))
        assert window.contains(date(2026, 1, 31))
        assert not window.contains(date(2026, 2, 1))

    def test_single_shared_day_intersects(self):
        a = DateWindow(date(2025, 1, 1), date(2025, 1, 10))
        b = DateWindow(date(2025, 1, 10), date(2025, 1, 20))
        assert a.intersects(b) and b.intersects(a)

    def test_daterange_is_inclusive(self):
        assert len(list(daterange(date(2025, 1, 1), date(2025, 1, 3)))) == 3
        assert list(daterange(date(2025, 1, 3), date(2025, 1, 1))) == []


class TestTimezoneHelpers:
    def test_local_date_crosses_midnight(self):
        # 18:30 UTC is already the next day in Ho Chi Minh City
        instant = datetime(2025, 7, 1, 18, 30, tzinfo=timezone.utc)
        assert local_date(instant, "Asia/Ho_Chi_Minh") == date(2025, 7, 2)
        assert local_date(instant, "UTC") == date(2025, 7, 1)

    def test_start_of_local_day(self):
        start = start_of_local_day(date(2025, 7, 2), "Asia/Ho_Chi_Minh")
        assert start == datetime(2025, 7, 1, 17, 0, tzinfo=timezone.utc)

    def test_unknown_timezone(self):
        with pytest.raises(DateUtilsError):
            local_date(datetime(2025, 7, 1, tzinfo=timezone.utc), "Mars/Olympus")

    def test_weekend(self):
        assert is_weekend(date(2025, 12, 20))
        assert is_weekend(date(2025, 12, 21))
        assert not is_weekend(date(2025, 12, 22))

    def test_safe_date(self):
        assert safe_date(2024, 2, 29) == date(2024, 2, 29)
        assert safe_date(2025, 2, 29) is None


class TestMoney:
    def test_round_half_up(self):
        assert round_money(Decimal("1000.5")) == Decimal("1001")
        assert round_money(Decimal("10.005"), 2) == Decimal("10.01")

    def test_floats_rejected(self):
        with pytest.raises(TypeError):
            to_decimal(1.5)

    def test_strings_and_ints(self):
        assert to_decimal("1.30") == Decimal("1.3")
        assert to_decimal(7) == Decimal("7")
