"""
Configured holiday dates.

Entries are either recurring ``MM-DD`` (every year) or one-off
``YYYY-MM-DD`` dates, e.g. a lunar new year that moves every year.
"""

from datetime import date
from typing import FrozenSet, Iterable, Optional, Tuple

from homestay.config.settings import Settings, get_settings
from homestay.utils.date_utils import DateUtilsError, parse_date


class HolidayCalendar:
    def __init__(self, entries: Iterable[str] = ()):
        recurring = set()
        fixed = set()
        for raw in entries:
            entry = raw.strip()
            if not entry:
                continue
            if len(entry) == 5:
                recurring.add(self._parse_month_day(entry))
            else:
                fixed.add(parse_date(entry))
        self._recurring: FrozenSet[Tuple[int, int]] = frozenset(recurring)
        self._fixed: FrozenSet[date] = frozenset(fixed)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "HolidayCalendar":
        settings = settings or get_settings()
        return cls(settings.HOLIDAYS)

    @staticmethod
    def _parse_month_day(entry: str) -> Tuple[int, int]:
        try:
            month, day = (int(part) for part in entry.split("-"))
        except ValueError as e:
            raise DateUtilsError(f"Invalid holiday entry: {entry}") from e
        # 2000 is a leap year so 02-29 is accepted as a recurring entry
        try:
            date(2000, month, day)
        except ValueError as e:
            raise DateUtilsError(f"Invalid holiday entry: {entry}") from e
        return month, day

    def is_holiday(self, day: date) -> bool:
        return day in self._fixed or (day.month, day.day) in self._recurring

    def __contains__(self, day: date) -> bool:
        return self.is_holiday(day)

    def __len__(self) -> int:
        return len(self._recurring) + len(self._fixed)
