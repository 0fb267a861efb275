"""Working-day calendar.

A day is non-working when it falls on a weekend or when any holiday record on
that date is global or scoped to the employee's site. Duplicate holiday
records for the same day are harmless: one match is enough.
"""
from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Iterable, Iterator, Optional

from ..common.datetime_utils import iter_days, month_bounds
from ..core.constants import WEEKEND_DAYS
from ..holidays.model import HolidayRecord


class WorkingCalendar:
    def __init__(self, holidays: Iterable[HolidayRecord] = (), *, weekend_days: Iterable[int] = WEEKEND_DAYS):
        self._weekend = frozenset(int(d) for d in weekend_days)
        self._by_date: dict[date, list[HolidayRecord]] = defaultdict(list)
        for holiday in holidays:
            self._by_date[holiday.holiday_date].append(holiday)

    @property
    def weekend_days(self) -> frozenset[int]:
        return self._weekend

    def is_weekend(self, day: date) -> bool:
        return day.weekday() in self._weekend

    def holidays_on(self, day: date, site_id: Optional[str] = None) -> list[HolidayRecord]:
        return [h for h in self._by_date.get(day, ()) if h.applies_to(site_id)]

    def is_holiday(self, day: date, site_id: Optional[str] = None) -> bool:
        return any(h.applies_to(site_id) for h in self._by_date.get(day, ()))

    def is_working_day(self, day: date, site_id: Optional[str] = None) -> bool:
        return not self.is_weekend(day) and not self.is_holiday(day, site_id)

    def iter_working_days(self, start: date, end: date, site_id: Optional[str] = None) -> Iterator[date]:
        for day in iter_days(start, end):
            if self.is_working_day(day, site_id):
                yield day

    def working_day_set(self, start: date, end: date, site_id: Optional[str] = None) -> frozenset[date]:
        return frozenset(self.iter_working_days(start, end, site_id))

    def working_days(self, start: date, end: date, site_id: Optional[str] = None) -> int:
        """Working days in [start, end]; 0 when start > end."""
        return sum(1 for _ in self.iter_working_days(start, end, site_id))

    def month_working_days(self, month: int, year: int, site_id: Optional[str] = None) -> int:
        first, last = month_bounds(month, year)
        return self.working_days(first, last, site_id)


def working_days(
    start: date,
    end: date,
    holidays: Iterable[HolidayRecord],
    site_id: Optional[str],
    *,
    weekend_days: Iterable[int] = WEEKEND_DAYS,
) -> int:
    return WorkingCalendar(holidays, weekend_days=weekend_days).working_days(start, end, site_id)


def employment_window(
    period_start: date,
    period_end: date,
    joining_date: Optional[date] = None,
    exit_date: Optional[date] = None,
) -> tuple[date, date]:
    """Clamp a period to an employee's joining/exit dates. The result may be empty (start > end)."""
    start = max(period_start, joining_date) if joining_date else period_start
    end = min(period_end, exit_date) if exit_date else period_end
    return start, end
