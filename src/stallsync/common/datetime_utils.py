from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Iterator, Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date: {value!r} (expected YYYY-MM-DD)") from None


def parse_optional_date(value: Optional[str]) -> Optional[date]:
    if value in (None, ""):
        return None
    return parse_iso_date(value)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day from start to end inclusive (nothing if start > end)."""
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def month_bounds(month: int, year: int) -> tuple[date, date]:
    if not 1 <= int(month) <= 12:
        raise ValidationError(f"Invalid month: {month}")
    last = calendar.monthrange(int(year), int(month))[1]
    return date(int(year), int(month), 1), date(int(year), int(month), last)


def next_month(month: int, year: int) -> tuple[int, int]:
    if month == 12:
        return 1, year + 1
    return month + 1, year


def months_between(start: date, end: date) -> list[tuple[int, int]]:
    """(month, year) pairs for every month overlapping [start, end]."""
    out: list[tuple[int, int]] = []
    month, year = start.month, start.year
    while (year, month) <= (end.year, end.month):
        out.append((month, year))
        month, year = next_month(month, year)
    return out


def overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> tuple[date, date]:
    """Intersection of two inclusive ranges; may be empty (start > end)."""
    return max(a_start, b_start), min(a_end, b_end)


def month_label(month: int, year: int) -> str:
    return date(year, month, 1).strftime("%b %Y")
