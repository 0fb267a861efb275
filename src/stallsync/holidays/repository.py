from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import HolidayRecord


class HolidayRepository(Protocol):
    def add(self, *, name: str, holiday_date: date, site_id: Optional[str], created_at: datetime) -> int:
        raise NotImplementedError

    def get(self, holiday_id: int) -> Optional[HolidayRecord]:
        raise NotImplementedError

    def delete(self, holiday_id: int) -> bool:
        raise NotImplementedError

    def list_between(self, *, start: date, end: date) -> Sequence[HolidayRecord]:
        """Global and site-scoped holidays dated within [start, end]."""
        raise NotImplementedError
