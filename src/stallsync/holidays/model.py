from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class HolidayRecord:
    """A non-working day; ``site_id`` None means it applies to every site."""

    holiday_date: date
    name: str
    site_id: Optional[str] = None
    holiday_id: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def is_global(self) -> bool:
        return self.site_id is None

    def applies_to(self, site_id: Optional[str]) -> bool:
        return self.site_id is None or self.site_id == site_id
