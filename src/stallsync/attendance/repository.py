from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get(self, staff_id: str, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def upsert(self, record: AttendanceRecord) -> None:
        """Insert or merge the (staff, date) record; None fields keep their stored value."""
        raise NotImplementedError

    def list_between(self, *, staff_ids: Sequence[str], start: date, end: date) -> Sequence[AttendanceRecord]:
        """Records for one IN-batch of staff ids dated within [start, end]."""
        raise NotImplementedError
