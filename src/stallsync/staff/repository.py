from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import Employee, SalaryHistoryEntry


class StaffRepository(Protocol):
    """Read/write access to staff records and their salary history."""

    def get(self, uid: str) -> Optional[Employee]:
        raise NotImplementedError

    def get_many(self, uids: Sequence[str]) -> Sequence[Employee]:
        """Fetch one IN-batch of staff; callers keep batches within the store's limit."""
        raise NotImplementedError

    def list_staff(self, *, site_id: Optional[str] = None) -> Sequence[Employee]:
        """Staff and managers; with site_id, those assigned to or managing that site."""
        raise NotImplementedError

    def update_details(
        self,
        uid: str,
        *,
        joining_date: Optional[date],
        exit_date: Optional[date],
        site_id: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def record_appraisal(
        self,
        *,
        staff_id: str,
        new_salary: float,
        effective_date: date,
        notes: Optional[str],
        recorded_by_uid: str,
        recorded_by_name: str,
        recorded_at: datetime,
    ) -> int:
        """Append a salary history entry and set the current salary in one write."""
        raise NotImplementedError

    def list_salary_history(self, staff_id: str) -> Sequence[SalaryHistoryEntry]:
        raise NotImplementedError
