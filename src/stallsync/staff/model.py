from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Employee:
    """A staff member or manager as consumed by attendance and payroll."""

    uid: str
    display_name: Optional[str]
    email: Optional[str]
    role: Role
    site_id: Optional[str] = None
    joining_date: Optional[date] = None
    exit_date: Optional[date] = None
    salary: float = 0.0
    managed_site_ids: tuple[str, ...] = ()

    @property
    def label(self) -> str:
        return self.display_name or self.email or self.uid

    def is_active_between(self, start: date, end: date) -> bool:
        if self.joining_date and self.joining_date > end:
            return False
        if self.exit_date and self.exit_date < start:
            return False
        return True

    def belongs_to_site(self, site_id: str) -> bool:
        if self.site_id == site_id:
            return True
        return self.role == Role.MANAGER and site_id in self.managed_site_ids


@dataclass(frozen=True)
class SalaryHistoryEntry:
    entry_id: int
    staff_id: str
    new_salary: float
    effective_date: date
    recorded_by_uid: str
    recorded_by_name: Optional[str]
    recorded_at: datetime
    notes: Optional[str] = None


@dataclass(frozen=True)
class Actor:
    """The signed-in user performing an action (identity comes from the auth provider)."""

    uid: str
    name: str
    role: Role
    site_id: Optional[str] = None

    @property
    def can_manage_staff(self) -> bool:
        return self.role in (Role.MANAGER, Role.ADMIN)
