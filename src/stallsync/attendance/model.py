from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..core.enums import AttendanceStatus


def attendance_doc_id(staff_id: str, work_date: date) -> str:
    """Stable key for the single record per (staff, date)."""
    return f"{work_date:%Y-%m-%d}_{staff_id}"


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one day's attendance for one staff member."""

    staff_id: str
    work_date: date
    status: AttendanceStatus
    site_id: Optional[str] = None
    notes: Optional[str] = None
    recorded_by_uid: Optional[str] = None
    recorded_by_name: Optional[str] = None

    @property
    def doc_id(self) -> str:
        return attendance_doc_id(self.staff_id, self.work_date)


@dataclass(frozen=True)
class AttendanceTally:
    present: int = 0
    absent: int = 0
    leave: int = 0
    half_day: int = 0

    @property
    def present_days(self) -> float:
        return self.present + 0.5 * self.half_day


@dataclass(frozen=True)
class RegisterDay:
    day: date
    status: Optional[AttendanceStatus]
    is_weekend: bool
    holiday_name: Optional[str] = None

    @property
    def is_working_day(self) -> bool:
        return not self.is_weekend and self.holiday_name is None


@dataclass(frozen=True)
class RegisterRow:
    staff_id: str
    staff_name: str
    site_id: Optional[str]
    days: list[RegisterDay] = field(default_factory=list)
    totals: AttendanceTally = field(default_factory=AttendanceTally)


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a guarded action: ``ok`` False means nothing was written."""

    ok: bool
    message: str = ""
    record: Optional[AttendanceRecord] = None
