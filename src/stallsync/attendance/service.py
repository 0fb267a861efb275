from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Sequence

from ..activity.service import StaffActivityLogger
from ..common.datetime_utils import iter_days, month_bounds
from ..core.constants import IN_QUERY_BATCH_SIZE, STATUS_CYCLE, TOPIC_ATTENDANCE, WEEKEND_DAYS
from ..core.enums import ActivityType, AttendanceStatus, NonWorkingDayPolicy
from ..core.exceptions import NotFoundError, ValidationError
from ..holidays.repository import HolidayRepository
from ..payroll.working_calendar import WorkingCalendar
from ..realtime.fanout import fetch_batched
from ..realtime.hub import ChangeHub
from ..staff.model import Actor, Employee
from ..staff.repository import StaffRepository
from ..staff.service import require_manager
from .aggregator import group_by_staff, tally
from .model import ActionResult, AttendanceRecord, RegisterDay, RegisterRow
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def parse_status(value) -> AttendanceStatus:
    try:
        return AttendanceStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in AttendanceStatus)
        raise ValidationError(f"Invalid attendance status {value!r} (expected one of {allowed})") from None


def next_status(current: Optional[AttendanceStatus]) -> AttendanceStatus:
    """Register cell cycle: unmarked -> Present -> Absent -> Leave -> Half-day -> Present."""
    if current is None:
        return AttendanceStatus(STATUS_CYCLE[0])
    index = STATUS_CYCLE.index(current.value)
    return AttendanceStatus(STATUS_CYCLE[(index + 1) % len(STATUS_CYCLE)])


@dataclass(frozen=True)
class AttendanceRegister:
    month: int
    year: int
    site_id: Optional[str]
    days: list[date]
    rows: list[RegisterRow]

    @property
    def read_only(self) -> bool:
        # The all-sites view has no site to record against.
        return self.site_id is None


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        staff: StaffRepository,
        holidays: HolidayRepository,
        *,
        hub: ChangeHub,
        activity: StaffActivityLogger,
        non_working_day_policy: NonWorkingDayPolicy = NonWorkingDayPolicy.IGNORE,
        batch_size: int = IN_QUERY_BATCH_SIZE,
        weekend_days: Iterable[int] = WEEKEND_DAYS,
    ):
        self._attendance = attendance
        self._staff = staff
        self._holidays = holidays
        self._hub = hub
        self._activity = activity
        self._policy = NonWorkingDayPolicy(non_working_day_policy)
        self._batch_size = int(batch_size)
        self._weekend_days = tuple(weekend_days)

    @property
    def batch_size(self) -> int:
        return self._batch_size

    def calendar_between(self, start: date, end: date) -> WorkingCalendar:
        return WorkingCalendar(self._holidays.list_between(start=start, end=end), weekend_days=self._weekend_days)

    def records_by_staff(self, staff_ids: Sequence[str], start: date, end: date) -> dict[str, list[AttendanceRecord]]:
        return fetch_batched(
            staff_ids,
            lambda batch: group_by_staff(self._attendance.list_between(staff_ids=batch, start=start, end=end)),
            size=self._batch_size,
        )

    def mark(
        self,
        actor: Actor,
        staff_id: str,
        work_date: date,
        status,
        *,
        site_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> ActionResult:
        require_manager(actor)
        status = parse_status(status)
        employee = self._get_employee(staff_id)

        record_site = site_id or employee.site_id
        if not record_site:
            return ActionResult(
                ok=False,
                message=f"{employee.label} has no site assigned. Select a site before marking attendance.",
            )

        calendar = self.calendar_between(work_date, work_date)
        if not calendar.is_working_day(work_date, employee.site_id or record_site):
            if self._policy is NonWorkingDayPolicy.REJECT:
                raise ValidationError(f"{work_date:%Y-%m-%d} is not a working day for {employee.label}")
            logger.info(
                "Attendance for %s on non-working day %s saved; it is left out of payroll counts",
                staff_id,
                work_date,
            )

        record = AttendanceRecord(
            staff_id=staff_id,
            work_date=work_date,
            status=status,
            site_id=record_site,
            notes=notes,
            recorded_by_uid=actor.uid,
            recorded_by_name=actor.name,
        )
        self._attendance.upsert(record)
        self._hub.notify(TOPIC_ATTENDANCE)
        self._activity.log(
            actor,
            ActivityType.ATTENDANCE_MARKED,
            related_staff_id=staff_id,
            site_id=record_site,
            date=f"{work_date:%Y-%m-%d}",
            status=status.value,
            related_document_id=record.doc_id,
        )
        return ActionResult(ok=True, message="Attendance saved", record=record)

    def cycle_status(self, actor: Actor, staff_id: str, work_date: date, *, site_id: Optional[str]) -> ActionResult:
        if site_id is None:
            return ActionResult(ok=False, message="Select a specific site to mark attendance.")
        employee = self._get_employee(staff_id)
        if not employee.site_id:
            return ActionResult(ok=False, message=f"{employee.label} has no site assigned.")

        current = self._attendance.get(staff_id, work_date)
        status = next_status(current.status if current else None)
        return self.mark(actor, staff_id, work_date, status, site_id=employee.site_id)

    def statuses_batch(self, staff_ids: Sequence[str], work_date: date) -> dict[str, AttendanceStatus]:
        records = self._attendance.list_between(staff_ids=list(staff_ids), start=work_date, end=work_date)
        return {r.staff_id: r.status for r in records}

    def daily_sheet(self, *, site_id: str, work_date: date) -> dict[str, AttendanceStatus]:
        staff_ids = [e.uid for e in self._staff.list_staff(site_id=site_id)]
        return fetch_batched(staff_ids, lambda batch: self.statuses_batch(batch, work_date), size=self._batch_size)

    def site_staff(self, site_id: str) -> list[Employee]:
        return sorted(self._staff.list_staff(site_id=site_id), key=lambda e: e.label.lower())

    def monthly_register(self, *, site_id: Optional[str], month: int, year: int) -> AttendanceRegister:
        first, last = month_bounds(month, year)
        employees = sorted(self._staff.list_staff(site_id=site_id), key=lambda e: e.label.lower())
        calendar = self.calendar_between(first, last)
        records = self.records_by_staff([e.uid for e in employees], first, last)
        days = list(iter_days(first, last))

        rows = []
        for employee in employees:
            by_day = {r.work_date: r.status for r in records.get(employee.uid, [])}
            cells = []
            for day in days:
                holidays = calendar.holidays_on(day, employee.site_id)
                cells.append(
                    RegisterDay(
                        day=day,
                        status=by_day.get(day),
                        is_weekend=calendar.is_weekend(day),
                        holiday_name=holidays[0].name if holidays else None,
                    )
                )
            working = calendar.working_day_set(first, last, employee.site_id)
            rows.append(
                RegisterRow(
                    staff_id=employee.uid,
                    staff_name=employee.label,
                    site_id=employee.site_id,
                    days=cells,
                    totals=tally(records.get(employee.uid, []), working),
                )
            )
        return AttendanceRegister(month=month, year=year, site_id=site_id, days=days, rows=rows)

    def _get_employee(self, staff_id: str) -> Employee:
        employee = self._staff.get(staff_id)
        if not employee:
            raise NotFoundError(f"Staff member {staff_id} not found")
        return employee
