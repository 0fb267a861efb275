from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Callable, Iterable, Optional, Sequence

from ..activity.service import StaffActivityLogger
from ..attendance.aggregator import group_by_staff
from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import month_bounds, month_label, months_between
from ..common.validators import require_month, require_positive_amount
from ..core.constants import IN_QUERY_BATCH_SIZE, TOPIC_ADVANCES, TOPIC_PAYMENTS, WEEKEND_DAYS
from ..core.enums import ActivityType
from ..core.exceptions import NotFoundError, ValidationError
from ..holidays.repository import HolidayRepository
from ..realtime.fanout import fetch_batched
from ..realtime.hub import ChangeHub
from ..staff.model import Actor, Employee
from ..staff.repository import StaffRepository
from ..staff.service import require_manager
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .engine import combine_report_row, compute_payroll, compute_payroll_row
from .model import PayrollRow, SalaryAdvance, SalaryPayment, StaffReport
from .netting import advance_window
from .repository import PayrollRepository
from .working_calendar import WorkingCalendar

logger = logging.getLogger(__name__)


def _group(items: Iterable, key: Callable) -> dict[str, list]:
    grouped: dict[str, list] = {}
    for item in items:
        grouped.setdefault(key(item), []).append(item)
    return grouped


class PayrollService:
    def __init__(
        self,
        payroll: PayrollRepository,
        staff: StaffRepository,
        attendance: AttendanceRepository,
        holidays: HolidayRepository,
        *,
        hub: ChangeHub,
        activity: StaffActivityLogger,
        calculator: Optional[PayrollCalculator] = None,
        batch_size: int = IN_QUERY_BATCH_SIZE,
        weekend_days: Iterable[int] = WEEKEND_DAYS,
        today: Callable[[], date] = date.today,
    ):
        self._payroll = payroll
        self._staff = staff
        self._attendance = attendance
        self._holidays = holidays
        self._hub = hub
        self._activity = activity
        self._calculator = calculator or StandardPayrollCalculator()
        self._batch_size = int(batch_size)
        self._weekend_days = tuple(weekend_days)
        self._today = today

    @property
    def calculator(self) -> PayrollCalculator:
        return self._calculator

    @property
    def batch_size(self) -> int:
        return self._batch_size

    # -- batched reads (one IN query per batch, merged by staff id) --

    def fetch_holidays(self, start: date, end: date):
        return list(self._holidays.list_between(start=start, end=end))

    def make_calendar(self, holidays) -> WorkingCalendar:
        return WorkingCalendar(holidays, weekend_days=self._weekend_days)

    def attendance_batch(self, batch: Sequence[str], start: date, end: date) -> dict[str, list[AttendanceRecord]]:
        return group_by_staff(self._attendance.list_between(staff_ids=list(batch), start=start, end=end))

    def advances_batch(self, batch: Sequence[str], start: Optional[date], end: Optional[date]) -> dict[str, list[SalaryAdvance]]:
        return _group(self._payroll.list_advances(staff_ids=list(batch), start=start, end=end), lambda a: a.staff_id)

    def payments_batch(self, batch: Sequence[str], periods) -> dict[str, list[SalaryPayment]]:
        return _group(self._payroll.list_payments(staff_ids=list(batch), periods=periods), lambda p: p.staff_id)

    def payroll_staff(self, *, site_id: Optional[str], start: date, end: date) -> list[Employee]:
        return [e for e in self._staff.list_staff(site_id=site_id) if e.is_active_between(start, end)]

    # -- reports --

    def build_monthly_payroll(self, *, month: int, year: int, site_id: Optional[str] = None) -> list[PayrollRow]:
        month, year = require_month(month, year)
        first, last = month_bounds(month, year)
        employees = self.payroll_staff(site_id=site_id, start=first, end=last)
        ids = [e.uid for e in employees]
        adv_start, adv_end = advance_window(month, year)

        return compute_payroll(
            employees,
            month=month,
            year=year,
            calendar=self.make_calendar(self.fetch_holidays(first, last)),
            attendance=fetch_batched(ids, lambda b: self.attendance_batch(b, first, last), size=self._batch_size),
            advances=fetch_batched(ids, lambda b: self.advances_batch(b, adv_start, adv_end), size=self._batch_size),
            payments=fetch_batched(ids, lambda b: self.payments_batch(b, [(month, year)]), size=self._batch_size),
            calculator=self._calculator,
        )

    def build_staff_report(self, *, start: date, end: date, site_id: Optional[str] = None) -> StaffReport:
        if start > end:
            raise ValidationError("Report start date must not be after its end date")
        months = months_between(start, end)
        employees = sorted(self.payroll_staff(site_id=site_id, start=start, end=end), key=lambda e: e.label.lower())
        ids = [e.uid for e in employees]

        # Whole months are loaded so every month keeps its own per-day rate.
        calendar = self.make_calendar(
            self.fetch_holidays(month_bounds(*months[0])[0], month_bounds(*months[-1])[1])
        )
        attendance = fetch_batched(ids, lambda b: self.attendance_batch(b, start, end), size=self._batch_size)
        advances = fetch_batched(ids, lambda b: self.advances_batch(b, start, end), size=self._batch_size)
        payments = fetch_batched(ids, lambda b: self.payments_batch(b, months), size=self._batch_size)

        rows = []
        for employee in employees:
            month_rows = [
                compute_payroll_row(
                    employee,
                    month=m,
                    year=y,
                    calendar=calendar,
                    attendance=attendance.get(employee.uid, ()),
                    calculator=self._calculator,
                    window=(start, end),
                )
                for m, y in months
            ]
            rows.append(
                combine_report_row(
                    employee,
                    month_rows,
                    advances=advances.get(employee.uid, ()),
                    payments=payments.get(employee.uid, ()),
                )
            )
        return StaffReport(start=start, end=end, rows=rows)

    def salary_expense(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        site_id: Optional[str] = None,
    ) -> float:
        """Earned salary for a period, or everything ever paid when no period is given."""
        if start is None or end is None:
            ids = [e.uid for e in self._staff.list_staff(site_id=site_id)]
            payments = fetch_batched(ids, lambda b: self.payments_batch(b, None), size=self._batch_size)
            return round(sum(p.amount_paid for rows in payments.values() for p in rows), 2)
        return self.build_staff_report(start=start, end=end, site_id=site_id).totals["earned_salary"]

    def list_advances(self, *, site_id: str) -> list[SalaryAdvance]:
        ids = [e.uid for e in self._staff.list_staff(site_id=site_id)]
        grouped = fetch_batched(ids, lambda b: self.advances_batch(b, None, None), size=self._batch_size)
        advances = [a for rows in grouped.values() for a in rows]
        advances.sort(key=lambda a: (a.given_on, a.advance_id or 0), reverse=True)
        return advances

    # -- writes --

    def record_advance(
        self,
        actor: Actor,
        staff_id: str,
        *,
        amount,
        given_on: date,
        for_month: Optional[int] = None,
        for_year: Optional[int] = None,
        notes: Optional[str] = None,
        site_id: Optional[str] = None,
    ) -> SalaryAdvance:
        require_manager(actor)
        employee = self._get_employee(staff_id)
        amount = require_positive_amount(amount, "Advance amount")

        if (for_month is None) != (for_year is None):
            raise ValidationError("Both month and year are needed to attribute an advance")
        if for_month is not None:
            for_month, for_year = require_month(for_month, for_year)
            window_start, window_end = advance_window(for_month, for_year)
            if not window_start <= given_on <= window_end:
                raise ValidationError(
                    f"An advance given on {given_on:%Y-%m-%d} cannot count towards {month_label(for_month, for_year)}"
                )

        advance = SalaryAdvance(
            staff_id=staff_id,
            amount=amount,
            given_on=given_on,
            for_month=for_month,
            for_year=for_year,
            site_id=site_id or actor.site_id or employee.site_id,
            staff_site_id=employee.site_id,
            notes=notes,
            recorded_by_uid=actor.uid,
            recorded_by_name=actor.name,
        )
        advance = replace(advance, advance_id=self._payroll.add_advance(advance))
        logger.info("Advance %s of %.2f recorded for %s", advance.advance_id, amount, staff_id)
        self._hub.notify(TOPIC_ADVANCES)
        self._activity.log(
            actor,
            ActivityType.SALARY_ADVANCE_GIVEN,
            related_staff_id=staff_id,
            site_id=advance.site_id,
            amount=amount,
            notes=f"Advance given to {employee.label} on {given_on:%d %b %Y}.",
            related_document_id=advance.advance_id,
        )
        return advance

    def record_payment(
        self,
        actor: Actor,
        staff_id: str,
        *,
        amount_paid,
        month: int,
        year: int,
        paid_on: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> SalaryPayment:
        require_manager(actor)
        employee = self._get_employee(staff_id)
        amount = require_positive_amount(amount_paid, "Paid amount")
        month, year = require_month(month, year)

        payment = SalaryPayment(
            staff_id=staff_id,
            amount_paid=amount,
            paid_on=paid_on or self._today(),
            for_month=month,
            for_year=year,
            site_id=employee.site_id,
            notes=notes,
            recorded_by_uid=actor.uid,
            recorded_by_name=actor.name,
        )
        payment = replace(payment, payment_id=self._payroll.add_payment(payment))
        logger.info("Payment %s of %.2f for %s recorded for %s", payment.payment_id, amount, month_label(month, year), staff_id)
        self._hub.notify(TOPIC_PAYMENTS)
        self._activity.log(
            actor,
            ActivityType.SALARY_PAID,
            related_staff_id=staff_id,
            site_id=employee.site_id,
            amount=amount,
            notes=f"Salary for {month_label(month, year)} paid. Notes: {notes or 'N/A'}.",
            related_document_id=payment.payment_id,
        )
        return payment

    def _get_employee(self, staff_id: str) -> Employee:
        employee = self._staff.get(staff_id)
        if not employee:
            raise NotFoundError(f"Staff member {staff_id} not found")
        return employee
