"""Derive payroll rows from the current accumulated state.

Everything here is pure: the live board and the reporting service both
rebuild rows from scratch whenever any input changes.
"""
from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Sequence

from ..attendance.aggregator import present_day_count
from ..attendance.model import AttendanceRecord
from ..common.datetime_utils import month_bounds, overlap
from ..staff.model import Employee
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import PayrollRow, SalaryAdvance, SalaryPayment, StaffReportRow
from .netting import settle
from .working_calendar import WorkingCalendar, employment_window


def compute_payroll_row(
    employee: Employee,
    *,
    month: int,
    year: int,
    calendar: WorkingCalendar,
    attendance: Iterable[AttendanceRecord] = (),
    advances: Iterable[SalaryAdvance] = (),
    payments: Iterable[SalaryPayment] = (),
    calculator: Optional[PayrollCalculator] = None,
    window: Optional[tuple[date, date]] = None,
) -> PayrollRow:
    """Payroll for one salary month, optionally restricted to ``window`` inside it.

    The per-day rate always uses the whole month's working days for the
    employee's site; only the days attendance is counted over shrink.
    """
    calculator = calculator or StandardPayrollCalculator()
    first, last = month_bounds(month, year)
    site = employee.site_id

    month_days = calendar.working_days(first, last, site)
    start, end = (first, last) if window is None else overlap(first, last, *window)
    start, end = employment_window(start, end, employee.joining_date, employee.exit_date)
    counted = calendar.working_day_set(start, end, site)

    present = present_day_count(attendance, counted)
    earned = calculator.earned_salary(employee.salary, month_days, present)
    settlement = settle(earned, advances, payments, month=month, year=year)

    return PayrollRow(
        staff_id=employee.uid,
        staff_name=employee.label,
        site_id=site,
        month=month,
        year=year,
        base_salary=employee.salary,
        month_working_days=month_days,
        expected_days=len(counted),
        present_days=present,
        per_day_rate=calculator.per_day_rate(employee.salary, month_days),
        earned_salary=earned,
        advances=settlement.advances_total,
        net_payable=settlement.net_payable,
        paid_amount=settlement.paid_amount,
        is_paid=settlement.is_paid,
    )


def compute_payroll(
    employees: Sequence[Employee],
    *,
    month: int,
    year: int,
    calendar: WorkingCalendar,
    attendance: dict[str, list[AttendanceRecord]],
    advances: dict[str, list[SalaryAdvance]],
    payments: dict[str, list[SalaryPayment]],
    calculator: Optional[PayrollCalculator] = None,
) -> list[PayrollRow]:
    """Rows for every employee active in the month, sorted by name."""
    first, last = month_bounds(month, year)
    rows = [
        compute_payroll_row(
            e,
            month=month,
            year=year,
            calendar=calendar,
            attendance=attendance.get(e.uid, ()),
            advances=advances.get(e.uid, ()),
            payments=payments.get(e.uid, ()),
            calculator=calculator,
        )
        for e in employees
        if e.is_active_between(first, last)
    ]
    rows.sort(key=lambda r: r.staff_name.lower())
    return rows


def combine_report_row(
    employee: Employee,
    month_rows: Sequence[PayrollRow],
    *,
    advances: Iterable[SalaryAdvance],
    payments: Iterable[SalaryPayment],
) -> StaffReportRow:
    """Sum per-month rows for a report; advances and payments are netted once for the whole range."""
    earned = sum(r.earned_salary for r in month_rows)
    advances_total = sum(a.amount for a in advances)
    return StaffReportRow(
        staff_id=employee.uid,
        staff_name=employee.label,
        site_id=employee.site_id,
        earned_salary=earned,
        advances=advances_total,
        paid_amount=sum(p.amount_paid for p in payments),
        net_payable=earned - advances_total,
        working_days=sum(r.expected_days for r in month_rows),
        present_days=sum(r.present_days for r in month_rows),
        months=list(month_rows),
    )
