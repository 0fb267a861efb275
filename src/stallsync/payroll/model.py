from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class SalaryAdvance:
    """Money handed out ahead of payroll. Immutable once recorded."""

    staff_id: str
    amount: float
    given_on: date
    for_month: Optional[int] = None
    for_year: Optional[int] = None
    advance_id: Optional[int] = None
    site_id: Optional[str] = None
    staff_site_id: Optional[str] = None
    notes: Optional[str] = None
    recorded_by_uid: Optional[str] = None
    recorded_by_name: Optional[str] = None

    def attributed_to(self, month: int, year: int) -> bool:
        if self.for_month is None or self.for_year is None:
            return True
        return self.for_month == month and self.for_year == year


@dataclass(frozen=True)
class SalaryPayment:
    staff_id: str
    amount_paid: float
    paid_on: date
    for_month: int
    for_year: int
    payment_id: Optional[int] = None
    site_id: Optional[str] = None
    notes: Optional[str] = None
    recorded_by_uid: Optional[str] = None
    recorded_by_name: Optional[str] = None


@dataclass(frozen=True)
class PayrollRow:
    """Derived payroll figures for one employee and one salary month (or part of it)."""

    staff_id: str
    staff_name: str
    site_id: Optional[str]
    month: int
    year: int
    base_salary: float
    month_working_days: int
    expected_days: int
    present_days: float
    per_day_rate: float
    earned_salary: float
    advances: float
    net_payable: float
    paid_amount: float
    is_paid: bool

    @property
    def outstanding(self) -> float:
        return max(self.net_payable - self.paid_amount, 0.0)


@dataclass(frozen=True)
class StaffReportRow:
    staff_id: str
    staff_name: str
    site_id: Optional[str]
    earned_salary: float
    advances: float
    paid_amount: float
    net_payable: float
    working_days: int
    present_days: float
    months: list[PayrollRow] = field(default_factory=list)


@dataclass(frozen=True)
class StaffReport:
    start: date
    end: date
    rows: list[StaffReportRow]

    @property
    def totals(self) -> dict[str, float]:
        earned = sum(r.earned_salary for r in self.rows)
        advances = sum(r.advances for r in self.rows)
        paid = sum(r.paid_amount for r in self.rows)
        return {
            "earned_salary": round(earned, 2),
            "advances": round(advances, 2),
            "paid_amount": round(paid, 2),
            "net_payable": round(earned - advances, 2),
        }
