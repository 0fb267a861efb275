from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable

from ..common.datetime_utils import month_bounds, next_month
from ..core.constants import ADVANCE_WINDOW_NEXT_MONTH_DAY
from .model import SalaryAdvance, SalaryPayment


def _cents(value: float) -> float:
    return round(value, 2)


@dataclass(frozen=True)
class Settlement:
    earned_salary: float
    advances_total: float
    paid_amount: float

    @property
    def net_payable(self) -> float:
        # Negative when advances exceed earnings; surfaced as-is.
        return self.earned_salary - self.advances_total

    @property
    def is_paid(self) -> bool:
        net = _cents(self.net_payable)
        return _cents(self.paid_amount) >= net and net > 0

    @property
    def outstanding(self) -> float:
        return max(_cents(self.net_payable - self.paid_amount), 0.0)


def advance_window(month: int, year: int) -> tuple[date, date]:
    """1st of the salary month through the 15th of the following month."""
    first, _ = month_bounds(month, year)
    nm, ny = next_month(month, year)
    return first, date(ny, nm, ADVANCE_WINDOW_NEXT_MONTH_DAY)


def advances_for_month(advances: Iterable[SalaryAdvance], month: int, year: int) -> list[SalaryAdvance]:
    start, end = advance_window(month, year)
    return [a for a in advances if start <= a.given_on <= end and a.attributed_to(month, year)]


def payments_for_month(payments: Iterable[SalaryPayment], month: int, year: int) -> list[SalaryPayment]:
    return [p for p in payments if p.for_month == month and p.for_year == year]


def settle(
    earned_salary: float,
    advances: Iterable[SalaryAdvance],
    payments: Iterable[SalaryPayment],
    *,
    month: int,
    year: int,
) -> Settlement:
    return Settlement(
        earned_salary=float(earned_salary),
        advances_total=sum(a.amount for a in advances_for_month(advances, month, year)),
        paid_amount=sum(p.amount_paid for p in payments_for_month(payments, month, year)),
    )
