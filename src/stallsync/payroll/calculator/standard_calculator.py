from __future__ import annotations

from .base import PayrollCalculator


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: (base / working days) * present days, 0 when the month has no working days."""

    def earned_salary(self, base_salary: float, working_days: int, present_days: float) -> float:
        if working_days <= 0:
            return 0.0
        return self.per_day_rate(base_salary, working_days) * float(present_days)
