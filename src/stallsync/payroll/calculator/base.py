from __future__ import annotations

from abc import ABC, abstractmethod


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    def per_day_rate(self, base_salary: float, working_days: int) -> float:
        if working_days <= 0:
            return 0.0
        return float(base_salary) / working_days

    @abstractmethod
    def earned_salary(self, base_salary: float, working_days: int, present_days: float) -> float:
        raise NotImplementedError
