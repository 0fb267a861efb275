from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import SalaryAdvance, SalaryPayment


class PayrollRepository(Protocol):
    """Advances and payments. Multi-id reads take one IN-batch at a time."""

    def add_advance(self, advance: SalaryAdvance) -> int:
        raise NotImplementedError

    def add_payment(self, payment: SalaryPayment) -> int:
        raise NotImplementedError

    def list_advances(
        self,
        *,
        staff_ids: Sequence[str],
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[SalaryAdvance]:
        raise NotImplementedError

    def list_payments(
        self,
        *,
        staff_ids: Sequence[str],
        periods: Optional[Sequence[tuple[int, int]]] = None,
    ) -> Sequence[SalaryPayment]:
        """Payments for the batch; ``periods`` restricts to (month, year) attributions."""
        raise NotImplementedError

    def count_payments_for_month(self, *, month: int, year: int) -> int:
        raise NotImplementedError
