"""Realtime monthly payroll board.

Holidays, attendance, advances and payments are each watched separately;
whenever any of them delivers, every row is rebuilt from the accumulated
state instead of being patched.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import month_bounds
from ..common.optimistic import OptimisticMap
from ..common.validators import require_month, require_positive_amount
from ..core.constants import TOPIC_ADVANCES, TOPIC_ATTENDANCE, TOPIC_HOLIDAYS, TOPIC_PAYMENTS
from ..realtime.fanout import FanOutQuery
from ..realtime.hub import ChangeHub
from ..realtime.subscription import Subscription
from ..staff.model import Actor, Employee
from .engine import compute_payroll
from .model import PayrollRow, SalaryPayment
from .netting import advance_window
from .service import PayrollService

logger = logging.getLogger(__name__)

BoardCallback = Callable[[list[PayrollRow], bool], None]
BoardErrorCallback = Callable[[str, Exception], None]


class LivePayrollBoard:
    def __init__(
        self,
        service: PayrollService,
        hub: ChangeHub,
        *,
        on_update: Optional[BoardCallback] = None,
        on_error: Optional[BoardErrorCallback] = None,
    ):
        self._service = service
        self._hub = hub
        self._on_update = on_update
        self._on_error = on_error

        size = service.batch_size
        self._attendance_query: FanOutQuery[list] = FanOutQuery(hub, TOPIC_ATTENDANCE, batch_size=size, name="payroll-attendance")
        self._advances_query: FanOutQuery[list] = FanOutQuery(hub, TOPIC_ADVANCES, batch_size=size, name="payroll-advances")
        self._payments_query: FanOutQuery[list] = FanOutQuery(hub, TOPIC_PAYMENTS, batch_size=size, name="payroll-payments")
        self._holidays_sub: Optional[Subscription] = None

        self._staff: list[Employee] = []
        self._month: Optional[int] = None
        self._year: Optional[int] = None
        self._holidays: Optional[list] = None
        self._attendance: dict[str, list] = {}
        self._advances: dict[str, list] = {}
        self._payments: OptimisticMap[str, list[SalaryPayment]] = OptimisticMap(on_change=self._recompute)
        self._rows: list[PayrollRow] = []
        self._watching = False

    @property
    def rows(self) -> list[PayrollRow]:
        return list(self._rows)

    @property
    def period(self) -> Optional[tuple[int, int]]:
        if self._month is None:
            return None
        return self._month, self._year

    @property
    def is_complete(self) -> bool:
        """True once holidays and every batch of every query have delivered."""
        return (
            self._holidays is not None
            and self._attendance_query.is_complete
            and self._advances_query.is_complete
            and self._payments_query.is_complete
        )

    def watch(self, *, staff: Sequence[Employee], month: int, year: int) -> None:
        month, year = require_month(month, year)
        self._unsubscribe()
        self._staff = list(staff)
        self._month, self._year = month, year
        self._holidays = None
        self._attendance = {}
        self._advances = {}
        self._payments.replace_confirmed({})
        self._subscribe()

    def set_period(self, month: int, year: int) -> None:
        self.watch(staff=self._staff, month=month, year=year)

    def set_staff(self, staff: Sequence[Employee]) -> None:
        if self._month is None:
            self._staff = list(staff)
            return
        self.watch(staff=staff, month=self._month, year=self._year)

    def record_payment(
        self,
        actor: Actor,
        staff_id: str,
        *,
        amount_paid,
        paid_on: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> SalaryPayment:
        """Show the payment on the board at once; it disappears again if the write fails."""
        if self._month is None:
            raise RuntimeError("Board is not watching a period")
        month, year = self._month, self._year
        tentative = SalaryPayment(
            staff_id=staff_id,
            amount_paid=require_positive_amount(amount_paid, "Paid amount"),
            paid_on=paid_on or date.today(),
            for_month=month,
            for_year=year,
        )
        current = list(self._payments.get(staff_id) or [])
        return self._payments.apply(
            staff_id,
            current + [tentative],
            lambda: self._service.record_payment(
                actor,
                staff_id,
                amount_paid=amount_paid,
                month=month,
                year=year,
                paid_on=paid_on,
                notes=notes,
            ),
        )

    def dispose(self) -> None:
        self._unsubscribe()
        self._attendance_query.dispose()
        self._advances_query.dispose()
        self._payments_query.dispose()
        self._on_update = None
        self._on_error = None

    def _subscribe(self) -> None:
        service = self._service
        first, last = month_bounds(self._month, self._year)
        adv_start, adv_end = advance_window(self._month, self._year)
        period = [(self._month, self._year)]
        ids = [e.uid for e in self._staff if e.is_active_between(first, last)]

        # Suppress per-query emissions until every query has had its first go.
        self._watching = False
        self._holidays_sub = self._hub.subscribe(
            TOPIC_HOLIDAYS,
            lambda: service.fetch_holidays(first, last),
            self._on_holidays,
            lambda exc: self._report("holidays", exc),
        )
        self._attendance_query.start(
            ids,
            lambda batch: service.attendance_batch(batch, first, last),
            on_change=self._on_attendance,
            on_error=lambda index, exc: self._report("attendance", exc),
        )
        self._advances_query.start(
            ids,
            lambda batch: service.advances_batch(batch, adv_start, adv_end),
            on_change=self._on_advances,
            on_error=lambda index, exc: self._report("advances", exc),
        )
        self._payments_query.start(
            ids,
            lambda batch: service.payments_batch(batch, period),
            on_change=self._on_payments,
            on_error=lambda index, exc: self._report("payments", exc),
        )
        self._watching = True
        self._recompute()

    def _unsubscribe(self) -> None:
        self._watching = False
        if self._holidays_sub is not None:
            self._holidays_sub.dispose()
            self._holidays_sub = None
        self._attendance_query.stop()
        self._advances_query.stop()
        self._payments_query.stop()

    def _on_holidays(self, holidays) -> None:
        self._holidays = list(holidays)
        self._recompute()

    def _on_attendance(self, data: dict, complete: bool) -> None:
        self._attendance = data
        self._recompute()

    def _on_advances(self, data: dict, complete: bool) -> None:
        self._advances = data
        self._recompute()

    def _on_payments(self, data: dict, complete: bool) -> None:
        self._payments.replace_confirmed(data)

    def _report(self, source: str, exc: Exception) -> None:
        logger.warning("Payroll board %s feed failed: %s", source, exc)
        if self._on_error is not None:
            self._on_error(source, exc)

    def _recompute(self) -> None:
        if not self._watching or self._month is None:
            return
        self._rows = compute_payroll(
            self._staff,
            month=self._month,
            year=self._year,
            calendar=self._service.make_calendar(self._holidays or ()),
            attendance=self._attendance,
            advances=self._advances,
            payments=self._payments.view(),
            calculator=self._service.calculator,
        )
        if self._on_update is not None:
            self._on_update(self.rows, self.is_complete)
