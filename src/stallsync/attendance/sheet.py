"""Live daily attendance sheet for one site.

Statuses come from a batched realtime query; a status change shows up at
once and is rolled back if the store refuses it.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Optional, Sequence

from ..common.optimistic import OptimisticMap
from ..core.constants import TOPIC_ATTENDANCE
from ..core.enums import AttendanceStatus
from ..realtime.fanout import FanOutQuery
from ..realtime.hub import ChangeHub
from ..staff.model import Actor, Employee
from .model import ActionResult
from .service import AttendanceService, next_status, parse_status

logger = logging.getLogger(__name__)

SheetCallback = Callable[[dict[str, Optional[AttendanceStatus]], bool], None]


class AttendanceSheet:
    def __init__(
        self,
        service: AttendanceService,
        hub: ChangeHub,
        *,
        on_update: Optional[SheetCallback] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ):
        self._service = service
        self._on_update = on_update
        self._on_error = on_error
        self._query: FanOutQuery[AttendanceStatus] = FanOutQuery(
            hub, TOPIC_ATTENDANCE, batch_size=service.batch_size, name="attendance-sheet"
        )
        self._statuses: OptimisticMap[str, AttendanceStatus] = OptimisticMap(on_change=self._emit)
        self._staff: list[Employee] = []
        self._site_id: Optional[str] = None
        self._work_date: Optional[date] = None

    @property
    def site_id(self) -> Optional[str]:
        return self._site_id

    @property
    def work_date(self) -> Optional[date]:
        return self._work_date

    @property
    def is_complete(self) -> bool:
        return self._query.is_complete

    def open(self, *, site_id: str, work_date: date, staff: Optional[Sequence[Employee]] = None) -> None:
        """(Re)point the sheet; earlier subscriptions are dropped before new ones open."""
        self._query.stop()
        self._site_id = site_id
        self._work_date = work_date
        self._staff = list(staff) if staff is not None else self._service.site_staff(site_id)
        self._statuses.replace_confirmed({})
        self._query.start(
            [e.uid for e in self._staff],
            lambda batch: self._service.statuses_batch(batch, work_date),
            on_change=self._on_snapshot,
            on_error=self._on_batch_error,
        )

    def rows(self) -> dict[str, Optional[AttendanceStatus]]:
        """Every staff member on the sheet, unmarked ones as None."""
        view = self._statuses.view()
        return {e.uid: view.get(e.uid) for e in self._staff}

    def set_status(self, actor: Actor, staff_id: str, status) -> ActionResult:
        if self._site_id is None or self._work_date is None:
            return ActionResult(ok=False, message="Select a site and date first.")
        status = parse_status(status)
        work_date = self._work_date
        site_id = self._site_id
        return self._statuses.apply(
            staff_id,
            status,
            lambda: self._service.mark(actor, staff_id, work_date, status, site_id=site_id),
            committed=lambda result: result.ok,
        )

    def cycle(self, actor: Actor, staff_id: str) -> ActionResult:
        return self.set_status(actor, staff_id, next_status(self._statuses.get(staff_id)))

    def close(self) -> None:
        self._query.dispose()
        self._staff = []
        self._site_id = None
        self._work_date = None

    def _on_snapshot(self, statuses: dict[str, AttendanceStatus], complete: bool) -> None:
        self._statuses.replace_confirmed(statuses)

    def _on_batch_error(self, index: int, exc: Exception) -> None:
        if self._on_error is not None:
            self._on_error(exc)

    def _emit(self) -> None:
        if self._on_update is not None:
            self._on_update(self.rows(), self._query.is_complete)
