from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..activity.service import StaffActivityLogger
from ..common.validators import require_non_negative_amount
from ..core.constants import IN_QUERY_BATCH_SIZE, TOPIC_STAFF
from ..core.enums import ActivityType
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..realtime.fanout import fetch_batched
from ..realtime.hub import ChangeHub
from .model import Actor, Employee, SalaryHistoryEntry
from .repository import StaffRepository

logger = logging.getLogger(__name__)


def require_manager(actor: Actor) -> None:
    if not actor.can_manage_staff:
        raise AuthorizationError("Only managers and admins can manage staff")


class StaffService:
    def __init__(
        self,
        staff: StaffRepository,
        *,
        hub: ChangeHub,
        activity: StaffActivityLogger,
        batch_size: int = IN_QUERY_BATCH_SIZE,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._staff = staff
        self._hub = hub
        self._activity = activity
        self._batch_size = int(batch_size)
        self._clock = clock

    def get(self, uid: str) -> Employee:
        employee = self._staff.get(uid)
        if not employee:
            raise NotFoundError(f"Staff member {uid} not found")
        return employee

    def get_many(self, uids: Sequence[str]) -> dict[str, Employee]:
        return fetch_batched(
            uids,
            lambda batch: {e.uid: e for e in self._staff.get_many(batch)},
            size=self._batch_size,
        )

    def list_staff(self, *, site_id: Optional[str] = None) -> list[Employee]:
        employees = list(self._staff.list_staff(site_id=site_id))
        employees.sort(key=lambda e: e.label.lower())
        return employees

    def update_details(
        self,
        actor: Actor,
        uid: str,
        *,
        joining_date: Optional[date],
        exit_date: Optional[date],
        site_id: Optional[str],
    ) -> Employee:
        require_manager(actor)
        current = self.get(uid)
        if joining_date and exit_date and exit_date < joining_date:
            raise ValidationError("Exit date cannot be before joining date")

        self._staff.update_details(uid, joining_date=joining_date, exit_date=exit_date, site_id=site_id)
        self._hub.notify(TOPIC_STAFF)
        self._activity.log(
            actor,
            ActivityType.STAFF_DETAILS_UPDATED,
            related_staff_id=uid,
            site_id=site_id or current.site_id,
            notes=f"Details updated (joining {joining_date or '-'}, exit {exit_date or '-'}, site {site_id or '-'}).",
        )
        return self.get(uid)

    def record_appraisal(
        self,
        actor: Actor,
        uid: str,
        *,
        new_salary,
        effective_date: date,
        notes: Optional[str] = None,
    ) -> int:
        require_manager(actor)
        employee = self.get(uid)
        salary = require_non_negative_amount(new_salary, "Salary")

        entry_id = self._staff.record_appraisal(
            staff_id=uid,
            new_salary=salary,
            effective_date=effective_date,
            notes=notes,
            recorded_by_uid=actor.uid,
            recorded_by_name=actor.name,
            recorded_at=self._clock(),
        )
        logger.info("Salary of %s set to %.2f effective %s by %s", uid, salary, effective_date, actor.uid)
        self._hub.notify(TOPIC_STAFF)
        self._activity.log(
            actor,
            ActivityType.STAFF_DETAILS_UPDATED,
            related_staff_id=uid,
            site_id=employee.site_id,
            notes=f"Salary appraisal recorded. New salary: {salary:.2f} effective {effective_date:%d %b %Y}.",
        )
        return entry_id

    def salary_history(self, uid: str) -> Sequence[SalaryHistoryEntry]:
        return self._staff.list_salary_history(uid)
