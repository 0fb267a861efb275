from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional

from ..common.validators import require_min_length
from ..core.constants import MIN_HOLIDAY_NAME_LENGTH, TOPIC_HOLIDAYS
from ..core.exceptions import NotFoundError
from ..payroll.repository import PayrollRepository
from ..realtime.hub import ChangeHub
from ..staff.model import Actor
from ..staff.service import require_manager
from .model import HolidayRecord
from .repository import HolidayRepository

logger = logging.getLogger(__name__)


class HolidayService:
    def __init__(
        self,
        holidays: HolidayRepository,
        payroll: PayrollRepository,
        *,
        hub: ChangeHub,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._holidays = holidays
        self._payroll = payroll
        self._hub = hub
        self._clock = clock

    def add_holiday(
        self,
        actor: Actor,
        *,
        name: str,
        holiday_date: date,
        site_id: Optional[str] = None,
    ) -> HolidayRecord:
        require_manager(actor)
        name = require_min_length(name, "Holiday name", MIN_HOLIDAY_NAME_LENGTH)
        created_at = self._clock()

        holiday_id = self._holidays.add(name=name, holiday_date=holiday_date, site_id=site_id, created_at=created_at)
        logger.info("Holiday %r on %s added for %s", name, holiday_date, site_id or "all sites")
        self._warn_if_paid(holiday_date)
        self._hub.notify(TOPIC_HOLIDAYS)
        return HolidayRecord(
            holiday_date=holiday_date,
            name=name,
            site_id=site_id,
            holiday_id=holiday_id,
            created_at=created_at,
        )

    def remove_holiday(self, actor: Actor, holiday_id: int) -> HolidayRecord:
        require_manager(actor)
        holiday = self._holidays.get(holiday_id)
        if not holiday:
            raise NotFoundError(f"Holiday {holiday_id} not found")

        self._holidays.delete(holiday_id)
        logger.info("Holiday %r on %s removed", holiday.name, holiday.holiday_date)
        self._warn_if_paid(holiday.holiday_date)
        self._hub.notify(TOPIC_HOLIDAYS)
        return holiday

    def list_between(self, *, start: date, end: date) -> list[HolidayRecord]:
        holidays = list(self._holidays.list_between(start=start, end=end))
        holidays.sort(key=lambda h: (h.holiday_date, h.name))
        return holidays

    def list_for_site(self, *, site_id: Optional[str], start: date, end: date) -> list[HolidayRecord]:
        """Holidays visible to a site: global ones plus its own (all of them when no site is given)."""
        holidays = self.list_between(start=start, end=end)
        if site_id is None:
            return holidays
        return [h for h in holidays if h.applies_to(site_id)]

    def _warn_if_paid(self, day: date) -> None:
        # Paid status is derived, so earlier payments may now read as under- or over-paid.
        paid = self._payroll.count_payments_for_month(month=day.month, year=day.year)
        if paid:
            logger.warning(
                "Holiday change on %s affects %d/%d, which already has %d payment(s) recorded",
                day,
                day.month,
                day.year,
                paid,
            )
