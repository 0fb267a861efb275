from __future__ import annotations

from collections import Counter
from datetime import date
from typing import Collection, Iterable, Optional

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, AttendanceTally

STATUS_WEIGHTS = {
    AttendanceStatus.PRESENT: 1.0,
    AttendanceStatus.HALF_DAY: 0.5,
    AttendanceStatus.ABSENT: 0.0,
    AttendanceStatus.LEAVE: 0.0,
}


def _counted(records: Iterable[AttendanceRecord], working_days: Optional[Collection[date]]):
    for record in records:
        if working_days is not None and record.work_date not in working_days:
            continue
        yield record


def present_day_count(
    records: Iterable[AttendanceRecord],
    working_days: Optional[Collection[date]] = None,
) -> float:
    """Fractional present days; records outside ``working_days`` (when given) don't count."""
    return sum(STATUS_WEIGHTS.get(r.status, 0.0) for r in _counted(records, working_days))


def tally(
    records: Iterable[AttendanceRecord],
    working_days: Optional[Collection[date]] = None,
) -> AttendanceTally:
    counts = Counter(r.status for r in _counted(records, working_days))
    return AttendanceTally(
        present=counts[AttendanceStatus.PRESENT],
        absent=counts[AttendanceStatus.ABSENT],
        leave=counts[AttendanceStatus.LEAVE],
        half_day=counts[AttendanceStatus.HALF_DAY],
    )


def group_by_staff(records: Iterable[AttendanceRecord]) -> dict[str, list[AttendanceRecord]]:
    grouped: dict[str, list[AttendanceRecord]] = {}
    for record in records:
        grouped.setdefault(record.staff_id, []).append(record)
    return grouped
