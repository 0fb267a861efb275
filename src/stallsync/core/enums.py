from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles that can be assigned to a user."""

    ADMIN = "admin"
    MANAGER = "manager"
    STAFF = "staff"


class AttendanceStatus(str, Enum):
    """Daily attendance status as stored in the register."""

    PRESENT = "Present"
    ABSENT = "Absent"
    LEAVE = "Leave"
    HALF_DAY = "Half-day"


class ActivityType(str, Enum):
    ATTENDANCE_MARKED = "ATTENDANCE_MARKED"
    SALARY_ADVANCE_GIVEN = "SALARY_ADVANCE_GIVEN"
    STAFF_DETAILS_UPDATED = "STAFF_DETAILS_UPDATED"
    SALARY_PAID = "SALARY_PAID"
    USER_STATUS_CHANGED = "USER_STATUS_CHANGED"


class NonWorkingDayPolicy(str, Enum):
    """What to do when attendance is marked on a weekend or holiday."""

    IGNORE = "ignore"
    REJECT = "reject"
