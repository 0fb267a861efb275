from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from .activity.mysql_activity_repository import MySQLActivityLogRepository
from .activity.repository import ActivityLogRepository
from .activity.service import StaffActivityLogger
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .attendance.sheet import AttendanceSheet, SheetCallback
from .core.constants import IN_QUERY_BATCH_SIZE, WEEKEND_DAYS
from .core.enums import NonWorkingDayPolicy
from .database.connection import DBConfig, DatabaseConnection
from .holidays.mysql_holiday_repository import MySQLHolidayRepository
from .holidays.repository import HolidayRepository
from .holidays.service import HolidayService
from .payroll.calculator.standard_calculator import StandardPayrollCalculator
from .payroll.live import BoardCallback, BoardErrorCallback, LivePayrollBoard
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.repository import PayrollRepository
from .payroll.service import PayrollService
from .realtime.hub import ChangeHub
from .staff.mysql_staff_repository import MySQLStaffRepository
from .staff.repository import StaffRepository
from .staff.service import StaffService


@dataclass(frozen=True)
class Container:
    hub: ChangeHub

    staff_repo: StaffRepository
    holidays_repo: HolidayRepository
    attendance_repo: AttendanceRepository
    payroll_repo: PayrollRepository
    activity_repo: ActivityLogRepository

    activity_logger: StaffActivityLogger
    staff_service: StaffService
    holiday_service: HolidayService
    attendance_service: AttendanceService
    payroll_service: PayrollService

    def payroll_board(
        self,
        *,
        on_update: Optional[BoardCallback] = None,
        on_error: Optional[BoardErrorCallback] = None,
    ) -> LivePayrollBoard:
        return LivePayrollBoard(self.payroll_service, self.hub, on_update=on_update, on_error=on_error)

    def attendance_sheet(
        self,
        *,
        on_update: Optional[SheetCallback] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> AttendanceSheet:
        return AttendanceSheet(self.attendance_service, self.hub, on_update=on_update, on_error=on_error)


def wire_services(
    *,
    staff_repo: StaffRepository,
    holidays_repo: HolidayRepository,
    attendance_repo: AttendanceRepository,
    payroll_repo: PayrollRepository,
    activity_repo: ActivityLogRepository,
    settings: Mapping[str, Any] | None = None,
    hub: ChangeHub | None = None,
) -> Container:
    """Build every service over the given repositories (MySQL in production, fakes in tests)."""
    settings = settings or {}
    hub = hub or ChangeHub()
    batch_size = int(settings.get("IN_QUERY_BATCH_SIZE", IN_QUERY_BATCH_SIZE))
    weekend_days = tuple(settings.get("WEEKEND_DAYS", WEEKEND_DAYS))
    policy = NonWorkingDayPolicy(settings.get("NON_WORKING_DAY_ATTENDANCE", NonWorkingDayPolicy.IGNORE.value))

    activity_logger = StaffActivityLogger(activity_repo)
    staff_service = StaffService(staff_repo, hub=hub, activity=activity_logger, batch_size=batch_size)
    holiday_service = HolidayService(holidays_repo, payroll_repo, hub=hub)
    attendance_service = AttendanceService(
        attendance_repo,
        staff_repo,
        holidays_repo,
        hub=hub,
        activity=activity_logger,
        non_working_day_policy=policy,
        batch_size=batch_size,
        weekend_days=weekend_days,
    )
    payroll_service = PayrollService(
        payroll_repo,
        staff_repo,
        attendance_repo,
        holidays_repo,
        hub=hub,
        activity=activity_logger,
        calculator=StandardPayrollCalculator(),
        batch_size=batch_size,
        weekend_days=weekend_days,
    )

    return Container(
        hub=hub,
        staff_repo=staff_repo,
        holidays_repo=holidays_repo,
        attendance_repo=attendance_repo,
        payroll_repo=payroll_repo,
        activity_repo=activity_repo,
        activity_logger=activity_logger,
        staff_service=staff_service,
        holiday_service=holiday_service,
        attendance_service=attendance_service,
        payroll_service=payroll_service,
    )


def build_container(*, db_config: dict, settings: Mapping[str, Any] | None = None) -> Container:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config))
    return wire_services(
        staff_repo=MySQLStaffRepository(conn),
        holidays_repo=MySQLHolidayRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        payroll_repo=MySQLPayrollRepository(conn),
        activity_repo=MySQLActivityLogRepository(conn),
        settings=settings,
    )
