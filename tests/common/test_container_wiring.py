from datetime import date

from stallsync.attendance.sheet import AttendanceSheet
from stallsync.core.enums import AttendanceStatus
from stallsync.payroll.live import LivePayrollBoard

DAY = date(2025, 1, 6)


def test_container_builds_live_views_on_its_own_hub(world, employee_factory, manager):
    employee = employee_factory("s1", name="Asha", salary=23000)
    world.repos.staff.employees[employee.uid] = employee
    board_updates = []
    sheet_updates = []

    board = world.container.payroll_board(on_update=lambda rows, complete: board_updates.append(rows))
    sheet = world.container.attendance_sheet(on_update=lambda rows, complete: sheet_updates.append(rows))
    assert isinstance(board, LivePayrollBoard)
    assert isinstance(sheet, AttendanceSheet)

    board.watch(staff=[employee], month=1, year=2025)
    sheet.open(site_id="site-a", work_date=DAY)
    sheet.set_status(manager, "s1", "Present")

    assert sheet_updates[-1]["s1"] == AttendanceStatus.PRESENT
    assert board_updates[-1][0].present_days == 1

    board.dispose()
    sheet.close()
    assert world.hub.subscriber_count("attendance") == 0


def test_service_writes_reach_container_board(world, employee_factory, manager):
    employee = employee_factory("s1", name="Asha", salary=23000)
    world.repos.staff.employees[employee.uid] = employee
    errors = []
    updates = []
    board = world.container.payroll_board(
        on_update=lambda rows, complete: updates.append(rows),
        on_error=lambda source, exc: errors.append(source),
    )
    board.watch(staff=[employee], month=1, year=2025)

    world.container.holiday_service.add_holiday(manager, name="Pongal", holiday_date=date(2025, 1, 14))

    assert updates[-1][0].month_working_days == 22
    assert errors == []
