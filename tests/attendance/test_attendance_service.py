from datetime import date

import pytest

from stallsync.attendance.service import next_status
from stallsync.container import wire_services
from stallsync.core.enums import ActivityType, AttendanceStatus
from stallsync.core.exceptions import NotFoundError, ValidationError
from stallsync.holidays.model import HolidayRecord


@pytest.fixture
def site(world, employee_factory):
    world.repos.staff.employees.update(
        {
            "s1": employee_factory("s1", name="Asha"),
            "s2": employee_factory("s2", name="Bala"),
            "floater": employee_factory("floater", name="Floater", site_id=None),
        }
    )
    return world


def test_next_status_cycle():
    assert next_status(None) == AttendanceStatus.PRESENT
    assert next_status(AttendanceStatus.PRESENT) == AttendanceStatus.ABSENT
    assert next_status(AttendanceStatus.ABSENT) == AttendanceStatus.LEAVE
    assert next_status(AttendanceStatus.LEAVE) == AttendanceStatus.HALF_DAY
    assert next_status(AttendanceStatus.HALF_DAY) == AttendanceStatus.PRESENT


def test_mark_upserts_and_logs(site, manager):
    svc = site.container.attendance_service
    svc.mark(manager, "s1", date(2025, 1, 6), "Present", notes="on time")
    result = svc.mark(manager, "s1", date(2025, 1, 6), "Half-day")

    assert result.ok
    stored = site.repos.attendance.get("s1", date(2025, 1, 6))
    assert stored.status == AttendanceStatus.HALF_DAY
    assert stored.notes == "on time"
    assert stored.doc_id == "2025-01-06_s1"
    assert [e.activity_type for e in site.repos.activity.entries] == [ActivityType.ATTENDANCE_MARKED] * 2
    assert site.repos.activity.entries[-1].details["status"] == "Half-day"


def test_mark_without_any_site_is_a_no_op(site, manager):
    result = site.container.attendance_service.mark(manager, "floater", date(2025, 1, 6), "Present")

    assert not result.ok
    assert "no site" in result.message
    assert site.repos.attendance.records == {}


def test_unknown_staff_and_bad_status(site, manager):
    svc = site.container.attendance_service
    with pytest.raises(NotFoundError):
        svc.mark(manager, "ghost", date(2025, 1, 6), "Present")
    with pytest.raises(ValidationError):
        svc.mark(manager, "s1", date(2025, 1, 6), "Late")


def test_non_working_day_is_kept_but_not_counted(site, manager):
    svc = site.container.attendance_service
    svc.mark(manager, "s1", date(2025, 1, 4), "Present")  # Saturday
    svc.mark(manager, "s1", date(2025, 1, 6), "Present")

    register = svc.monthly_register(site_id="site-a", month=1, year=2025)
    row = next(r for r in register.rows if r.staff_id == "s1")

    assert site.repos.attendance.get("s1", date(2025, 1, 4)) is not None
    assert row.totals.present == 1


def test_reject_policy_refuses_non_working_days(world, employee_factory, manager):
    world.repos.staff.employees["s1"] = employee_factory("s1")
    world.repos.holidays.add(name="Pongal", holiday_date=date(2025, 1, 14), site_id="site-a", created_at=None)
    strict = wire_services(
        staff_repo=world.repos.staff,
        holidays_repo=world.repos.holidays,
        attendance_repo=world.repos.attendance,
        payroll_repo=world.repos.payroll,
        activity_repo=world.repos.activity,
        settings={"NON_WORKING_DAY_ATTENDANCE": "reject"},
    )

    with pytest.raises(ValidationError):
        strict.attendance_service.mark(manager, "s1", date(2025, 1, 14), "Present")
    assert strict.attendance_service.mark(manager, "s1", date(2025, 1, 15), "Present").ok


def test_cycle_status_walks_the_cycle(site, manager):
    svc = site.container.attendance_service
    day = date(2025, 1, 7)
    seen = [svc.cycle_status(manager, "s1", day, site_id="site-a").record.status for _ in range(5)]

    assert seen == [
        AttendanceStatus.PRESENT,
        AttendanceStatus.ABSENT,
        AttendanceStatus.LEAVE,
        AttendanceStatus.HALF_DAY,
        AttendanceStatus.PRESENT,
    ]


def test_cycle_status_in_all_sites_view_is_a_no_op(site, manager):
    result = site.container.attendance_service.cycle_status(manager, "s1", date(2025, 1, 7), site_id=None)
    assert not result.ok
    assert site.repos.attendance.records == {}


def test_daily_sheet_batches_large_sites(world, employee_factory, manager):
    for i in range(65):
        world.repos.staff.employees[f"s{i}"] = employee_factory(f"s{i}")
    svc = world.container.attendance_service
    svc.mark(manager, "s64", date(2025, 1, 6), "Present")
    world.repos.attendance.batches.clear()

    sheet = svc.daily_sheet(site_id="site-a", work_date=date(2025, 1, 6))

    assert sheet == {"s64": AttendanceStatus.PRESENT}
    assert [len(b) for b in world.repos.attendance.batches] == [30, 30, 5]


def test_monthly_register_flags_weekends_and_holidays(site, manager):
    site.repos.holidays.add(name="New Year", holiday_date=date(2025, 1, 1), site_id=None, created_at=None)
    svc = site.container.attendance_service
    svc.mark(manager, "s1", date(2025, 1, 2), "Present")
    svc.mark(manager, "s1", date(2025, 1, 3), "Half-day")
    svc.mark(manager, "s1", date(2025, 1, 6), "Absent")

    register = svc.monthly_register(site_id="site-a", month=1, year=2025)
    row = register.rows[0]

    assert not register.read_only
    assert len(register.days) == 31
    assert row.staff_name == "Asha"
    assert row.days[0].holiday_name == "New Year"
    assert row.days[3].is_weekend
    assert row.totals.present_days == 1.5
    assert row.totals.absent == 1
    assert svc.monthly_register(site_id=None, month=1, year=2025).read_only
