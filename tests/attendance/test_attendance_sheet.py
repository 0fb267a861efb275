from datetime import date

import pytest

from stallsync.core.enums import AttendanceStatus
from stallsync.core.exceptions import StoreError

DAY = date(2025, 1, 6)


@pytest.fixture
def sheet_world(world, employee_factory):
    for uid in ("s1", "s2"):
        world.repos.staff.employees[uid] = employee_factory(uid)
    updates = []
    sheet = world.container.attendance_sheet(
        on_update=lambda rows, complete: updates.append((rows, complete)),
    )
    sheet.open(site_id="site-a", work_date=DAY)
    world.sheet = sheet
    world.updates = updates
    return world


def test_open_lists_every_staff_member(sheet_world):
    rows, complete = sheet_world.updates[-1]
    assert rows == {"s1": None, "s2": None}
    assert complete


def test_status_change_is_shown_then_confirmed(sheet_world, manager):
    result = sheet_world.sheet.set_status(manager, "s1", "Present")

    assert result.ok
    assert any(rows["s1"] == AttendanceStatus.PRESENT for rows, _ in sheet_world.updates)
    assert sheet_world.sheet.rows()["s1"] == AttendanceStatus.PRESENT
    assert sheet_world.repos.attendance.get("s1", DAY).status == AttendanceStatus.PRESENT


def test_failed_write_rolls_back(sheet_world, manager):
    sheet_world.sheet.set_status(manager, "s1", "Present")
    sheet_world.repos.attendance.fail_writes = True

    with pytest.raises(StoreError):
        sheet_world.sheet.set_status(manager, "s1", "Absent")

    statuses = [rows["s1"] for rows, _ in sheet_world.updates]
    assert AttendanceStatus.ABSENT in statuses
    assert sheet_world.sheet.rows()["s1"] == AttendanceStatus.PRESENT


def test_cycle_uses_current_view(sheet_world, manager):
    sheet_world.sheet.cycle(manager, "s2")
    sheet_world.sheet.cycle(manager, "s2")
    assert sheet_world.sheet.rows()["s2"] == AttendanceStatus.ABSENT


def test_changes_from_elsewhere_are_pushed(sheet_world, manager):
    sheet_world.container.attendance_service.mark(manager, "s2", DAY, "Leave")
    assert sheet_world.sheet.rows()["s2"] == AttendanceStatus.LEAVE


def test_close_disposes_subscriptions(sheet_world, manager):
    sheet_world.sheet.close()
    count = len(sheet_world.updates)
    sheet_world.container.attendance_service.mark(manager, "s2", DAY, "Leave")

    assert len(sheet_world.updates) == count
    assert sheet_world.hub.subscriber_count("attendance") == 0
