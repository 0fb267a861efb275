from datetime import date

import pytest

from stallsync.core.exceptions import StoreError


@pytest.fixture
def board_world(world, employee_factory):
    employees = [employee_factory("s1", name="Asha", salary=23000), employee_factory("s2", name="Bala", salary=23000)]
    for e in employees:
        world.repos.staff.employees[e.uid] = e
    updates = []
    errors = []
    board = world.container.payroll_board(
        on_update=lambda rows, complete: updates.append((rows, complete)),
        on_error=lambda source, exc: errors.append(source),
    )
    board.watch(staff=employees, month=1, year=2025)
    world.board = board
    world.updates = updates
    world.errors = errors
    world.employees = employees
    return world


def _row(world, uid):
    rows, _ = world.updates[-1]
    return next(r for r in rows if r.staff_id == uid)


def test_initial_snapshot_is_complete(board_world):
    rows, complete = board_world.updates[-1]
    assert complete
    assert [r.staff_id for r in rows] == ["s1", "s2"]
    assert board_world.board.is_complete


def test_attendance_change_recomputes_rows(board_world, manager):
    board_world.container.attendance_service.mark(manager, "s1", date(2025, 1, 6), "Present")
    assert _row(board_world, "s1").present_days == 1
    assert _row(board_world, "s1").earned_salary == pytest.approx(1000)


def test_holiday_change_updates_denominator(board_world, manager):
    board_world.container.holiday_service.add_holiday(manager, name="Pongal", holiday_date=date(2025, 1, 14))
    assert _row(board_world, "s1").month_working_days == 22


def test_advance_and_payment_flow(board_world, manager):
    svc = board_world.container.payroll_service
    board_world.container.attendance_service.mark(manager, "s1", date(2025, 1, 6), "Present")
    svc.record_advance(manager, "s1", amount=400, given_on=date(2025, 1, 7))

    assert _row(board_world, "s1").net_payable == pytest.approx(600)

    payment = board_world.board.record_payment(manager, "s1", amount_paid=600, paid_on=date(2025, 2, 1))

    assert payment.payment_id == 1
    assert _row(board_world, "s1").is_paid
    assert _row(board_world, "s1").paid_amount == pytest.approx(600)


def test_failed_payment_rolls_back(board_world, manager):
    board_world.container.attendance_service.mark(manager, "s1", date(2025, 1, 6), "Present")
    board_world.repos.payroll.fail_writes = True

    with pytest.raises(StoreError):
        board_world.board.record_payment(manager, "s1", amount_paid=1000)

    paid_history = [next(r for r in rows if r.staff_id == "s1").is_paid for rows, _ in board_world.updates]
    assert True in paid_history
    assert _row(board_world, "s1").is_paid is False
    assert _row(board_world, "s1").paid_amount == 0


def test_set_period_drops_old_subscriptions(board_world, manager):
    hub = board_world.hub
    board_world.board.set_period(2, 2025)

    assert board_world.board.period == (2, 2025)
    assert hub.subscriber_count("holidays") == 1
    assert hub.subscriber_count("attendance") == 1
    board_world.container.attendance_service.mark(manager, "s1", date(2025, 1, 6), "Present")
    assert _row(board_world, "s1").present_days == 0
    assert _row(board_world, "s1").month == 2


def test_set_staff_resubscribes(board_world):
    board_world.board.set_staff(board_world.employees[:1])
    rows, _ = board_world.updates[-1]
    assert [r.staff_id for r in rows] == ["s1"]


def test_feed_failure_is_reported_and_keeps_last_rows(board_world, manager):
    board_world.container.attendance_service.mark(manager, "s1", date(2025, 1, 6), "Present")
    board_world.repos.attendance.failing_ids.add("s1")

    board_world.container.attendance_service.mark(manager, "s2", date(2025, 1, 6), "Present")

    assert board_world.errors == ["attendance"]
    assert _row(board_world, "s1").present_days == 1


def test_dispose_unsubscribes_everything(board_world):
    board_world.board.dispose()
    hub = board_world.hub
    assert all(hub.subscriber_count(t) == 0 for t in ("holidays", "attendance", "advances", "payments"))
