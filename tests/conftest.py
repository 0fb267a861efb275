from __future__ import annotations

from dataclasses import replace
from datetime import date
from types import SimpleNamespace

import pytest

from stallsync.container import wire_services
from stallsync.core.enums import Role
from stallsync.core.exceptions import StoreError
from stallsync.holidays.model import HolidayRecord
from stallsync.staff.model import Actor, Employee, SalaryHistoryEntry


class FakeStaffRepo:
    def __init__(self, employees=()):
        self.employees = {e.uid: e for e in employees}
        self.history: list[SalaryHistoryEntry] = []

    def get(self, uid):
        return self.employees.get(uid)

    def get_many(self, uids):
        assert len(uids) <= 30
        return [self.employees[u] for u in uids if u in self.employees]

    def list_staff(self, *, site_id=None):
        return [e for e in self.employees.values() if site_id is None or e.belongs_to_site(site_id)]

    def update_details(self, uid, *, joining_date, exit_date, site_id):
        self.employees[uid] = replace(self.employees[uid], joining_date=joining_date, exit_date=exit_date, site_id=site_id)
        return True

    def record_appraisal(self, *, staff_id, new_salary, effective_date, notes, recorded_by_uid, recorded_by_name, recorded_at):
        entry = SalaryHistoryEntry(
            entry_id=len(self.history) + 1,
            staff_id=staff_id,
            new_salary=new_salary,
            effective_date=effective_date,
            recorded_by_uid=recorded_by_uid,
            recorded_by_name=recorded_by_name,
            recorded_at=recorded_at,
            notes=notes,
        )
        self.history.append(entry)
        self.employees[staff_id] = replace(self.employees[staff_id], salary=new_salary)
        return entry.entry_id

    def list_salary_history(self, staff_id):
        return [h for h in reversed(self.history) if h.staff_id == staff_id]


class FakeHolidayRepo:
    def __init__(self):
        self.items: dict[int, HolidayRecord] = {}
        self._next_id = 1

    def add(self, *, name, holiday_date, site_id, created_at):
        hid = self._next_id
        self._next_id += 1
        self.items[hid] = HolidayRecord(
            holiday_date=holiday_date, name=name, site_id=site_id, holiday_id=hid, created_at=created_at
        )
        return hid

    def get(self, holiday_id):
        return self.items.get(int(holiday_id))

    def delete(self, holiday_id):
        return self.items.pop(int(holiday_id), None) is not None

    def list_between(self, *, start, end):
        return [h for h in self.items.values() if start <= h.holiday_date <= end]


class FakeAttendanceRepo:
    def __init__(self):
        self.records = {}
        self.batches: list[tuple[str, ...]] = []
        self.failing_ids: set[str] = set()
        self.fail_writes = False

    def get(self, staff_id, work_date):
        return self.records.get((staff_id, work_date))

    def upsert(self, record):
        if self.fail_writes:
            raise StoreError("attendance write refused")
        key = (record.staff_id, record.work_date)
        current = self.records.get(key)
        if current is not None:
            record = replace(
                record,
                site_id=record.site_id or current.site_id,
                notes=record.notes if record.notes is not None else current.notes,
            )
        self.records[key] = record

    def list_between(self, *, staff_ids, start, end):
        assert 0 < len(staff_ids) <= 30
        self.batches.append(tuple(staff_ids))
        if self.failing_ids.intersection(staff_ids):
            raise StoreError("attendance read failed")
        wanted = set(staff_ids)
        return [r for (sid, day), r in self.records.items() if sid in wanted and start <= day <= end]


class FakePayrollRepo:
    def __init__(self):
        self.advances = []
        self.payments = []
        self.fail_writes = False

    def add_advance(self, advance):
        if self.fail_writes:
            raise StoreError("advance write refused")
        self.advances.append(replace(advance, advance_id=len(self.advances) + 1))
        return len(self.advances)

    def add_payment(self, payment):
        if self.fail_writes:
            raise StoreError("payment write refused")
        self.payments.append(replace(payment, payment_id=len(self.payments) + 1))
        return len(self.payments)

    def list_advances(self, *, staff_ids, start=None, end=None):
        assert len(staff_ids) <= 30
        return [
            a
            for a in self.advances
            if a.staff_id in staff_ids
            and (start is None or a.given_on >= start)
            and (end is None or a.given_on <= end)
        ]

    def list_payments(self, *, staff_ids, periods=None):
        assert len(staff_ids) <= 30
        return [
            p
            for p in self.payments
            if p.staff_id in staff_ids and (not periods or (p.for_month, p.for_year) in set(periods))
        ]

    def count_payments_for_month(self, *, month, year):
        return sum(1 for p in self.payments if p.for_month == month and p.for_year == year)


class FakeActivityRepo:
    def __init__(self):
        self.entries = []
        self.fail = False

    def add(self, entry):
        if self.fail:
            raise StoreError("activity log unavailable")
        self.entries.append(replace(entry, log_id=len(self.entries) + 1))
        return len(self.entries)

    def list_recent(self, *, site_id=None, staff_id=None, limit=100):
        rows = [
            e
            for e in reversed(self.entries)
            if (site_id is None or e.site_id == site_id) and (staff_id is None or e.related_staff_id == staff_id)
        ]
        return rows[:limit]


def make_employee(uid, *, site_id="site-a", salary=30000.0, role=Role.STAFF, joining_date=None, exit_date=None, **kw):
    return Employee(
        uid=uid,
        display_name=kw.pop("name", uid.title()),
        email=f"{uid}@example.com",
        role=role,
        site_id=site_id,
        joining_date=joining_date,
        exit_date=exit_date,
        salary=salary,
        **kw,
    )


@pytest.fixture
def employee_factory():
    return make_employee


@pytest.fixture
def manager():
    return Actor(uid="m1", name="Mira", role=Role.MANAGER, site_id="site-a")


@pytest.fixture
def staff_actor():
    return Actor(uid="s9", name="Sam", role=Role.STAFF, site_id="site-a")


@pytest.fixture
def world():
    """Fake repositories wired into real services."""
    repos = SimpleNamespace(
        staff=FakeStaffRepo(),
        holidays=FakeHolidayRepo(),
        attendance=FakeAttendanceRepo(),
        payroll=FakePayrollRepo(),
        activity=FakeActivityRepo(),
    )
    container = wire_services(
        staff_repo=repos.staff,
        holidays_repo=repos.holidays,
        attendance_repo=repos.attendance,
        payroll_repo=repos.payroll,
        activity_repo=repos.activity,
    )
    return SimpleNamespace(repos=repos, container=container, hub=container.hub)


@pytest.fixture
def jan_2025():
    return date(2025, 1, 1), date(2025, 1, 31)
