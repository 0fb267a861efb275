from datetime import datetime

from stallsync.activity.service import StaffActivityLogger
from stallsync.core.enums import ActivityType
from stallsync.core.exceptions import StoreError


class BrokenLogs:
    def add(self, entry):
        raise StoreError("disk full")


class ListLogs:
    def __init__(self):
        self.entries = []

    def add(self, entry):
        self.entries.append(entry)
        return len(self.entries)


def test_log_records_actor_and_drops_empty_details(manager):
    logs = ListLogs()
    logger = StaffActivityLogger(logs, clock=lambda: datetime(2025, 1, 2, 9, 30))

    log_id = logger.log(manager, ActivityType.SALARY_PAID, related_staff_id="s1", site_id="site-a", amount=500.0, notes=None)

    assert log_id == 1
    entry = logs.entries[0]
    assert entry.user_id == manager.uid
    assert entry.details == {"amount": 500.0}
    assert entry.timestamp == datetime(2025, 1, 2, 9, 30)


def test_failed_log_write_does_not_raise(manager, caplog):
    logger = StaffActivityLogger(BrokenLogs())
    assert logger.log(manager, ActivityType.SALARY_PAID, related_staff_id="s1") is None
    assert "Failed to log staff activity" in caplog.text


def test_missing_actor_is_skipped():
    logs = ListLogs()
    assert StaffActivityLogger(logs).log(None, ActivityType.ATTENDANCE_MARKED, related_staff_id="s1") is None
    assert logs.entries == []
