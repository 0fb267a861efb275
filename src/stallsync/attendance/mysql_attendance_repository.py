from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_date, db_cursor, fetchall, fetchone, in_placeholders
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = "staff_id, work_date, status, site_id, notes, recorded_by_uid, recorded_by_name"


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        staff_id=r["staff_id"],
        work_date=as_date(r["work_date"]),
        status=AttendanceStatus(r["status"]),
        site_id=r.get("site_id"),
        notes=r.get("notes"),
        recorded_by_uid=r.get("recorded_by_uid"),
        recorded_by_name=r.get("recorded_by_name"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, staff_id: str, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM staff_attendance WHERE staff_id=%s AND work_date=%s",
                (staff_id, work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def upsert(self, record: AttendanceRecord) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO staff_attendance(doc_id, {_COLUMNS})
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    status=VALUES(status),
                    site_id=COALESCE(VALUES(site_id), site_id),
                    notes=COALESCE(VALUES(notes), notes),
                    recorded_by_uid=COALESCE(VALUES(recorded_by_uid), recorded_by_uid),
                    recorded_by_name=COALESCE(VALUES(recorded_by_name), recorded_by_name)
                """,
                (
                    record.doc_id,
                    record.staff_id,
                    record.work_date,
                    record.status.value,
                    record.site_id,
                    record.notes,
                    record.recorded_by_uid,
                    record.recorded_by_name,
                ),
            )

    def list_between(self, *, staff_ids: Sequence[str], start: date, end: date) -> Sequence[AttendanceRecord]:
        if not staff_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM staff_attendance
                WHERE staff_id IN ({in_placeholders(staff_ids)}) AND work_date BETWEEN %s AND %s
                ORDER BY work_date, staff_id
                """,
                (*staff_ids, start, end),
            )
            return [_to_record(r) for r in fetchall(cur)]
