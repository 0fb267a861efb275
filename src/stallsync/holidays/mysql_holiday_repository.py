from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_date, db_cursor, fetchall, fetchone
from .model import HolidayRecord
from .repository import HolidayRepository


def _to_holiday(r: dict) -> HolidayRecord:
    return HolidayRecord(
        holiday_id=int(r["holiday_id"]),
        name=r["name"],
        holiday_date=as_date(r["holiday_date"]),
        site_id=r.get("site_id"),
        created_at=r.get("created_at"),
    )


class MySQLHolidayRepository(HolidayRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(self, *, name: str, holiday_date: date, site_id: Optional[str], created_at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO holidays(name, holiday_date, site_id, created_at) VALUES(%s,%s,%s,%s)",
                (name, holiday_date, site_id, created_at),
            )
            return int(cur.lastrowid)

    def get(self, holiday_id: int) -> Optional[HolidayRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT holiday_id, name, holiday_date, site_id, created_at FROM holidays WHERE holiday_id=%s",
                (int(holiday_id),),
            )
            r = fetchone(cur)
            return _to_holiday(r) if r else None

    def delete(self, holiday_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM holidays WHERE holiday_id=%s", (int(holiday_id),))
            return cur.rowcount > 0

    def list_between(self, *, start: date, end: date) -> Sequence[HolidayRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT holiday_id, name, holiday_date, site_id, created_at
                FROM holidays
                WHERE holiday_date BETWEEN %s AND %s
                ORDER BY holiday_date, holiday_id
                """,
                (start, end),
            )
            return [_to_holiday(r) for r in fetchall(cur)]
