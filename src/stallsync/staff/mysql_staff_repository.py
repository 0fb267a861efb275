from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_date, as_float, db_cursor, fetchall, fetchone, in_placeholders
from .model import Employee, SalaryHistoryEntry
from .repository import StaffRepository

_SELECT = """
    SELECT s.uid, s.display_name, s.email, s.role, s.site_id, s.joining_date, s.exit_date, s.salary,
           GROUP_CONCAT(ms.site_id) AS managed_sites
    FROM staff s
    LEFT JOIN manager_sites ms ON ms.uid = s.uid
"""


def _to_employee(row: dict) -> Employee:
    managed = row.get("managed_sites") or ""
    return Employee(
        uid=row["uid"],
        display_name=row.get("display_name"),
        email=row.get("email"),
        role=Role(row["role"]),
        site_id=row.get("site_id"),
        joining_date=as_date(row.get("joining_date")),
        exit_date=as_date(row.get("exit_date")),
        salary=as_float(row.get("salary")),
        managed_site_ids=tuple(s for s in managed.split(",") if s),
    )


class MySQLStaffRepository(StaffRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, uid: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE s.uid=%s GROUP BY s.uid", (uid,))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def get_many(self, uids: Sequence[str]) -> Sequence[Employee]:
        if not uids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE s.uid IN ({in_placeholders(uids)}) GROUP BY s.uid", tuple(uids))
            return [_to_employee(r) for r in fetchall(cur)]

    def list_staff(self, *, site_id: Optional[str] = None) -> Sequence[Employee]:
        clauses = ["s.role IN ('staff', 'manager')"]
        params: list[object] = []
        if site_id is not None:
            clauses.append(
                "(s.site_id=%s OR (s.role='manager' AND EXISTS "
                "(SELECT 1 FROM manager_sites m2 WHERE m2.uid=s.uid AND m2.site_id=%s)))"
            )
            params.extend([site_id, site_id])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE {' AND '.join(clauses)} GROUP BY s.uid ORDER BY s.display_name",
                tuple(params),
            )
            return [_to_employee(r) for r in fetchall(cur)]

    def update_details(
        self,
        uid: str,
        *,
        joining_date: Optional[date],
        exit_date: Optional[date],
        site_id: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE staff SET joining_date=%s, exit_date=%s, site_id=%s WHERE uid=%s",
                (joining_date, exit_date, site_id, uid),
            )
            return cur.rowcount > 0

    def record_appraisal(
        self,
        *,
        staff_id: str,
        new_salary: float,
        effective_date: date,
        notes: Optional[str],
        recorded_by_uid: str,
        recorded_by_name: str,
        recorded_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO salary_history(staff_id, new_salary, effective_date, notes,
                                           recorded_by_uid, recorded_by_name, recorded_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (staff_id, new_salary, effective_date, notes, recorded_by_uid, recorded_by_name, recorded_at),
            )
            entry_id = int(cur.lastrowid)
            cur.execute("UPDATE staff SET salary=%s WHERE uid=%s", (new_salary, staff_id))
            return entry_id

    def list_salary_history(self, staff_id: str) -> Sequence[SalaryHistoryEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT entry_id, staff_id, new_salary, effective_date, notes,
                       recorded_by_uid, recorded_by_name, recorded_at
                FROM salary_history
                WHERE staff_id=%s
                ORDER BY effective_date DESC, entry_id DESC
                """,
                (staff_id,),
            )
            return [
                SalaryHistoryEntry(
                    entry_id=int(r["entry_id"]),
                    staff_id=r["staff_id"],
                    new_salary=as_float(r["new_salary"]),
                    effective_date=as_date(r["effective_date"]),
                    notes=r.get("notes"),
                    recorded_by_uid=r["recorded_by_uid"],
                    recorded_by_name=r.get("recorded_by_name"),
                    recorded_at=r["recorded_at"],
                )
                for r in fetchall(cur)
            ]
