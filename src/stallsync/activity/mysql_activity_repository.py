from __future__ import annotations

import json
from typing import Optional, Sequence

from ..core.enums import ActivityType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import StaffActivityLog
from .repository import ActivityLogRepository


class MySQLActivityLogRepository(ActivityLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(self, entry: StaffActivityLog) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO staff_activity_logs(activity_type, related_staff_id, site_id,
                                                user_id, user_name, logged_at, details_json)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    entry.activity_type.value,
                    entry.related_staff_id,
                    entry.site_id,
                    entry.user_id,
                    entry.user_name,
                    entry.timestamp,
                    json.dumps(entry.details, default=str),
                ),
            )
            return int(cur.lastrowid)

    def list_recent(
        self,
        *,
        site_id: Optional[str] = None,
        staff_id: Optional[str] = None,
        limit: int = 100,
    ) -> Sequence[StaffActivityLog]:
        clauses: list[str] = []
        params: list[object] = []
        if site_id is not None:
            clauses.append("site_id=%s")
            params.append(site_id)
        if staff_id is not None:
            clauses.append("related_staff_id=%s")
            params.append(staff_id)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT log_id, activity_type, related_staff_id, site_id, user_id, user_name, logged_at, details_json
                FROM staff_activity_logs
                {where}
                ORDER BY logged_at DESC, log_id DESC
                LIMIT %s
                """,
                tuple(params),
            )
            return [
                StaffActivityLog(
                    log_id=int(r["log_id"]),
                    activity_type=ActivityType(r["activity_type"]),
                    related_staff_id=r["related_staff_id"],
                    site_id=r.get("site_id"),
                    user_id=r["user_id"],
                    user_name=r.get("user_name") or "",
                    timestamp=r["logged_at"],
                    details=json.loads(r["details_json"] or "{}"),
                )
                for r in fetchall(cur)
            ]
