from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_date, as_float, db_cursor, fetchall, fetchone, in_placeholders
from .model import SalaryAdvance, SalaryPayment
from .repository import PayrollRepository


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add_advance(self, advance: SalaryAdvance) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO salary_advances(staff_id, amount, given_on, for_month, for_year, site_id,
                                            staff_site_id, notes, recorded_by_uid, recorded_by_name)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    advance.staff_id,
                    advance.amount,
                    advance.given_on,
                    advance.for_month,
                    advance.for_year,
                    advance.site_id,
                    advance.staff_site_id,
                    advance.notes,
                    advance.recorded_by_uid,
                    advance.recorded_by_name,
                ),
            )
            return int(cur.lastrowid)

    def add_payment(self, payment: SalaryPayment) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO salary_payments(staff_id, amount_paid, paid_on, for_month, for_year, site_id,
                                            notes, recorded_by_uid, recorded_by_name)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    payment.staff_id,
                    payment.amount_paid,
                    payment.paid_on,
                    payment.for_month,
                    payment.for_year,
                    payment.site_id,
                    payment.notes,
                    payment.recorded_by_uid,
                    payment.recorded_by_name,
                ),
            )
            return int(cur.lastrowid)

    def list_advances(
        self,
        *,
        staff_ids: Sequence[str],
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[SalaryAdvance]:
        if not staff_ids:
            return []
        clauses = [f"staff_id IN ({in_placeholders(staff_ids)})"]
        params: list[object] = list(staff_ids)
        if start is not None:
            clauses.append("given_on >= %s")
            params.append(start)
        if end is not None:
            clauses.append("given_on <= %s")
            params.append(end)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT advance_id, staff_id, amount, given_on, for_month, for_year, site_id,
                       staff_site_id, notes, recorded_by_uid, recorded_by_name
                FROM salary_advances
                WHERE {' AND '.join(clauses)}
                ORDER BY given_on DESC, advance_id DESC
                """,
                tuple(params),
            )
            return [
                SalaryAdvance(
                    advance_id=int(r["advance_id"]),
                    staff_id=r["staff_id"],
                    amount=as_float(r["amount"]),
                    given_on=as_date(r["given_on"]),
                    for_month=int(r["for_month"]) if r.get("for_month") is not None else None,
                    for_year=int(r["for_year"]) if r.get("for_year") is not None else None,
                    site_id=r.get("site_id"),
                    staff_site_id=r.get("staff_site_id"),
                    notes=r.get("notes"),
                    recorded_by_uid=r.get("recorded_by_uid"),
                    recorded_by_name=r.get("recorded_by_name"),
                )
                for r in fetchall(cur)
            ]

    def list_payments(
        self,
        *,
        staff_ids: Sequence[str],
        periods: Optional[Sequence[tuple[int, int]]] = None,
    ) -> Sequence[SalaryPayment]:
        if not staff_ids:
            return []
        clauses = [f"staff_id IN ({in_placeholders(staff_ids)})"]
        params: list[object] = list(staff_ids)
        if periods:
            clauses.append("(" + " OR ".join(["(for_month=%s AND for_year=%s)"] * len(periods)) + ")")
            for month, year in periods:
                params.extend([int(month), int(year)])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT payment_id, staff_id, amount_paid, paid_on, for_month, for_year, site_id,
                       notes, recorded_by_uid, recorded_by_name
                FROM salary_payments
                WHERE {' AND '.join(clauses)}
                ORDER BY paid_on, payment_id
                """,
                tuple(params),
            )
            return [
                SalaryPayment(
                    payment_id=int(r["payment_id"]),
                    staff_id=r["staff_id"],
                    amount_paid=as_float(r["amount_paid"]),
                    paid_on=as_date(r["paid_on"]),
                    for_month=int(r["for_month"]),
                    for_year=int(r["for_year"]),
                    site_id=r.get("site_id"),
                    notes=r.get("notes"),
                    recorded_by_uid=r.get("recorded_by_uid"),
                    recorded_by_name=r.get("recorded_by_name"),
                )
                for r in fetchall(cur)
            ]

    def count_payments_for_month(self, *, month: int, year: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS n FROM salary_payments WHERE for_month=%s AND for_year=%s",
                (int(month), int(year)),
            )
            r = fetchone(cur)
            return int(r["n"]) if r else 0
