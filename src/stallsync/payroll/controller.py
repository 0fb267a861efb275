from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date, parse_optional_date
from ..common.web import csv_response, json_body, manager_required, optional_date, required_date, scoped_site_id
from ..container import Container
from ..core.exceptions import ValidationError
from .model import PayrollRow, SalaryAdvance, SalaryPayment, StaffReportRow

PAYROLL_CSV_FIELDS = [
    "staff_id",
    "staff_name",
    "base_salary",
    "working_days",
    "present_days",
    "earned_salary",
    "advances",
    "net_payable",
    "paid_amount",
    "status",
]


def payroll_row_json(r: PayrollRow) -> dict:
    return {
        "staff_id": r.staff_id,
        "staff_name": r.staff_name,
        "site_id": r.site_id,
        "base_salary": r.base_salary,
        "working_days": r.month_working_days,
        "expected_days": r.expected_days,
        "present_days": r.present_days,
        "earned_salary": round(r.earned_salary, 2),
        "advances": round(r.advances, 2),
        "net_payable": round(r.net_payable, 2),
        "paid_amount": round(r.paid_amount, 2),
        "is_paid": r.is_paid,
    }


def _report_row_json(r: StaffReportRow) -> dict:
    return {
        "staff_id": r.staff_id,
        "staff_name": r.staff_name,
        "site_id": r.site_id,
        "working_days": r.working_days,
        "present_days": r.present_days,
        "earned_salary": round(r.earned_salary, 2),
        "advances": round(r.advances, 2),
        "paid_amount": round(r.paid_amount, 2),
        "net_payable": round(r.net_payable, 2),
    }


def _advance_json(a: SalaryAdvance) -> dict:
    return {
        "id": a.advance_id,
        "staff_id": a.staff_id,
        "amount": a.amount,
        "date": a.given_on.isoformat(),
        "for_month": a.for_month,
        "for_year": a.for_year,
        "site_id": a.site_id,
        "notes": a.notes,
    }


def _payment_json(p: SalaryPayment) -> dict:
    return {
        "id": p.payment_id,
        "staff_id": p.staff_id,
        "amount_paid": p.amount_paid,
        "paid_on": p.paid_on.isoformat(),
        "for_month": p.for_month,
        "for_year": p.for_year,
        "notes": p.notes,
    }


def _range_args():
    start_s = request.args.get("start")
    end_s = request.args.get("end")
    if not start_s or not end_s:
        raise ValidationError("start and end are required")
    return parse_iso_date(start_s), parse_iso_date(end_s)


def register(app: Flask, container: Container) -> None:
    currency = app.config.get("CURRENCY_SYMBOL", "")

    @app.route("/api/payroll/<int:year>/<int:month>", methods=["GET"], endpoint="api_payroll_month")
    @manager_required
    def payroll_month(actor, year: int, month: int):
        rows = container.payroll_service.build_monthly_payroll(month=month, year=year, site_id=scoped_site_id(actor))
        return jsonify({"success": True, "currency": currency, "data": [payroll_row_json(r) for r in rows]})

    @app.route("/api/payroll/<int:year>/<int:month>.csv", methods=["GET"], endpoint="api_payroll_month_csv")
    @manager_required
    def payroll_month_csv(actor, year: int, month: int):
        rows = container.payroll_service.build_monthly_payroll(month=month, year=year, site_id=scoped_site_id(actor))
        data = []
        for r in rows:
            item = payroll_row_json(r)
            item["status"] = "Paid" if r.is_paid else "Pending"
            data.append({k: item[k] for k in PAYROLL_CSV_FIELDS})
        return csv_response(app, data, fieldnames=PAYROLL_CSV_FIELDS, filename=f"payroll_{year}_{month:02d}.csv")

    @app.route("/api/payroll/report", methods=["GET"], endpoint="api_payroll_report")
    @manager_required
    def payroll_report(actor):
        start, end = _range_args()
        report = container.payroll_service.build_staff_report(start=start, end=end, site_id=scoped_site_id(actor))
        return jsonify(
            {
                "success": True,
                "currency": currency,
                "start": start.isoformat(),
                "end": end.isoformat(),
                "totals": report.totals,
                "data": [_report_row_json(r) for r in report.rows],
            }
        )

    @app.route("/api/payroll/expense", methods=["GET"], endpoint="api_payroll_expense")
    @manager_required
    def payroll_expense(actor):
        start = parse_optional_date(request.args.get("start"))
        end = parse_optional_date(request.args.get("end"))
        total = container.payroll_service.salary_expense(start=start, end=end, site_id=scoped_site_id(actor))
        return jsonify({"success": True, "currency": currency, "total": total})

    @app.route("/api/payroll/advances", methods=["GET"], endpoint="api_payroll_advances")
    @manager_required
    def payroll_advances(actor):
        site_id = scoped_site_id(actor)
        if not site_id:
            raise ValidationError("site_id is required")
        advances = container.payroll_service.list_advances(site_id=site_id)
        return jsonify({"success": True, "data": [_advance_json(a) for a in advances]})

    @app.route("/api/payroll/advances", methods=["POST"], endpoint="api_payroll_advance_add")
    @manager_required
    def payroll_advance_add(actor):
        data = json_body()
        advance = container.payroll_service.record_advance(
            actor,
            str(data.get("staff_id") or ""),
            amount=data.get("amount"),
            given_on=required_date(data, "date"),
            for_month=data.get("for_month"),
            for_year=data.get("for_year"),
            notes=data.get("notes"),
            site_id=data.get("site_id") or None,
        )
        return jsonify({"success": True, "message": "Advance recorded", "data": _advance_json(advance)}), 201

    @app.route("/api/payroll/payments", methods=["POST"], endpoint="api_payroll_payment_add")
    @manager_required
    def payroll_payment_add(actor):
        data = json_body()
        payment = container.payroll_service.record_payment(
            actor,
            str(data.get("staff_id") or ""),
            amount_paid=data.get("amount_paid"),
            month=data.get("month"),
            year=data.get("year"),
            paid_on=optional_date(data, "paid_on"),
            notes=data.get("notes"),
        )
        return jsonify({"success": True, "message": "Payment recorded", "data": _payment_json(payment)}), 201
