from __future__ import annotations

from datetime import date

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.web import json_body, manager_required, required_date, scoped_site_id
from ..container import Container
from ..core.exceptions import ValidationError
from .model import ActionResult


def _result_json(result: ActionResult):
    body = {"success": result.ok, "message": result.message}
    if result.record is not None:
        body["data"] = {
            "id": result.record.doc_id,
            "staff_id": result.record.staff_id,
            "date": result.record.work_date.isoformat(),
            "status": result.record.status.value,
            "site_id": result.record.site_id,
        }
    return jsonify(body), 200 if result.ok else 409


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/daily", methods=["GET"], endpoint="api_attendance_daily")
    @manager_required
    def attendance_daily(actor):
        site_id = scoped_site_id(actor)
        if not site_id:
            raise ValidationError("site_id is required")
        day_s = request.args.get("date")
        work_date = parse_iso_date(day_s) if day_s else date.today()
        statuses = container.attendance_service.daily_sheet(site_id=site_id, work_date=work_date)
        return jsonify(
            {
                "success": True,
                "date": work_date.isoformat(),
                "data": {uid: status.value for uid, status in statuses.items()},
            }
        )

    @app.route("/api/attendance", methods=["POST"], endpoint="api_attendance_mark")
    @manager_required
    def attendance_mark(actor):
        data = json_body()
        result = container.attendance_service.mark(
            actor,
            str(data.get("staff_id") or ""),
            required_date(data, "date"),
            data.get("status"),
            site_id=data.get("site_id") or actor.site_id,
            notes=data.get("notes"),
        )
        return _result_json(result)

    @app.route("/api/attendance/cycle", methods=["POST"], endpoint="api_attendance_cycle")
    @manager_required
    def attendance_cycle(actor):
        data = json_body()
        result = container.attendance_service.cycle_status(
            actor,
            str(data.get("staff_id") or ""),
            required_date(data, "date"),
            site_id=data.get("site_id") or None,
        )
        return _result_json(result)

    @app.route("/api/attendance/register", methods=["GET"], endpoint="api_attendance_register")
    @manager_required
    def attendance_register(actor):
        today = date.today()
        register_ = container.attendance_service.monthly_register(
            site_id=scoped_site_id(actor),
            month=request.args.get("month", default=today.month, type=int),
            year=request.args.get("year", default=today.year, type=int),
        )
        return jsonify(
            {
                "success": True,
                "read_only": register_.read_only,
                "days": [d.isoformat() for d in register_.days],
                "data": [
                    {
                        "staff_id": row.staff_id,
                        "name": row.staff_name,
                        "site_id": row.site_id,
                        "days": [
                            {
                                "date": cell.day.isoformat(),
                                "status": cell.status.value if cell.status else None,
                                "weekend": cell.is_weekend,
                                "holiday": cell.holiday_name,
                            }
                            for cell in row.days
                        ],
                        "totals": {
                            "present": row.totals.present_days,
                            "absent": row.totals.absent,
                            "leave": row.totals.leave,
                        },
                    }
                    for row in register_.rows
                ],
            }
        )
