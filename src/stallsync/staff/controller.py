from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import json_body, manager_required, optional_date, required_date, scoped_site_id
from ..container import Container
from .model import Employee, SalaryHistoryEntry


def employee_json(e: Employee) -> dict:
    return {
        "uid": e.uid,
        "name": e.label,
        "email": e.email,
        "role": e.role.value,
        "site_id": e.site_id,
        "joining_date": e.joining_date.isoformat() if e.joining_date else None,
        "exit_date": e.exit_date.isoformat() if e.exit_date else None,
        "salary": e.salary,
    }


def _history_json(h: SalaryHistoryEntry) -> dict:
    return {
        "id": h.entry_id,
        "new_salary": h.new_salary,
        "effective_date": h.effective_date.isoformat(),
        "notes": h.notes,
        "recorded_by": h.recorded_by_name or h.recorded_by_uid,
        "recorded_at": h.recorded_at.isoformat(),
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/staff", methods=["GET"], endpoint="api_staff_list")
    @manager_required
    def staff_list(actor):
        staff = container.staff_service.list_staff(site_id=scoped_site_id(actor))
        return jsonify({"success": True, "data": [employee_json(e) for e in staff]})

    @app.route("/api/staff/<uid>", methods=["GET"], endpoint="api_staff_detail")
    @manager_required
    def staff_detail(actor, uid: str):
        return jsonify({"success": True, "data": employee_json(container.staff_service.get(uid))})

    @app.route("/api/staff/<uid>", methods=["PUT"], endpoint="api_staff_update")
    @manager_required
    def staff_update(actor, uid: str):
        data = json_body()
        employee = container.staff_service.update_details(
            actor,
            uid,
            joining_date=optional_date(data, "joining_date"),
            exit_date=optional_date(data, "exit_date"),
            site_id=data.get("site_id") or None,
        )
        return jsonify({"success": True, "message": "Staff details updated", "data": employee_json(employee)})

    @app.route("/api/staff/<uid>/appraisals", methods=["POST"], endpoint="api_staff_appraisal")
    @manager_required
    def staff_appraisal(actor, uid: str):
        data = json_body()
        entry_id = container.staff_service.record_appraisal(
            actor,
            uid,
            new_salary=data.get("new_salary"),
            effective_date=required_date(data, "effective_date"),
            notes=data.get("notes"),
        )
        return jsonify({"success": True, "message": "Salary appraisal recorded", "id": entry_id}), 201

    @app.route("/api/staff/<uid>/salary-history", methods=["GET"], endpoint="api_staff_salary_history")
    @manager_required
    def staff_salary_history(actor, uid: str):
        history = container.staff_service.salary_history(uid)
        return jsonify({"success": True, "data": [_history_json(h) for h in history]})

    @app.route("/api/staff/activity", methods=["GET"], endpoint="api_staff_activity")
    @manager_required
    def staff_activity(actor):
        logs = container.activity_logger.recent(
            site_id=scoped_site_id(actor),
            staff_id=request.args.get("staff_id") or None,
            limit=request.args.get("limit", default=100, type=int),
        )
        return jsonify(
            {
                "success": True,
                "data": [
                    {
                        "id": log.log_id,
                        "type": log.activity_type.value,
                        "staff_id": log.related_staff_id,
                        "site_id": log.site_id,
                        "user": log.user_name,
                        "timestamp": log.timestamp.isoformat(),
                        "details": log.details,
                    }
                    for log in logs
                ],
            }
        )
