from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.web import json_body, manager_required, required_date, scoped_site_id
from ..container import Container
from ..core.exceptions import ValidationError
from .model import HolidayRecord


def holiday_json(h: HolidayRecord) -> dict:
    return {
        "id": h.holiday_id,
        "name": h.name,
        "date": h.holiday_date.isoformat(),
        "site_id": h.site_id,
        "global": h.is_global,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/holidays", methods=["GET"], endpoint="api_holidays_list")
    @manager_required
    def holidays_list(actor):
        start_s = request.args.get("start")
        end_s = request.args.get("end")
        if not start_s or not end_s:
            raise ValidationError("start and end are required")
        holidays = container.holiday_service.list_for_site(
            site_id=scoped_site_id(actor),
            start=parse_iso_date(start_s),
            end=parse_iso_date(end_s),
        )
        return jsonify({"success": True, "data": [holiday_json(h) for h in holidays]})

    @app.route("/api/holidays", methods=["POST"], endpoint="api_holidays_add")
    @manager_required
    def holidays_add(actor):
        data = json_body()
        holiday = container.holiday_service.add_holiday(
            actor,
            name=data.get("name"),
            holiday_date=required_date(data, "date"),
            site_id=data.get("site_id") or None,
        )
        return jsonify({"success": True, "message": "Holiday added", "data": holiday_json(holiday)}), 201

    @app.route("/api/holidays/<int:holiday_id>", methods=["DELETE"], endpoint="api_holidays_delete")
    @manager_required
    def holidays_delete(actor, holiday_id: int):
        holiday = container.holiday_service.remove_holiday(actor, holiday_id)
        return jsonify({"success": True, "message": f"Holiday {holiday.name} removed"})
