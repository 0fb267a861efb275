"""Flask helpers shared by the JSON controllers."""
from __future__ import annotations

import csv
import io
import logging
from functools import wraps
from typing import Iterable, Optional, Sequence

from flask import Flask, jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, DomainError, NotFoundError, StoreError, ValidationError
from ..staff.model import Actor
from .datetime_utils import parse_iso_date, parse_optional_date

logger = logging.getLogger(__name__)

_STATUS_CODES = (
    (ValidationError, 400),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (StoreError, 503),
)


def current_actor() -> Optional[Actor]:
    """The signed-in user as stored in the session by the auth provider."""
    uid = session.get("user_id")
    if not uid:
        return None
    try:
        role = Role(session.get("role"))
    except ValueError:
        role = Role.STAFF
    return Actor(
        uid=str(uid),
        name=session.get("name") or "Unknown User",
        role=role,
        site_id=session.get("site_id"),
    )


def manager_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        actor = current_actor()
        if actor is None:
            return jsonify({"success": False, "message": "Please sign in to continue"}), 401
        if not actor.can_manage_staff:
            return jsonify({"success": False, "message": "Managers and admins only"}), 403
        return view(actor, *args, **kwargs)

    return wrapper


def scoped_site_id(actor: Actor) -> Optional[str]:
    """Site filter for a request: admins may pick any site or none, managers are held to their own."""
    requested = request.args.get("site_id") or None
    if actor.role == Role.ADMIN:
        return requested
    if requested and requested != actor.site_id:
        raise AuthorizationError(f"Not allowed to view site {requested}")
    return actor.site_id


def json_body() -> dict:
    return request.get_json(silent=True) or {}


def required_date(data: dict, key: str):
    value = data.get(key)
    if not value:
        raise ValidationError(f"{key} is required")
    return parse_iso_date(value)


def optional_date(data: dict, key: str):
    return parse_optional_date(data.get(key))


def csv_response(app: Flask, rows: Iterable[dict], *, fieldnames: Sequence[str], filename: str):
    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=list(fieldnames))
    writer.writeheader()
    for row in rows:
        writer.writerow(row)

    # BOM so spreadsheet apps detect UTF-8.
    return app.response_class(
        out.getvalue().encode("utf-8-sig"),
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        status = next((code for cls, code in _STATUS_CODES if isinstance(exc, cls)), 400)
        if status >= 500:
            logger.error("Store failure on %s %s: %s", request.method, request.path, exc)
        return jsonify({"success": False, "message": str(exc)}), status
