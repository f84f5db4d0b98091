from __future__ import annotations

import logging
from datetime import date
from functools import wraps
from typing import Optional

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    DomainError,
    InvalidStateError,
    NotFoundError,
    OutOfWindowError,
    ServiceMismatchError,
    ValidationError,
    WindowExpiredError,
)
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)

# Most specific first; the first isinstance match wins.
ERROR_STATUS: tuple[tuple[type[DomainError], str, int], ...] = (
    (NotFoundError, "NOT_FOUND", 404),
    (OutOfWindowError, "OUT_OF_WINDOW", 422),
    (WindowExpiredError, "WINDOW_EXPIRED", 422),
    (ServiceMismatchError, "SERVICE_MISMATCH", 422),
    (InvalidStateError, "INVALID_STATE", 409),
    (AuthorizationError, "FORBIDDEN", 403),
    (ValidationError, "VALIDATION_ERROR", 400),
)


def error_response(error: DomainError):
    for kind, code, status in ERROR_STATUS:
        if isinstance(error, kind):
            break
    else:
        code, status = "DOMAIN_ERROR", 400
    return jsonify({"success": False, "code": code, "message": str(error)}), status


def server_error(action: str):
    logger.exception("Unexpected failure while trying to %s", action)
    return jsonify({"success": False, "code": "SERVER_ERROR", "message": f"Server error while trying to {action}"}), 500


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "code": "UNAUTHENTICATED", "message": "Please sign in"}), 401
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "code": "UNAUTHENTICATED", "message": "Please sign in"}), 401
        if not current_role().is_administrative:
            return jsonify({"success": False, "code": "FORBIDDEN", "message": "You are not allowed"}), 403
        return view(*args, **kwargs)

    return wrapper


def current_user_id() -> int:
    return int(session["user_id"])


def current_role() -> Role:
    return Role.parse(session.get("role"))


def json_body() -> dict:
    return request.get_json(silent=True) or {}


def query_date(name: str) -> Optional[date]:
    value = (request.args.get(name) or "").strip()
    if not value:
        return None
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"Invalid {name} (YYYY-MM-DD)")
