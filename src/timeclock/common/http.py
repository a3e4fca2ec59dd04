from __future__ import annotations

import logging
from datetime import date
from functools import wraps

from flask import Flask, jsonify, request, session

from ..core.exceptions import (
    AuthorizationError,
    BreakTooShortError,
    ConflictError,
    DomainError,
    InvalidTransitionError,
    NoActiveBreakError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "employee_id" not in session or "organization_id" not in session:
            return jsonify({"success": False, "message": "Login required"}), 401
        return view(*args, **kwargs)

    return wrapper


def current_employee_id() -> int:
    return int(session["employee_id"])


def current_organization_id() -> int:
    return int(session["organization_id"])


def json_body() -> dict:
    return request.get_json(silent=True) or {}


def date_arg(name: str, default: date | None = None) -> date | None:
    value = (request.args.get(name) or "").strip()
    if not value:
        return default
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{name} must be a YYYY-MM-DD date")


def error_response(exc: DomainError):
    body = {"success": False, "error": type(exc).__name__, "message": str(exc)}

    if isinstance(exc, ValidationError):
        status = 400
    elif isinstance(exc, AuthorizationError):
        status = 403
    elif isinstance(exc, NotFoundError):
        status = 404
    elif isinstance(exc, BreakTooShortError):
        status = 422
        body["remaining_minutes"] = exc.remaining_minutes
    elif isinstance(exc, InvalidTransitionError):
        status = 409
        body["current_status"] = exc.current
    elif isinstance(exc, (ConflictError, NoActiveBreakError)):
        status = 409
    elif isinstance(exc, StoreUnavailableError):
        status = 503
    else:
        status = 400
    return jsonify(body), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        if isinstance(exc, StoreUnavailableError):
            logger.error("Store unavailable: %s", exc)
        return error_response(exc)
