from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from functools import wraps
from typing import Any, Optional

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..authorization.model import Principal
from ..core.exceptions import AuthenticationError, DomainError, ValidationError
from ..core.logging import get_logger
from .datetime_utils import parse_iso_date, parse_iso_datetime

logger = get_logger("http")


def current_principal() -> Optional[Principal]:
    return Principal.from_session(session)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            raise AuthenticationError("Not authorized to access this route")
        return view(*args, **kwargs)

    return wrapper


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def ok(data: Any = None, status: int = 200, **extra):
    payload = {"success": True, **extra}
    if data is not None:
        payload["data"] = data
    return jsonify(payload), status


def date_arg(source: dict, key: str, *, required: bool = True) -> Optional[date]:
    value = source.get(key)
    if not value:
        if required:
            raise ValidationError(f"{key} is required")
        return None
    return parse_iso_date(str(value))


def int_arg(source: dict, key: str, *, required: bool = True) -> Optional[int]:
    value = source.get(key)
    if value is None or value == "":
        if required:
            raise ValidationError(f"{key} is required")
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be an integer")


def int_list_arg(source: dict, key: str) -> list[int]:
    values = source.get(key) or []
    if not isinstance(values, list):
        raise ValidationError(f"{key} must be a list")
    return [int_arg({key: v}, key) for v in values]


def datetime_arg(source: dict, key: str) -> Optional[datetime]:
    value = source.get(key)
    return parse_iso_datetime(str(value)) if value else None


def decimal_arg(source: dict, key: str) -> Decimal:
    try:
        value = Decimal(str(source.get(key)))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{key} must be a number")
    if not value.is_finite():
        raise ValidationError(f"{key} must be a number")
    return value


def optional_bool(source: dict, key: str) -> Optional[bool]:
    if key not in source or source[key] is None:
        return None
    value = source[key]
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(err: DomainError):
        return jsonify({"success": False, "message": str(err)}), err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(err: HTTPException):
        return jsonify({"success": False, "message": err.description}), err.code

    @app.errorhandler(Exception)
    def handle_unexpected(err: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.path)
        message = str(err) if app.config.get("DEBUG") else "Internal server error"
        return jsonify({"success": False, "message": message}), 500
