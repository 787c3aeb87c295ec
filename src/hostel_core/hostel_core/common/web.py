"""Flask glue shared by the JSON controllers."""
from __future__ import annotations

import logging
from datetime import date, datetime
from enum import Enum
from functools import wraps

from flask import Flask, jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AttendanceRejected,
    AuthenticationError,
    AuthorizationError,
    DomainError,
    IdentityResolutionError,
    InvalidTransitionError,
    NotFoundError,
    TenantMismatchError,
    ValidationError,
)
from ..core.session import Session
from ..database.errors import StoreError

logger = logging.getLogger(__name__)

SESSION_KEY = "auth"

_STATUS = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (TenantMismatchError, 403),
    (NotFoundError, 404),
    (InvalidTransitionError, 409),
    (AttendanceRejected, 422),
    (IdentityResolutionError, 503),
)


def current_session() -> Session:
    data = session.get(SESSION_KEY)
    if not data:
        raise AuthenticationError("Please sign in to continue")
    return Session.from_dict(data)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if SESSION_KEY not in session:
            return jsonify({"error": "unauthenticated", "message": "Please sign in to continue"}), 401
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            data = session.get(SESSION_KEY)
            if not data:
                return jsonify({"error": "unauthenticated", "message": "Please sign in to continue"}), 401
            if data.get("role") not in {r.value for r in roles}:
                return jsonify({"error": "forbidden", "message": "You do not have access to this resource"}), 403
            return view(*args, **kwargs)

        return wrapper

    return decorator


def json_body() -> dict:
    return request.get_json(silent=True) or {}


def to_json(value):
    """Dataclasses, enums and dates into JSON-friendly values (camelCase keys)."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    if hasattr(value, "__dataclass_fields__"):
        return {_camel(k): to_json(getattr(value, k)) for k in value.__dataclass_fields__}
    return value


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p.title() for p in rest)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        for exc_type, status in _STATUS:
            if isinstance(e, exc_type):
                break
        else:
            status = 400
        body = {"error": type(e).__name__, "message": str(e)}
        if isinstance(e, AttendanceRejected):
            body["reason"] = e.reason.value
            if e.attempt is not None:
                body["stages"] = [s.value for s in e.attempt.stages]
            if getattr(e, "next_slot_label", None):
                body["nextSlot"] = e.next_slot_label
            if getattr(e, "distance", None) is not None:
                body["distance"] = round(e.distance, 1)
        return jsonify(body), status

    @app.errorhandler(StoreError)
    def handle_store_error(e: StoreError):
        logger.exception("Store failure while handling %s %s", request.method, request.path)
        return jsonify({"error": "StoreUnavailable", "message": "Data store is unavailable, please retry"}), 503
