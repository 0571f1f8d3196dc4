"""Shared Flask helpers for the JSON controllers.

Authentication is handled by the fronting provider; it forwards the caller's
id in the ``X-User-Id`` header. Each request resolves that id to an active
profile and stores it on ``flask.g``.
"""

from __future__ import annotations

import logging
from datetime import datetime
from functools import wraps
from typing import Any, Optional

from flask import Flask, current_app, g, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from ..users.repository import UserRepository
from .datetime_utils import now_local, parse_override_instant

logger = logging.getLogger(__name__)

USER_HEADER = "X-User-Id"


def install_identity_loader(app: Flask, users: UserRepository) -> None:
    @app.before_request
    def _load_current_user():
        g.current_user = None
        raw = request.headers.get(USER_HEADER, "").strip()
        if not raw:
            return
        try:
            user = users.get_by_id(int(raw))
        except ValueError:
            user = None
        if user and user.is_active:
            g.current_user = user


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if getattr(g, "current_user", None) is None:
            raise AuthenticationError("Session expired or not signed in")
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    allowed = set(roles)

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            user = getattr(g, "current_user", None)
            if user is None:
                raise AuthenticationError("Session expired or not signed in")
            if user.role not in allowed:
                raise AuthorizationError("You do not have permission to perform this action")
            return view(*args, **kwargs)

        return wrapper

    return decorator


def json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object", code="INVALID_BODY")
    return data


def effective_now(override: Optional[str]) -> datetime:
    """Return "now", honouring a client-supplied instant only where allowed.

    Outside development/testing the override is silently ignored, like the
    production punch endpoint always used the server clock.
    """
    if override and current_app.config.get("ALLOW_TIME_OVERRIDE"):
        return parse_override_instant(override)
    return now_local()


def ok(payload: Any = None, status: int = 200):
    body = {"success": True}
    if payload is not None:
        body["data"] = payload
    return jsonify(body), status


_STATUS_BY_ERROR = (
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ValidationError, 400),
)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def _domain_error(exc: DomainError):
        status = next((code for cls, code in _STATUS_BY_ERROR if isinstance(exc, cls)), 400)
        return jsonify({"success": False, "error": str(exc), "code": exc.code}), status

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        code = (exc.name or "error").upper().replace(" ", "_")
        return jsonify({"success": False, "error": exc.description, "code": code}), exc.code

    @app.errorhandler(Exception)
    def _unexpected(exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"success": False, "error": "Internal server error", "code": "INTERNAL"}), 500
