"""Request/response helpers shared by the JSON controllers."""

from __future__ import annotations

import logging
from typing import Tuple

from flask import Flask, jsonify, request

from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    ConflictError,
    DependencyError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from .pagination import normalize_pagination

logger = logging.getLogger(__name__)

USER_ID_HEADER = "X-User-Id"
USER_ROLE_HEADER = "X-User-Role"


def current_identity() -> Tuple[int, Role]:
    """Caller identity forwarded by the authentication layer (already verified upstream)."""

    raw_id = request.headers.get(USER_ID_HEADER, "").strip()
    raw_role = request.headers.get(USER_ROLE_HEADER, Role.EMPLOYEE.value).strip().lower()
    try:
        user_id = int(raw_id)
    except ValueError:
        raise AuthorizationError("Missing or invalid caller identity")
    try:
        role = Role(raw_role)
    except ValueError:
        raise AuthorizationError(f"Unknown role: {raw_role}")
    return user_id, role


def json_body() -> dict:
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def page_args() -> Tuple[int, int]:
    return normalize_pagination(request.args.get("page", 1), request.args.get("page_size", 20))


def status_for(exc: DomainError) -> int:
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, AuthorizationError):
        return 403
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, ConflictError):
        return 409
    if isinstance(exc, DependencyError):
        return 503
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        status = status_for(exc)
        if status >= 500:
            logger.error("%s %s failed: %s", request.method, request.path, exc.message)
        return jsonify(exc.to_dict()), status
