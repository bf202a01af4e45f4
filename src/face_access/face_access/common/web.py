from __future__ import annotations

import logging
from functools import wraps
from typing import Optional

from flask import jsonify, session

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    DuplicateActionError,
    IdentityProviderUnavailableError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from ..users.service import SessionActor

logger = logging.getLogger(__name__)

SESSION_KEY = "actor"

_STORAGE_MESSAGE = "A server error occurred. Please try again or contact an administrator."

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (DuplicateActionError, 409),
    (IdentityProviderUnavailableError, 503),
    (StorageError, 500),
)


def current_actor() -> Optional[SessionActor]:
    return SessionActor.from_session(session.get(SESSION_KEY))


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_actor() is None:
            return jsonify({"success": False, "message": "Authentication required"}), 401
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        actor = current_actor()
        if actor is None:
            return jsonify({"success": False, "message": "Authentication required"}), 401
        if not actor.is_admin:
            return jsonify({"success": False, "message": "Administrator role required"}), 403
        return view(*args, **kwargs)

    return wrapper


def error_response(exc: Exception):
    """Translate an exception raised by a service into a JSON response."""
    if isinstance(exc, DomainError):
        for error_type, status in _STATUS_BY_ERROR:
            if isinstance(exc, error_type):
                break
        else:
            status = 400

        if isinstance(exc, StorageError):
            logger.error("storage failure: %s", exc)
            return jsonify({"success": False, "message": _STORAGE_MESSAGE}), status

        body = {"success": False, "message": str(exc)}
        if isinstance(exc, ValidationError) and exc.fields:
            body["errors"] = exc.fields
        if isinstance(exc, DuplicateActionError):
            body["last_action"] = getattr(exc.last_action, "value", exc.last_action)
            body["last_timestamp"] = exc.last_timestamp.isoformat()
        return jsonify(body), status

    logger.exception("unexpected error")
    return jsonify({"success": False, "message": _STORAGE_MESSAGE}), 500
