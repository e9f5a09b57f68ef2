"""Request helpers shared by the controllers.

The principal is the ``uid`` the identity provider integration stores in the
session; it is looked up on every request.
"""

from __future__ import annotations

from functools import wraps
from typing import Callable, Optional

from flask import current_app, g, jsonify, redirect, request, session

from ..core.exceptions import AuthorizationError, DomainError, NotFoundError, ValidationError
from ..users.model import User

_STATUS_CODES = (
    (ValidationError, 400),
    (AuthorizationError, 403),
    (NotFoundError, 404),
)


def current_user(container) -> Optional[User]:
    if "current_user" not in g:
        g.current_user = container.user_service.get(session.get("uid"))
    return g.current_user


def login_required(container) -> Callable:
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if not current_user(container):
                return redirect("/")
            return view(*args, **kwargs)

        return wrapper

    return decorator


def recap_access_required(container) -> Callable:
    """Admin, HRD, manager and GM only; everyone else is sent to the dashboard."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            user = current_user(container)
            if not user:
                return redirect("/")
            if not container.user_service.has_admin_access(user):
                return redirect("/dashboard")
            return view(*args, **kwargs)

        return wrapper

    return decorator


def request_data() -> dict:
    """JSON body if there is one, else the submitted form."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return {k: v if len(v) > 1 else v[0] for k, v in request.form.lists()}


def error_response(e: DomainError):
    for exc_type, code in _STATUS_CODES:
        if isinstance(e, exc_type):
            return jsonify({"success": False, "message": str(e)}), code
    return jsonify({"success": False, "message": str(e)}), 400


def server_error(message: str):
    current_app.logger.exception(message)
    return jsonify({"success": False, "message": message}), 500
