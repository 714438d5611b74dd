"""
Request gate: pulls the access token from the request, resolves it through
the Session Manager and leaves the identity on ``g.identity``.
"""
from __future__ import annotations

from functools import wraps

from flask import request, g, current_app

from api.deps import get_session_manager
from models.user import Role
from services.errors import Expired, Unauthenticated
from services.identity import Identity


def bearer_token() -> str | None:
    """Access token from ``Authorization: Bearer`` or, failing that, the access cookie."""
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        token = auth.split(" ", 1)[1].strip()
        if token:
            return token
    return request.cookies.get(current_app.config["ACCESS_COOKIE_NAME"]) or None


def optional_identity() -> Identity | None:
    """Identity behind the access token, or None when it is missing, expired or invalid."""
    token = bearer_token()
    if token is None:
        return None
    try:
        return get_session_manager().verify(token)
    except (Expired, Unauthenticated):
        return None


def jwt_required():
    """
    Reject the request unless it carries a valid access token.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            g.identity = get_session_manager().verify(bearer_token())
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def roles_required(required_roles: list[str]):
    """
    Allow access if the caller holds ANY of the required roles, else 403.
    """
    req = tuple(Role(r) for r in required_roles)

    def decorator(fn):
        @wraps(fn)
        @jwt_required()
        def wrapper(*args, **kwargs):
            get_session_manager().require_role(g.identity, *req)
            return fn(*args, **kwargs)

        return wrapper

    return decorator
