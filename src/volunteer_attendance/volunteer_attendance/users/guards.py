from __future__ import annotations

from functools import wraps

from flask import session

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            raise AuthenticationError("Authentication required")
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    """Allow only the given roles; anything else gets 403."""

    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                raise AuthenticationError("Authentication required")
            if session.get("role") not in allowed:
                raise AuthorizationError("You do not have permission to perform this action")
            return view(*args, **kwargs)

        return wrapper

    return decorator


def current_user_id() -> str:
    return session["user_id"]
