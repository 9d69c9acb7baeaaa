from __future__ import annotations
from functools import wraps
from flask import request, g, abort
from utils.security import get_token_authority


def _bearer_token() -> str | None:
    token = request.cookies.get("accessToken")
    if token:
        return token
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return auth.split(" ", 1)[1].strip() or None
    return None


def jwt_required():
    """
    Require a valid access token (cookie 'accessToken' or 'Authorization: Bearer').
    Sets g.current_user_id from the token subject; loading the user is up to the view.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            token = _bearer_token()
            if not token:
                abort(401, description="Unauthorized request.")
            # TokenExpired / TokenMalformed propagate to the error handlers
            decoded = get_token_authority().verify_access(token)
            g.current_user_id = decoded["sub"]
            g.current_token_jti = decoded.get("jti")
            return fn(*args, **kwargs)

        return wrapper

    return decorator
