from __future__ import annotations
from functools import wraps
from flask import request, g

from api.errors import BadRequestError


def get_bearer_token(authorization: str | None) -> str | None:
    """Return the token from an `Authorization: Bearer <token>` header, if any."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None


def bearer_token_required():
    """
    Require an `Authorization: Bearer` header and expose the raw token as
    g.bearer_token. Validation is left to the session coordinator.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            token = get_bearer_token(request.headers.get("Authorization"))
            if not token:
                raise BadRequestError("Bearer token missing")
            g.bearer_token = token
            return fn(*args, **kwargs)

        return wrapper

    return decorator
