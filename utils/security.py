"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT access token creation/verification via PyJWT
- Opaque refresh token generation (stored as SHA-256 digests)
"""
from __future__ import annotations

import hashlib
import secrets
from datetime import datetime, timezone

import jwt
from argon2 import PasswordHasher
from argon2 import exceptions as argon2_exceptions

DEFAULT_ACCESS_TOKEN_TTL = 60 * 60
DEFAULT_ISSUER = "account-auth"
DEFAULT_ALGORITHM = "HS256"
REFRESH_TOKEN_BYTES = 32

ph = PasswordHasher()


class HashingError(Exception):
    """Password hashing or verification failed for a reason other than a mismatch."""


class TokenError(Exception):
    """Base class for access token failures."""


class InvalidTokenError(TokenError):
    pass


class ExpiredTokenError(TokenError):
    pass


class MalformedTokenError(TokenError):
    pass


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    try:
        return ph.hash(password)
    except argon2_exceptions.HashingError as exc:
        raise HashingError("Could not hash password") from exc


def verify_password(password: str, password_hash: str) -> bool:
    """ Verify a plaintext password using argon2

    A mismatch is not an error; a malformed stored hash is.
    """
    try:
        return ph.verify(password_hash, password)
    except argon2_exceptions.VerifyMismatchError:
        return False
    except (argon2_exceptions.InvalidHashError, argon2_exceptions.VerificationError) as exc:
        raise HashingError("Stored password hash is malformed") from exc


def _now() -> datetime:
    return datetime.now(timezone.utc)


def issue_access_token(
    subject: str,
    secret: str,
    ttl_seconds: int = DEFAULT_ACCESS_TOKEN_TTL,
    *,
    issuer: str = DEFAULT_ISSUER,
    algorithm: str = DEFAULT_ALGORITHM,
    now: datetime | None = None,
) -> str:
    """
    Create a signed access token for `subject` that expires `ttl_seconds`
    after issuance. `now` only exists so callers can backdate a token.
    """
    issued_at = int((now or _now()).timestamp())
    payload = {
        "iss": issuer,
        "sub": str(subject),
        "iat": issued_at,
        "exp": issued_at + int(ttl_seconds),
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def validate_access_token(
    token: str,
    secret: str,
    *,
    issuer: str = DEFAULT_ISSUER,
    algorithm: str = DEFAULT_ALGORITHM,
) -> str:
    """
    Decode and validate an access token and return its subject.
    Raises ExpiredTokenError, InvalidTokenError or MalformedTokenError.
    """
    if not token or not isinstance(token, str):
        raise MalformedTokenError("Token is missing")
    try:
        decoded = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            issuer=issuer,
            options={"require": ["exp", "iat", "sub"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise ExpiredTokenError("Token expired") from exc
    except jwt.InvalidSignatureError as exc:
        raise InvalidTokenError("Invalid token signature") from exc
    # DecodeError covers bad segments, base64 and JSON; must come after InvalidSignatureError
    except jwt.DecodeError as exc:
        raise MalformedTokenError("Malformed token") from exc
    except jwt.InvalidTokenError as exc:
        raise InvalidTokenError(f"Invalid token: {exc}") from exc

    subject = decoded.get("sub")
    if not subject:
        raise InvalidTokenError("Token has no subject")
    return subject


def generate_refresh_token() -> str:
    """Generate an unguessable opaque refresh token."""
    return secrets.token_hex(REFRESH_TOKEN_BYTES)


def hash_refresh_token(token: str) -> str:
    # Lookup key only; the plaintext token never reaches the database.
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
