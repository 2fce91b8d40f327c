"""
Session coordinator: login, refresh and logout over two cooperating tokens.

- access tokens are stateless JWTs; validating one never touches the database
- refresh tokens are opaque, store-backed and live for a week

Each refresh token goes active -> revoked (logout) or active -> expired (time).
Neither end state leads back to active. Cookies are the HTTP layer's concern;
this class only decides which tokens exist.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache

from api.config import Settings
from api.errors import BadRequestError, InternalServerError, UnauthorizedError
from models.queries import RefreshTokenStore, UserStore
from models.user import User
from utils.security import (
    hash_password,
    issue_access_token,
    validate_access_token,
    verify_password,
)

INVALID_CREDENTIALS = "Incorrect email or password"

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password("account-auth-timing-equalizer")


@dataclass(frozen=True)
class LoginResult:
    user: User
    access_token: str
    refresh_token: str


class SessionCoordinator:
    def __init__(self, settings: Settings, users: UserStore, refresh_tokens: RefreshTokenStore):
        self.settings = settings
        self.users = users
        self.refresh_tokens = refresh_tokens

    def _issue_access_token(self, user_id: str) -> str:
        return issue_access_token(
            user_id,
            self.settings.jwt_secret,
            self.settings.jwt_default_duration,
            issuer=self.settings.jwt_issuer,
            algorithm=self.settings.jwt_algorithm,
        )

    def authenticate(self, token: str) -> str:
        """Return the user id carried by a valid access token; raises TokenError otherwise."""
        return validate_access_token(
            token,
            self.settings.jwt_secret,
            issuer=self.settings.jwt_issuer,
            algorithm=self.settings.jwt_algorithm,
        )

    def register(self, email: str, password: str) -> User:
        if not email or not password:
            raise BadRequestError("Missing required fields")

        user = self.users.create(email=email, hashed_password=hash_password(password))
        if user is None:
            raise InternalServerError("Could not create user, does this user already exist?")
        logger.info("Registered user %s", user.id)
        return user

    def login(self, email: str, password: str) -> LoginResult:
        if not email or not password:
            raise BadRequestError("Missing required fields")

        user = self.users.get_by_email(email)
        if user is None:
            # Same Argon2 cost as a real mismatch
            verify_password(password, _dummy_hash())
            logger.info("Login rejected")
            raise UnauthorizedError(INVALID_CREDENTIALS)
        if not verify_password(password, user.hashed_password):
            logger.info("Login rejected")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        access_token = self._issue_access_token(user.id)
        issued = self.refresh_tokens.save(user.id)
        logger.info("User %s logged in", user.id)
        return LoginResult(user=user, access_token=access_token, refresh_token=issued.token)

    def refresh(self, refresh_token: str | None) -> str:
        """Mint a new access token from an active refresh token. The refresh token is not rotated."""
        if not refresh_token:
            raise BadRequestError("No refresh token")

        user = self.refresh_tokens.find_active_by_token(refresh_token)
        if user is None:
            raise UnauthorizedError("Invalid, expired or revoked refresh token")
        logger.info("Refreshed access token for user %s", user.id)
        return self._issue_access_token(user.id)

    def logout(self, refresh_token: str | None) -> None:
        if not refresh_token:
            raise BadRequestError("No refresh token to revoke")
        self.refresh_tokens.revoke(refresh_token)

    def update_credentials(self, access_token: str | None, email: str, password: str) -> User:
        if not access_token:
            raise BadRequestError("Bearer token missing")
        user_id = self.authenticate(access_token)

        if not email or not password:
            raise BadRequestError("Missing required fields")

        user = self.users.update_credentials(user_id, email, hash_password(password))
        if user is None:
            raise InternalServerError("Failed to update user")

        if self.settings.revoke_sessions_on_credential_change:
            self.refresh_tokens.revoke_all_for_user(user.id)
        else:
            logger.warning("Credentials changed for user %s; existing refresh tokens stay valid", user.id)
        return user

    def current_user(self, access_token: str | None, refresh_token: str | None) -> User | None:
        """None for anonymous callers; raises for a bad or missing access token otherwise."""
        if not access_token and not refresh_token:
            return None
        if not access_token:
            raise UnauthorizedError("Invalid JWT")

        user_id = self.authenticate(access_token)
        user = self.users.get_by_id(user_id)
        if user is None:
            raise InternalServerError("User does not exist")
        return user
