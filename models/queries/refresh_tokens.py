"""
Refresh token persistence.

Only the SHA-256 digest of a token is stored. A token is active while it
exists, has not expired and has no revoked_at; expiry is checked at query
time, so there is no background job flipping state.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from models.base_model import utcnow
from models.db_storage import DBStorage
from models.refresh_token import RefreshToken
from models.user import User
from utils.security import generate_refresh_token, hash_refresh_token

DEFAULT_LIFETIME = timedelta(days=7)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssuedRefreshToken:
    """A freshly minted token. `token` is the only copy of the plaintext."""
    token: str
    user_id: str
    expires_at: datetime


class RefreshTokenStore:
    def __init__(self, storage: DBStorage, lifetime: timedelta = DEFAULT_LIFETIME):
        self.storage = storage
        self.lifetime = lifetime

    def save(self, user_id: str) -> IssuedRefreshToken:
        token = generate_refresh_token()
        expires_at = utcnow() + self.lifetime
        record = RefreshToken(
            token_hash=hash_refresh_token(token),
            user_id=user_id,
            expires_at=expires_at,
        )
        self.storage.new(record)
        self.storage.save()
        return IssuedRefreshToken(token=token, user_id=user_id, expires_at=expires_at)

    def find_active_by_token(self, token: str) -> User | None:
        if not token:
            return None
        session = self.storage.get_session()
        return (
            session.query(User)
            .join(RefreshToken, RefreshToken.user_id == User.id)
            .filter(
                RefreshToken.token_hash == hash_refresh_token(token),
                RefreshToken.revoked_at.is_(None),
                RefreshToken.expires_at > utcnow(),
            )
            .first()
        )

    def revoke(self, token: str) -> None:
        """Mark a token revoked. Unknown or already revoked tokens are ignored."""
        if not token:
            return
        now = utcnow()
        session = self.storage.get_session()
        count = (
            session.query(RefreshToken)
            .filter(
                RefreshToken.token_hash == hash_refresh_token(token),
                RefreshToken.revoked_at.is_(None),
            )
            .update({"revoked_at": now, "updated_at": now}, synchronize_session=False)
        )
        self.storage.save()
        if count:
            logger.info("Revoked refresh token")

    def revoke_all_for_user(self, user_id: str) -> int:
        now = utcnow()
        session = self.storage.get_session()
        count = (
            session.query(RefreshToken)
            .filter(RefreshToken.user_id == user_id, RefreshToken.revoked_at.is_(None))
            .update({"revoked_at": now, "updated_at": now}, synchronize_session=False)
        )
        self.storage.save()
        logger.info("Revoked %d refresh token(s) for user %s", count, user_id)
        return count
