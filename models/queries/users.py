"""User record queries. Returns None where the database reports a unique-email conflict."""
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from models.base_model import utcnow
from models.db_storage import DBStorage
from models.user import User

logger = logging.getLogger(__name__)


class UserStore:
    def __init__(self, storage: DBStorage):
        self.storage = storage

    def create(self, email: str, hashed_password: str) -> User | None:
        user = User(email=email, hashed_password=hashed_password)
        self.storage.new(user)
        try:
            self.storage.save()
        except IntegrityError:
            logger.warning("User insert rejected by a unique constraint")
            return None
        return user

    def get_by_email(self, email: str) -> User | None:
        session = self.storage.get_session()
        return session.query(User).filter(User.email == email).first()

    def get_by_id(self, user_id: str) -> User | None:
        return self.storage.get(User, user_id)

    def update_credentials(self, user_id: str, email: str, hashed_password: str) -> User | None:
        user = self.get_by_id(user_id)
        if user is None:
            return None
        user.email = email
        user.hashed_password = hashed_password
        user.updated_at = utcnow()
        self.storage.new(user)
        try:
            self.storage.save()
        except IntegrityError:
            logger.warning("Credential update for user %s rejected by a unique constraint", user_id)
            return None
        return user
