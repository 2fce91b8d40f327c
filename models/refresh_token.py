"""
RefreshToken model: stores refresh token digests so we can look them up and revoke them
Fields:
- token_hash (unique) - SHA-256 of the opaque token handed to the client
- user_id (String(36)) - FK to users.id
- expires_at
- revoked_at (NULL while the token is active)
"""
from sqlalchemy import Column, String, ForeignKey
from sqlalchemy.orm import relationship
from models.base_model import BaseModel, Base, UTCDateTime


class RefreshToken(BaseModel, Base):
    __tablename__ = "refresh_tokens"

    token_hash = Column(String(64), nullable=False, unique=True, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(UTCDateTime, nullable=False)
    revoked_at = Column(UTCDateTime, nullable=True)

    user = relationship("User", back_populates="refresh_tokens")

    @property
    def revoked(self) -> bool:
        return self.revoked_at is not None

    def __repr__(self):
        return f"<RefreshToken user_id={self.user_id} revoked={self.revoked}>"
