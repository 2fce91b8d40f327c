from models.queries.users import UserStore
from models.queries.refresh_tokens import IssuedRefreshToken, RefreshTokenStore

__all__ = ["UserStore", "IssuedRefreshToken", "RefreshTokenStore"]
