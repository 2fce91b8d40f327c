"""
Environment-aware configuration.

Settings is built once at startup and handed to create_app(); nothing reads
the environment after that. Flask's own flags come from the config classes
selected by get_config().
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()  # Read .env if present

PRODUCTION = "production"


class ConfigError(RuntimeError):
    pass


def env_or_raise(key: str) -> str:
    value = os.getenv(key)
    if not value:
        raise ConfigError(f"{key} must be defined in .env")
    return value


def _env_flag(key: str, default: str = "false") -> bool:
    return os.getenv(key, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    base_url: str
    port: int
    platform: str
    database_url: str
    jwt_secret: str
    client_url: str
    jwt_default_duration: int = 60 * 60
    jwt_algorithm: str = "HS256"
    jwt_issuer: str = "account-auth"
    access_cookie_max_age: timedelta = timedelta(minutes=15)
    refresh_token_lifetime: timedelta = timedelta(days=7)
    revoke_sessions_on_credential_change: bool = False
    sql_echo: bool = False

    @property
    def secure_cookies(self) -> bool:
        return self.platform == PRODUCTION

    @classmethod
    def from_env(cls) -> "Settings":
        """Read settings from the environment, failing fast on any missing required key."""
        return cls(
            base_url=env_or_raise("BASE_URL"),
            port=int(env_or_raise("PORT")),
            platform=env_or_raise("PLATFORM"),
            database_url=env_or_raise("DATABASE_URL"),
            jwt_secret=env_or_raise("JWT_SECRET"),
            client_url=env_or_raise("CLIENT_URL"),
            jwt_default_duration=int(os.getenv("JWT_DEFAULT_DURATION_SECONDS", "3600")),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            jwt_issuer=os.getenv("JWT_ISSUER", "account-auth"),
            access_cookie_max_age=timedelta(seconds=int(os.getenv("ACCESS_COOKIE_MAX_AGE_SECONDS", "900"))),
            refresh_token_lifetime=timedelta(days=int(os.getenv("REFRESH_TOKEN_LIFETIME_DAYS", "7"))),
            revoke_sessions_on_credential_change=_env_flag("REVOKE_SESSIONS_ON_CREDENTIAL_CHANGE"),
            sql_echo=_env_flag("SQL_ECHO"),
        )


class BaseConfig:
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    # In dev, propagate exceptions so our error handler has full context
    PROPAGATE_EXCEPTIONS = True


class TestingConfig(BaseConfig):
    TESTING = True


class ProductionConfig(BaseConfig):
    DEBUG = False


def get_config(platform: str | None):
    """
    Select the Flask config class for a platform name.
    """
    env = (platform or "dev").lower()
    if env in ["prod", PRODUCTION]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig
