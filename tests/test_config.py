from datetime import timedelta

import pytest

from api import config
from api.config import (
    ConfigError,
    DevelopmentConfig,
    ProductionConfig,
    Settings,
    get_config,
)

REQUIRED = {
    "BASE_URL": "http://localhost:",
    "PORT": "8080",
    "PLATFORM": "dev",
    "DATABASE_URL": "sqlite://",
    "JWT_SECRET": "env-secret-that-is-long-enough-for-hs256",
    "CLIENT_URL": "http://localhost:5173",
}


@pytest.fixture
def env(monkeypatch):
    for key, value in REQUIRED.items():
        monkeypatch.setenv(key, value)
    for key in ("JWT_DEFAULT_DURATION_SECONDS", "ACCESS_COOKIE_MAX_AGE_SECONDS",
                "REFRESH_TOKEN_LIFETIME_DAYS", "REVOKE_SESSIONS_ON_CREDENTIAL_CHANGE"):
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_from_env_defaults(env):
    settings = Settings.from_env()

    assert settings.port == 8080
    assert settings.jwt_default_duration == 3600
    assert settings.access_cookie_max_age == timedelta(minutes=15)
    assert settings.refresh_token_lifetime == timedelta(days=7)
    assert settings.revoke_sessions_on_credential_change is False
    assert settings.secure_cookies is False


@pytest.mark.parametrize("key", sorted(REQUIRED))
def test_missing_required_variable_fails_fast(env, key):
    env.delenv(key)
    with pytest.raises(ConfigError, match=key):
        Settings.from_env()


def test_optional_overrides(env):
    env.setenv("PLATFORM", "production")
    env.setenv("JWT_DEFAULT_DURATION_SECONDS", "600")
    env.setenv("REVOKE_SESSIONS_ON_CREDENTIAL_CHANGE", "true")
    settings = Settings.from_env()

    assert settings.jwt_default_duration == 600
    assert settings.revoke_sessions_on_credential_change is True
    assert settings.secure_cookies is True


def test_settings_are_immutable(settings):
    with pytest.raises(AttributeError):
        settings.jwt_secret = "changed"


@pytest.mark.parametrize(
    "platform,expected",
    [("production", ProductionConfig), ("prod", ProductionConfig), ("test", config.TestingConfig),
     ("dev", DevelopmentConfig), (None, DevelopmentConfig)],
)
def test_get_config(platform, expected):
    assert get_config(platform) is expected
