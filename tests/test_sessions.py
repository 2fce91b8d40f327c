"""SessionCoordinator without the HTTP layer."""
from dataclasses import replace

import pytest

from api.errors import BadRequestError, InternalServerError, UnauthorizedError
from api.sessions import INVALID_CREDENTIALS, SessionCoordinator
from utils.security import InvalidTokenError, issue_access_token, validate_access_token, verify_password


def test_register_then_login_returns_same_user(coordinator):
    registered = coordinator.register("alice@example.com", "pw123456")
    result = coordinator.login("alice@example.com", "pw123456")

    assert result.user.id == registered.id
    assert validate_access_token(result.access_token, coordinator.settings.jwt_secret) == registered.id
    assert result.refresh_token


def test_register_stores_only_a_hash(coordinator):
    user = coordinator.register("alice@example.com", "pw123456")

    assert user.hashed_password != "pw123456"
    assert verify_password("pw123456", user.hashed_password)
    with pytest.raises(AttributeError):
        user.password


@pytest.mark.parametrize("email,password", [("", "pw123456"), ("alice@example.com", ""), (None, None)])
def test_register_requires_both_fields(coordinator, email, password):
    with pytest.raises(BadRequestError):
        coordinator.register(email, password)


def test_register_duplicate_email_fails_generically(coordinator):
    coordinator.register("alice@example.com", "pw123456")
    with pytest.raises(InternalServerError):
        coordinator.register("alice@example.com", "another-password")


def test_login_failures_are_indistinguishable(coordinator):
    coordinator.register("alice@example.com", "pw123456")

    with pytest.raises(UnauthorizedError) as wrong_password:
        coordinator.login("alice@example.com", "wrong-password")
    with pytest.raises(UnauthorizedError) as unknown_email:
        coordinator.login("nobody@example.com", "pw123456")

    assert wrong_password.value.message == unknown_email.value.message == INVALID_CREDENTIALS


def test_refresh_issues_access_token_with_default_ttl(coordinator):
    user = coordinator.register("alice@example.com", "pw123456")
    result = coordinator.login("alice@example.com", "pw123456")

    access_token = coordinator.refresh(result.refresh_token)
    assert coordinator.authenticate(access_token) == user.id


def test_refresh_does_not_rotate(coordinator):
    coordinator.register("alice@example.com", "pw123456")
    result = coordinator.login("alice@example.com", "pw123456")

    coordinator.refresh(result.refresh_token)
    coordinator.refresh(result.refresh_token)


def test_refresh_requires_a_token(coordinator):
    with pytest.raises(BadRequestError):
        coordinator.refresh(None)


def test_refresh_with_unknown_or_revoked_token(coordinator):
    coordinator.register("alice@example.com", "pw123456")
    result = coordinator.login("alice@example.com", "pw123456")
    coordinator.logout(result.refresh_token)

    with pytest.raises(UnauthorizedError):
        coordinator.refresh(result.refresh_token)
    with pytest.raises(UnauthorizedError):
        coordinator.refresh("never-issued")


def test_logout_is_idempotent(coordinator):
    coordinator.register("alice@example.com", "pw123456")
    result = coordinator.login("alice@example.com", "pw123456")

    coordinator.logout(result.refresh_token)
    coordinator.logout(result.refresh_token)
    coordinator.logout("never-issued")


def test_logout_requires_a_token(coordinator):
    with pytest.raises(BadRequestError):
        coordinator.logout("")


def test_update_credentials_changes_password_only(coordinator):
    original = coordinator.register("alice@example.com", "pw123456")
    created_at = original.created_at
    result = coordinator.login("alice@example.com", "pw123456")

    updated = coordinator.update_credentials(result.access_token, "alice@example.org", "new-password")

    assert updated.id == original.id
    assert updated.created_at == created_at
    assert coordinator.login("alice@example.org", "new-password").user.id == original.id
    with pytest.raises(UnauthorizedError):
        coordinator.login("alice@example.org", "pw123456")


def test_update_credentials_keeps_refresh_tokens_by_default(coordinator):
    coordinator.register("alice@example.com", "pw123456")
    result = coordinator.login("alice@example.com", "pw123456")

    coordinator.update_credentials(result.access_token, "alice@example.com", "new-password")
    assert coordinator.refresh(result.refresh_token)


def test_update_credentials_can_revoke_sessions(settings, users, refresh_tokens):
    coordinator = SessionCoordinator(
        replace(settings, revoke_sessions_on_credential_change=True), users, refresh_tokens
    )
    coordinator.register("alice@example.com", "pw123456")
    result = coordinator.login("alice@example.com", "pw123456")

    coordinator.update_credentials(result.access_token, "alice@example.com", "new-password")
    with pytest.raises(UnauthorizedError):
        coordinator.refresh(result.refresh_token)


def test_update_credentials_token_checks(coordinator):
    with pytest.raises(BadRequestError):
        coordinator.update_credentials(None, "alice@example.com", "pw123456")
    with pytest.raises(InvalidTokenError):
        coordinator.update_credentials(
            issue_access_token("someone", "a-different-secret-of-sufficient-length"),
            "alice@example.com",
            "pw123456",
        )


def test_current_user(coordinator):
    user = coordinator.register("alice@example.com", "pw123456")
    result = coordinator.login("alice@example.com", "pw123456")

    assert coordinator.current_user(None, None) is None
    assert coordinator.current_user(result.access_token, None).id == user.id
    with pytest.raises(UnauthorizedError):
        coordinator.current_user(None, result.refresh_token)


def test_current_user_without_backing_record(coordinator):
    orphan = issue_access_token("no-such-user", coordinator.settings.jwt_secret)
    with pytest.raises(InternalServerError):
        coordinator.current_user(orphan, None)
