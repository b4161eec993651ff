"""Tests for password hashing, session tokens and the authenticator."""

import pytest
from datetime import datetime, timedelta, timezone
from uuid import uuid4

from jose import jwt

from expense_tracker.config import AuthSettings
from expense_tracker.models.user import LoginRequest, RegisterRequest
from expense_tracker.services.auth import (
    INVALID_CREDENTIALS,
    AuthenticationError,
    TokenService,
    check_password,
    hash_password,
)
from expense_tracker.services.storage import DuplicateError, NotFoundError


def registration(username="alice", email="alice@example.com", password="secret123"):
    return RegisterRequest(username=username, email=email, password=password)


class TestPasswordHashing:
    """Tests for hash_password / check_password."""

    def test_hash_is_not_plaintext(self):
        """The hash never contains the password."""
        hashed = hash_password("secret123")
        assert "secret123" not in hashed
        assert check_password(hashed, "secret123")

    def test_wrong_password(self):
        """A different password does not match."""
        assert not check_password(hash_password("secret123"), "secret124")

    def test_hashes_are_salted(self):
        """The same password hashes differently each time."""
        assert hash_password("secret123") != hash_password("secret123")


class TestTokenService:
    """Tests for session token issue and verify."""

    def test_round_trip(self, token_service):
        """A fresh token verifies to the user it was issued for."""
        user_id = uuid4()
        assert token_service.verify(token_service.issue(user_id)) == user_id

    def test_expiry_is_thirty_days(self, token_service, settings):
        """Tokens expire after the configured number of days."""
        claims = jwt.get_unverified_claims(token_service.issue(uuid4()))
        assert claims["exp"] - claims["iat"] == 30 * 24 * 60 * 60

    def test_expired_token(self, settings):
        """A token past its expiry is rejected."""
        issued = datetime.now(timezone.utc) - timedelta(days=31)
        old_service = TokenService(settings.auth, now=lambda: issued)
        token = old_service.issue(uuid4())

        with pytest.raises(AuthenticationError, match="expired"):
            TokenService(settings.auth).verify(token)

    def test_token_signed_with_other_secret(self, token_service):
        """A token signed with another secret is rejected."""
        forger = TokenService(AuthSettings(secret_key="some-other-secret-key"))
        with pytest.raises(AuthenticationError):
            token_service.verify(forger.issue(uuid4()))

    def test_garbage_token(self, token_service):
        """Malformed tokens are rejected."""
        with pytest.raises(AuthenticationError):
            token_service.verify("not.a.token")

    def test_token_without_user_id(self, token_service, settings):
        """A validly signed token must still name a user."""
        token = jwt.encode(
            {"sub": "nobody", "exp": int((datetime.now(timezone.utc) + timedelta(days=1)).timestamp())},
            settings.auth.secret_key,
            algorithm=settings.auth.algorithm,
        )
        with pytest.raises(AuthenticationError):
            token_service.verify(token)


class TestAuthenticator:
    """Tests for register, login and token resolution."""

    def test_register_returns_public_user_and_token(self, authenticator, token_service):
        """Registration signs the user in."""
        result = authenticator.register(registration())
        assert result.user.username == "alice"
        assert token_service.verify(result.token) == result.user.id

    def test_register_stores_hash(self, authenticator, user_storage):
        """The stored password is a hash that checks against the typed password."""
        authenticator.register(registration())
        stored = user_storage.get_user_by_email("alice@example.com")
        assert stored.password_hash != "secret123"
        assert check_password(stored.password_hash, "secret123")

    def test_duplicate_email(self, authenticator):
        """A taken email is a conflict."""
        authenticator.register(registration())
        with pytest.raises(DuplicateError):
            authenticator.register(registration(username="alice2"))

    def test_duplicate_username(self, authenticator):
        """A taken username is a conflict."""
        authenticator.register(registration())
        with pytest.raises(DuplicateError):
            authenticator.register(registration(email="other@example.com"))

    def test_login(self, authenticator):
        """Correct credentials produce a token."""
        registered = authenticator.register(registration())
        result = authenticator.login(LoginRequest(email="ALICE@example.com", password="secret123"))
        assert result.user.id == registered.user.id

    def test_wrong_password_and_unknown_email_look_the_same(self, authenticator):
        """Login failures do not reveal whether the email exists."""
        authenticator.register(registration())

        with pytest.raises(AuthenticationError) as wrong_password:
            authenticator.login(LoginRequest(email="alice@example.com", password="wrong-one"))
        with pytest.raises(AuthenticationError) as unknown_email:
            authenticator.login(LoginRequest(email="nobody@example.com", password="secret123"))

        assert str(wrong_password.value) == str(unknown_email.value) == INVALID_CREDENTIALS

    def test_resolve_user(self, authenticator):
        """A valid token resolves to the full user."""
        result = authenticator.register(registration())
        user = authenticator.resolve_user(result.token)
        assert user.id == result.user.id
        assert user.email == "alice@example.com"

    def test_resolve_missing_token(self, authenticator):
        """No token is an authentication failure."""
        with pytest.raises(AuthenticationError):
            authenticator.resolve_user(None)

    def test_resolve_token_for_unknown_user(self, authenticator, token_service):
        """A valid token for a user that does not exist is rejected."""
        with pytest.raises(AuthenticationError):
            authenticator.resolve_user(token_service.issue(uuid4()))

    def test_get_profile_unknown_user(self, authenticator):
        """Profiles of unknown users are not found."""
        with pytest.raises(NotFoundError):
            authenticator.get_profile(uuid4())
