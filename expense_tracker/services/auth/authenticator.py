"""
Credential Store & Authenticator

Registers users, checks credentials and resolves bearer tokens back to
users. The only component that touches password hashes.

DESIGN DECISION: Login failures are deliberately uniform. An unknown
email and a wrong password raise the same AuthenticationError with the
same message and are audited as the same event.
"""

from typing import Optional
from uuid import UUID

from expense_tracker.audit import AuditLogger
from expense_tracker.models.user import AuthResult, LoginRequest, RegisterRequest, User
from expense_tracker.services.auth.security import (
    AuthenticationError,
    TokenService,
    check_password,
    hash_password,
)
from expense_tracker.services.storage import (
    DuplicateError,
    NotFoundError,
    UserStorageInterface,
)


INVALID_CREDENTIALS = "Invalid email or password"
USER_EXISTS = "User already exists with this email or username"


class Authenticator:
    """Register, login, and token-to-user resolution."""

    def __init__(
        self,
        users: UserStorageInterface,
        tokens: TokenService,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._users = users
        self._tokens = tokens
        self._audit_logger = audit_logger or AuditLogger()

    def register(
        self,
        request: RegisterRequest,
        correlation_id: Optional[UUID] = None,
    ) -> AuthResult:
        """
        Create a user and sign them in.

        Raises:
            DuplicateError: If the username or email is already taken
        """
        if self._users.user_exists(request.username, request.email):
            self._audit_logger.log_registration_conflict(
                request.username, request.email, correlation_id
            )
            raise DuplicateError(USER_EXISTS)

        try:
            user = self._users.create_user(
                username=request.username,
                email=request.email,
                password_hash=hash_password(request.password),
            )
        except DuplicateError as e:
            # Lost a race with a concurrent registration
            self._audit_logger.log_registration_conflict(
                request.username, request.email, correlation_id
            )
            raise DuplicateError(USER_EXISTS) from e

        self._audit_logger.log_user_registered(user.id, user.username, correlation_id)
        return AuthResult(user=user.to_public(), token=self._tokens.issue(user.id))

    def login(
        self,
        request: LoginRequest,
        correlation_id: Optional[UUID] = None,
    ) -> AuthResult:
        """
        Exchange email and password for a token.

        Raises:
            AuthenticationError: Unknown email or wrong password
        """
        user = self._users.get_user_by_email(request.email)
        if user is None or not check_password(user.password_hash, request.password):
            self._audit_logger.log_login_failed(request.email, correlation_id)
            raise AuthenticationError(INVALID_CREDENTIALS)

        self._audit_logger.log_login_succeeded(user.id, correlation_id)
        return AuthResult(user=user.to_public(), token=self._tokens.issue(user.id))

    def verify(self, token: str) -> UUID:
        """Signature and expiry check only; see resolve_user for the full lookup."""
        return self._tokens.verify(token)

    def resolve_user(
        self,
        token: Optional[str],
        correlation_id: Optional[UUID] = None,
    ) -> User:
        """
        Turn a bearer token into the acting user.

        Raises:
            AuthenticationError: If the token is missing or invalid, or its
                user no longer exists
        """
        if not token:
            self._audit_logger.log_token_rejected("missing", correlation_id)
            raise AuthenticationError("No token provided")

        try:
            user_id = self._tokens.verify(token)
        except AuthenticationError as e:
            self._audit_logger.log_token_rejected(str(e), correlation_id)
            raise

        user = self._users.get_user_by_id(user_id)
        if user is None:
            self._audit_logger.log_token_rejected("unknown user", correlation_id)
            raise AuthenticationError("Token is not valid")
        return user

    def get_profile(self, user_id: UUID) -> User:
        """
        Re-read a user record.

        Raises:
            NotFoundError: If the user does not exist
        """
        user = self._users.get_user_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user
