"""Authentication services: password hashing, tokens, register/login."""

from expense_tracker.services.auth.security import (
    AuthenticationError,
    TokenService,
    check_password,
    hash_password,
)
from expense_tracker.services.auth.authenticator import (
    INVALID_CREDENTIALS,
    USER_EXISTS,
    Authenticator,
)

__all__ = [
    "AuthenticationError",
    "Authenticator",
    "INVALID_CREDENTIALS",
    "TokenService",
    "USER_EXISTS",
    "check_password",
    "hash_password",
]
