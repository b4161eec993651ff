"""
Password hashing and session tokens.

Passwords are stored as salted one-way hashes (werkzeug). Session tokens
are signed JWTs (python-jose) carrying the user id, the issue time and a
fixed expiry. Nothing about a token is stored server-side: a token is
valid if its signature checks out and it has not expired.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from uuid import UUID

from jose import ExpiredSignatureError, JWTError, jwt
from werkzeug.security import check_password_hash, generate_password_hash

from expense_tracker.config import AuthSettings


class AuthenticationError(Exception):
    """Bad credentials, or a missing, invalid or expired token."""
    pass


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def check_password(password_hash: str, password: str) -> bool:
    """Compare a password against a stored hash in constant time."""
    return check_password_hash(password_hash, password)


class TokenService:
    """
    Issues and verifies signed session tokens.

    `now` is injectable so tests can issue tokens in the past.
    """

    def __init__(
        self,
        settings: AuthSettings,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self._secret = settings.secret_key
        self._algorithm = settings.algorithm
        self._lifetime = timedelta(days=settings.expires_days)
        self._now = now or (lambda: datetime.now(timezone.utc))

    def issue(self, user_id: UUID) -> str:
        issued_at = self._now()
        claims = {
            "sub": str(user_id),
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self._lifetime).timestamp()),
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> UUID:
        """
        Return the user id a token was issued for.

        Raises:
            AuthenticationError: If the token is malformed, forged or expired
        """
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except ExpiredSignatureError as e:
            raise AuthenticationError("Token has expired") from e
        except JWTError as e:
            raise AuthenticationError("Token is not valid") from e

        try:
            return UUID(claims["sub"])
        except (KeyError, TypeError, ValueError) as e:
            raise AuthenticationError("Token is not valid") from e
