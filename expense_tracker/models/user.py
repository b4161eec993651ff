"""
User and authentication models.

The password hash only ever lives on User, which is internal. Everything
that leaves the process goes through UserPublic.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from expense_tracker.models.expense import ApiModel


USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
PASSWORD_MIN_LENGTH = 6


def normalize_email(value: str) -> str:
    """Emails are compared trimmed and lower-cased everywhere."""
    return value.strip().lower()


class RegisterRequest(BaseModel):
    """
    A validated registration request.

    Username and email are trimmed, email is lower-cased. The password is
    kept exactly as typed.
    """

    username: str = Field(
        ...,
        min_length=USERNAME_MIN_LENGTH,
        max_length=USERNAME_MAX_LENGTH,
    )
    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH)

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("email", mode="before")
    @classmethod
    def lower_email(cls, v: Any) -> Any:
        return normalize_email(v) if isinstance(v, str) else v


class LoginRequest(BaseModel):
    """Credentials presented at login. Format is not checked here."""

    email: str
    password: str

    @field_validator("email", mode="after")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return normalize_email(v)


class User(BaseModel):
    """A user as stored, including the password hash."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    email: str
    password_hash: str = Field(repr=False)
    created_at: datetime

    def to_public(self) -> "UserPublic":
        return UserPublic(
            id=self.id,
            username=self.username,
            email=self.email,
            created_at=self.created_at,
        )


class UserPublic(ApiModel):
    """The user fields that may be returned to a client."""

    id: UUID
    username: str
    email: str
    created_at: datetime


class AuthResult(BaseModel):
    """What register and login hand back: the user plus a fresh token."""

    user: UserPublic
    token: str = Field(repr=False)

    def to_api_dict(self) -> dict[str, Any]:
        data = self.user.to_api_dict()
        data["token"] = self.token
        return data
