"""Pydantic schemas for identities and auth-service requests."""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6


def _validate_email(value: str) -> str:
    cleaned = value.strip()
    if not _EMAIL_PATTERN.match(cleaned):
        raise ValueError("Please include a valid email")
    return cleaned


class UserIdentity(BaseModel):
    """Identity returned by the auth service on login or registration.

    The service names the primary key ``_id``; the model exposes it as ``id``
    and serialises it back under the original alias so the persisted session
    matches the server payload.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(..., alias="_id", min_length=1)
    name: str | None = None
    email: str | None = None
    token: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int):
            return str(value)
        return value

    def to_storage(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class PublicUser(BaseModel):
    """Identity without its bearer token, safe to echo back to clients."""

    id: str
    name: str | None = None
    email: str | None = None

    @classmethod
    def from_identity(cls, identity: UserIdentity) -> PublicUser:
        return cls(id=identity.id, name=identity.name, email=identity.email)


class RegisterRequest(BaseModel):
    name: str = Field(..., description="Display name")
    email: str
    password: str = Field(
        ...,
        min_length=MIN_PASSWORD_LENGTH,
        description="Please enter a password with 6 or more characters",
    )

    @field_validator("name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Name is required")
        return cleaned

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        return _validate_email(value)


class LoginRequest(BaseModel):
    email: str
    password: str = Field(..., min_length=1, description="Password is required")

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        return _validate_email(value)


class ProfileUpdate(BaseModel):
    """Partial profile update forwarded to the auth service."""

    name: str | None = None
    email: str | None = None
    password: str | None = Field(None, min_length=MIN_PASSWORD_LENGTH)

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _validate_email(value)


class SessionStatus(BaseModel):
    authenticated: bool
    loading: bool = False
    user: PublicUser | None = None


__all__ = [
    "LoginRequest",
    "MIN_PASSWORD_LENGTH",
    "ProfileUpdate",
    "PublicUser",
    "RegisterRequest",
    "SessionStatus",
    "UserIdentity",
]
