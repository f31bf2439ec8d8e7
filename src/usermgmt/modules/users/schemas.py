"""Pydantic schemas for user operations."""

import re
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from usermgmt.core.constants import (
    MAX_CULTURE_LENGTH,
    MAX_EMAIL_LENGTH,
    MAX_FULL_NAME_LENGTH,
    MAX_LANGUAGE_LENGTH,
    MAX_MOBILE_NUMBER_LENGTH,
    MAX_USERNAME_LENGTH,
    MIN_PASSWORD_LENGTH,
    PASSWORD_SPECIAL_CHARACTERS,
)


# ============================================================
# Password Validation
# ============================================================

# Password complexity rules: (regex pattern, human-readable name)
PASSWORD_COMPLEXITY_RULES: list[tuple[str, str]] = [
    (r"[A-Z]", "uppercase letter"),
    (r"[a-z]", "lowercase letter"),
    (r"\d", "digit"),
    (f"[{re.escape(PASSWORD_SPECIAL_CHARACTERS)}]", "special character"),
]


def validate_password_complexity(password: str) -> str:
    """Validate password meets complexity requirements.

    Requirements:
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - At least one special character from PASSWORD_SPECIAL_CHARACTERS

    Args:
        password: The password to validate

    Returns:
        The validated password

    Raises:
        ValueError: If password doesn't meet requirements
    """
    missing = [
        name
        for pattern, name in PASSWORD_COMPLEXITY_RULES
        if not re.search(pattern, password)
    ]

    if missing:
        if len(missing) == 1:
            raise ValueError(f"Password must contain at least one {missing[0]}")
        raise ValueError(f"Password must contain at least one: {', '.join(missing)}")

    return password


def validate_email_length(email: str | None) -> str | None:
    """Reject emails longer than the column allows."""
    if email is not None and len(email) > MAX_EMAIL_LENGTH:
        raise ValueError(f"Email must be at most {MAX_EMAIL_LENGTH} characters")
    return email


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


# ============================================================
# User Schemas
# ============================================================


class UserCreate(BaseModel):
    """Schema for creating a new user. Every field is required."""

    username: str = Field(..., min_length=1, max_length=MAX_USERNAME_LENGTH)
    full_name: str = Field(..., min_length=1, max_length=MAX_FULL_NAME_LENGTH)
    email: EmailStr
    mobile_number: str = Field(..., min_length=1, max_length=MAX_MOBILE_NUMBER_LENGTH)
    language: str = Field(..., min_length=1, max_length=MAX_LANGUAGE_LENGTH)
    culture: str = Field(..., min_length=1, max_length=MAX_CULTURE_LENGTH)
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, repr=False)

    @field_validator("email")
    @classmethod
    def email_length(cls, v: str) -> str:
        """Validate email length."""
        return validate_email_length(v)

    @field_validator("password")
    @classmethod
    def password_complexity(cls, v: str) -> str:
        """Validate password complexity."""
        return validate_password_complexity(v)


class UserUpdate(BaseModel):
    """Schema for a partial user update.

    A field is applied only when it is present with a non-empty value;
    missing, null and empty-string fields leave the stored value unchanged.
    Username cannot be changed.
    """

    full_name: str | None = Field(None, max_length=MAX_FULL_NAME_LENGTH)
    email: EmailStr | None = None
    mobile_number: str | None = Field(None, max_length=MAX_MOBILE_NUMBER_LENGTH)
    language: str | None = Field(None, max_length=MAX_LANGUAGE_LENGTH)
    culture: str | None = Field(None, max_length=MAX_CULTURE_LENGTH)

    @field_validator("*", mode="before")
    @classmethod
    def blank_as_absent(cls, v: Any) -> Any:
        """Treat empty strings as "not provided"."""
        if isinstance(v, str) and v == "":
            return None
        return v

    @field_validator("email")
    @classmethod
    def email_length(cls, v: str | None) -> str | None:
        """Validate email length."""
        return validate_email_length(v)

    def changes(self) -> dict[str, Any]:
        """Return the fields to apply, keyed by column name."""
        return {
            key: value
            for key, value in self.model_dump(exclude_unset=True).items()
            if value is not None
        }


class UserResponse(BaseModel):
    """Schema for user response data. Never carries credentials."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    full_name: str
    email: str
    mobile_number: str
    language: str
    culture: str
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Mark naive timestamps (as read back from SQLite) as UTC."""
        return as_utc(v)


class ValidatePasswordRequest(BaseModel):
    """Schema for checking a candidate password."""

    password: str = Field(..., min_length=1, repr=False)


class ValidatePasswordResponse(BaseModel):
    """Schema for the password check outcome."""

    is_valid: bool
