"""Pydantic v2 request/response schemas for authentication and profile endpoints."""

import uuid
from datetime import datetime
from typing import Literal

from pydantic import EmailStr, Field, field_validator

from havenstay.auth.passwords import password_too_long
from havenstay.schemas.common import ApiModel, PatchModel

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class RegisterRequest(ApiModel):
    """Schema for user registration. Admin accounts cannot be self-registered."""

    email: EmailStr
    password: str = Field(..., min_length=8)
    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    role: Literal["guest", "host"] = "guest"
    phone_number: str | None = Field(None, max_length=50)

    @field_validator("password")
    @classmethod
    def _password_fits_bcrypt(cls, value: str) -> str:
        if password_too_long(value):
            raise ValueError("Password must be at most 72 bytes")
        return value


class LoginRequest(ApiModel):
    """Schema for email/password login."""

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class ProfileUpdate(PatchModel):
    """Profile fields a user may change about themselves."""

    nullable_fields = frozenset({"phone_number", "profile_picture", "bio"})

    first_name: str | None = Field(None, min_length=1, max_length=255)
    last_name: str | None = Field(None, min_length=1, max_length=255)
    phone_number: str | None = Field(None, max_length=50)
    profile_picture: str | None = Field(None, max_length=512)
    bio: str | None = Field(None, max_length=2000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class UserResponse(ApiModel):
    """Public user profile. The password hash is never serialised."""

    id: uuid.UUID
    email: str
    first_name: str
    last_name: str
    role: str
    phone_number: str | None = None
    profile_picture: str | None = None
    bio: str | None = None
    is_verified: bool = False
    created_at: datetime


class UserSummary(ApiModel):
    """Minimal user card embedded in listings, bookings and reviews."""

    id: uuid.UUID
    first_name: str
    last_name: str
    profile_picture: str | None = None
