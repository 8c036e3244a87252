"""Pydantic v2 schemas for the pre-launch waitlist."""

import uuid
from datetime import datetime

from pydantic import EmailStr, Field

from havenstay.schemas.common import ApiModel


class WaitlistCreate(ApiModel):
    full_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    city: str = Field(..., min_length=1, max_length=100)
    subscribe_to_newsletter: bool = False


class WaitlistEntryResponse(ApiModel):
    id: uuid.UUID
    full_name: str
    email: str
    city: str
    subscribe_to_newsletter: bool
    created_at: datetime
