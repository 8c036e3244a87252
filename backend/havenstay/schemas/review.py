"""Pydantic v2 request/response schemas for review endpoints."""

import uuid
from datetime import datetime

from pydantic import Field

from havenstay.schemas.auth import UserSummary
from havenstay.schemas.common import ApiModel


class ReviewCreate(ApiModel):
    booking_id: uuid.UUID
    rating: int = Field(..., ge=1, le=5)
    comment: str | None = Field(None, max_length=2000)


class ReviewResponse(ApiModel):
    id: uuid.UUID
    booking_id: uuid.UUID
    property_id: uuid.UUID
    guest_id: uuid.UUID
    rating: int
    comment: str | None = None
    created_at: datetime


class ReviewWithGuestResponse(ReviewResponse):
    """Review plus the reviewing guest's card."""

    guest: UserSummary | None = None
