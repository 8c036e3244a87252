"""Pydantic v2 request/response schemas for direct messages."""

import uuid
from datetime import datetime

from pydantic import Field

from havenstay.schemas.common import ApiModel


class MessageCreate(ApiModel):
    receiver_id: uuid.UUID
    content: str = Field(..., min_length=1, max_length=5000)
    booking_id: uuid.UUID | None = None


class DirectMessageResponse(ApiModel):
    id: uuid.UUID
    sender_id: uuid.UUID
    receiver_id: uuid.UUID
    booking_id: uuid.UUID | None = None
    content: str
    is_read: bool
    created_at: datetime
