"""Pydantic v2 request/response schemas for booking endpoints."""

import uuid
from datetime import datetime, timezone
from typing import Literal

from pydantic import Field, field_validator

from havenstay.schemas.auth import UserSummary
from havenstay.schemas.common import ApiModel
from havenstay.schemas.property import PropertySummary

BookingStatus = Literal["pending", "confirmed", "canceled", "completed"]

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BookingCreate(ApiModel):
    """Schema for requesting a stay.

    Date ordering is checked by the booking engine, not here, so that an
    inverted range is reported as ``invalid_date_range``. ``total_price`` is
    accepted for client compatibility and ignored; the server derives it.
    """

    property_id: uuid.UUID
    check_in_date: datetime
    check_out_date: datetime
    total_price: int | None = Field(None, ge=0)

    @field_validator("check_in_date", "check_out_date")
    @classmethod
    def to_naive_utc(cls, value: datetime) -> datetime:
        """Store aware timestamps as naive UTC so all comparisons are like-for-like."""
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value


class BookingStatusUpdate(ApiModel):
    """Target status plus an optional payment reference (confirmation only)."""

    status: BookingStatus
    payment_id: str | None = Field(None, min_length=1, max_length=255)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BookingResponse(ApiModel):
    """Standard booking response."""

    id: uuid.UUID
    property_id: uuid.UUID
    guest_id: uuid.UUID
    check_in_date: datetime
    check_out_date: datetime
    total_price: int
    status: str
    payment_id: str | None = None
    created_at: datetime
    updated_at: datetime


class GuestBookingResponse(BookingResponse):
    """A guest's booking with the listing card."""

    property: PropertySummary | None = None


class HostBookingResponse(BookingResponse):
    """A booking on one of the host's listings, with listing and guest cards."""

    property: PropertySummary | None = None
    guest: UserSummary | None = None
