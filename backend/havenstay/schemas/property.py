"""Pydantic v2 request/response schemas for property endpoints."""

import uuid
from datetime import datetime
from typing import Literal

from pydantic import Field, model_validator

from havenstay.schemas.auth import UserSummary
from havenstay.schemas.common import ApiModel, PatchModel
from havenstay.schemas.review import ReviewResponse

PropertyType = Literal["entire_apartment", "private_room", "shared_space"]
CancellationPolicy = Literal["flexible", "moderate", "strict"]

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PropertyCreate(ApiModel):
    """Schema for creating a listing. New listings await admin approval."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1, max_length=255)
    city: str = Field("Lagos", min_length=1, max_length=100)
    neighborhood: str = Field(..., min_length=1, max_length=100)
    property_type: PropertyType
    price_per_night: int = Field(..., gt=0)
    cleaning_fee: int = Field(0, ge=0)
    max_guests: int = Field(..., ge=1)
    bedrooms: int = Field(..., ge=0)
    beds: int = Field(..., ge=1)
    bathrooms: int = Field(..., ge=0)
    amenities: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    house_rules: str | None = None
    cancellation_policy: CancellationPolicy = "moderate"
    is_active: bool = True


class PropertyUpdate(PatchModel):
    """Mutable listing fields. Approval and ownership are not patchable."""

    nullable_fields = frozenset({"house_rules"})

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, min_length=1)
    address: str | None = Field(None, min_length=1, max_length=255)
    city: str | None = Field(None, min_length=1, max_length=100)
    neighborhood: str | None = Field(None, min_length=1, max_length=100)
    property_type: PropertyType | None = None
    price_per_night: int | None = Field(None, gt=0)
    cleaning_fee: int | None = Field(None, ge=0)
    max_guests: int | None = Field(None, ge=1)
    bedrooms: int | None = Field(None, ge=0)
    beds: int | None = Field(None, ge=1)
    bathrooms: int | None = Field(None, ge=0)
    amenities: list[str] | None = None
    images: list[str] | None = None
    house_rules: str | None = None
    cancellation_policy: CancellationPolicy | None = None
    is_active: bool | None = None


class PropertyQuery(ApiModel):
    """Listing filters from the query string."""

    city: str | None = None
    neighborhood: str | None = None
    property_type: PropertyType | None = None
    min_price: int | None = Field(None, ge=0)
    max_price: int | None = Field(None, ge=0)
    guests: int | None = Field(None, ge=1)
    bedrooms: int | None = Field(None, ge=0)
    is_approved: bool | None = None
    is_active: bool | None = None

    @model_validator(mode="after")
    def check_price_range(self) -> "PropertyQuery":
        if self.min_price is not None and self.max_price is not None and self.min_price > self.max_price:
            raise ValueError("minPrice must not exceed maxPrice")
        return self


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PropertyResponse(ApiModel):
    """Full listing as stored."""

    id: uuid.UUID
    host_id: uuid.UUID
    title: str
    description: str
    address: str
    city: str
    neighborhood: str
    property_type: str
    price_per_night: int
    cleaning_fee: int
    max_guests: int
    bedrooms: int
    beds: int
    bathrooms: int
    amenities: list[str]
    images: list[str]
    house_rules: str | None = None
    cancellation_policy: str
    is_approved: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime


class PropertySummary(ApiModel):
    """Listing card embedded in booking responses."""

    id: uuid.UUID
    title: str
    images: list[str]
    price_per_night: int
    neighborhood: str
    city: str


class PropertyDetailResponse(PropertyResponse):
    """Listing with host card, reviews and the average rating (0 without reviews)."""

    host: UserSummary | None = None
    reviews: list[ReviewResponse] = Field(default_factory=list)
    avg_rating: float = 0
