"""Properties API routes — public search and detail, host-managed listings."""

import uuid

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import ValidationError

from havenstay.api.deps import get_optional_user, get_storage, require_admin, require_host
from havenstay.api.forms import parse_listing_payload
from havenstay.errors import InvalidInput
from havenstay.models.user import User
from havenstay.schemas.auth import UserSummary
from havenstay.schemas.property import (
    PropertyCreate,
    PropertyDetailResponse,
    PropertyQuery,
    PropertyResponse,
    PropertyUpdate,
)
from havenstay.schemas.review import ReviewResponse, ReviewWithGuestResponse
from havenstay.services import catalog, ledger
from havenstay.services.uploads import save_images
from havenstay.storage.base import Storage

router = APIRouter(prefix="/api/properties", tags=["properties"])


@router.post(
    "",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new property",
)
async def create_property(
    request: Request,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(require_host),
) -> PropertyResponse:
    """Create a listing owned by the caller. Accepts JSON or multipart with image files."""
    payload = await parse_listing_payload(request, PropertyCreate)
    images = await save_images(payload.files) if payload.files else []
    prop = await catalog.create_property(storage, current_user, payload.body, images)
    await storage.commit()
    return PropertyResponse.model_validate(prop)


@router.get(
    "",
    response_model=list[PropertyResponse],
    summary="Search listings",
)
async def list_properties(
    city: str | None = Query(None),
    neighborhood: str | None = Query(None),
    property_type: str | None = Query(None, alias="propertyType"),
    min_price: int | None = Query(None, alias="minPrice"),
    max_price: int | None = Query(None, alias="maxPrice"),
    guests: int | None = Query(None),
    bedrooms: int | None = Query(None),
    is_approved: bool | None = Query(None, alias="isApproved", description="Admin only"),
    is_active: bool | None = Query(None, alias="isActive", description="Admin only"),
    storage: Storage = Depends(get_storage),
    current_user: User | None = Depends(get_optional_user),
) -> list[PropertyResponse]:
    """Return approved, active listings matching every supplied filter."""
    try:
        query = PropertyQuery(
            city=city,
            neighborhood=neighborhood,
            property_type=property_type,
            min_price=min_price,
            max_price=max_price,
            guests=guests,
            bedrooms=bedrooms,
            is_approved=is_approved,
            is_active=is_active,
        )
    except ValidationError as exc:
        raise InvalidInput.from_validation_error(exc) from None

    properties = await catalog.list_properties(storage, query, current_user)
    return [PropertyResponse.model_validate(p) for p in properties]


@router.get(
    "/{property_id}",
    response_model=PropertyDetailResponse,
    summary="Get a property with host, reviews and rating",
)
async def get_property(
    property_id: uuid.UUID,
    storage: Storage = Depends(get_storage),
    current_user: User | None = Depends(get_optional_user),
) -> PropertyDetailResponse:
    detail = await catalog.get_property_detail(storage, property_id, current_user)
    return PropertyDetailResponse(
        **PropertyResponse.model_validate(detail.property).model_dump(),
        host=UserSummary.model_validate(detail.host) if detail.host else None,
        reviews=[ReviewResponse.model_validate(r) for r in detail.reviews],
        avg_rating=detail.avg_rating,
    )


@router.put(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Update a property",
)
async def update_property(
    property_id: uuid.UUID,
    request: Request,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(require_host),
) -> PropertyResponse:
    """Partially update a listing. Only the owning host or an admin may do this."""
    payload = await parse_listing_payload(request, PropertyUpdate)
    # Check ownership before any file lands on disk.
    await catalog.get_managed_property(storage, current_user, property_id)
    images = await save_images(payload.files) if payload.files else None
    prop = await catalog.update_property(
        storage,
        current_user,
        property_id,
        payload.body,
        uploaded_images=images,
        keep_images=payload.keep_images,
    )
    await storage.commit()
    return PropertyResponse.model_validate(prop)


@router.put(
    "/{property_id}/approve",
    response_model=PropertyResponse,
    summary="Approve a property (admin)",
)
async def approve_property(
    property_id: uuid.UUID,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(require_admin),
) -> PropertyResponse:
    prop = await catalog.approve_property(storage, current_user, property_id)
    await storage.commit()
    return PropertyResponse.model_validate(prop)


@router.get(
    "/{property_id}/reviews",
    response_model=list[ReviewWithGuestResponse],
    summary="List reviews of a property",
)
async def list_property_reviews(
    property_id: uuid.UUID,
    storage: Storage = Depends(get_storage),
) -> list[ReviewWithGuestResponse]:
    entries = await ledger.list_property_reviews(storage, property_id)
    return [
        ReviewWithGuestResponse(
            **ReviewResponse.model_validate(entry.review).model_dump(),
            guest=UserSummary.model_validate(entry.guest) if entry.guest else None,
        )
        for entry in entries
    ]
