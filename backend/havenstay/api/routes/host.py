"""Host dashboard routes — the caller's own listings and the bookings on them."""

from fastapi import APIRouter, Depends

from havenstay.api.deps import get_storage, require_host
from havenstay.models.user import User
from havenstay.schemas.auth import UserSummary
from havenstay.schemas.booking import BookingResponse, HostBookingResponse
from havenstay.schemas.property import PropertyResponse, PropertySummary
from havenstay.services import booking_engine, catalog
from havenstay.storage.base import Storage

router = APIRouter(prefix="/api/host", tags=["host"])


@router.get("/properties", response_model=list[PropertyResponse])
async def list_host_properties(
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(require_host),
) -> list[PropertyResponse]:
    """All of the caller's listings, approved or not."""
    properties = await catalog.list_host_properties(storage, current_user)
    return [PropertyResponse.model_validate(p) for p in properties]


@router.get("/bookings", response_model=list[HostBookingResponse])
async def list_host_bookings(
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(require_host),
) -> list[HostBookingResponse]:
    entries = await booking_engine.list_host_bookings(storage, current_user)
    return [
        HostBookingResponse(
            **BookingResponse.model_validate(entry.booking).model_dump(),
            property=PropertySummary.model_validate(entry.property),
            guest=UserSummary.model_validate(entry.guest) if entry.guest else None,
        )
        for entry in entries
    ]
