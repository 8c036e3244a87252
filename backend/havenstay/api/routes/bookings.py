"""Bookings API routes — request, view and move stays through their lifecycle."""

import uuid

from fastapi import APIRouter, Depends, status

from havenstay.api.deps import get_storage, require_authenticated
from havenstay.models.user import User
from havenstay.schemas.booking import (
    BookingCreate,
    BookingResponse,
    BookingStatusUpdate,
    GuestBookingResponse,
)
from havenstay.schemas.property import PropertySummary
from havenstay.services import booking_engine
from havenstay.storage.base import Storage

router = APIRouter(prefix="/api/bookings", tags=["bookings"])


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request a stay",
)
async def create_booking(
    body: BookingCreate,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(require_authenticated),
) -> BookingResponse:
    """Create a pending booking. The total price is computed server-side."""
    booking = await booking_engine.create_booking(
        storage,
        current_user,
        body.property_id,
        body.check_in_date,
        body.check_out_date,
    )
    await storage.commit()
    return BookingResponse.model_validate(booking)


@router.get(
    "",
    response_model=list[GuestBookingResponse],
    summary="List the caller's bookings",
)
async def list_my_bookings(
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(require_authenticated),
) -> list[GuestBookingResponse]:
    rows = await booking_engine.list_guest_bookings(storage, current_user)
    return [
        GuestBookingResponse(
            **BookingResponse.model_validate(booking).model_dump(),
            property=PropertySummary.model_validate(prop) if prop else None,
        )
        for booking, prop in rows
    ]


@router.get(
    "/{booking_id}",
    response_model=GuestBookingResponse,
    summary="Get a booking",
)
async def get_booking(
    booking_id: uuid.UUID,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(require_authenticated),
) -> GuestBookingResponse:
    """Visible to the booking's guest, the property's host and admins."""
    booking, prop = await booking_engine.get_booking_for(storage, current_user, booking_id)
    return GuestBookingResponse(
        **BookingResponse.model_validate(booking).model_dump(),
        property=PropertySummary.model_validate(prop),
    )


@router.put(
    "/{booking_id}/status",
    response_model=BookingResponse,
    summary="Change a booking's status",
)
async def update_booking_status(
    booking_id: uuid.UUID,
    body: BookingStatusUpdate,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(require_authenticated),
) -> BookingResponse:
    booking = await booking_engine.update_booking_status(
        storage,
        current_user,
        booking_id,
        body.status,
        payment_id=body.payment_id,
    )
    await storage.commit()
    return BookingResponse.model_validate(booking)
