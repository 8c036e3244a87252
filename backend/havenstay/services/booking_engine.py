"""Booking engine — availability, pricing and the booking status lifecycle.

Lifecycle::

    pending   -> confirmed   (property host, admin)
    pending   -> canceled    (guest, property host, admin)
    confirmed -> completed   (property host, admin)
    confirmed -> canceled    (guest, property host, admin)

``completed`` and ``canceled`` are terminal. Overlap checks and inserts for a
property always run inside ``Storage.booking_scope`` so two requests can never
both claim the same nights.
"""

import logging
import math
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta

from havenstay.errors import (
    DateConflict,
    Forbidden,
    InvalidDateRange,
    InvalidInput,
    InvalidTransition,
    NotFound,
)
from havenstay.models import Booking, Property, User
from havenstay.storage.base import Storage

logger = logging.getLogger(__name__)

# Actor roles relative to a booking
GUEST = "guest"
HOST = "host"
ADMIN = "admin"

TRANSITIONS: dict[tuple[str, str], frozenset[str]] = {
    ("pending", "confirmed"): frozenset({HOST, ADMIN}),
    ("pending", "canceled"): frozenset({GUEST, HOST, ADMIN}),
    ("confirmed", "completed"): frozenset({HOST, ADMIN}),
    ("confirmed", "canceled"): frozenset({GUEST, HOST, ADMIN}),
}

TERMINAL_STATUSES = frozenset({"completed", "canceled"})

_ONE_NIGHT = timedelta(days=1)


@dataclass(frozen=True)
class HostBooking:
    """A booking on a host's listing, with the records needed to render it."""

    booking: Booking
    property: Property
    guest: User | None


# ---------------------------------------------------------------------------
# Pure rules
# ---------------------------------------------------------------------------


def validate_date_range(check_in: datetime, check_out: datetime) -> None:
    if check_in >= check_out:
        raise InvalidDateRange()


def ranges_overlap(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open ``[a_start, a_end)`` vs ``[b_start, b_end)``; touching ends do not overlap."""
    return a_start < b_end and b_start < a_end


def count_nights(check_in: datetime, check_out: datetime) -> int:
    """Whole nights, rounding any partial day up."""
    return math.ceil((check_out - check_in) / _ONE_NIGHT)


def compute_total_price(prop: Property, check_in: datetime, check_out: datetime) -> int:
    return prop.price_per_night * count_nights(check_in, check_out) + (prop.cleaning_fee or 0)


def actor_roles(actor: User, booking: Booking, prop: Property) -> set[str]:
    """The roles ``actor`` holds with respect to this particular booking."""
    roles = set()
    if booking.guest_id == actor.id:
        roles.add(GUEST)
    if prop.host_id == actor.id:
        roles.add(HOST)
    if actor.is_admin:
        roles.add(ADMIN)
    return roles


def check_transition(current: str, target: str, roles: set[str]) -> None:
    """Validate a status change.

    The transition itself is checked first so an illegal move is always
    ``InvalidTransition`` no matter who asks.

    Raises:
        InvalidTransition: ``current -> target`` is not in the lifecycle table.
        Forbidden: None of ``roles`` may perform it.
    """
    allowed = TRANSITIONS.get((current, target))
    if allowed is None:
        raise InvalidTransition(f"Cannot change booking status from {current} to {target}")
    if not roles & allowed:
        raise Forbidden("Not authorized to update this booking")


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


async def create_booking(
    storage: Storage,
    guest: User,
    property_id: uuid.UUID,
    check_in: datetime,
    check_out: datetime,
) -> Booking:
    """Reserve ``[check_in, check_out)`` on a property for ``guest``.

    Raises:
        InvalidDateRange: ``check_in >= check_out`` (checked before any lookup).
        NotFound: The property does not exist or is not open for booking.
        DateConflict: A non-canceled booking already covers part of the range.
    """
    validate_date_range(check_in, check_out)

    prop = await storage.get_property(property_id)
    if prop is None or not (prop.is_listable or prop.host_id == guest.id or guest.is_admin):
        raise NotFound("Property not found")

    async with storage.booking_scope(prop.id):
        existing = await storage.list_active_bookings(prop.id)
        for other in existing:
            if ranges_overlap(check_in, check_out, other.check_in_date, other.check_out_date):
                logger.info(
                    "Rejected booking on property %s: %s-%s overlaps booking %s",
                    prop.id,
                    check_in.date(),
                    check_out.date(),
                    other.id,
                )
                raise DateConflict()

        booking = Booking(
            property_id=prop.id,
            guest_id=guest.id,
            check_in_date=check_in,
            check_out_date=check_out,
            total_price=compute_total_price(prop, check_in, check_out),
            status="pending",
        )
        booking = await storage.add_booking(booking)

    logger.info(
        "Booking %s created for property %s by guest %s (%d nights, total %d)",
        booking.id,
        prop.id,
        guest.id,
        count_nights(check_in, check_out),
        booking.total_price,
    )
    return booking


async def update_booking_status(
    storage: Storage,
    actor: User,
    booking_id: uuid.UUID,
    status: str,
    payment_id: str | None = None,
) -> Booking:
    """Move a booking along its lifecycle.

    The booking is re-read inside the property's booking scope, so the check
    always sees the current status rather than whatever the caller last saw.

    Raises:
        NotFound: Unknown booking.
        InvalidInput: ``payment_id`` given for a target other than ``confirmed``.
        InvalidTransition: Not a legal lifecycle step.
        Forbidden: The caller may not perform this step.
    """
    if payment_id is not None and status != "confirmed":
        raise InvalidInput.for_field("paymentId", "A payment ID can only be attached when confirming a booking")

    booking = await storage.get_booking(booking_id)
    if booking is None:
        raise NotFound("Booking not found")

    prop = await storage.get_property(booking.property_id)
    if prop is None:
        raise NotFound("Property not found")

    async with storage.booking_scope(prop.id):
        booking = await storage.get_booking(booking_id)
        if booking is None:
            raise NotFound("Booking not found")

        previous = booking.status
        check_transition(previous, status, actor_roles(actor, booking, prop))
        booking = await storage.update_booking_status(booking, status, payment_id)

    logger.info("Booking %s: %s -> %s by user %s", booking.id, previous, status, actor.id)
    return booking


async def get_booking_for(storage: Storage, actor: User, booking_id: uuid.UUID) -> tuple[Booking, Property]:
    """Return a booking visible to its guest, the property host, or an admin."""
    booking = await storage.get_booking(booking_id)
    if booking is None:
        raise NotFound("Booking not found")
    prop = await storage.get_property(booking.property_id)
    if prop is None:
        raise NotFound("Property not found")
    if not actor_roles(actor, booking, prop):
        raise Forbidden("Not authorized to view this booking")
    return booking, prop


async def list_guest_bookings(storage: Storage, guest: User) -> list[tuple[Booking, Property | None]]:
    """The guest's bookings, newest first, each paired with its property."""
    bookings = await storage.list_bookings_by_guest(guest.id)
    cache: dict[uuid.UUID, Property | None] = {}
    result = []
    for booking in bookings:
        if booking.property_id not in cache:
            cache[booking.property_id] = await storage.get_property(booking.property_id)
        result.append((booking, cache[booking.property_id]))
    return result


async def list_host_bookings(storage: Storage, host: User) -> list[HostBooking]:
    """Bookings across every property the host owns."""
    guests: dict[uuid.UUID, User | None] = {}
    result = []
    for prop in await storage.list_properties_by_host(host.id):
        for booking in await storage.list_bookings_by_property(prop.id):
            if booking.guest_id not in guests:
                guests[booking.guest_id] = await storage.get_user(booking.guest_id)
            result.append(HostBooking(booking=booking, property=prop, guest=guests[booking.guest_id]))
    return result
