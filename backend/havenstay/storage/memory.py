"""Dict-backed storage adapter.

Entities live in per-type dicts keyed by id; insertion order doubles as
creation order. Booking scopes are an ``asyncio.Lock`` per property.
"""

import asyncio
import uuid
from collections import defaultdict
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from havenstay.database import utcnow
from havenstay.errors import Conflict
from havenstay.models import Booking, Message, Property, Review, User, WaitlistEntry
from havenstay.storage.base import PropertyFilters, Storage


def _stamp(entity: Any) -> None:
    """Fill in what the database would: id and timestamps."""
    if getattr(entity, "id", None) is None:
        entity.id = uuid.uuid4()
    now = utcnow()
    if getattr(entity, "created_at", None) is None:
        entity.created_at = now
    if hasattr(type(entity), "updated_at") and getattr(entity, "updated_at", None) is None:
        entity.updated_at = now


def _newest_first(items: list) -> list:
    # Reverse before the stable sort so later insertions win timestamp ties.
    return sorted(reversed(items), key=lambda item: item.created_at, reverse=True)


class MemoryStorage(Storage):
    """In-process :class:`Storage` implementation."""

    def __init__(self) -> None:
        self.users: dict[uuid.UUID, User] = {}
        self.properties: dict[uuid.UUID, Property] = {}
        self.bookings: dict[uuid.UUID, Booking] = {}
        self.reviews: dict[uuid.UUID, Review] = {}
        self.messages: dict[uuid.UUID, Message] = {}
        self.waitlist: dict[uuid.UUID, WaitlistEntry] = {}
        self._property_locks: defaultdict[uuid.UUID, asyncio.Lock] = defaultdict(asyncio.Lock)

    # -- users -------------------------------------------------------------

    async def add_user(self, user: User) -> User:
        if await self.get_user_by_email(user.email) is not None:
            raise Conflict("Email already registered")
        _stamp(user)
        self.users[user.id] = user
        return user

    async def get_user(self, user_id: uuid.UUID) -> User | None:
        return self.users.get(user_id)

    async def get_user_by_email(self, email: str) -> User | None:
        email = email.lower()
        return next((u for u in self.users.values() if u.email.lower() == email), None)

    async def list_users(self, role: str | None = None) -> list[User]:
        users = [u for u in self.users.values() if role is None or u.role == role]
        return _newest_first(users)

    async def update_user(self, user: User, changes: dict[str, Any]) -> User:
        for field, value in changes.items():
            setattr(user, field, value)
        return user

    # -- properties --------------------------------------------------------

    async def add_property(self, prop: Property) -> Property:
        _stamp(prop)
        self.properties[prop.id] = prop
        return prop

    async def get_property(self, property_id: uuid.UUID) -> Property | None:
        return self.properties.get(property_id)

    async def list_properties(self, filters: PropertyFilters) -> list[Property]:
        return _newest_first([p for p in self.properties.values() if filters.matches(p)])

    async def list_properties_by_host(self, host_id: uuid.UUID) -> list[Property]:
        return _newest_first([p for p in self.properties.values() if p.host_id == host_id])

    async def update_property(self, prop: Property, changes: dict[str, Any]) -> Property:
        for field, value in changes.items():
            setattr(prop, field, value)
        prop.updated_at = utcnow()
        return prop

    async def approve_property(self, prop: Property) -> Property:
        prop.is_approved = True
        prop.updated_at = utcnow()
        return prop

    # -- bookings ----------------------------------------------------------

    @asynccontextmanager
    async def booking_scope(self, property_id: uuid.UUID) -> AsyncIterator[None]:
        async with self._property_locks[property_id]:
            yield

    async def add_booking(self, booking: Booking) -> Booking:
        _stamp(booking)
        self.bookings[booking.id] = booking
        return booking

    async def get_booking(self, booking_id: uuid.UUID) -> Booking | None:
        return self.bookings.get(booking_id)

    async def list_bookings_by_guest(self, guest_id: uuid.UUID) -> list[Booking]:
        return _newest_first([b for b in self.bookings.values() if b.guest_id == guest_id])

    async def list_bookings_by_property(self, property_id: uuid.UUID) -> list[Booking]:
        return _newest_first([b for b in self.bookings.values() if b.property_id == property_id])

    async def list_active_bookings(self, property_id: uuid.UUID) -> list[Booking]:
        return [b for b in self.bookings.values() if b.property_id == property_id and b.status != "canceled"]

    async def count_bookings_by_status(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for booking in self.bookings.values():
            counts[booking.status] = counts.get(booking.status, 0) + 1
        return counts

    async def update_booking_status(self, booking: Booking, status: str, payment_id: str | None = None) -> Booking:
        booking.status = status
        if payment_id is not None:
            booking.payment_id = payment_id
        booking.updated_at = utcnow()
        return booking

    # -- reviews -----------------------------------------------------------

    async def add_review(self, review: Review) -> Review:
        if await self.get_review_by_booking(review.booking_id) is not None:
            raise Conflict("A review already exists for this booking")
        _stamp(review)
        self.reviews[review.id] = review
        return review

    async def get_review_by_booking(self, booking_id: uuid.UUID) -> Review | None:
        return next((r for r in self.reviews.values() if r.booking_id == booking_id), None)

    async def list_reviews_by_property(self, property_id: uuid.UUID) -> list[Review]:
        return _newest_first([r for r in self.reviews.values() if r.property_id == property_id])

    async def list_reviews_by_guest(self, guest_id: uuid.UUID) -> list[Review]:
        return _newest_first([r for r in self.reviews.values() if r.guest_id == guest_id])

    # -- messages ----------------------------------------------------------

    async def add_message(self, message: Message) -> Message:
        _stamp(message)
        self.messages[message.id] = message
        return message

    async def get_message(self, message_id: uuid.UUID) -> Message | None:
        return self.messages.get(message_id)

    async def list_conversation(self, user_a: uuid.UUID, user_b: uuid.UUID) -> list[Message]:
        pair = {user_a, user_b}
        conversation = [m for m in self.messages.values() if {m.sender_id, m.receiver_id} == pair]
        return sorted(conversation, key=lambda m: m.created_at)

    async def mark_message_read(self, message: Message) -> Message:
        message.is_read = True
        return message

    # -- waitlist ----------------------------------------------------------

    async def add_waitlist_entry(self, entry: WaitlistEntry) -> WaitlistEntry:
        if await self.get_waitlist_entry_by_email(entry.email) is not None:
            raise Conflict("Email already registered in waitlist")
        _stamp(entry)
        self.waitlist[entry.id] = entry
        return entry

    async def get_waitlist_entry_by_email(self, email: str) -> WaitlistEntry | None:
        email = email.lower()
        return next((e for e in self.waitlist.values() if e.email.lower() == email), None)

    async def list_waitlist_entries(self) -> list[WaitlistEntry]:
        return _newest_first(list(self.waitlist.values()))

    # -- unit of work ------------------------------------------------------

    async def commit(self) -> None:
        return None
