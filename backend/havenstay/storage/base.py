"""Storage port — the persistence capabilities the services depend on.

Services only talk to :class:`Storage`. Two adapters implement it:
:class:`~havenstay.storage.memory.MemoryStorage` for tests and demos and
:class:`~havenstay.storage.sql.SqlStorage` for PostgreSQL.

Entities are the SQLAlchemy model classes in ``havenstay.models``; the memory
adapter keeps them as plain objects.
"""

import uuid
from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import Any

from havenstay.models import Booking, Message, Property, Review, User, WaitlistEntry


@dataclass(frozen=True)
class PropertyFilters:
    """Listing predicate. ``None`` leaves a field unconstrained; all others AND together."""

    city: str | None = None
    neighborhood: str | None = None
    property_type: str | None = None
    min_price: int | None = None
    max_price: int | None = None
    guests: int | None = None
    bedrooms: int | None = None
    is_approved: bool | None = None
    is_active: bool | None = None

    def matches(self, prop: Property) -> bool:
        if self.city is not None and prop.city.lower() != self.city.lower():
            return False
        if self.neighborhood is not None and prop.neighborhood.lower() != self.neighborhood.lower():
            return False
        if self.property_type is not None and prop.property_type != self.property_type:
            return False
        if self.min_price is not None and prop.price_per_night < self.min_price:
            return False
        if self.max_price is not None and prop.price_per_night > self.max_price:
            return False
        if self.guests is not None and prop.max_guests < self.guests:
            return False
        if self.bedrooms is not None and prop.bedrooms < self.bedrooms:
            return False
        if self.is_approved is not None and prop.is_approved != self.is_approved:
            return False
        if self.is_active is not None and prop.is_active != self.is_active:
            return False
        return True


class Storage(ABC):
    """Persistence port for users, listings, bookings, reviews, messages and the waitlist.

    ``add_*`` methods return the stored entity with ``id`` and timestamps set.
    Unique-key violations surface as :class:`havenstay.errors.Conflict`.
    """

    # -- users -------------------------------------------------------------

    @abstractmethod
    async def add_user(self, user: User) -> User: ...

    @abstractmethod
    async def get_user(self, user_id: uuid.UUID) -> User | None: ...

    @abstractmethod
    async def get_user_by_email(self, email: str) -> User | None: ...

    @abstractmethod
    async def list_users(self, role: str | None = None) -> list[User]: ...

    @abstractmethod
    async def update_user(self, user: User, changes: dict[str, Any]) -> User: ...

    # -- properties --------------------------------------------------------

    @abstractmethod
    async def add_property(self, prop: Property) -> Property: ...

    @abstractmethod
    async def get_property(self, property_id: uuid.UUID) -> Property | None: ...

    @abstractmethod
    async def list_properties(self, filters: PropertyFilters) -> list[Property]:
        """Properties matching ``filters``, newest first."""

    @abstractmethod
    async def list_properties_by_host(self, host_id: uuid.UUID) -> list[Property]: ...

    @abstractmethod
    async def update_property(self, prop: Property, changes: dict[str, Any]) -> Property: ...

    @abstractmethod
    async def approve_property(self, prop: Property) -> Property: ...

    # -- bookings ----------------------------------------------------------

    @abstractmethod
    def booking_scope(self, property_id: uuid.UUID) -> AbstractAsyncContextManager[None]:
        """Serialise booking writes for one property.

        Everything read and written inside the scope behaves as a single
        atomic unit with respect to other scopes on the same property.
        """

    @abstractmethod
    async def add_booking(self, booking: Booking) -> Booking: ...

    @abstractmethod
    async def get_booking(self, booking_id: uuid.UUID) -> Booking | None: ...

    @abstractmethod
    async def list_bookings_by_guest(self, guest_id: uuid.UUID) -> list[Booking]: ...

    @abstractmethod
    async def list_bookings_by_property(self, property_id: uuid.UUID) -> list[Booking]: ...

    @abstractmethod
    async def list_active_bookings(self, property_id: uuid.UUID) -> list[Booking]:
        """Non-canceled bookings of a property."""

    @abstractmethod
    async def count_bookings_by_status(self) -> dict[str, int]: ...

    @abstractmethod
    async def update_booking_status(self, booking: Booking, status: str, payment_id: str | None = None) -> Booking: ...

    # -- reviews -----------------------------------------------------------

    @abstractmethod
    async def add_review(self, review: Review) -> Review: ...

    @abstractmethod
    async def get_review_by_booking(self, booking_id: uuid.UUID) -> Review | None: ...

    @abstractmethod
    async def list_reviews_by_property(self, property_id: uuid.UUID) -> list[Review]: ...

    @abstractmethod
    async def list_reviews_by_guest(self, guest_id: uuid.UUID) -> list[Review]: ...

    # -- messages ----------------------------------------------------------

    @abstractmethod
    async def add_message(self, message: Message) -> Message: ...

    @abstractmethod
    async def get_message(self, message_id: uuid.UUID) -> Message | None: ...

    @abstractmethod
    async def list_conversation(self, user_a: uuid.UUID, user_b: uuid.UUID) -> list[Message]:
        """Messages between two users in either direction, oldest first."""

    @abstractmethod
    async def mark_message_read(self, message: Message) -> Message: ...

    # -- waitlist ----------------------------------------------------------

    @abstractmethod
    async def add_waitlist_entry(self, entry: WaitlistEntry) -> WaitlistEntry: ...

    @abstractmethod
    async def get_waitlist_entry_by_email(self, email: str) -> WaitlistEntry | None: ...

    @abstractmethod
    async def list_waitlist_entries(self) -> list[WaitlistEntry]: ...

    # -- unit of work ------------------------------------------------------

    @abstractmethod
    async def commit(self) -> None:
        """Make everything written so far durable and visible to other connections."""
