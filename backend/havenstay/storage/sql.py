"""SQLAlchemy storage adapter over an ``AsyncSession``.

One adapter instance wraps the session of a single request; the caller owns
rollback, and handlers that write call :meth:`SqlStorage.commit` before
responding (see ``havenstay.api.deps.get_storage``).
"""

import logging
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import and_, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from havenstay.errors import Conflict, DateConflict
from havenstay.models import Booking, Message, Property, Review, User, WaitlistEntry
from havenstay.storage.base import PropertyFilters, Storage

logger = logging.getLogger(__name__)

# Name of the PostgreSQL exclusion constraint installed by the initial migration.
BOOKING_OVERLAP_CONSTRAINT = "ex_bookings_no_overlap"


class SqlStorage(Storage):
    """:class:`Storage` backed by a relational database."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _insert(self, entity: Any, conflict_message: str) -> Any:
        try:
            # SAVEPOINT so a unique violation does not poison the request transaction
            async with self.session.begin_nested():
                self.session.add(entity)
                await self.session.flush()
        except IntegrityError as exc:
            if BOOKING_OVERLAP_CONSTRAINT in str(exc.orig):
                raise DateConflict() from None
            logger.info("Unique constraint rejected %s: %s", type(entity).__name__, exc.orig)
            raise Conflict(conflict_message) from None
        await self.session.refresh(entity)
        return entity

    async def _flush(self, entity: Any) -> Any:
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    # -- users -------------------------------------------------------------

    async def add_user(self, user: User) -> User:
        return await self._insert(user, "Email already registered")

    async def get_user(self, user_id: uuid.UUID) -> User | None:
        result = await self.session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> User | None:
        result = await self.session.execute(select(User).where(func.lower(User.email) == email.lower()))
        return result.scalar_one_or_none()

    async def list_users(self, role: str | None = None) -> list[User]:
        query = select(User)
        if role is not None:
            query = query.where(User.role == role)
        result = await self.session.execute(query.order_by(User.created_at.desc()))
        return list(result.scalars().all())

    async def update_user(self, user: User, changes: dict[str, Any]) -> User:
        for field, value in changes.items():
            setattr(user, field, value)
        return await self._flush(user)

    # -- properties --------------------------------------------------------

    async def add_property(self, prop: Property) -> Property:
        return await self._insert(prop, "Property already exists")

    async def get_property(self, property_id: uuid.UUID) -> Property | None:
        result = await self.session.execute(select(Property).where(Property.id == property_id))
        return result.scalar_one_or_none()

    async def list_properties(self, filters: PropertyFilters) -> list[Property]:
        conditions = []
        if filters.city is not None:
            conditions.append(func.lower(Property.city) == filters.city.lower())
        if filters.neighborhood is not None:
            conditions.append(func.lower(Property.neighborhood) == filters.neighborhood.lower())
        if filters.property_type is not None:
            conditions.append(Property.property_type == filters.property_type)
        if filters.min_price is not None:
            conditions.append(Property.price_per_night >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(Property.price_per_night <= filters.max_price)
        if filters.guests is not None:
            conditions.append(Property.max_guests >= filters.guests)
        if filters.bedrooms is not None:
            conditions.append(Property.bedrooms >= filters.bedrooms)
        if filters.is_approved is not None:
            conditions.append(Property.is_approved == filters.is_approved)
        if filters.is_active is not None:
            conditions.append(Property.is_active == filters.is_active)

        result = await self.session.execute(
            select(Property).where(*conditions).order_by(Property.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_properties_by_host(self, host_id: uuid.UUID) -> list[Property]:
        result = await self.session.execute(
            select(Property).where(Property.host_id == host_id).order_by(Property.created_at.desc())
        )
        return list(result.scalars().all())

    async def update_property(self, prop: Property, changes: dict[str, Any]) -> Property:
        for field, value in changes.items():
            setattr(prop, field, value)
        return await self._flush(prop)

    async def approve_property(self, prop: Property) -> Property:
        prop.is_approved = True
        return await self._flush(prop)

    # -- bookings ----------------------------------------------------------

    @asynccontextmanager
    async def booking_scope(self, property_id: uuid.UUID) -> AsyncIterator[None]:
        # Row lock on the property; held until the request transaction ends, so
        # concurrent writers for the same property queue up behind each other.
        await self.session.execute(
            select(Property.id).where(Property.id == property_id).with_for_update()
        )
        yield
        await self.session.flush()

    async def add_booking(self, booking: Booking) -> Booking:
        return await self._insert(booking, "Booking already exists")

    async def get_booking(self, booking_id: uuid.UUID) -> Booking | None:
        # populate_existing: re-read current status rather than a stale identity-map copy
        result = await self.session.execute(
            select(Booking).where(Booking.id == booking_id).execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_bookings_by_guest(self, guest_id: uuid.UUID) -> list[Booking]:
        result = await self.session.execute(
            select(Booking).where(Booking.guest_id == guest_id).order_by(Booking.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_bookings_by_property(self, property_id: uuid.UUID) -> list[Booking]:
        result = await self.session.execute(
            select(Booking).where(Booking.property_id == property_id).order_by(Booking.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_active_bookings(self, property_id: uuid.UUID) -> list[Booking]:
        result = await self.session.execute(
            select(Booking).where(
                Booking.property_id == property_id,
                Booking.status != "canceled",
            )
        )
        return list(result.scalars().all())

    async def count_bookings_by_status(self) -> dict[str, int]:
        result = await self.session.execute(
            select(Booking.status, func.count()).group_by(Booking.status)
        )
        return {status: count for status, count in result.all()}

    async def update_booking_status(self, booking: Booking, status: str, payment_id: str | None = None) -> Booking:
        booking.status = status
        if payment_id is not None:
            booking.payment_id = payment_id
        return await self._flush(booking)

    # -- reviews -----------------------------------------------------------

    async def add_review(self, review: Review) -> Review:
        return await self._insert(review, "A review already exists for this booking")

    async def get_review_by_booking(self, booking_id: uuid.UUID) -> Review | None:
        result = await self.session.execute(select(Review).where(Review.booking_id == booking_id))
        return result.scalar_one_or_none()

    async def list_reviews_by_property(self, property_id: uuid.UUID) -> list[Review]:
        result = await self.session.execute(
            select(Review).where(Review.property_id == property_id).order_by(Review.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_reviews_by_guest(self, guest_id: uuid.UUID) -> list[Review]:
        result = await self.session.execute(
            select(Review).where(Review.guest_id == guest_id).order_by(Review.created_at.desc())
        )
        return list(result.scalars().all())

    # -- messages ----------------------------------------------------------

    async def add_message(self, message: Message) -> Message:
        return await self._insert(message, "Message already exists")

    async def get_message(self, message_id: uuid.UUID) -> Message | None:
        result = await self.session.execute(select(Message).where(Message.id == message_id))
        return result.scalar_one_or_none()

    async def list_conversation(self, user_a: uuid.UUID, user_b: uuid.UUID) -> list[Message]:
        result = await self.session.execute(
            select(Message)
            .where(
                or_(
                    and_(Message.sender_id == user_a, Message.receiver_id == user_b),
                    and_(Message.sender_id == user_b, Message.receiver_id == user_a),
                )
            )
            .order_by(Message.created_at.asc())
        )
        return list(result.scalars().all())

    async def mark_message_read(self, message: Message) -> Message:
        message.is_read = True
        return await self._flush(message)

    # -- waitlist ----------------------------------------------------------

    async def add_waitlist_entry(self, entry: WaitlistEntry) -> WaitlistEntry:
        return await self._insert(entry, "Email already registered in waitlist")

    async def get_waitlist_entry_by_email(self, email: str) -> WaitlistEntry | None:
        result = await self.session.execute(
            select(WaitlistEntry).where(func.lower(WaitlistEntry.email) == email.lower())
        )
        return result.scalar_one_or_none()

    async def list_waitlist_entries(self) -> list[WaitlistEntry]:
        result = await self.session.execute(select(WaitlistEntry).order_by(WaitlistEntry.created_at.desc()))
        return list(result.scalars().all())

    # -- unit of work ------------------------------------------------------

    async def commit(self) -> None:
        await self.session.commit()
