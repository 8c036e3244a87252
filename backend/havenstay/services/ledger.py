"""Reviews and direct messages."""

import logging
import uuid
from dataclasses import dataclass

from havenstay.errors import Conflict, Forbidden, InvalidState, NotFound
from havenstay.models import Message, Review, User
from havenstay.schemas.message import MessageCreate
from havenstay.schemas.review import ReviewCreate
from havenstay.storage.base import Storage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewWithGuest:
    review: Review
    guest: User | None


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------


async def create_review(storage: Storage, guest: User, body: ReviewCreate) -> Review:
    """Review a completed stay. One review per booking, by that booking's guest.

    Raises:
        NotFound: Unknown booking.
        Forbidden: Caller is not the booking's guest.
        InvalidState: The booking is not completed.
        Conflict: The booking already has a review.
    """
    booking = await storage.get_booking(body.booking_id)
    if booking is None:
        raise NotFound("Booking not found")
    if booking.guest_id != guest.id:
        raise Forbidden("You can only review properties you've booked")
    if booking.status != "completed":
        raise InvalidState("You can only review completed stays")
    if await storage.get_review_by_booking(booking.id) is not None:
        raise Conflict("A review already exists for this booking")

    # The unique constraint on booking_id backs up the check above under concurrency.
    review = await storage.add_review(
        Review(
            booking_id=booking.id,
            property_id=booking.property_id,
            guest_id=guest.id,
            rating=body.rating,
            comment=body.comment,
        )
    )
    logger.info("Review %s posted for booking %s", review.id, booking.id)
    return review


async def list_property_reviews(storage: Storage, property_id: uuid.UUID) -> list[ReviewWithGuest]:
    if await storage.get_property(property_id) is None:
        raise NotFound("Property not found")

    guests: dict[uuid.UUID, User | None] = {}
    result = []
    for review in await storage.list_reviews_by_property(property_id):
        if review.guest_id not in guests:
            guests[review.guest_id] = await storage.get_user(review.guest_id)
        result.append(ReviewWithGuest(review=review, guest=guests[review.guest_id]))
    return result


async def list_guest_reviews(storage: Storage, guest: User) -> list[Review]:
    return await storage.list_reviews_by_guest(guest.id)


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


async def send_message(storage: Storage, sender: User, body: MessageCreate) -> Message:
    """Store a message from ``sender`` to another known user.

    Raises:
        NotFound: Unknown receiver, or a ``booking_id`` that does not exist.
    """
    if await storage.get_user(body.receiver_id) is None:
        raise NotFound("Receiver not found")
    if body.booking_id is not None and await storage.get_booking(body.booking_id) is None:
        raise NotFound("Booking not found")

    return await storage.add_message(
        Message(
            sender_id=sender.id,
            receiver_id=body.receiver_id,
            booking_id=body.booking_id,
            content=body.content,
            is_read=False,
        )
    )


async def get_conversation(storage: Storage, user: User, other_user_id: uuid.UUID) -> list[Message]:
    """Both directions of the thread between ``user`` and another user, oldest first."""
    return await storage.list_conversation(user.id, other_user_id)


async def mark_message_read(storage: Storage, user: User, message_id: uuid.UUID) -> Message:
    """Flip ``is_read`` on a message the caller received.

    Raises:
        NotFound: Unknown message.
        Forbidden: Caller is not the receiver.
    """
    message = await storage.get_message(message_id)
    if message is None:
        raise NotFound("Message not found")
    if message.receiver_id != user.id:
        raise Forbidden("Not authorized to mark this message as read")
    if message.is_read:
        return message
    return await storage.mark_message_read(message)
