"""Review model — one per completed booking."""

import uuid

from sqlalchemy import ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from havenstay.database import Base, CreatedAtMixin, UUIDPrimaryKeyMixin


class Review(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    """A guest's rating of a stay."""

    __tablename__ = "reviews"

    # UNIQUE enforces one review per booking
    booking_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("bookings.id"),
        unique=True,
        nullable=False,
    )
    property_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("properties.id"),
        nullable=False,
        index=True,
    )
    guest_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, booking_id={self.booking_id}, rating={self.rating})>"
