"""Booking model — a guest's reservation of a property."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from havenstay.database import Base, TimestampMixin, UUIDPrimaryKeyMixin

BOOKING_STATUSES = ("pending", "confirmed", "canceled", "completed")


class Booking(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A reservation over the half-open interval [check_in_date, check_out_date)."""

    __tablename__ = "bookings"

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
    check_in_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    check_out_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    total_price: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        default="pending",
        nullable=False,
        index=True,
    )  # pending, confirmed, canceled, completed
    payment_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    __table_args__ = (Index("ix_bookings_property_dates", "property_id", "check_in_date", "check_out_date"),)

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, property_id={self.property_id}, guest_id={self.guest_id}, status={self.status})>"
        )
