"""Property model — listings offered by hosts."""

import uuid

from sqlalchemy import JSON, Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from havenstay.database import Base, TimestampMixin, UUIDPrimaryKeyMixin

PROPERTY_TYPES = ("entire_apartment", "private_room", "shared_space")
CANCELLATION_POLICIES = ("flexible", "moderate", "strict")


class Property(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A listing owned by exactly one host."""

    __tablename__ = "properties"

    host_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False, default="Lagos", index=True)
    neighborhood: Mapped[str] = mapped_column(String(100), nullable=False)
    property_type: Mapped[str] = mapped_column(String(50), nullable=False)  # entire_apartment, private_room, shared_space
    # Prices are integer minor units (kobo/cents).
    price_per_night: Mapped[int] = mapped_column(Integer, nullable=False)
    cleaning_fee: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_guests: Mapped[int] = mapped_column(Integer, nullable=False)
    bedrooms: Mapped[int] = mapped_column(Integer, nullable=False)
    beds: Mapped[int] = mapped_column(Integer, nullable=False)
    bathrooms: Mapped[int] = mapped_column(Integer, nullable=False)
    amenities: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    images: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    house_rules: Mapped[str | None] = mapped_column(Text, nullable=True)
    cancellation_policy: Mapped[str] = mapped_column(String(20), nullable=False, default="moderate")
    is_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    @property
    def is_listable(self) -> bool:
        return self.is_approved and self.is_active

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, title={self.title!r}, host_id={self.host_id})>"
