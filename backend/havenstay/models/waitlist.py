"""Waitlist model — prospective users captured before sign-up."""

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from havenstay.database import Base, CreatedAtMixin, UUIDPrimaryKeyMixin


class WaitlistEntry(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "waitlist"

    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    subscribe_to_newsletter: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<WaitlistEntry(id={self.id}, email={self.email!r})>"
